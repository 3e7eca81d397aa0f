"""
Reorder Service
Files purchase orders for auto-reorder products that have dropped to their
reorder level.

A product is reordered when:
- auto_reorder is enabled
- stock <= reorder level (DEFAULT_REORDER_LEVEL when unset)
- target_stock_level > stock
- it has a supplier

Products reordered within the cooldown window, or already on an open
(pending/ordered) purchase order, are skipped. Eligible products are grouped
into one purchase order per supplier.
"""
import logging
import threading
import time
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional

from invenhub.core.config import settings
from invenhub.domain.catalog import PurchaseOrderStatus
from invenhub.domain.product import Product
from invenhub.domain.purchase_order import PurchaseOrderCreate, PurchaseOrderItemCreate
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.purchase_order_repository import PurchaseOrderRepository
from invenhub.services.notification_service import NotificationService
from invenhub.services.purchase_order_service import PurchaseOrderService

logger = logging.getLogger(__name__)


def needs_reorder(product: Product) -> bool:
    return bool(
        product.auto_reorder
        and product.stock <= product.effective_reorder_level
        and product.target_stock_level
        and product.target_stock_level > product.stock
        and product.supplier_id is not None
    )


class ReorderService:
    """
    Automatic replenishment

    One instance is shared by the scheduler and the manual trigger endpoint;
    runs are serialized and share the cooldown map.
    """

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        purchase_order_repository: Optional[PurchaseOrderRepository] = None,
        purchase_order_service: Optional[PurchaseOrderService] = None,
        notification_service: Optional[NotificationService] = None,
        cooldown_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.products = product_repository or ProductRepository()
        self.purchase_orders = purchase_order_repository or PurchaseOrderRepository()
        self.purchase_order_service = purchase_order_service or PurchaseOrderService(
            purchase_order_repository=self.purchase_orders,
            product_repository=self.products,
        )
        self.notifications = notification_service or NotificationService()
        self.cooldown_seconds = (
            settings.AUTO_REORDER_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
        )
        self._clock = clock
        self._last_reordered: Dict[int, float] = {}
        self._lock = threading.Lock()

    def find_products_to_reorder(self, products: Iterable[Product]) -> List[Product]:
        return [product for product in products if needs_reorder(product)]

    def _in_cooldown(self, product_id: int, now: float) -> bool:
        last = self._last_reordered.get(product_id)
        return last is not None and now - last < self.cooldown_seconds

    def check_and_reorder(self, products: Optional[List[Product]] = None) -> Dict:
        """
        Run one reorder pass

        Args:
            products: Products to check (loads the whole catalog when None)

        Returns:
            Run report with counts, created purchase order IDs and failures
        """
        with self._lock:
            if products is None:
                products, _ = self.products.find_all()

            report = {
                "checked": len(products),
                "eligible": 0,
                "skipped_cooldown": 0,
                "skipped_open_order": 0,
                "purchase_orders_created": [],
                "products_reordered": 0,
                "failures": [],
            }

            candidates = self.find_products_to_reorder(products)
            report["eligible"] = len(candidates)
            logger.info(f"Checked {len(products)} products, {len(candidates)} need reordering")

            if not candidates:
                return report

            now = self._clock()
            cooled = []
            for product in candidates:
                if self._in_cooldown(product.id, now):
                    report["skipped_cooldown"] += 1
                else:
                    cooled.append(product)

            already_ordered = self.purchase_orders.find_product_ids_with_open_orders(
                [product.id for product in cooled]
            )
            to_order = [product for product in cooled if product.id not in already_ordered]
            report["skipped_open_order"] = len(cooled) - len(to_order)

            by_supplier: Dict[int, List[Product]] = defaultdict(list)
            for product in to_order:
                by_supplier[product.supplier_id].append(product)

            for supplier_id, supplier_products in by_supplier.items():
                try:
                    order = self._order_from_supplier(supplier_id, supplier_products)
                except Exception as e:
                    logger.error(f"Failed to create auto purchase order for supplier {supplier_id}: {e}")
                    report["failures"].append({"supplier_id": supplier_id, "error": str(e)})
                    continue

                report["purchase_orders_created"].append(order.id)
                report["products_reordered"] += len(supplier_products)

                for product in supplier_products:
                    self._last_reordered[product.id] = now
                    quantity = product.target_stock_level - product.stock
                    try:
                        self.notifications.notify_auto_reorder(product, quantity, product.target_stock_level)
                    except Exception as e:
                        logger.warning(f"Could not create auto-reorder notification for {product.name}: {e}")

            return report

    def _order_from_supplier(self, supplier_id: int, products: List[Product]):
        logger.info(f"Creating auto purchase order for supplier {supplier_id} with {len(products)} products")

        order = self.purchase_order_service.create_purchase_order(
            PurchaseOrderCreate(
                supplier_id=supplier_id,
                items=[
                    PurchaseOrderItemCreate(
                        product_id=product.id,
                        quantity=product.target_stock_level - product.stock,
                        unit_price=product.cost_price,
                    )
                    for product in products
                ],
                status=PurchaseOrderStatus.PENDING,
                is_auto_generated=True,
            )
        )

        logger.info(f"Created auto purchase order {order.id} for supplier {supplier_id}")
        return order
