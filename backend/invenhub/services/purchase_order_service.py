"""
Purchase Order Service
Raises purchase orders against suppliers and walks them through their
lifecycle. Receiving an order adds its quantities to stock exactly once.

Lifecycle:
    pending -> ordered | received | canceled
    ordered -> received | canceled
    received, canceled: terminal
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from invenhub.core.config import settings
from invenhub.core.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from invenhub.domain.catalog import PurchaseOrderStatus, PURCHASE_ORDER_TRANSITIONS
from invenhub.domain.purchase_order import PurchaseOrder, PurchaseOrderCreate
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.purchase_order_repository import PurchaseOrderRepository
from invenhub.repositories.supplier_repository import SupplierRepository

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


class PurchaseOrderService:
    """Service for purchase order business logic"""

    def __init__(
        self,
        purchase_order_repository: Optional[PurchaseOrderRepository] = None,
        supplier_repository: Optional[SupplierRepository] = None,
        product_repository: Optional[ProductRepository] = None,
    ):
        self.purchase_orders = purchase_order_repository or PurchaseOrderRepository()
        self.suppliers = supplier_repository or SupplierRepository()
        self.products = product_repository or ProductRepository()

    def list_purchase_orders(
        self,
        status: Optional[str] = None,
        supplier_id: Optional[int] = None
    ) -> List[PurchaseOrder]:
        return self.purchase_orders.find_all(status=status, supplier_id=supplier_id)

    def get_purchase_order(self, order_id: int) -> PurchaseOrder:
        order = self.purchase_orders.find_by_id(order_id)
        if not order:
            raise NotFoundError(f"Purchase order {order_id} not found")
        return order

    def create_purchase_order(self, payload: PurchaseOrderCreate) -> PurchaseOrder:
        """
        Create a purchase order

        The total is recomputed from the lines; a client total that disagrees
        by more than a cent is rejected.
        """
        if not payload.items:
            raise ValidationError("Purchase order must contain at least one item")

        if not self.suppliers.find_by_id(payload.supplier_id):
            raise ValidationError(f"Supplier {payload.supplier_id} not found")

        products = self.products.find_by_ids([item.product_id for item in payload.items])
        missing = [item.product_id for item in payload.items if item.product_id not in products]
        if missing:
            raise ValidationError(f"Products not found: {missing}")

        unit_prices = [item.unit_price.quantize(CENT, rounding=ROUND_HALF_UP) for item in payload.items]
        total = sum(
            (price * item.quantity for price, item in zip(unit_prices, payload.items)),
            Decimal('0')
        )
        if payload.total_amount is not None and abs(payload.total_amount - total) > Decimal('0.01'):
            raise ValidationError(
                f"Total amount mismatch: expected {total}, got {payload.total_amount}"
            )

        order_date = payload.order_date or datetime.now(timezone.utc)
        expected_delivery = payload.expected_delivery_date or (
            order_date + timedelta(days=settings.EXPECTED_DELIVERY_DAYS)
        )
        received = payload.status == PurchaseOrderStatus.RECEIVED

        order = self.purchase_orders.create(
            order={
                'supplier_id': payload.supplier_id,
                'status': payload.status.value,
                'total_amount': total,
                'order_date': order_date,
                'expected_delivery_date': expected_delivery,
                'delivered_date': datetime.now(timezone.utc) if received else None,
                'is_auto_generated': payload.is_auto_generated,
            },
            items=[
                {
                    'product_id': item.product_id,
                    'product_name': products[item.product_id].name,
                    'quantity': item.quantity,
                    'unit_price': price,
                }
                for price, item in zip(unit_prices, payload.items)
            ],
        )

        logger.info(
            f"Created purchase order {order.id} for supplier {order.supplier_id} "
            f"({len(order.items)} items, total {order.total_amount}, status {order.status.value})"
        )
        return order

    def update_status(self, order_id: int, new_status: PurchaseOrderStatus) -> PurchaseOrder:
        """
        Move a purchase order to a new status

        Raises:
            NotFoundError: Unknown order
            InvalidStatusTransitionError: Move not allowed from the current status
        """
        order = self.get_purchase_order(order_id)

        if new_status not in PURCHASE_ORDER_TRANSITIONS[order.status]:
            raise InvalidStatusTransitionError(order.status.value, new_status.value)

        delivered_date = (
            datetime.now(timezone.utc) if new_status == PurchaseOrderStatus.RECEIVED else None
        )

        updated = self.purchase_orders.update_status(
            order_id,
            expected_status=order.status.value,
            new_status=new_status.value,
            delivered_date=delivered_date,
        )

        if not updated:
            # Changed or removed between the read and the guarded update
            current = self.purchase_orders.find_by_id(order_id)
            if not current:
                raise NotFoundError(f"Purchase order {order_id} not found")
            raise InvalidStatusTransitionError(current.status.value, new_status.value)

        logger.info(f"Purchase order {order_id}: {order.status.value} -> {new_status.value}")
        return updated

    def delete_purchase_order(self, order_id: int) -> None:
        if not self.purchase_orders.delete(order_id):
            raise NotFoundError(f"Purchase order {order_id} not found")
        logger.info(f"Deleted purchase order {order_id}")
