"""
Product Service
Catalog maintenance: create, update and delete products, and manage their
auto-reorder settings.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from invenhub.core.config import settings
from invenhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from invenhub.domain.product import Product, ProductCreate, ProductUpdate
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.supplier_repository import SupplierRepository
from invenhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ProductService:
    """Service for product catalog business logic"""

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        supplier_repository: Optional[SupplierRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.products = product_repository or ProductRepository()
        self.suppliers = supplier_repository or SupplierRepository()
        self.notifications = notification_service or NotificationService()

    def list_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        supplier_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        return self.products.find_all(
            query=query, category=category, supplier_id=supplier_id, limit=limit, offset=offset
        )

    def get_product(self, product_id: int) -> Product:
        product = self.products.find_by_id(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def get_by_barcode(self, barcode: str) -> Product:
        product = self.products.find_by_barcode(barcode)
        if not product:
            raise NotFoundError(f"Product with barcode {barcode} not found")
        return product

    def get_categories(self) -> List[Dict[str, Any]]:
        return self.products.get_categories()

    def get_low_stock(self) -> List[Product]:
        return self.products.find_low_stock(settings.DEFAULT_REORDER_LEVEL)

    def _resolve_supplier(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Turn a supplier name into supplier_id when no id was given"""
        supplier_name = data.pop('supplier', None)
        if data.get('supplier_id') is None and supplier_name:
            data['supplier_id'] = self.suppliers.find_id_by_name(supplier_name)
            if data['supplier_id'] is None:
                logger.warning(f"Unknown supplier '{supplier_name}', product saved without supplier")
        elif data.get('supplier_id') is not None and not self.suppliers.find_by_id(data['supplier_id']):
            raise ValidationError(f"Supplier {data['supplier_id']} not found")
        return data

    def _check_barcode_free(self, barcode: str, product_id: Optional[int] = None) -> None:
        existing = self.products.find_by_barcode(barcode)
        if existing and existing.id != product_id:
            raise ConflictError(f"A product with barcode {barcode} already exists")

    def create_product(self, payload: ProductCreate) -> Product:
        data = self._resolve_supplier(payload.model_dump())
        self._check_barcode_free(data['barcode'])

        product = self.products.create(data)
        logger.info(f"Created product {product.id} ({product.name})")

        self._safe_notify(self.notifications.notify_new_product, product)
        self._safe_notify(self.notifications.check_stock_levels, [product])
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        data = self._resolve_supplier(payload.model_dump(exclude_unset=True))
        if data.get('barcode'):
            self._check_barcode_free(data['barcode'], product_id)

        product = self.products.update(product_id, data)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        self._safe_notify(self.notifications.notify_product_update, product)
        if 'stock' in data or 'reorder_level' in data:
            self._safe_notify(self.notifications.check_stock_levels, [product])
        return product

    def delete_product(self, product_id: int) -> None:
        if not self.products.delete(product_id):
            raise NotFoundError(f"Product {product_id} not found")
        logger.info(f"Deleted product {product_id}")

    def toggle_auto_reorder(self, product_id: int, enabled: bool) -> Product:
        """
        Switch automatic reordering on or off

        Enabling it on a product without a positive target stock level sets
        the target to twice the reorder level, at least 10 units.
        """
        product = self.get_product(product_id)

        data: Dict[str, Any] = {'auto_reorder': enabled}
        if enabled and product.target_stock_level <= 0:
            data['target_stock_level'] = max(product.effective_reorder_level * 2, 10)

        updated = self.products.update(product_id, data)
        if not updated:
            raise NotFoundError(f"Product {product_id} not found")
        return updated

    def update_target_stock_level(self, product_id: int, target_stock_level: int) -> Product:
        if target_stock_level < 0:
            raise ValidationError("Target stock level cannot be negative")

        product = self.products.update(product_id, {'target_stock_level': target_stock_level})
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    @staticmethod
    def _safe_notify(notify, *args) -> None:
        # Notifications never fail the catalog change that triggered them
        try:
            notify(*args)
        except Exception as e:
            logger.warning(f"Could not create notification: {e}")
