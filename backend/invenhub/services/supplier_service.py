"""
Supplier Service
"""
import logging
from typing import List, Optional

from invenhub.core.exceptions import ConflictError, NotFoundError
from invenhub.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from invenhub.repositories.purchase_order_repository import PurchaseOrderRepository
from invenhub.repositories.supplier_repository import SupplierRepository

logger = logging.getLogger(__name__)


class SupplierService:

    def __init__(
        self,
        supplier_repository: Optional[SupplierRepository] = None,
        purchase_order_repository: Optional[PurchaseOrderRepository] = None,
    ):
        self.suppliers = supplier_repository or SupplierRepository()
        self.purchase_orders = purchase_order_repository or PurchaseOrderRepository()

    def list_suppliers(self) -> List[Supplier]:
        return self.suppliers.find_all()

    def get_supplier(self, supplier_id: int) -> Supplier:
        supplier = self.suppliers.find_by_id(supplier_id)
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found")
        return supplier

    def create_supplier(self, payload: SupplierCreate) -> Supplier:
        supplier = self.suppliers.create(payload.model_dump())
        logger.info(f"Created supplier {supplier.id} ({supplier.name})")
        return supplier

    def update_supplier(self, supplier_id: int, payload: SupplierUpdate) -> Supplier:
        supplier = self.suppliers.update(supplier_id, payload.model_dump(exclude_unset=True))
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found")
        return supplier

    def delete_supplier(self, supplier_id: int) -> None:
        """Suppliers with purchase orders on record cannot be deleted"""
        if self.purchase_orders.count_by_supplier(supplier_id) > 0:
            raise ConflictError(f"Supplier {supplier_id} has purchase orders and cannot be deleted")

        if not self.suppliers.delete(supplier_id):
            raise NotFoundError(f"Supplier {supplier_id} not found")
        logger.info(f"Deleted supplier {supplier_id}")
