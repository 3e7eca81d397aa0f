"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.supplier_repository import SupplierRepository
from invenhub.repositories.sale_repository import SaleRepository
from invenhub.repositories.purchase_order_repository import PurchaseOrderRepository
from invenhub.repositories.user_repository import UserRepository
from invenhub.repositories.notification_repository import NotificationRepository

__all__ = [
    'ProductRepository',
    'SupplierRepository',
    'SaleRepository',
    'PurchaseOrderRepository',
    'UserRepository',
    'NotificationRepository',
]
