"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.
"""
from invenhub.domain.product import Product
from invenhub.domain.supplier import Supplier
from invenhub.domain.sale import Sale, SaleItem, ProductSnapshot
from invenhub.domain.purchase_order import PurchaseOrder, PurchaseOrderItem
from invenhub.domain.user import User
from invenhub.domain.notification import Notification

__all__ = [
    'Product',
    'Supplier',
    'Sale',
    'SaleItem',
    'ProductSnapshot',
    'PurchaseOrder',
    'PurchaseOrderItem',
    'User',
    'Notification',
]
