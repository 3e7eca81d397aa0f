"""
Enumerated values shared across the domain

Store categories follow the SafariFlow merchandise lines. Status, role and
channel values are the only ones the API accepts.
"""
from enum import Enum


class ProductCategory(str, Enum):
    """Product categories"""
    APPAREL = "Apparel"
    BASTAR_ART = "Bastar Art"
    BOTTLES = "Bottles"
    KEYRINGS = "Keyrings"
    CANVAS = "Canvas"
    STATIONERY = "Stationery"
    ACCESSORIES = "Accessories"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"


class SaleChannel(str, Enum):
    IN_STORE = "in-store"
    ONLINE = "online"


class PurchaseOrderStatus(str, Enum):
    """Purchase order lifecycle"""
    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELED = "canceled"


# Allowed status moves; received and canceled are terminal
PURCHASE_ORDER_TRANSITIONS = {
    PurchaseOrderStatus.PENDING: {
        PurchaseOrderStatus.ORDERED,
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.CANCELED,
    },
    PurchaseOrderStatus.ORDERED: {
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.CANCELED,
    },
    PurchaseOrderStatus.RECEIVED: set(),
    PurchaseOrderStatus.CANCELED: set(),
}

OPEN_PURCHASE_ORDER_STATUSES = (PurchaseOrderStatus.PENDING, PurchaseOrderStatus.ORDERED)


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    GUEST = "guest"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
