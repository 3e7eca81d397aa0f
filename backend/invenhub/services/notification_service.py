"""
Notification Service
Creates the dashboard notifications for stock alerts, catalog changes,
sales and automatic reorders.
"""
import logging
from typing import Iterable, List, Optional

from invenhub.core.config import settings
from invenhub.domain.catalog import NotificationType
from invenhub.domain.notification import Notification
from invenhub.domain.product import Product
from invenhub.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


class NotificationService:
    """
    Service for dashboard notifications

    Stock alerts carry a dedupe_key so a product that stays low across many
    checks keeps a single unread alert.
    """

    def __init__(self, repository: Optional[NotificationRepository] = None):
        self.repository = repository or NotificationRepository()

    def list(self, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        return self.repository.find_all(unread_only=unread_only, limit=limit)

    def unread_count(self) -> int:
        return self.repository.unread_count()

    def mark_read(self, notification_id: int) -> Optional[Notification]:
        return self.repository.mark_read(notification_id)

    def mark_all_read(self) -> int:
        return self.repository.mark_all_read()

    def delete(self, notification_id: int) -> bool:
        return self.repository.delete(notification_id)

    def clear(self) -> int:
        return self.repository.delete_all()

    def check_stock_levels(self, products: Iterable[Product]) -> List[Notification]:
        """
        Raise out-of-stock and low-stock alerts for the given products

        Returns:
            Notifications created by this check (duplicates are skipped)
        """
        products = list(products)
        if not products:
            return []

        out_of_stock = [p for p in products if p.is_out_of_stock]
        low_stock = [p for p in products if p.is_low_stock]

        logger.info(f"Found {len(low_stock)} low stock items, {len(out_of_stock)} out of stock items")

        created = []
        for product in out_of_stock:
            notification = self.create_stock_alert(product, "out")
            if notification:
                created.append(notification)

        for product in low_stock:
            notification = self.create_stock_alert(product, "low")
            if notification:
                created.append(notification)

        return created

    def create_stock_alert(self, product: Product, level: str) -> Optional[Notification]:
        if not product.name:
            logger.warning("Attempted to create stock alert for invalid product")
            return None

        dedupe_key = f"stock:{level}:{product.id}"
        if self.repository.exists_unread(dedupe_key):
            return None

        threshold = product.effective_reorder_level
        if level == "out":
            notification_type = NotificationType.ERROR
            title = "Out of Stock Alert"
            message = f"{product.name} is out of stock"
        else:
            notification_type = NotificationType.WARNING
            title = "Low Stock Alert"
            message = f"{product.name} is running low ({product.stock} left, threshold: {threshold})"

        logger.info(f"Creating {level} stock alert for {product.name} ({product.stock}/{threshold})")

        return self.repository.create(
            type=notification_type.value,
            title=title,
            message=message,
            link="/inventory",
            dedupe_key=dedupe_key,
        )

    def notify_new_product(self, product: Product) -> Notification:
        return self.repository.create(
            type=NotificationType.SUCCESS.value,
            title="New Product Added",
            message=f"{product.name} has been added to inventory",
            link="/inventory",
        )

    def notify_product_update(self, product: Product) -> Notification:
        return self.repository.create(
            type=NotificationType.INFO.value,
            title="Product Updated",
            message=f"{product.name} has been updated",
            link="/inventory",
        )

    def notify_new_transaction(self, total_amount: float, items: int) -> Notification:
        return self.repository.create(
            type=NotificationType.SUCCESS.value,
            title="New Transaction",
            message=f"₹{total_amount:,.2f} sale completed for {_plural(items, 'item')}",
            link="/transactions",
        )

    def notify_stock_update(self, products_updated: int) -> Notification:
        return self.repository.create(
            type=NotificationType.INFO.value,
            title="Stock Updated",
            message=f"Stock levels updated for {_plural(products_updated, 'product')}",
            link="/inventory",
        )

    def notify_auto_reorder(self, product: Product, quantity: int, target: int) -> Notification:
        return self.repository.create(
            type=NotificationType.INFO.value,
            title="Auto Reorder Initiated",
            message=f"{product.name}: Ordered {quantity} units to restock to {target} units",
            link="/purchase-orders",
        )
