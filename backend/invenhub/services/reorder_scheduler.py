"""
Reorder Scheduler
Background task that polls the catalog, raises stock alerts and runs the
auto-reorder pass. Started and stopped from the application lifespan.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from invenhub.core.config import settings
from invenhub.repositories.product_repository import ProductRepository
from invenhub.services.notification_service import NotificationService
from invenhub.services.reorder_service import ReorderService

logger = logging.getLogger(__name__)


class ReorderScheduler:
    """Runs one reorder pass after an initial delay, then at a fixed interval"""

    def __init__(
        self,
        reorder_service: Optional[ReorderService] = None,
        notification_service: Optional[NotificationService] = None,
        product_repository: Optional[ProductRepository] = None,
        initial_delay: Optional[float] = None,
        interval: Optional[float] = None,
    ):
        self.products = product_repository or ProductRepository()
        self.notifications = notification_service or NotificationService()
        self.reorder_service = reorder_service or ReorderService(
            product_repository=self.products,
            notification_service=self.notifications,
        )
        self.initial_delay = (
            settings.AUTO_REORDER_INITIAL_DELAY_SECONDS if initial_delay is None else initial_delay
        )
        self.interval = settings.AUTO_REORDER_INTERVAL_SECONDS if interval is None else interval

        self.last_run_at: Optional[datetime] = None
        self.last_report: Optional[Dict] = None
        self.last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> Dict:
        """One synchronous pass: stock alerts, then reordering"""
        products, _ = self.products.find_all()
        self.notifications.check_stock_levels(products)
        report = self.reorder_service.check_and_reorder(products)

        self.last_run_at = datetime.now(timezone.utc)
        self.last_report = report
        self.last_error = None
        return report

    async def _run(self) -> None:
        logger.info(
            f"Auto-reorder scheduler started (initial delay {self.initial_delay}s, "
            f"interval {self.interval}s)"
        )
        delay = self.initial_delay

        while True:
            try:
                await asyncio.sleep(delay)
                logger.info("Running scheduled auto-reorder check")
                report = await asyncio.to_thread(self.run_once)
                logger.info(
                    f"Auto-reorder check done: {report['products_reordered']} products reordered, "
                    f"{len(report['purchase_orders_created'])} purchase orders created"
                )
            except asyncio.CancelledError:
                logger.info("Auto-reorder scheduler stopped")
                raise
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Failed to run scheduled auto-reorder check: {e}")

            delay = self.interval

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def status(self) -> Dict:
        return {
            "enabled": settings.AUTO_REORDER_ENABLED,
            "running": self.is_running,
            "interval_seconds": self.interval,
            "cooldown_seconds": self.reorder_service.cooldown_seconds,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_report": self.last_report,
            "last_error": self.last_error,
        }


reorder_scheduler = ReorderScheduler()
