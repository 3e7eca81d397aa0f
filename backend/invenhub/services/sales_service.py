"""
Sales Service
Billing: prices a cart, records the sale and keeps shelf stock in step.

Totals are always computed here from the line items:
    subtotal = sum(quantity * price_at_sale)
    tax_amount = subtotal * SALES_TAX_RATE (rounded to cents)
    total_amount = subtotal + tax_amount
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from invenhub.core.config import settings
from invenhub.core.exceptions import NotFoundError, ValidationError
from invenhub.domain.catalog import SaleChannel
from invenhub.domain.sale import Sale, SaleCreate, ProductSnapshot
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.sale_repository import SaleRepository
from invenhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
TOTAL_TOLERANCE = Decimal('0.01')


def to_cents(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(lines: List[Dict[str, Any]], tax_rate: float) -> Dict[str, Decimal]:
    """Subtotal, tax and total for lines carrying quantity and price_at_sale"""
    subtotal = sum(
        (to_cents(line['price_at_sale']) * line['quantity'] for line in lines),
        Decimal('0')
    )
    tax_amount = (subtotal * Decimal(str(tax_rate))).quantize(CENT, rounding=ROUND_HALF_UP)
    return {
        'subtotal': subtotal.quantize(CENT, rounding=ROUND_HALF_UP),
        'tax_amount': tax_amount,
        'total_amount': (subtotal + tax_amount).quantize(CENT, rounding=ROUND_HALF_UP),
    }


class SalesService:
    """Service for recording and reversing sales"""

    def __init__(
        self,
        sale_repository: Optional[SaleRepository] = None,
        product_repository: Optional[ProductRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.sales = sale_repository or SaleRepository()
        self.products = product_repository or ProductRepository()
        self.notifications = notification_service or NotificationService()

    def list_sales(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        payment_method: Optional[str] = None,
        channel: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> List[Sale]:
        return self.sales.find_all(
            start_date=start_date,
            end_date=end_date,
            payment_method=payment_method,
            channel=channel,
            customer_name=customer_name,
        )

    def get_sale(self, sale_id: int) -> Sale:
        sale = self.sales.find_by_id(sale_id)
        if not sale:
            raise NotFoundError(f"Sale {sale_id} not found")
        return sale

    def create_sale(self, payload: SaleCreate) -> Sale:
        """
        Record a sale

        In-store sales take stock off the shelf in the same transaction as
        the sale insert. Online sales leave stock alone.

        Raises:
            ValidationError: Empty cart, unknown product or total mismatch
            InsufficientStockError: An in-store line exceeds stock on hand
        """
        if not payload.items:
            raise ValidationError("Sale must contain at least one item")

        if not payload.employee_id.strip():
            raise ValidationError("Employee ID is required")

        product_ids = [item.product_id for item in payload.items]
        products = self.products.find_by_ids(product_ids)

        lines = []
        for item in payload.items:
            product = products.get(item.product_id)
            if not product:
                raise ValidationError(f"Product {item.product_id} not found")

            lines.append({
                'product_id': product.id,
                'snapshot': ProductSnapshot(
                    name=product.name,
                    category=product.category.value,
                    price=product.price,
                    barcode=product.barcode,
                    cost_price=product.cost_price,
                ),
                'quantity': item.quantity,
                'price_at_sale': to_cents(item.price_at_sale if item.price_at_sale is not None else product.price),
            })

        totals = calculate_totals(lines, settings.SALES_TAX_RATE)

        if payload.total_amount is not None:
            if abs(Decimal(str(payload.total_amount)) - totals['total_amount']) > TOTAL_TOLERANCE:
                raise ValidationError(
                    f"Total amount mismatch: expected {totals['total_amount']}, got {payload.total_amount}"
                )

        in_store = payload.channel == SaleChannel.IN_STORE
        sale = self.sales.create_with_stock_update(
            sale={
                **totals,
                'payment_method': payload.payment_method.value,
                'channel': payload.channel.value,
                'customer_id': payload.customer_id,
                'customer_name': payload.customer_name,
                'employee_id': payload.employee_id,
                'timestamp': datetime.now(timezone.utc),
            },
            items=lines,
            decrement_stock=in_store,
        )

        logger.info(
            f"Recorded sale {sale.id}: {sale.item_count} items, total {sale.total_amount} "
            f"({sale.channel.value}, {sale.payment_method.value})"
        )

        self._after_sale(sale, product_ids if in_store else [])
        return sale

    def _after_sale(self, sale: Sale, touched_product_ids: List[int]) -> None:
        try:
            self.notifications.notify_new_transaction(float(sale.total_amount), sale.item_count)
            if touched_product_ids:
                unique_ids = list(dict.fromkeys(touched_product_ids))
                self.notifications.notify_stock_update(len(unique_ids))
                self.notifications.check_stock_levels(self.products.find_by_ids(unique_ids).values())
        except Exception as e:
            logger.warning(f"Could not create notifications for sale {sale.id}: {e}")

    def delete_sale(self, sale_id: int) -> Sale:
        """Delete a sale; in-store units go back on the shelf"""
        sale = self.sales.delete_with_stock_restore(sale_id)
        if not sale:
            raise NotFoundError(f"Sale {sale_id} not found")

        logger.info(f"Deleted sale {sale_id}")
        return sale
