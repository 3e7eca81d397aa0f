"""
Analytics Service
Sales and inventory figures for the dashboard.

The calculations are plain functions over lists of Sale / Product models so
they can run on any slice of history. Revenue is measured on total_amount
(tax included); cost comes from the cost snapshot taken at sale time.
"""
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from invenhub.core.config import settings
from invenhub.domain.product import Product
from invenhub.domain.sale import Sale
from invenhub.repositories.product_repository import ProductRepository
from invenhub.repositories.sale_repository import SaleRepository

MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def _money(value: Decimal) -> float:
    return round(float(value), 2)


def _as_utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment.astimezone(timezone.utc)


def _grouped(totals: Dict[str, Decimal]) -> List[Dict]:
    return [{"name": name, "value": _money(value)} for name, value in totals.items()]


def total_revenue(sales: List[Sale]) -> Decimal:
    return sum((sale.total_amount for sale in sales), Decimal('0'))


def total_cost(sales: List[Sale]) -> Decimal:
    return sum((sale.total_cost for sale in sales), Decimal('0'))


def total_profit(sales: List[Sale]) -> Decimal:
    return total_revenue(sales) - total_cost(sales)


def profit_margin(sales: List[Sale]) -> float:
    """Profit as a percentage of revenue (0 with no revenue)"""
    revenue = total_revenue(sales)
    if revenue <= 0:
        return 0.0
    return round(float(total_profit(sales) / revenue * 100), 2)


def items_sold(sales: List[Sale]) -> int:
    return sum(sale.item_count for sale in sales)


def average_order_value(sales: List[Sale]) -> float:
    if not sales:
        return 0.0
    return _money(total_revenue(sales) / len(sales))


def sales_by_payment_method(sales: List[Sale]) -> List[Dict]:
    totals: Dict[str, Decimal] = OrderedDict()
    for sale in sales:
        key = sale.payment_method.value
        totals[key] = totals.get(key, Decimal('0')) + sale.total_amount
    return _grouped(totals)


def sales_by_channel(sales: List[Sale]) -> List[Dict]:
    totals: Dict[str, Decimal] = OrderedDict()
    for sale in sales:
        key = sale.channel.value
        totals[key] = totals.get(key, Decimal('0')) + sale.total_amount
    return _grouped(totals)


def sales_by_category(sales: List[Sale]) -> List[Dict]:
    """Line revenue (quantity * price_at_sale) per category snapshot"""
    totals: Dict[str, Decimal] = OrderedDict()
    for sale in sales:
        for item in sale.items:
            key = item.product_snapshot.category
            totals[key] = totals.get(key, Decimal('0')) + item.line_total
    return _grouped(totals)


def monthly_sales(sales: List[Sale]) -> List[Dict]:
    """Revenue per calendar month, Jan to Dec, across all years given"""
    buckets = [Decimal('0')] * 12
    for sale in sales:
        buckets[_as_utc(sale.timestamp).month - 1] += sale.total_amount
    return [{"name": MONTHS[index], "value": _money(value)} for index, value in enumerate(buckets)]


def hourly_sales(sales: List[Sale], now: Optional[datetime] = None) -> List[Dict]:
    """
    Revenue per hour of day (UTC) over the last 24 hours

    Always returns 24 buckets named "00:00" to "23:00". Hours without sales
    stay at zero.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    since = now - timedelta(hours=24)

    buckets = [Decimal('0')] * 24
    for sale in sales:
        moment = _as_utc(sale.timestamp)
        if since <= moment <= now:
            buckets[moment.hour] += sale.total_amount

    return [{"name": f"{hour:02d}:00", "value": _money(value)} for hour, value in enumerate(buckets)]


def product_performance(sales: List[Sale]) -> List[Dict]:
    """Units sold and line revenue per product, best sellers by revenue first"""
    performance: Dict[str, Dict] = {}
    for sale in sales:
        for item in sale.items:
            key = str(item.product_id) if item.product_id is not None else item.product_snapshot.barcode
            entry = performance.setdefault(key, {
                "product_id": item.product_id,
                "name": item.product_snapshot.name,
                "sold": 0,
                "revenue": Decimal('0'),
            })
            entry["sold"] += item.quantity
            entry["revenue"] += item.line_total

    ranked = sorted(performance.values(), key=lambda entry: entry["revenue"], reverse=True)
    for entry in ranked:
        entry["revenue"] = _money(entry["revenue"])
    return ranked


def low_stock_products(products: Iterable[Product]) -> List[Product]:
    """Products at or below their reorder level, emptiest first"""
    return sorted(
        (product for product in products if product.stock <= product.effective_reorder_level),
        key=lambda product: (product.stock, product.name)
    )


def sales_summary(sales: List[Sale]) -> Dict:
    return {
        "total_revenue": _money(total_revenue(sales)),
        "sales_by_payment_method": sales_by_payment_method(sales),
        "sales_by_channel": sales_by_channel(sales),
        "total_transactions": len(sales),
        "products_sold": items_sold(sales),
    }


class AnalyticsService:
    """Loads history and builds the dashboard payloads"""

    def __init__(
        self,
        sale_repository: Optional[SaleRepository] = None,
        product_repository: Optional[ProductRepository] = None,
    ):
        self.sales = sale_repository or SaleRepository()
        self.products = product_repository or ProductRepository()

    def get_sales_summary(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict:
        return sales_summary(self.sales.find_all(start_date=start_date, end_date=end_date))

    def get_dashboard(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict:
        sales = self.sales.find_all(start_date=start_date, end_date=end_date)
        products, total_products = self.products.find_all()
        low_stock = low_stock_products(products)

        return {
            **sales_summary(sales),
            "total_cost": _money(total_cost(sales)),
            "total_profit": _money(total_profit(sales)),
            "profit_margin": profit_margin(sales),
            "average_order_value": average_order_value(sales),
            "sales_by_category": sales_by_category(sales),
            "monthly_sales": monthly_sales(sales),
            "hourly_sales": hourly_sales(sales),
            "product_performance": product_performance(sales),
            "total_products": total_products,
            "low_stock_count": len(low_stock),
            "low_stock_products": [product.to_dict() for product in low_stock],
            "default_reorder_level": settings.DEFAULT_REORDER_LEVEL,
        }
