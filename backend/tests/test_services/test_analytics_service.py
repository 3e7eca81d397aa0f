"""
Unit tests for the analytics calculations
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from invenhub.services import analytics_service as analytics
from invenhub.services.analytics_service import AnalyticsService


@pytest.fixture
def sales(make_sale):
    return [
        make_sale(total_amount='64.78'),
        make_sale(
            sale_id=2,
            items=[('Water Bottle', 'Bottles', 1, '15.50', '6.00')],
            total_amount='16.74',
            payment_method='card',
            channel='online',
            timestamp=datetime(2025, 1, 20, 18, 0, tzinfo=timezone.utc),
        ),
    ]


class TestTotals:

    def test_revenue_uses_total_amount(self, sales):
        assert analytics.total_revenue(sales) == Decimal('81.52')

    def test_cost_uses_snapshot_cost(self, sales):
        assert analytics.total_cost(sales) == Decimal('31.98')

    def test_profit_and_margin(self, sales):
        assert analytics.total_profit(sales) == Decimal('49.54')
        assert analytics.profit_margin(sales) == 60.77

    def test_items_and_average_order(self, sales):
        assert analytics.items_sold(sales) == 3
        assert analytics.average_order_value(sales) == 40.76

    def test_empty_history(self):
        assert analytics.total_revenue([]) == Decimal('0')
        assert analytics.profit_margin([]) == 0.0
        assert analytics.average_order_value([]) == 0.0


class TestBreakdowns:

    def test_by_payment_method(self, sales):
        assert analytics.sales_by_payment_method(sales) == [
            {'name': 'cash', 'value': 64.78},
            {'name': 'card', 'value': 16.74},
        ]

    def test_by_channel(self, sales):
        assert analytics.sales_by_channel(sales) == [
            {'name': 'in-store', 'value': 64.78},
            {'name': 'online', 'value': 16.74},
        ]

    def test_by_category_uses_line_totals(self, sales):
        assert analytics.sales_by_category(sales) == [
            {'name': 'Apparel', 'value': 59.98},
            {'name': 'Bottles', 'value': 15.5},
        ]

    def test_monthly_has_twelve_buckets(self, sales):
        monthly = analytics.monthly_sales(sales)

        assert [bucket['name'] for bucket in monthly][:3] == ['Jan', 'Feb', 'Mar']
        assert len(monthly) == 12
        assert monthly[0]['value'] == 16.74
        assert monthly[2]['value'] == 64.78
        assert monthly[5]['value'] == 0.0

    def test_hourly_covers_last_day_only(self, make_sale):
        now = datetime(2025, 3, 15, 13, 0, tzinfo=timezone.utc)
        recent = make_sale(total_amount='10.00', timestamp=datetime(2025, 3, 15, 12, 30, tzinfo=timezone.utc))
        naive = make_sale(sale_id=2, total_amount='5.00', timestamp=datetime(2025, 3, 15, 1, 15))
        stale = make_sale(sale_id=3, total_amount='99.00', timestamp=datetime(2025, 3, 14, 10, 0, tzinfo=timezone.utc))

        hourly = analytics.hourly_sales([recent, naive, stale], now=now)

        assert len(hourly) == 24
        assert hourly[0]['name'] == '00:00'
        assert hourly[23]['name'] == '23:00'
        assert hourly[12]['value'] == 10.0
        assert hourly[1]['value'] == 5.0
        assert hourly[10]['value'] == 0.0

    def test_hourly_without_sales_is_all_zero(self):
        hourly = analytics.hourly_sales([], now=datetime(2025, 3, 15, tzinfo=timezone.utc))

        assert all(bucket['value'] == 0.0 for bucket in hourly)

    def test_product_performance_ranked_by_revenue(self, make_sale):
        sale = make_sale(items=[
            ('Water Bottle', 'Bottles', 1, '15.50', '6.00'),
            ('Safari Adventure T-Shirt', 'Apparel', 2, '29.99', '12.99'),
        ])

        ranked = analytics.product_performance([sale, sale])

        assert [entry['name'] for entry in ranked] == ['Safari Adventure T-Shirt', 'Water Bottle']
        assert ranked[0]['sold'] == 4
        assert ranked[0]['revenue'] == 119.96
        assert ranked[1]['product_id'] == 1

    def test_low_stock_products_sorted_emptiest_first(self, make_product):
        products = [
            make_product(id=1, name='A', stock=4, reorder_level=10),
            make_product(id=2, name='B', stock=0, reorder_level=10),
            make_product(id=3, name='C', stock=50, reorder_level=10),
        ]

        assert [p.id for p in analytics.low_stock_products(products)] == [2, 1]


def test_sales_summary_shape(sales):
    summary = analytics.sales_summary(sales)

    assert summary['total_revenue'] == 81.52
    assert summary['total_transactions'] == 2
    assert summary['products_sold'] == 3


def test_dashboard_combines_sales_and_stock(sales, make_product):
    sale_repo = MagicMock()
    sale_repo.find_all.return_value = sales
    product_repo = MagicMock()
    product_repo.find_all.return_value = ([make_product(stock=2)], 1)

    dashboard = AnalyticsService(sale_repo, product_repo).get_dashboard()

    assert dashboard['total_revenue'] == 81.52
    assert dashboard['total_profit'] == 49.54
    assert dashboard['total_products'] == 1
    assert dashboard['low_stock_count'] == 1
    assert len(dashboard['hourly_sales']) == 24
    sale_repo.find_all.assert_called_once_with(start_date=None, end_date=None)
