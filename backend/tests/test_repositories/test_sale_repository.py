"""
Unit tests for SaleRepository

Stock movements and inserts run against a mocked cursor.
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

from invenhub.core.exceptions import InsufficientStockError
from invenhub.domain.sale import ProductSnapshot, Sale
from invenhub.repositories.sale_repository import SaleRepository


SOLD_AT = datetime(2025, 3, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def sale_row():
    return {
        'id': 10,
        'subtotal': Decimal('59.98'),
        'tax_amount': Decimal('4.80'),
        'total_amount': Decimal('64.78'),
        'payment_method': 'cash',
        'channel': 'in-store',
        'customer_id': None,
        'customer_name': 'Asha',
        'employee_id': 'emp-1',
        'timestamp': SOLD_AT,
        'created_at': SOLD_AT,
    }


@pytest.fixture
def sale_item_row():
    return {
        'id': 100,
        'sale_id': 10,
        'product_id': 1,
        'product_name': 'Safari Adventure T-Shirt',
        'product_category': 'Apparel',
        'product_price': Decimal('29.99'),
        'product_barcode': '123456789001',
        'product_cost_price': Decimal('12.99'),
        'quantity': 2,
        'price_at_sale': Decimal('29.99'),
    }


@pytest.fixture
def new_sale():
    return {
        'subtotal': Decimal('59.98'),
        'tax_amount': Decimal('4.80'),
        'total_amount': Decimal('64.78'),
        'payment_method': 'cash',
        'channel': 'in-store',
        'customer_name': 'Asha',
        'employee_id': 'emp-1',
        'timestamp': SOLD_AT,
    }


@pytest.fixture
def new_items():
    return [{
        'product_id': 1,
        'snapshot': ProductSnapshot(
            name='Safari Adventure T-Shirt',
            category='Apparel',
            price=Decimal('29.99'),
            barcode='123456789001',
            cost_price=Decimal('12.99'),
        ),
        'quantity': 2,
        'price_at_sale': Decimal('29.99'),
    }]


def _mock_connection(mock_get_conn):
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_get_conn.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


class TestSaleRepository:

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_find_by_id_loads_items(self, mock_get_conn, sale_row, sale_item_row):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = sale_row
        mock_cursor.fetchall.return_value = [sale_item_row]

        sale = SaleRepository().find_by_id(10)

        assert isinstance(sale, Sale)
        assert sale.customer_name == 'Asha'
        assert len(sale.items) == 1
        assert sale.items[0].product_snapshot.barcode == '123456789001'
        assert sale.item_count == 2

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_find_all_applies_customer_filter(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = []

        sales = SaleRepository().find_all(payment_method='card', customer_name='ash')

        assert sales == []
        sql, params = mock_cursor.execute.call_args[0]
        assert 'customer_name ILIKE %s' in sql
        assert 'ORDER BY timestamp DESC' in sql
        assert params == ['card', '%ash%']

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_in_store_sale_decrements_stock_then_inserts(
        self, mock_get_conn, new_sale, new_items, sale_row, sale_item_row
    ):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [{'stock': 40}, sale_row, sale_item_row]

        sale = SaleRepository().create_with_stock_update(new_sale, new_items, decrement_stock=True)

        assert sale.id == 10
        assert sale.items[0].quantity == 2
        first_sql, first_params = mock_cursor.execute.call_args_list[0][0]
        assert 'stock >= %s' in first_sql
        assert first_params == (2, 1, 2)
        mock_conn.commit.assert_called_once()
        mock_conn.rollback.assert_not_called()

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_insufficient_stock_rolls_back_without_insert(self, mock_get_conn, new_sale, new_items):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        # Conditional decrement misses, then the current stock is read
        mock_cursor.fetchone.side_effect = [None, {'stock': 1}]

        with pytest.raises(InsufficientStockError) as exc_info:
            SaleRepository().create_with_stock_update(new_sale, new_items, decrement_stock=True)

        assert str(exc_info.value) == (
            "Insufficient stock for Safari Adventure T-Shirt. Available: 1, Requested: 2"
        )
        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()
        executed = [call[0][0] for call in mock_cursor.execute.call_args_list]
        assert not any('INSERT INTO sales' in sql for sql in executed)
        mock_conn.close.assert_called_once()

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_online_sale_leaves_stock_untouched(
        self, mock_get_conn, new_sale, new_items, sale_row, sale_item_row
    ):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [{**sale_row, 'channel': 'online'}, sale_item_row]

        sale = SaleRepository().create_with_stock_update(
            {**new_sale, 'channel': 'online'}, new_items, decrement_stock=False
        )

        assert sale.channel.value == 'online'
        executed = [call[0][0] for call in mock_cursor.execute.call_args_list]
        assert not any('UPDATE products' in sql for sql in executed)
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_delete_restores_in_store_stock(self, mock_get_conn, sale_row, sale_item_row):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = sale_row
        mock_cursor.fetchall.return_value = [sale_item_row]

        sale = SaleRepository().delete_with_stock_restore(10)

        assert sale.id == 10
        restore = [
            call[0] for call in mock_cursor.execute.call_args_list
            if 'stock = stock + %s' in call[0][0]
        ]
        assert len(restore) == 1
        assert restore[0][1] == (2, 1)
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.sale_repository.get_db_connection_dict')
    def test_delete_missing_sale_returns_none(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert SaleRepository().delete_with_stock_restore(99) is None
        mock_conn.commit.assert_not_called()
