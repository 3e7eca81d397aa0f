"""
Unit tests for ProductRepository

Tests the data access layer in isolation using mocked database connections.
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch

from psycopg2 import errors

from invenhub.core.exceptions import ConflictError
from invenhub.repositories.product_repository import ProductRepository
from invenhub.domain.product import Product


def _mock_connection(mock_get_conn):
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_get_conn.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


class TestProductRepository:
    """Test suite for ProductRepository"""

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_product_when_exists(self, mock_get_conn, product_row):
        """Test find_by_id returns Product when product exists"""
        # Arrange
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = product_row

        # Act
        repo = ProductRepository()
        product = repo.find_by_id(1)

        # Assert
        assert isinstance(product, Product)
        assert product.id == 1
        assert product.barcode == '123456789001'
        assert product.supplier_name == 'Jungle Threads Ltd'
        assert product.price == Decimal('29.99')
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_none_when_not_exists(self, mock_get_conn):
        """Test find_by_id returns None when product doesn't exist"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        repo = ProductRepository()
        product = repo.find_by_id(999)

        assert product is None

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_find_all_returns_products_and_count(self, mock_get_conn, product_row):
        """Test find_all returns list of products and total count"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'total': 2}
        mock_cursor.fetchall.return_value = [
            product_row,
            {**product_row, 'id': 2, 'name': 'Bastar Art Elephant', 'barcode': '123456789002',
             'category': 'Bastar Art'},
        ]

        repo = ProductRepository()
        products, total = repo.find_all(query='elephant', category='Bastar Art', limit=10)

        assert total == 2
        assert len(products) == 2
        assert all(isinstance(p, Product) for p in products)
        assert products[1].barcode == '123456789002'

        # Search term is wrapped for ILIKE and pagination is appended
        count_params = mock_cursor.execute.call_args_list[0][0][1]
        assert count_params == ['%elephant%', '%elephant%', 'Bastar Art']
        page_params = mock_cursor.execute.call_args_list[1][0][1]
        assert page_params[-2:] == [10, 0]

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_find_all_ignores_all_category(self, mock_get_conn):
        """Test category 'all' adds no filter"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'total': 0}
        mock_cursor.fetchall.return_value = []

        repo = ProductRepository()
        products, total = repo.find_all(category='all')

        assert products == []
        assert total == 0
        count_sql, count_params = mock_cursor.execute.call_args_list[0][0]
        assert count_params == []
        assert '1=1' in count_sql

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_find_by_ids_returns_empty_without_query(self, mock_get_conn):
        """Test find_by_ids short-circuits on an empty id list"""
        repo = ProductRepository()

        assert repo.find_by_ids([]) == {}
        mock_get_conn.assert_not_called()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_create_commits_and_returns_product(self, mock_get_conn, product_row):
        """Test create inserts only writable columns and commits"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [{'id': 1}, product_row]

        repo = ProductRepository()
        product = repo.create({
            'name': 'Safari Adventure T-Shirt',
            'barcode': '123456789001',
            'category': 'Apparel',
            'price': Decimal('29.99'),
            'cost_price': Decimal('12.99'),
            'supplier': 'ignored',
        })

        assert product.id == 1
        insert_sql, insert_values = mock_cursor.execute.call_args_list[0][0]
        assert 'supplier,' not in insert_sql
        assert len(insert_values) == 5
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_create_rolls_back_on_error(self, mock_get_conn):
        """Test create rolls back when the insert fails"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = Exception("connection lost")

        repo = ProductRepository()
        with pytest.raises(Exception, match="connection lost"):
            repo.create({'name': 'X', 'barcode': '1'})

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()
        mock_conn.close.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_create_duplicate_barcode_is_a_conflict(self, mock_get_conn):
        """Test a concurrent insert of the same barcode surfaces as ConflictError"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = errors.UniqueViolation("duplicate key value violates unique constraint")

        repo = ProductRepository()
        with pytest.raises(ConflictError, match="barcode 123456789001 already exists"):
            repo.create({'name': 'X', 'barcode': '123456789001'})

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()
        mock_conn.close.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_update_duplicate_barcode_is_a_conflict(self, mock_get_conn):
        """Test changing to a barcode another product just took surfaces as ConflictError"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = errors.UniqueViolation("duplicate key value violates unique constraint")

        repo = ProductRepository()
        with pytest.raises(ConflictError):
            repo.update(1, {'barcode': '123456789006'})

        mock_conn.rollback.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_update_returns_none_for_missing_product(self, mock_get_conn):
        """Test update returns None when no row matches"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        repo = ProductRepository()
        result = repo.update(999, {'stock': 3})

        assert result is None
        mock_conn.rollback.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_set_stock_returns_previous_stock(self, mock_get_conn):
        """Test set_stock reports the stock before the overwrite"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'previous_stock': 7}

        repo = ProductRepository()
        previous = repo.set_stock(1, 20)

        assert previous == 7
        assert mock_cursor.execute.call_args[0][1] == (20, 1)
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.product_repository.get_db_connection_dict')
    def test_delete_reports_whether_row_existed(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        repo = ProductRepository()

        assert repo.delete(999) is False


class TestProductDomainModel:
    """Computed properties of the Product model"""

    def test_healthy_stock(self, make_product):
        product = make_product(stock=42, reorder_level=10)

        assert product.is_low_stock is False
        assert product.is_out_of_stock is False
        assert product.margin == Decimal('17.00')

    def test_low_stock_at_reorder_level(self, make_product):
        product = make_product(stock=10, reorder_level=10)

        assert product.is_low_stock is True
        assert product.is_out_of_stock is False

    def test_out_of_stock_is_not_low_stock(self, make_product):
        product = make_product(stock=0, reorder_level=10)

        assert product.is_out_of_stock is True
        assert product.is_low_stock is False

    def test_default_reorder_level_applies_when_unset(self, make_product):
        product = make_product(stock=5, reorder_level=None)

        assert product.effective_reorder_level == 5
        assert product.is_low_stock is True

    def test_to_dict_converts_decimals(self, make_product):
        data = make_product().to_dict()

        assert data['price'] == 29.99
        assert data['cost_price'] == 12.99
        assert data['category'] == 'Apparel'
        assert data['is_low_stock'] is False
