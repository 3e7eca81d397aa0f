"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
"""
from typing import List, Optional, Tuple, Dict, Any

from psycopg2 import errors

from invenhub.domain.product import Product
from invenhub.core.database import get_db_connection_dict
from invenhub.core.exceptions import ConflictError


PRODUCT_COLUMNS = """
    p.id, p.name, p.barcode, p.category, p.price, p.cost_price, p.stock,
    p.image_url, p.supplier_id, s.name AS supplier_name,
    p.reorder_level, p.auto_reorder, p.target_stock_level,
    p.created_at, p.updated_at
"""

# Columns a caller may write through create/update
WRITABLE_COLUMNS = (
    'name', 'barcode', 'category', 'price', 'cost_price', 'stock', 'image_url',
    'supplier_id', 'reorder_level', 'auto_reorder', 'target_stock_level',
)


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        return Product(**dict(row))

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        """Load several products at once, keyed by ID"""
        if not product_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.id = ANY(%s)
            """, (list(product_ids),))

            return {row['id']: self._map_row_to_product(row) for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.barcode = %s
            """, (barcode,))

            row = cursor.fetchone()
            return self._map_row_to_product(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        supplier_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            query: Case-insensitive search in name or barcode
            category: Filter by category ('all' means no filter)
            supplier_id: Filter by supplier
            limit: Maximum results to return (None for all)
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if query:
                conditions.append("(p.name ILIKE %s OR p.barcode ILIKE %s)")
                search_term = f"%{query}%"
                params.extend([search_term, search_term])

            if category and category != 'all':
                conditions.append("p.category = %s")
                params.append(category)

            if supplier_id is not None:
                conditions.append("p.supplier_id = %s")
                params.append(supplier_id)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) AS total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            page_clause = ""
            page_params: List[Any] = []
            if limit is not None:
                page_clause = "LIMIT %s OFFSET %s"
                page_params = [limit, offset]

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE {where_clause}
                ORDER BY p.name
                {page_clause}
            """, params + page_params)

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return products, total

        finally:
            cursor.close()
            conn.close()

    def find_low_stock(self, default_threshold: int) -> List[Product]:
        """
        Products at or below their reorder level (out of stock included)

        Products without a reorder level use default_threshold.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.stock <= COALESCE(NULLIF(p.reorder_level, 0), %s)
                ORDER BY p.stock ASC, p.name
            """, (default_threshold,))

            return [self._map_row_to_product(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def get_categories(self) -> List[Dict[str, Any]]:
        """Category names with product counts, most populated first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT category AS name, COUNT(*) AS count
                FROM products
                GROUP BY category
                ORDER BY count DESC, category
            """)
            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, data: Dict[str, Any]) -> Product:
        """Insert a product and return it with its supplier name"""
        columns = [column for column in WRITABLE_COLUMNS if column in data]
        values = [data[column] for column in columns]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products ({', '.join(columns)}, created_at, updated_at)
                VALUES ({', '.join(['%s'] * len(columns))}, NOW(), NOW())
                RETURNING id
            """, values)
            product_id = cursor.fetchone()['id']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.id = %s
            """, (product_id,))
            row = cursor.fetchone()

            conn.commit()
            return self._map_row_to_product(row)

        except errors.UniqueViolation:
            conn.rollback()
            raise ConflictError(f"A product with barcode {data.get('barcode')} already exists")
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, data: Dict[str, Any]) -> Optional[Product]:
        """
        Update the given columns of a product

        Returns:
            Updated Product or None if the product does not exist
        """
        columns = [column for column in WRITABLE_COLUMNS if column in data]
        if not columns:
            return self.find_by_id(product_id)

        update_fields = [f"{column} = %s" for column in columns]
        values = [data[column] for column in columns]
        update_fields.append("updated_at = NOW()")

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {', '.join(update_fields)}
                WHERE id = %s
                RETURNING id
            """, values + [product_id])

            if not cursor.fetchone():
                conn.rollback()
                return None

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                LEFT JOIN suppliers s ON p.supplier_id = s.id
                WHERE p.id = %s
            """, (product_id,))
            row = cursor.fetchone()

            conn.commit()
            return self._map_row_to_product(row)

        except errors.UniqueViolation:
            conn.rollback()
            raise ConflictError(f"A product with barcode {data.get('barcode')} already exists")
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s RETURNING id", (product_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def set_stock(self, product_id: int, new_stock: int) -> Optional[int]:
        """
        Overwrite stock (stock counts, spreadsheet uploads)

        Returns:
            Previous stock, or None if the product does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE products p
                SET stock = %s, updated_at = NOW()
                FROM (SELECT id, stock FROM products WHERE id = %s FOR UPDATE) old
                WHERE p.id = old.id
                RETURNING old.stock AS previous_stock
            """, (new_stock, product_id))

            row = cursor.fetchone()
            conn.commit()
            return row['previous_stock'] if row else None

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
