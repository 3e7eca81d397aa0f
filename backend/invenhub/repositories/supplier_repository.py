"""
Supplier Repository - Data Access Layer for Suppliers
"""
from typing import List, Optional, Dict, Any

from invenhub.domain.supplier import Supplier, SupplierProduct
from invenhub.core.database import get_db_connection_dict


SUPPLIER_COLUMNS = "id, name, contact_person, email, phone, address, created_at, updated_at"
WRITABLE_COLUMNS = ('name', 'contact_person', 'email', 'phone', 'address')


class SupplierRepository:
    """
    Repository for Supplier data access

    Suppliers come back with the products they replenish attached.
    """

    @staticmethod
    def _attach_products(cursor, rows: List[dict]) -> List[Supplier]:
        if not rows:
            return []

        supplier_ids = [row['id'] for row in rows]
        cursor.execute("""
            SELECT id, name, category, price, stock, supplier_id
            FROM products
            WHERE supplier_id = ANY(%s)
            ORDER BY name
        """, (supplier_ids,))

        products_by_supplier: Dict[int, List[SupplierProduct]] = {}
        for product_row in cursor.fetchall():
            product = dict(product_row)
            supplier_id = product.pop('supplier_id')
            products_by_supplier.setdefault(supplier_id, []).append(SupplierProduct(**product))

        return [
            Supplier(**dict(row), products=products_by_supplier.get(row['id'], []))
            for row in rows
        ]

    def find_all(self) -> List[Supplier]:
        """All suppliers ordered by name"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {SUPPLIER_COLUMNS} FROM suppliers ORDER BY name")
            rows = cursor.fetchall()
            return self._attach_products(cursor, rows)

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, supplier_id: int) -> Optional[Supplier]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {SUPPLIER_COLUMNS} FROM suppliers WHERE id = %s", (supplier_id,))
            row = cursor.fetchone()
            if not row:
                return None

            return self._attach_products(cursor, [row])[0]

        finally:
            cursor.close()
            conn.close()

    def find_id_by_name(self, name: str) -> Optional[int]:
        """Exact, case-insensitive name lookup used when products name their supplier"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT id FROM suppliers WHERE LOWER(name) = LOWER(%s) ORDER BY id LIMIT 1",
                (name.strip(),)
            )
            row = cursor.fetchone()
            return row['id'] if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, data: Dict[str, Any]) -> Supplier:
        columns = [column for column in WRITABLE_COLUMNS if column in data]
        values = [data[column] for column in columns]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO suppliers ({', '.join(columns)}, created_at, updated_at)
                VALUES ({', '.join(['%s'] * len(columns))}, NOW(), NOW())
                RETURNING {SUPPLIER_COLUMNS}
            """, values)
            row = cursor.fetchone()
            conn.commit()
            return Supplier(**dict(row))

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, supplier_id: int, data: Dict[str, Any]) -> Optional[Supplier]:
        columns = [column for column in WRITABLE_COLUMNS if column in data]
        if not columns:
            return self.find_by_id(supplier_id)

        update_fields = [f"{column} = %s" for column in columns]
        update_fields.append("updated_at = NOW()")
        values = [data[column] for column in columns]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE suppliers
                SET {', '.join(update_fields)}
                WHERE id = %s
                RETURNING {SUPPLIER_COLUMNS}
            """, values + [supplier_id])

            row = cursor.fetchone()
            if not row:
                conn.rollback()
                return None

            supplier = self._attach_products(cursor, [row])[0]
            conn.commit()
            return supplier

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, supplier_id: int) -> bool:
        """Delete a supplier; its products are left without a supplier"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM suppliers WHERE id = %s RETURNING id", (supplier_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
