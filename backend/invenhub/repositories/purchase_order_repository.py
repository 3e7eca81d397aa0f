"""
Purchase Order Repository - Data Access Layer for Purchase Orders

Receiving an order and adding its quantities to stock happen in one
transaction, guarded by the status the order had when it was read.
"""
from datetime import datetime
from typing import List, Optional, Dict, Any

from invenhub.core.database import get_db_connection_dict
from invenhub.domain.catalog import PurchaseOrderStatus, OPEN_PURCHASE_ORDER_STATUSES
from invenhub.domain.purchase_order import PurchaseOrder, PurchaseOrderItem


PURCHASE_ORDER_COLUMNS = """
    po.id, po.supplier_id, s.name AS supplier_name, po.status, po.total_amount,
    po.order_date, po.expected_delivery_date, po.delivered_date,
    po.is_auto_generated, po.created_at, po.updated_at
"""


class PurchaseOrderRepository:
    """Repository for PurchaseOrder data access"""

    def _load_items(self, cursor, order_ids: List[int]) -> Dict[int, List[PurchaseOrderItem]]:
        if not order_ids:
            return {}

        cursor.execute("""
            SELECT id, purchase_order_id, product_id, product_name, quantity, unit_price
            FROM purchase_order_items
            WHERE purchase_order_id = ANY(%s)
            ORDER BY id
        """, (order_ids,))

        items: Dict[int, List[PurchaseOrderItem]] = {}
        for row in cursor.fetchall():
            item = dict(row)
            order_id = item.pop('purchase_order_id')
            items.setdefault(order_id, []).append(PurchaseOrderItem(**item))
        return items

    def _fetch_one(self, cursor, order_id: int, lock: bool = False) -> Optional[PurchaseOrder]:
        cursor.execute(f"""
            SELECT {PURCHASE_ORDER_COLUMNS}
            FROM purchase_orders po
            LEFT JOIN suppliers s ON po.supplier_id = s.id
            WHERE po.id = %s
            {'FOR UPDATE OF po' if lock else ''}
        """, (order_id,))

        row = cursor.fetchone()
        if not row:
            return None

        items = self._load_items(cursor, [order_id])
        return PurchaseOrder(**dict(row), items=items.get(order_id, []))

    def find_by_id(self, order_id: int) -> Optional[PurchaseOrder]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            return self._fetch_one(cursor, order_id)

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[str] = None,
        supplier_id: Optional[int] = None
    ) -> List[PurchaseOrder]:
        """Purchase orders, newest first, optionally filtered by status and supplier"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if status:
                conditions.append("po.status = %s")
                params.append(status)

            if supplier_id is not None:
                conditions.append("po.supplier_id = %s")
                params.append(supplier_id)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT {PURCHASE_ORDER_COLUMNS}
                FROM purchase_orders po
                LEFT JOIN suppliers s ON po.supplier_id = s.id
                WHERE {where_clause}
                ORDER BY po.order_date DESC, po.id DESC
            """, params)
            rows = cursor.fetchall()

            items = self._load_items(cursor, [row['id'] for row in rows])
            return [PurchaseOrder(**dict(row), items=items.get(row['id'], [])) for row in rows]

        finally:
            cursor.close()
            conn.close()

    def find_product_ids_with_open_orders(self, product_ids: List[int]) -> set:
        """Subset of product_ids already on a pending or ordered purchase order"""
        if not product_ids:
            return set()

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT DISTINCT poi.product_id
                FROM purchase_order_items poi
                JOIN purchase_orders po ON po.id = poi.purchase_order_id
                WHERE po.status = ANY(%s)
                  AND poi.product_id = ANY(%s)
            """, ([s.value for s in OPEN_PURCHASE_ORDER_STATUSES], list(product_ids)))

            return {row['product_id'] for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def count_by_supplier(self, supplier_id: int) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT COUNT(*) AS total FROM purchase_orders WHERE supplier_id = %s",
                (supplier_id,)
            )
            return cursor.fetchone()['total']

        finally:
            cursor.close()
            conn.close()

    def create(self, order: Dict[str, Any], items: List[Dict[str, Any]]) -> PurchaseOrder:
        """
        Insert a purchase order with its lines

        Args:
            order: supplier_id, status, total_amount, order_date,
                   expected_delivery_date, delivered_date, is_auto_generated
            items: product_id, product_name, quantity, unit_price
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO purchase_orders (
                    supplier_id, status, total_amount, order_date,
                    expected_delivery_date, delivered_date, is_auto_generated,
                    created_at, updated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
                RETURNING id
            """, (
                order['supplier_id'],
                order['status'],
                order['total_amount'],
                order['order_date'],
                order.get('expected_delivery_date'),
                order.get('delivered_date'),
                order.get('is_auto_generated', False),
            ))
            order_id = cursor.fetchone()['id']

            for item in items:
                cursor.execute("""
                    INSERT INTO purchase_order_items (
                        purchase_order_id, product_id, product_name, quantity, unit_price
                    )
                    VALUES (%s, %s, %s, %s, %s)
                """, (
                    order_id,
                    item['product_id'],
                    item.get('product_name'),
                    item['quantity'],
                    item['unit_price'],
                ))

            # An order created as received stocks its goods straight away
            if order['status'] == PurchaseOrderStatus.RECEIVED.value:
                self._receive_items(cursor, items)

            created = self._fetch_one(cursor, order_id)
            conn.commit()
            return created

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    @staticmethod
    def _receive_items(cursor, items: List[Dict[str, Any]]) -> None:
        for item in sorted(items, key=lambda i: i['product_id'] or 0):
            if item['product_id'] is None:
                continue
            cursor.execute("""
                UPDATE products
                SET stock = stock + %s, updated_at = NOW()
                WHERE id = %s
            """, (item['quantity'], item['product_id']))

    def update_status(
        self,
        order_id: int,
        expected_status: str,
        new_status: str,
        delivered_date: Optional[datetime] = None
    ) -> Optional[PurchaseOrder]:
        """
        Move an order from expected_status to new_status

        When new_status is received, each line's quantity is added to stock in
        the same transaction.

        Returns:
            Updated PurchaseOrder, or None when the order no longer exists or
            its status changed since it was read
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE purchase_orders
                SET status = %s,
                    delivered_date = COALESCE(%s, delivered_date),
                    updated_at = NOW()
                WHERE id = %s AND status = %s
                RETURNING id
            """, (new_status, delivered_date, order_id, expected_status))

            if cursor.fetchone() is None:
                conn.rollback()
                return None

            if new_status == PurchaseOrderStatus.RECEIVED.value:
                cursor.execute("""
                    SELECT product_id, quantity
                    FROM purchase_order_items
                    WHERE purchase_order_id = %s
                """, (order_id,))
                self._receive_items(cursor, [dict(row) for row in cursor.fetchall()])

            updated = self._fetch_one(cursor, order_id)
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, order_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM purchase_orders WHERE id = %s RETURNING id", (order_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
