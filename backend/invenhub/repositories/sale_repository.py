"""
Sale Repository - Data Access Layer for Sales

Sales and their stock movements are written in one transaction. Stock is
decremented with a conditional UPDATE, so two tills selling the last unit at
the same time cannot both succeed.
"""
from datetime import datetime
from typing import List, Optional, Dict, Any

from invenhub.core.database import get_db_connection_dict
from invenhub.core.exceptions import InsufficientStockError
from invenhub.domain.sale import Sale, SaleItem, ProductSnapshot


SALE_COLUMNS = """
    id, subtotal, tax_amount, total_amount, payment_method, channel,
    customer_id, customer_name, employee_id, timestamp, created_at
"""

SALE_ITEM_COLUMNS = """
    id, sale_id, product_id, product_name, product_category, product_price,
    product_barcode, product_cost_price, quantity, price_at_sale
"""


class SaleRepository:
    """
    Repository for Sale data access

    Returns Sale domain models with their line items.
    """

    @staticmethod
    def _map_item_row(row: dict) -> SaleItem:
        return SaleItem(
            id=row['id'],
            product_id=row['product_id'],
            product_snapshot=ProductSnapshot(
                name=row['product_name'],
                category=row['product_category'],
                price=row['product_price'],
                barcode=row['product_barcode'],
                cost_price=row['product_cost_price'] or 0,
            ),
            quantity=row['quantity'],
            price_at_sale=row['price_at_sale'],
        )

    def _load_items(self, cursor, sale_ids: List[int]) -> Dict[int, List[SaleItem]]:
        if not sale_ids:
            return {}

        cursor.execute(f"""
            SELECT {SALE_ITEM_COLUMNS}
            FROM sale_items
            WHERE sale_id = ANY(%s)
            ORDER BY id
        """, (sale_ids,))

        items: Dict[int, List[SaleItem]] = {}
        for row in cursor.fetchall():
            items.setdefault(row['sale_id'], []).append(self._map_item_row(row))
        return items

    def find_by_id(self, sale_id: int) -> Optional[Sale]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {SALE_COLUMNS} FROM sales WHERE id = %s", (sale_id,))
            row = cursor.fetchone()
            if not row:
                return None

            items = self._load_items(cursor, [sale_id])
            return Sale(**dict(row), items=items.get(sale_id, []))

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        payment_method: Optional[str] = None,
        channel: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> List[Sale]:
        """
        Find sales with filters, newest first

        Args:
            start_date: Sales at or after this moment
            end_date: Sales at or before this moment
            payment_method: cash, card or online
            channel: in-store or online
            customer_name: Case-insensitive partial match
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if start_date:
                conditions.append("timestamp >= %s")
                params.append(start_date)

            if end_date:
                conditions.append("timestamp <= %s")
                params.append(end_date)

            if payment_method:
                conditions.append("payment_method = %s")
                params.append(payment_method)

            if channel:
                conditions.append("channel = %s")
                params.append(channel)

            if customer_name:
                conditions.append("customer_name ILIKE %s")
                params.append(f"%{customer_name}%")

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales
                WHERE {where_clause}
                ORDER BY timestamp DESC
            """, params)
            rows = cursor.fetchall()

            items = self._load_items(cursor, [row['id'] for row in rows])
            return [Sale(**dict(row), items=items.get(row['id'], [])) for row in rows]

        finally:
            cursor.close()
            conn.close()

    def create_with_stock_update(
        self,
        sale: Dict[str, Any],
        items: List[Dict[str, Any]],
        decrement_stock: bool
    ) -> Sale:
        """
        Insert a sale and, for in-store sales, take the sold units off the shelf

        Args:
            sale: subtotal, tax_amount, total_amount, payment_method, channel,
                  customer_id, customer_name, employee_id, timestamp
            items: product_id, snapshot (ProductSnapshot), quantity, price_at_sale
            decrement_stock: Whether to decrement product stock

        Raises:
            InsufficientStockError: A line would take stock below zero; nothing is written
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            if decrement_stock:
                # Rows are locked in product id order
                for item in sorted(items, key=lambda i: i['product_id']):
                    cursor.execute("""
                        UPDATE products
                        SET stock = stock - %s, updated_at = NOW()
                        WHERE id = %s AND stock >= %s
                        RETURNING stock
                    """, (item['quantity'], item['product_id'], item['quantity']))

                    if cursor.fetchone() is None:
                        cursor.execute("SELECT stock FROM products WHERE id = %s", (item['product_id'],))
                        current = cursor.fetchone()
                        conn.rollback()
                        raise InsufficientStockError(
                            item['snapshot'].name,
                            current['stock'] if current else 0,
                            item['quantity']
                        )

            cursor.execute(f"""
                INSERT INTO sales (
                    subtotal, tax_amount, total_amount, payment_method, channel,
                    customer_id, customer_name, employee_id, timestamp, created_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
                RETURNING {SALE_COLUMNS}
            """, (
                sale['subtotal'],
                sale['tax_amount'],
                sale['total_amount'],
                sale['payment_method'],
                sale['channel'],
                sale.get('customer_id'),
                sale.get('customer_name'),
                sale['employee_id'],
                sale['timestamp'],
            ))
            sale_row = cursor.fetchone()

            saved_items = []
            for item in items:
                snapshot = item['snapshot']
                cursor.execute(f"""
                    INSERT INTO sale_items (
                        sale_id, product_id, product_name, product_category, product_price,
                        product_barcode, product_cost_price, quantity, price_at_sale
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {SALE_ITEM_COLUMNS}
                """, (
                    sale_row['id'],
                    item['product_id'],
                    snapshot.name,
                    snapshot.category,
                    snapshot.price,
                    snapshot.barcode,
                    snapshot.cost_price,
                    item['quantity'],
                    item['price_at_sale'],
                ))
                saved_items.append(self._map_item_row(cursor.fetchone()))

            conn.commit()
            return Sale(**dict(sale_row), items=saved_items)

        except InsufficientStockError:
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete_with_stock_restore(self, sale_id: int) -> Optional[Sale]:
        """
        Delete a sale, putting in-store units back on the shelf

        Returns:
            The deleted Sale, or None if it did not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {SALE_COLUMNS} FROM sales WHERE id = %s FOR UPDATE", (sale_id,))
            row = cursor.fetchone()
            if not row:
                conn.rollback()
                return None

            items = self._load_items(cursor, [sale_id]).get(sale_id, [])
            sale = Sale(**dict(row), items=items)

            if sale.channel.value == 'in-store':
                for item in sorted(items, key=lambda i: i.product_id or 0):
                    if item.product_id is None:
                        continue
                    cursor.execute("""
                        UPDATE products
                        SET stock = stock + %s, updated_at = NOW()
                        WHERE id = %s
                    """, (item.quantity, item.product_id))

            cursor.execute("DELETE FROM sales WHERE id = %s", (sale_id,))
            conn.commit()
            return sale

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
