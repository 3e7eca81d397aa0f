"""
Service for stock counts: Excel template download, upload preview and bulk
stock updates, plus the inventory summary.
"""
import io
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Optional, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from invenhub.core.config import settings
from invenhub.core.database import get_db_connection_dict_with_retry
from invenhub.core.exceptions import ValidationError
from invenhub.repositories.product_repository import ProductRepository
from invenhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TEMPLATE_HEADERS = ["Barcode", "Product", "Category", "Supplier", "Current Quantity", "New Quantity"]
HEADER_WORDS = {'barcode', 'nan', ''}


def _parse_quantity(raw_qty) -> int:
    """Parse a spreadsheet cell into a whole, non-negative stock count"""
    value = Decimal(str(raw_qty).strip())
    if not value.is_finite() or value != value.to_integral_value():
        raise ValueError(f"not a whole number: {raw_qty}")
    if value < 0:
        raise ValueError("negative quantity")
    return int(value)


class InventoryService:
    """Service for inventory business logic"""

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.products = product_repository or ProductRepository()
        self.notifications = notification_service or NotificationService()

    @staticmethod
    def get_stock_summary() -> Dict:
        """Get summary of inventory status"""
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total_products,
                    COUNT(*) FILTER (WHERE stock > 0) as products_in_stock,
                    COUNT(*) FILTER (WHERE stock = 0) as out_of_stock,
                    COUNT(*) FILTER (
                        WHERE stock > 0 AND stock <= COALESCE(NULLIF(reorder_level, 0), %s)
                    ) as low_stock,
                    COUNT(*) FILTER (WHERE auto_reorder) as auto_reorder_products,
                    COALESCE(SUM(stock), 0) as total_units,
                    COALESCE(SUM(stock * cost_price), 0) as stock_cost_value,
                    COALESCE(SUM(stock * price), 0) as stock_retail_value
                FROM products
            """, (settings.DEFAULT_REORDER_LEVEL,))

            result = dict(cursor.fetchone() or {})
            for field in ('stock_cost_value', 'stock_retail_value'):
                if field in result:
                    result[field] = float(result[field])
            return result
        finally:
            cursor.close()
            conn.close()

    def generate_inventory_template(self) -> io.BytesIO:
        """Generate Excel template with every product and its current stock"""
        products, _ = self.products.find_all()

        wb = Workbook()
        ws = wb.active
        ws.title = "Inventory"

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True, size=12)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        for col_num, header in enumerate(TEMPLATE_HEADERS, 1):
            cell = ws.cell(row=1, column=col_num, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = border

        for row_num, product in enumerate(products, 2):
            data = [
                product.barcode,
                product.name,
                product.category.value,
                product.supplier_name or "",
                product.stock,
                product.stock,  # New Quantity, edited by the user
            ]

            for col_num, value in enumerate(data, 1):
                cell = ws.cell(row=row_num, column=col_num, value=value)
                cell.border = border
                cell.alignment = Alignment(horizontal='left', vertical='center')

                if col_num == 1:
                    cell.number_format = '@'
                if col_num in [5, 6]:
                    cell.alignment = Alignment(horizontal='right', vertical='center')
                    cell.number_format = '#,##0'

        for column, width in zip("ABCDEF", [18, 40, 15, 25, 18, 18]):
            ws.column_dimensions[column].width = width

        ws.freeze_panes = 'A2'

        excel_file = io.BytesIO()
        wb.save(excel_file)
        excel_file.seek(0)

        return excel_file

    @staticmethod
    def _find_columns(df: pd.DataFrame) -> Tuple[str, Optional[str], Optional[str]]:
        """Barcode, name and quantity columns of an uploaded sheet"""
        barcode_col = None
        name_col = None
        qty_col = None

        for col in df.columns:
            col_lower = str(col).strip().lower()
            if 'barcode' in col_lower:
                barcode_col = col
            elif col_lower in ('product', 'name', 'product name'):
                name_col = col
            elif 'new quantity' in col_lower:
                qty_col = col
            elif qty_col is None and col_lower in ('quantity', 'qty', 'stock'):
                qty_col = col

        if barcode_col is None:
            raise ValidationError(f"Could not find a barcode column. Columns: {list(df.columns)}")

        return barcode_col, name_col, qty_col

    @staticmethod
    def _read_sheet(file_content: bytes) -> pd.DataFrame:
        try:
            return pd.read_excel(io.BytesIO(file_content), sheet_name=0, header=0, dtype=str)
        except Exception as e:
            raise ValidationError(f"Error reading Excel: {str(e)}")

    def _parse_rows(self, file_content: bytes) -> Tuple[List[Dict], List[Dict], Dict]:
        """
        Returns:
            (valid rows, invalid rows, detected columns)
        """
        df = self._read_sheet(file_content)
        barcode_col, name_col, qty_col = self._find_columns(df)

        if qty_col is None:
            raise ValidationError(f"Could not find a quantity column. Columns: {list(df.columns)}")

        rows = []
        invalid = []
        for idx, row in df.iterrows():
            barcode = str(row[barcode_col]).strip() if pd.notna(row[barcode_col]) else ""
            if barcode.lower() in HEADER_WORDS:
                continue

            name = str(row[name_col]).strip() if name_col and pd.notna(row[name_col]) else ""
            raw_qty = row[qty_col] if pd.notna(row[qty_col]) else None

            try:
                quantity = _parse_quantity(raw_qty)
            except (ValueError, TypeError, InvalidOperation, OverflowError):
                invalid.append({
                    "row": idx + 2,
                    "barcode": barcode,
                    "value": raw_qty,
                    "reason": "Quantity must be a whole number of zero or more"
                })
                continue

            rows.append({"barcode": barcode, "name": name, "quantity": quantity})

        columns = {
            "barcode": barcode_col,
            "name": name_col if name_col else "N/A",
            "quantity": qty_col,
        }
        return rows, invalid, columns

    def preview_inventory_file(self, file_content: bytes, filename: str) -> Dict:
        """
        Preview Excel file content WITHOUT updating the database

        Each row is matched against the catalog so the user can see the change
        before applying it.
        """
        rows, invalid, columns = self._parse_rows(file_content)

        for row in rows:
            product = self.products.find_by_barcode(row["barcode"])
            row["found"] = product is not None
            row["current_stock"] = product.stock if product else None
            row["change"] = row["quantity"] - product.stock if product else None

        return {
            "status": "success",
            "filename": filename,
            "total_rows": len(rows),
            "columns": columns,
            "rows": rows,
            "invalid": invalid,
        }

    def process_inventory_upload(self, file_content: bytes, filename: str) -> Dict:
        """Apply an uploaded stock count; only the barcodes in the sheet change"""
        rows, invalid, _ = self._parse_rows(file_content)
        if not rows and not invalid:
            raise ValidationError("No rows found to update")

        results = self.bulk_update_stock([(row["barcode"], row["quantity"]) for row in rows])
        results["status"] = "success"
        results["filename"] = filename
        results["invalid"] = invalid
        results["summary"]["invalid"] = len(invalid)

        logger.info(
            f"Inventory upload {filename}: {results['summary']['updated']} updated, "
            f"{results['summary']['not_found']} not found, {len(invalid)} invalid"
        )
        return results

    def bulk_update_stock(self, updates: List[Tuple[str, int]]) -> Dict:
        """Bulk update stock for multiple products by barcode"""
        results = {
            "success": [],
            "errors": [],
            "not_found": [],
            "summary": {
                "total": len(updates),
                "updated": 0,
                "failed": 0,
                "not_found": 0
            }
        }

        updated_products = []
        for barcode, new_quantity in updates:
            try:
                product = self.products.find_by_barcode(barcode)

                if not product:
                    results["not_found"].append({
                        "barcode": barcode,
                        "reason": "Product not found in database"
                    })
                    results["summary"]["not_found"] += 1
                    continue

                old_stock = self.products.set_stock(product.id, new_quantity)
                if old_stock is None:
                    results["not_found"].append({
                        "barcode": barcode,
                        "reason": "Product was removed before the update"
                    })
                    results["summary"]["not_found"] += 1
                    continue

                results["success"].append({
                    "barcode": barcode,
                    "name": product.name,
                    "old_stock": old_stock,
                    "new_stock": new_quantity,
                    "change": new_quantity - old_stock
                })
                results["summary"]["updated"] += 1
                updated_products.append(product.model_copy(update={"stock": new_quantity}))

            except Exception as e:
                logger.error(f"Stock update failed for {barcode}: {e}")
                results["errors"].append({
                    "barcode": barcode,
                    "error": str(e)
                })
                results["summary"]["failed"] += 1

        if updated_products:
            try:
                self.notifications.notify_stock_update(len(updated_products))
                self.notifications.check_stock_levels(updated_products)
            except Exception as e:
                logger.warning(f"Could not create stock notifications: {e}")

        return results
