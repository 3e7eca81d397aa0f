"""
API endpoints for inventory management.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from invenhub.core.auth import TokenUser, require_admin, require_guest, require_staff
from invenhub.core.exceptions import ValidationError
from invenhub.services.inventory_service import InventoryService


router = APIRouter()

EXCEL_EXTENSIONS = ('.xlsx', '.xls')


def get_inventory_service() -> InventoryService:
    return InventoryService()


def _check_excel(file: UploadFile) -> None:
    if not file.filename or not file.filename.lower().endswith(EXCEL_EXTENSIONS):
        raise HTTPException(status_code=400, detail="File must be an Excel workbook (.xlsx or .xls)")


@router.get("/summary")
async def get_inventory_summary(
    user: TokenUser = Depends(require_guest),
    service: InventoryService = Depends(get_inventory_service)
):
    """Counts of products in, low and out of stock, plus units and stock value"""
    try:
        return {"status": "success", "data": service.get_stock_summary()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching inventory summary: {str(e)}")


@router.get("/template")
async def download_inventory_template(
    user: TokenUser = Depends(require_guest),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Download Excel template with every product and its current stock

    Returns:
        Excel file ready for editing
    """
    try:
        excel_file = service.generate_inventory_template()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"Inventory_{timestamp}.xlsx"

        return StreamingResponse(
            excel_file,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={
                "Content-Disposition": f"attachment; filename={filename}"
            }
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating template: {str(e)}")


@router.post("/preview")
async def preview_inventory_file(
    file: UploadFile = File(...),
    user: TokenUser = Depends(require_staff),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Preview Excel file content WITHOUT updating database

    Returns:
        Parsed rows matched against the catalog
    """
    try:
        _check_excel(file)
        contents = await file.read()
        return service.preview_inventory_file(file_content=contents, filename=file.filename)

    except HTTPException:
        raise
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error reading file: {str(e)}")


@router.post("/bulk-update")
async def upload_inventory_file(
    file: UploadFile = File(...),
    user: TokenUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Overwrite stock for every barcode listed in the uploaded sheet

    Barcodes not in the sheet keep their current stock.
    """
    try:
        _check_excel(file)
        contents = await file.read()
        return service.process_inventory_upload(file_content=contents, filename=file.filename)

    except HTTPException:
        raise
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")
