"""
Suppliers API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status

from invenhub.core.auth import TokenUser, require_admin, require_guest, require_staff
from invenhub.core.exceptions import ConflictError, NotFoundError
from invenhub.domain.supplier import SupplierCreate, SupplierUpdate
from invenhub.services.supplier_service import SupplierService

router = APIRouter()


def get_supplier_service() -> SupplierService:
    return SupplierService()


@router.get("")
async def get_suppliers(
    user: TokenUser = Depends(require_guest),
    service: SupplierService = Depends(get_supplier_service)
):
    """All suppliers with the products they replenish"""
    try:
        suppliers = service.list_suppliers()
        return {
            "status": "success",
            "count": len(suppliers),
            "data": [supplier.to_dict() for supplier in suppliers]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching suppliers: {str(e)}")


@router.get("/{supplier_id}")
async def get_supplier(
    supplier_id: int,
    user: TokenUser = Depends(require_guest),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        return {"status": "success", "data": service.get_supplier(supplier_id).to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching supplier: {str(e)}")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    payload: SupplierCreate,
    user: TokenUser = Depends(require_staff),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        supplier = service.create_supplier(payload)
        return {"status": "success", "data": supplier.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating supplier: {str(e)}")


@router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    user: TokenUser = Depends(require_staff),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        supplier = service.update_supplier(supplier_id, payload)
        return {"status": "success", "data": supplier.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating supplier: {str(e)}")


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: int,
    user: TokenUser = Depends(require_admin),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        service.delete_supplier(supplier_id)
        return {"status": "success", "message": f"Supplier {supplier_id} deleted"}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting supplier: {str(e)}")
