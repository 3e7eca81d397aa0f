"""
Purchase Orders API Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from invenhub.core.auth import TokenUser, require_admin, require_guest, require_staff
from invenhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from invenhub.domain.catalog import PurchaseOrderStatus
from invenhub.domain.purchase_order import PurchaseOrderCreate, PurchaseOrderStatusUpdate
from invenhub.services.purchase_order_service import PurchaseOrderService

router = APIRouter()


def get_purchase_order_service() -> PurchaseOrderService:
    return PurchaseOrderService()


@router.get("")
async def get_purchase_orders(
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    supplier_id: Optional[int] = Query(None, alias="supplierId"),
    user: TokenUser = Depends(require_guest),
    service: PurchaseOrderService = Depends(get_purchase_order_service)
):
    try:
        orders = service.list_purchase_orders(
            status=status_filter.value if status_filter else None,
            supplier_id=supplier_id
        )
        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching purchase orders: {str(e)}")


@router.get("/{order_id}")
async def get_purchase_order(
    order_id: int,
    user: TokenUser = Depends(require_guest),
    service: PurchaseOrderService = Depends(get_purchase_order_service)
):
    try:
        return {"status": "success", "data": service.get_purchase_order(order_id).to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching purchase order: {str(e)}")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    payload: PurchaseOrderCreate,
    user: TokenUser = Depends(require_staff),
    service: PurchaseOrderService = Depends(get_purchase_order_service)
):
    try:
        order = service.create_purchase_order(payload)
        return {"status": "success", "data": order.to_dict()}

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating purchase order: {str(e)}")


@router.patch("/{order_id}/status")
async def update_purchase_order_status(
    order_id: int,
    payload: PurchaseOrderStatusUpdate,
    user: TokenUser = Depends(require_staff),
    service: PurchaseOrderService = Depends(get_purchase_order_service)
):
    """
    Move a purchase order through its lifecycle

    Receiving an order adds its quantities to stock. Received and canceled
    orders cannot change status again.
    """
    try:
        order = service.update_status(order_id, payload.status)
        return {"status": "success", "data": order.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating purchase order: {str(e)}")


@router.delete("/{order_id}")
async def delete_purchase_order(
    order_id: int,
    user: TokenUser = Depends(require_admin),
    service: PurchaseOrderService = Depends(get_purchase_order_service)
):
    try:
        service.delete_purchase_order(order_id)
        return {"status": "success", "message": f"Purchase order {order_id} deleted"}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting purchase order: {str(e)}")
