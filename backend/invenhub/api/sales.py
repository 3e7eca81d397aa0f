"""
Sales API Endpoints
Billing at the till and web shop orders
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from invenhub.core.auth import TokenUser, require_admin, require_guest, require_staff
from invenhub.core.exceptions import NotFoundError, ValidationError
from invenhub.domain.catalog import PaymentMethod, SaleChannel
from invenhub.domain.sale import SaleCreate
from invenhub.services.analytics_service import AnalyticsService
from invenhub.services.sales_service import SalesService

router = APIRouter()


def get_sales_service() -> SalesService:
    return SalesService()


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()


@router.get("")
async def get_sales(
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Sales at or after (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="Sales at or before (ISO 8601)"),
    payment_method: Optional[PaymentMethod] = Query(None, alias="paymentMethod"),
    channel: Optional[SaleChannel] = Query(None),
    customer_name: Optional[str] = Query(None, alias="customerName", description="Partial match"),
    user: TokenUser = Depends(require_guest),
    service: SalesService = Depends(get_sales_service)
):
    """Sales history, newest first"""
    try:
        sales = service.list_sales(
            start_date=start_date,
            end_date=end_date,
            payment_method=payment_method.value if payment_method else None,
            channel=channel.value if channel else None,
            customer_name=customer_name,
        )

        return {
            "status": "success",
            "count": len(sales),
            "data": [sale.to_dict() for sale in sales]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sales: {str(e)}")


@router.get("/analytics/summary")
async def get_sales_summary(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user: TokenUser = Depends(require_guest),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Revenue totals

    Returns:
    - Total revenue
    - Revenue by payment method and by channel
    - Number of transactions
    - Units sold
    """
    try:
        return {"status": "success", "data": service.get_sales_summary(start_date, end_date)}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error getting sales analytics: {str(e)}")


@router.get("/{sale_id}")
async def get_sale(
    sale_id: int,
    user: TokenUser = Depends(require_guest),
    service: SalesService = Depends(get_sales_service)
):
    try:
        return {"status": "success", "data": service.get_sale(sale_id).to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sale: {str(e)}")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sale(
    payload: SaleCreate,
    user: TokenUser = Depends(require_staff),
    service: SalesService = Depends(get_sales_service)
):
    """
    Record a sale

    In-store sales take the sold units off the shelf; the whole sale is
    rejected if any line exceeds stock on hand.
    """
    try:
        sale = service.create_sale(payload)
        return {"status": "success", "data": sale.to_dict()}

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating sale: {str(e)}")


@router.delete("/{sale_id}")
async def delete_sale(
    sale_id: int,
    user: TokenUser = Depends(require_admin),
    service: SalesService = Depends(get_sales_service)
):
    """Delete a sale; in-store units go back into stock"""
    try:
        service.delete_sale(sale_id)
        return {"status": "success", "message": f"Sale {sale_id} deleted"}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting sale: {str(e)}")
