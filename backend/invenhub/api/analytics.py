"""
Analytics API Endpoints
Dashboard figures computed from sales history and the current catalog
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from invenhub.core.auth import TokenUser, require_guest
from invenhub.services.analytics_service import AnalyticsService

router = APIRouter()


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()


@router.get("/dashboard")
async def get_dashboard(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user: TokenUser = Depends(require_guest),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Everything the dashboard shows in one call

    Returns:
    - Revenue, cost, profit and margin
    - Items sold and average order value
    - Revenue by payment method, channel and category
    - Monthly (Jan-Dec) and hourly (last 24h) revenue
    - Product performance and low stock products
    """
    try:
        return {"status": "success", "data": service.get_dashboard(start_date, end_date)}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error building dashboard: {str(e)}")
