"""
Auto-reorder API Endpoints
Scheduler status and a manual trigger for one reorder pass
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from invenhub.core.auth import TokenUser, require_guest, require_staff
from invenhub.services.reorder_scheduler import ReorderScheduler, reorder_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


def get_reorder_scheduler() -> ReorderScheduler:
    return reorder_scheduler


@router.get("/status")
async def get_reorder_status(
    user: TokenUser = Depends(require_guest),
    scheduler: ReorderScheduler = Depends(get_reorder_scheduler)
):
    return {"status": "success", "data": scheduler.status()}


@router.post("/run")
async def run_reorder_now(
    user: TokenUser = Depends(require_staff),
    scheduler: ReorderScheduler = Depends(get_reorder_scheduler)
):
    """Run stock alerts and the auto-reorder pass immediately"""
    try:
        logger.info(f"Manual auto-reorder run requested by {user.email}")
        report = await asyncio.to_thread(scheduler.run_once)
        return {"status": "success", "data": report}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error running auto-reorder: {str(e)}")
