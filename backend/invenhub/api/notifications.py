"""
Notifications API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from invenhub.core.auth import TokenUser, require_guest
from invenhub.services.notification_service import NotificationService

router = APIRouter()


def get_notification_service() -> NotificationService:
    return NotificationService()


@router.get("")
async def get_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=500),
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        notifications = service.list(unread_only=unread_only, limit=limit)
        return {
            "status": "success",
            "count": len(notifications),
            "data": [n.to_dict() for n in notifications]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching notifications: {str(e)}")


@router.get("/unread-count")
async def get_unread_count(
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        return {"status": "success", "data": {"unread": service.unread_count()}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting notifications: {str(e)}")


@router.patch("/read-all")
async def mark_all_read(
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        return {"status": "success", "data": {"updated": service.mark_all_read()}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating notifications: {str(e)}")


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        notification = service.mark_read(notification_id)
        if not notification:
            raise HTTPException(status_code=404, detail=f"Notification {notification_id} not found")
        return {"status": "success", "data": notification.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating notification: {str(e)}")


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        if not service.delete(notification_id):
            raise HTTPException(status_code=404, detail=f"Notification {notification_id} not found")
        return {"status": "success", "message": f"Notification {notification_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting notification: {str(e)}")


@router.delete("")
async def clear_notifications(
    user: TokenUser = Depends(require_guest),
    service: NotificationService = Depends(get_notification_service)
):
    try:
        return {"status": "success", "data": {"deleted": service.clear()}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error clearing notifications: {str(e)}")
