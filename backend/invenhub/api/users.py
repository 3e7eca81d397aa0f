"""
User management endpoints (admin only)
"""
from fastapi import APIRouter, Depends, HTTPException

from invenhub.core.auth import TokenUser, require_admin
from invenhub.core.exceptions import NotFoundError, ValidationError
from invenhub.domain.user import RoleUpdate
from invenhub.services.auth_service import AuthService
from invenhub.api.auth import get_auth_service


router = APIRouter()


@router.get("")
async def list_users(
    user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    try:
        users = service.list_users()
        return {
            "status": "success",
            "count": len(users),
            "data": [u.to_dict() for u in users]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    """Change a user's role (admin, staff or guest)"""
    try:
        updated = service.update_role(user_id, payload.role)
        return {"status": "success", "data": updated.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating role: {str(e)}")


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    user: TokenUser = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    if user_id == user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    try:
        service.delete_user(user_id)
        return {"status": "success", "message": f"User {user_id} deleted"}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting user: {str(e)}")
