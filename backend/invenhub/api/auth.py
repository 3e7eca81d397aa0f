"""
Authentication API endpoints
- Registration and login (public)
- Current user
"""
from fastapi import APIRouter, Depends, HTTPException, status

from invenhub.core.auth import TokenUser, get_current_user
from invenhub.core.exceptions import NotFoundError, ValidationError
from invenhub.domain.user import LoginRequest, UserCreate
from invenhub.services.auth_service import AuthService


router = APIRouter()


def get_auth_service() -> AuthService:
    return AuthService()


def _token_payload(token_response) -> dict:
    return {
        "access_token": token_response.access_token,
        "token_type": token_response.token_type,
        "user": token_response.user.to_dict(),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    service: AuthService = Depends(get_auth_service)
):
    """Create an account and return an access token"""
    try:
        return _token_payload(service.register(payload))

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error registering user: {str(e)}")


@router.post("/login")
async def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    try:
        return _token_payload(service.login(payload))

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error logging in: {str(e)}")


@router.get("/me")
async def get_me(
    current_user: TokenUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Profile of the user the token belongs to"""
    try:
        user = service.get_user(current_user.id)
        return {"status": "success", "data": user.to_dict()}

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")
