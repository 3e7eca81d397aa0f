"""
Authentication for the InvenHub backend
Issues and validates HS256 JWT access tokens and provides user context
"""
from typing import Optional
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel

from invenhub.core.config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Role hierarchy: admin > staff > guest
ROLE_HIERARCHY = {
    "admin": 3,
    "staff": 2,
    "guest": 1,
}


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: int
    email: str
    name: Optional[str] = None
    role: str = "staff"


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_auth_secret() -> str:
        """Get the AUTH_SECRET from settings"""
        secret = settings.AUTH_SECRET
        if not secret:
            raise ValueError("AUTH_SECRET environment variable is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        return settings.JWT_ALGORITHM


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: int, email: str, name: Optional[str], role: str,
                        expires_minutes: Optional[int] = None) -> str:
    """
    Sign an access token for a user.

    Payload:
    {
        "sub": "42",
        "id": 42,
        "email": "staff@safariflow.in",
        "name": "Asha",
        "role": "staff",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "name": name,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, AuthConfig.get_auth_secret(), algorithm=AuthConfig.get_jwt_algorithm())


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token, raising 401 on any failure"""
    try:
        return jwt.decode(
            token,
            AuthConfig.get_auth_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
        )
    except JWTError as e:
        error_msg = str(e).lower()
        if "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id or email",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return TokenUser(
        id=int(user_id),
        email=email,
        name=payload.get("name"),
        role=payload.get("role", "guest")
    )


def require_role(required_role: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/products/{product_id}")
        async def delete_product(
            product_id: int,
            user: TokenUser = Depends(require_role("admin"))
        ):
            ...
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        user_level = ROLE_HIERARCHY.get(user.role, 0)
        required_level = ROLE_HIERARCHY.get(required_role, 0)

        if user_level < required_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {required_role}, your role: {user.role}"
            )

        return user

    return role_checker


# Convenience dependencies for common role requirements
require_admin = require_role("admin")
require_staff = require_role("staff")
require_guest = require_role("guest")
