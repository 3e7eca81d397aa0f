"""
Auth Service
Registration, login and user role management.
"""
import logging
from typing import List, Optional

from invenhub.core.auth import create_access_token, hash_password, verify_password
from invenhub.core.config import settings
from invenhub.core.exceptions import NotFoundError, ValidationError
from invenhub.domain.catalog import UserRole
from invenhub.domain.user import LoginRequest, TokenResponse, User, UserCreate
from invenhub.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, user_repository: Optional[UserRepository] = None):
        self.users = user_repository or UserRepository()

    def _token_for(self, user: User) -> TokenResponse:
        token = create_access_token(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role=user.role.value,
        )
        return TokenResponse(access_token=token, user=user)

    def register(self, payload: UserCreate) -> TokenResponse:
        if self.users.find_by_email(payload.email):
            raise ValidationError("User with this email already exists")

        user = self.users.create(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=UserRole.STAFF.value,
            avatar=settings.DEFAULT_AVATAR_URL,
        )
        logger.info(f"Registered user {user.id} ({user.email}) as {user.role.value}")
        return self._token_for(user)

    def login(self, payload: LoginRequest) -> TokenResponse:
        credentials = self.users.find_credentials_by_email(payload.email)
        if not credentials:
            raise ValidationError("Invalid email or password")

        user, password_hash = credentials
        if not verify_password(payload.password, password_hash):
            logger.warning(f"Failed login attempt for {payload.email}")
            raise ValidationError("Invalid email or password")

        return self._token_for(user)

    def get_user(self, user_id: int) -> User:
        user = self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def list_users(self) -> List[User]:
        return self.users.find_all()

    def update_role(self, user_id: int, role: UserRole) -> User:
        user = self.users.update_role(user_id, role.value)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        logger.info(f"User {user_id} role changed to {role.value}")
        return user

    def delete_user(self, user_id: int) -> None:
        if not self.users.delete(user_id):
            raise NotFoundError(f"User {user_id} not found")
