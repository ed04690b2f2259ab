"""User domain services."""
import logging
from typing import Protocol, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import NotFoundError, ValidationError
from app.domain.users.models import User
from app.infra.db.session import unit_of_work

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "Anonymous User"


class UserRepository(Protocol):
    """User repository protocol."""

    async def create(self, email: str, name: str) -> User:
        """Create a new user."""
        ...

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        ...


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserService:
    """User service."""

    def __init__(self, user_repo: UserRepository, db: AsyncSession):
        self.user_repo = user_repo
        self.db = db

    async def create_user(self, email: str, name: Optional[str] = None) -> User:
        """Create a new user."""
        email = _normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        async with unit_of_work(self.db):
            existing = await self.user_repo.get_by_email(email)
            if existing:
                raise ValidationError("User with this email already exists")
            user = await self.user_repo.create(email, (name or "").strip() or DEFAULT_USER_NAME)
        logger.info(f"👤 [AUTH] Created user {user.id} ({user.email})")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.user_repo.get_by_email(_normalize_email(email))

    async def get_user(self, user_id: int) -> User:
        """Get user by ID."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def get_or_create_user(self, email: str, name: Optional[str] = None) -> User:
        """Login path: the wallet identity maps to exactly one user row."""
        user = await self.get_user_by_email(email)
        if user:
            return user
        return await self.create_user(email, name)
