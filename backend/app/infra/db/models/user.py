"""User database model."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime

from app.infra.db.base import Base


class UserModel(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, default="Anonymous User")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self):
        """Convert to domain entity."""
        from app.domain.users.models import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
        )
