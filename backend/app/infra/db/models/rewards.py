"""Reward and transaction database models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, CheckConstraint, Text
from sqlalchemy.orm import relationship

from app.domain.rewards.models import TransactionType
from app.infra.db.base import Base

_TRANSACTION_TYPES = ", ".join(f"'{t.value}'" for t in TransactionType)


class RewardModel(Base):
    """Reward row.

    Two kinds share this table:
    - ledger: one per user (user_id set, is_available False), points is the running balance
    - catalog: user_id NULL, is_available True, points is the redemption cost
    """

    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # NULLs do not collide under UNIQUE, so any number of catalog rows is allowed
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    collection_info = Column(Text, nullable=False)
    points = Column(Float, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    is_available = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("UserModel", backref="reward")

    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_rewards_level"),
    )

    def to_entity(self):
        """Convert to domain entity."""
        from app.domain.rewards.models import Reward
        return Reward(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            description=self.description,
            collection_info=self.collection_info,
            points=self.points,
            level=self.level,
            is_available=self.is_available,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TransactionModel(Base):
    """Append-only points history."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(f"type IN ({_TRANSACTION_TYPES})", name="ck_transactions_type"),
    )

    def to_entity(self):
        """Convert to domain entity."""
        from app.domain.rewards.models import Transaction
        return Transaction(
            id=self.id,
            user_id=self.user_id,
            type=TransactionType(self.type),
            amount=self.amount,
            description=self.description,
            date=self.date,
        )
