"""Transaction repository."""
from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from app.domain.rewards.models import Transaction, TransactionType
from app.infra.db.models.rewards import TransactionModel


class TransactionRepository:
    """Append-only transaction log."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, type: TransactionType, amount: float, description: str) -> Transaction:
        """Append a transaction."""
        model = TransactionModel(user_id=user_id, type=type.value, amount=amount, description=description)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model.to_entity()

    async def list_by_user(self, user_id: int, limit: int = 10) -> List[Transaction]:
        """Newest transactions for a user."""
        result = await self.session.execute(
            select(TransactionModel)
            .where(TransactionModel.user_id == user_id)
            .order_by(TransactionModel.date.desc(), TransactionModel.id.desc())
            .limit(limit)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def totals(self, user_id: int) -> Tuple[float, float]:
        """(earned, redeemed) sums for a user."""
        redeemed = TransactionModel.type == TransactionType.REDEEMED.value
        result = await self.session.execute(
            select(
                func.coalesce(func.sum(case((redeemed, 0), else_=TransactionModel.amount)), 0),
                func.coalesce(func.sum(case((redeemed, TransactionModel.amount), else_=0)), 0),
            ).where(TransactionModel.user_id == user_id)
        )
        earned, spent = result.one()
        return float(earned), float(spent)
