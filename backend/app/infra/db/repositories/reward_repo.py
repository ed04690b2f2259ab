"""Reward repository implementation."""
from datetime import datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.domain.rewards.models import Reward, LeaderboardEntry
from app.infra.db.models.rewards import RewardModel
from app.infra.db.models.user import UserModel

LEDGER_NAME = "Points Balance"
LEDGER_COLLECTION_INFO = "Points earned from reporting and collecting waste"


class RewardRepository:
    """Reward repository interface."""

    # Ledger rows
    async def get_ledger(self, user_id: int) -> Optional[Reward]:
        """Get the user's ledger row."""
        raise NotImplementedError

    async def get_ledger_for_update(self, user_id: int) -> Optional[RewardModel]:
        """Get the user's ledger row locked for update."""
        raise NotImplementedError

    async def create_ledger(self, user_id: int) -> RewardModel:
        """Create an empty ledger row for the user."""
        raise NotImplementedError

    async def leaderboard(self) -> List[LeaderboardEntry]:
        """Ledger rows joined with users, highest balance first."""
        raise NotImplementedError

    # Catalog rows
    async def get(self, reward_id: int) -> Optional[Reward]:
        """Get any reward row by ID."""
        raise NotImplementedError

    async def list_catalog(self) -> List[Reward]:
        """Redeemable catalog rows."""
        raise NotImplementedError

    async def create_catalog_item(
        self, name: str, cost: float, description: Optional[str], collection_info: str
    ) -> Reward:
        """Create a catalog row."""
        raise NotImplementedError


class RewardRepositoryImpl(RewardRepository):
    """Reward repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_ledger(self, user_id: int) -> Optional[Reward]:
        """Get the user's ledger row."""
        result = await self.session.execute(
            select(RewardModel).where(RewardModel.user_id == user_id)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_ledger_for_update(self, user_id: int) -> Optional[RewardModel]:
        """Get the user's ledger row locked for update (no-op lock on SQLite)."""
        result = await self.session.execute(
            select(RewardModel)
            .where(RewardModel.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_ledger(self, user_id: int) -> RewardModel:
        """Create an empty ledger row for the user."""
        now = datetime.utcnow()
        model = RewardModel(
            user_id=user_id,
            name=LEDGER_NAME,
            description=None,
            collection_info=LEDGER_COLLECTION_INFO,
            points=0,
            level=1,
            is_available=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model

    async def leaderboard(self) -> List[LeaderboardEntry]:
        """Ledger rows joined with users, highest balance first."""
        result = await self.session.execute(
            select(RewardModel, UserModel.name)
            .join(UserModel, UserModel.id == RewardModel.user_id)
            .order_by(RewardModel.points.desc(), RewardModel.id.asc())
        )
        return [
            LeaderboardEntry(
                reward_id=reward.id,
                user_id=reward.user_id,
                user_name=name,
                points=reward.points,
                level=reward.level,
                created_at=reward.created_at,
            )
            for reward, name in result.all()
        ]

    async def get(self, reward_id: int) -> Optional[Reward]:
        """Get any reward row by ID."""
        result = await self.session.execute(select(RewardModel).where(RewardModel.id == reward_id))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_catalog(self) -> List[Reward]:
        """Redeemable catalog rows, cheapest first."""
        result = await self.session.execute(
            select(RewardModel)
            .where(RewardModel.user_id.is_(None), RewardModel.is_available.is_(True))
            .order_by(RewardModel.points.asc(), RewardModel.id.asc())
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def create_catalog_item(
        self, name: str, cost: float, description: Optional[str], collection_info: str
    ) -> Reward:
        """Create a catalog row."""
        now = datetime.utcnow()
        model = RewardModel(
            user_id=None,
            name=name,
            description=description,
            collection_info=collection_info,
            points=cost,
            level=1,
            is_available=True,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model.to_entity()
