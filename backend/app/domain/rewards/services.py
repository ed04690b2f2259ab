"""Reward domain services: the per-user points ledger, its transaction log and the catalog."""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import ValidationError
from app.domain.common.types import format_date, format_points, round_points, utcnow
from app.domain.rewards.models import (
    REDEEM_ALL_REWARD_ID,
    AvailableReward,
    BalanceReconciliation,
    LeaderboardEntry,
    Reward,
    Transaction,
    TransactionType,
)
from app.infra.db.models.rewards import RewardModel
from app.infra.db.repositories.reward_repo import RewardRepository
from app.infra.db.repositories.transaction_repo import TransactionRepository
from app.infra.db.session import unit_of_work
from app.infra.messaging.event_bus import EventBus, EventType, event_bus

logger = logging.getLogger(__name__)

COLLECT_DESCRIPTION = "Points earned for collecting waste"
INSUFFICIENT_POINTS = "Insufficient points or invalid reward"
NOTHING_TO_REDEEM = "No points available to redeem"


class RewardService:
    """Reward service for business logic.

    Operations are one unit of work each, except add_points and credit, which
    write without committing so other services can fold them into their own
    unit of work (a report and its points land together or not at all).
    """

    def __init__(
        self,
        repo: RewardRepository,
        transactions: TransactionRepository,
        db: AsyncSession,
        events: Optional[EventBus] = None,
    ):
        self.repo = repo
        self.transactions = transactions
        self.db = db
        self.events = events or event_bus

    # Ledger
    async def _ledger_for_update(self, user_id: int) -> RewardModel:
        ledger = await self.repo.get_ledger_for_update(user_id)
        if ledger is not None:
            return ledger
        try:
            # Savepoint: a concurrent first credit may insert the row before us
            async with self.db.begin_nested():
                ledger = await self.repo.create_ledger(user_id)
        except IntegrityError:
            logger.info(f"🏦 [REWARDS] Ledger for user {user_id} created concurrently, re-reading")
            ledger = await self.repo.get_ledger_for_update(user_id)
            if ledger is None:
                raise
            return ledger
        logger.info(f"🏦 [REWARDS] Created ledger {ledger.id} for user {user_id}")
        return ledger

    async def add_points(self, user_id: int, points: float) -> float:
        """ledger += points. Returns the new balance. Caller commits."""
        ledger = await self._ledger_for_update(user_id)
        ledger.points = round_points((ledger.points or 0) + points)
        ledger.updated_at = utcnow()
        await self.db.flush()
        return ledger.points

    async def credit(self, user_id: int, amount: float, type: TransactionType, description: str) -> float:
        """Ledger and log move together. Caller commits."""
        amount = round_points(amount)
        balance = await self.add_points(user_id, amount)
        await self.transactions.create(user_id, type, amount, description)
        return balance

    async def get_or_create_reward(self, user_id: int) -> Reward:
        """The user's ledger row, created empty on first use."""
        async with unit_of_work(self.db):
            ledger = await self._ledger_for_update(user_id)
        return ledger.to_entity()

    async def update_reward_points(self, user_id: int, points: float) -> Reward:
        """Additive ledger update, without a transaction entry."""
        async with unit_of_work(self.db):
            await self.add_points(user_id, round_points(points))
            ledger = await self.repo.get_ledger(user_id)
        await self.publish_balance(user_id, ledger.points)
        return ledger

    async def save_reward(self, user_id: int, amount: float) -> float:
        """Award collection points. Not idempotent: every call awards again."""
        async with unit_of_work(self.db):
            balance = await self.credit(user_id, amount, TransactionType.EARNED_COLLECT, COLLECT_DESCRIPTION)
        logger.info(f"💰 [REWARDS] User {user_id} +{format_points(amount)} (collect), balance {format_points(balance)}")
        await self.publish_balance(user_id, balance)
        return balance

    async def create_transaction(
        self, user_id: int, type: TransactionType, amount: float, description: str
    ) -> Transaction:
        """Append a transaction without touching the ledger."""
        async with unit_of_work(self.db):
            return await self.transactions.create(user_id, type, round_points(amount), description)

    async def redeem_reward(self, user_id: int, reward_id: int) -> Transaction:
        """Redeem all points (reward_id 0) or one catalog reward.

        Raises ValidationError with no state change when there is nothing to
        redeem, the reward is not a catalog item, or the balance is short.
        """
        async with unit_of_work(self.db):
            ledger = await self._ledger_for_update(user_id)
            balance = round_points(ledger.points or 0)

            if reward_id == REDEEM_ALL_REWARD_ID:
                if balance <= 0:
                    raise ValidationError(NOTHING_TO_REDEEM)
                cost = balance
                description = f"Redeemed all points: {format_points(balance)}"
            else:
                reward = await self.repo.get(reward_id)
                if reward is None or not reward.is_catalog_item or balance < reward.points:
                    raise ValidationError(INSUFFICIENT_POINTS)
                cost = round_points(reward.points)
                description = f"Redeemed: {reward.name}"

            ledger.points = round_points(balance - cost)
            ledger.updated_at = utcnow()
            await self.db.flush()
            transaction = await self.transactions.create(user_id, TransactionType.REDEEMED, cost, description)
            new_balance = ledger.points

        logger.info(f"🎁 [REWARDS] User {user_id} redeemed {format_points(cost)} (reward {reward_id}), balance {format_points(new_balance)}")
        await self.publish_balance(user_id, new_balance)
        return transaction

    async def get_user_balance(self, user_id: int) -> float:
        """Single-row read of the ledger. 0 when the user has no ledger yet."""
        ledger = await self.repo.get_ledger(user_id)
        return round_points(ledger.points) if ledger else 0.0

    async def get_reward_transactions(self, user_id: int, limit: int = 10) -> List[dict]:
        """Newest transactions, dates as YYYY-MM-DD."""
        transactions = await self.transactions.list_by_user(user_id, limit=limit)
        return [
            {
                "id": t.id,
                "type": t.type.value,
                "amount": t.amount,
                "description": t.description,
                "date": format_date(t.date),
            }
            for t in transactions
        ]

    async def get_available_rewards(self, user_id: int) -> List[AvailableReward]:
        """Synthetic "Your Points" entry (id 0, cost = balance) followed by catalog rewards."""
        balance = await self.get_user_balance(user_id)
        catalog = await self.repo.list_catalog()
        return [
            AvailableReward(
                id=REDEEM_ALL_REWARD_ID,
                name="Your Points",
                cost=balance,
                description="Redeem your earned points",
                collection_info="Points earned from reporting and collecting waste",
            )
        ] + [
            AvailableReward(
                id=r.id,
                name=r.name,
                cost=round_points(r.points),
                description=r.description,
                collection_info=r.collection_info,
            )
            for r in catalog
        ]

    async def get_all_rewards(self) -> List[LeaderboardEntry]:
        """Leaderboard."""
        return await self.repo.leaderboard()

    async def create_catalog_reward(
        self,
        name: str,
        cost: float,
        collection_info: str,
        description: Optional[str] = None,
    ) -> Reward:
        if not name or not name.strip():
            raise ValidationError("Reward name is required")
        if cost <= 0:
            raise ValidationError("Cost must be positive")
        async with unit_of_work(self.db):
            return await self.repo.create_catalog_item(name.strip(), round_points(cost), description, collection_info)

    async def reconcile_balance(self, user_id: int) -> BalanceReconciliation:
        """Ledger balance vs. earned - redeemed from the log."""
        balance = await self.get_user_balance(user_id)
        earned, redeemed = await self.transactions.totals(user_id)
        result = BalanceReconciliation(ledger_points=balance, transaction_total=round_points(earned - redeemed))
        if not result.in_sync:
            logger.warning(
                f"⚠️ [REWARDS] Ledger drift for user {user_id}: ledger={balance} log={result.transaction_total}"
            )
        return result

    async def publish_balance(self, user_id: int, balance: float) -> None:
        await self.events.emit(EventType.BALANCE_UPDATED, {"balance": round_points(balance)}, user_id=user_id)
