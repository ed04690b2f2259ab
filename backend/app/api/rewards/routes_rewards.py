"""Rewards API routes."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import Optional, List

from app.api.deps import get_current_user, get_reward_service
from app.domain.rewards.models import REDEEM_ALL_REWARD_ID, AvailableReward
from app.domain.rewards.services import RewardService
from app.domain.users.models import User
from app.settings import settings

router = APIRouter()


# Request/Response Models
class TransactionResponse(BaseModel):
    id: int
    type: str
    amount: float
    description: str
    date: str  # YYYY-MM-DD


class AvailableRewardResponse(BaseModel):
    id: int
    name: str
    cost: float
    description: Optional[str] = None
    collection_info: str


class LeaderboardEntryResponse(BaseModel):
    user_id: int
    user_name: Optional[str] = None
    points: float
    level: int
    created_at: datetime


class ReconciliationResponse(BaseModel):
    ledger_points: float
    transaction_total: float
    in_sync: bool


class DashboardResponse(BaseModel):
    """Balance, recent activity and what can be redeemed."""
    balance: float
    transactions: List[TransactionResponse]
    rewards: List[AvailableRewardResponse]
    reconciliation: ReconciliationResponse


class RedeemRequest(BaseModel):
    """reward_id 0 redeems every point."""
    reward_id: int


class RedeemResponse(BaseModel):
    transaction: TransactionResponse
    balance: float  # read after commit


def _available(items: List[AvailableReward]) -> List[AvailableRewardResponse]:
    return [AvailableRewardResponse(**vars(r)) for r in items]


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    """Everything the rewards page shows."""
    available = await rewards.get_available_rewards(current_user.id)
    reconciliation = await rewards.reconcile_balance(current_user.id)
    return DashboardResponse(
        balance=reconciliation.ledger_points,
        transactions=await rewards.get_reward_transactions(current_user.id, limit=settings.transactions_limit),
        rewards=_available([r for r in available if r.id != REDEEM_ALL_REWARD_ID and r.cost > 0]),
        reconciliation=ReconciliationResponse(
            ledger_points=reconciliation.ledger_points,
            transaction_total=reconciliation.transaction_total,
            in_sync=reconciliation.in_sync,
        ),
    )


@router.get("/balance")
async def get_balance(
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    return {"balance": await rewards.get_user_balance(current_user.id)}


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_transactions(
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    """Newest transactions first (10 by default)."""
    return await rewards.get_reward_transactions(current_user.id, limit=limit or settings.transactions_limit)


@router.get("/available", response_model=List[AvailableRewardResponse])
async def list_available_rewards(
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    """The "Your Points" entry (id 0) followed by the catalog."""
    return _available(await rewards.get_available_rewards(current_user.id))


@router.get("/leaderboard", response_model=List[LeaderboardEntryResponse])
async def get_leaderboard(
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    entries = await rewards.get_all_rewards()
    return [
        LeaderboardEntryResponse(
            user_id=e.user_id,
            user_name=e.user_name,
            points=e.points,
            level=e.level,
            created_at=e.created_at,
        )
        for e in entries
    ]


@router.post("/redeem", response_model=RedeemResponse)
async def redeem(
    request: RedeemRequest,
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
):
    """Redeem a catalog reward, or everything with reward_id 0."""
    transaction = await rewards.redeem_reward(current_user.id, request.reward_id)
    return RedeemResponse(
        transaction=TransactionResponse(
            id=transaction.id,
            type=transaction.type.value,
            amount=transaction.amount,
            description=transaction.description,
            date=transaction.date.strftime("%Y-%m-%d"),
        ),
        balance=await rewards.get_user_balance(current_user.id),
    )
