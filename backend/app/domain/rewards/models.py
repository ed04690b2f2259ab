"""Reward domain models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Transaction type enum."""
    EARNED_REPORT = "earned_report"
    EARNED_COLLECT = "earned_collect"
    REDEEMED = "redeemed"


# Synthetic "your points" entry in the available-rewards list; never persisted.
REDEEM_ALL_REWARD_ID = 0


@dataclass
class Reward:
    """Reward row: a user's ledger (user_id set) or a catalog item (user_id None, is_available)."""
    id: int
    user_id: Optional[int]
    name: str
    description: Optional[str]
    collection_info: str
    points: float
    level: int
    is_available: bool
    created_at: datetime
    updated_at: datetime

    @property
    def is_catalog_item(self) -> bool:
        return self.user_id is None and self.is_available


@dataclass
class Transaction:
    """Transaction domain model. Append-only."""
    id: int
    user_id: int
    type: TransactionType
    amount: float
    description: str
    date: datetime


@dataclass
class AvailableReward:
    """Entry of the rewards list. cost is the catalog row's points."""
    id: int
    name: str
    cost: float
    description: Optional[str]
    collection_info: str


@dataclass
class LeaderboardEntry:
    """Ledger row joined with its user."""
    reward_id: int
    user_id: int
    user_name: Optional[str]
    points: float
    level: int
    created_at: datetime


@dataclass
class BalanceReconciliation:
    """Ledger balance compared with the transaction log."""
    ledger_points: float
    transaction_total: float

    @property
    def in_sync(self) -> bool:
        return round(self.ledger_points - self.transaction_total, 2) == 0
