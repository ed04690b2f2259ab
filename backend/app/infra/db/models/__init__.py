"""Database models."""
from app.infra.db.models.user import UserModel
from app.infra.db.models.report import ReportModel, CollectedWasteModel
from app.infra.db.models.rewards import RewardModel, TransactionModel
from app.infra.db.models.notification import NotificationModel

__all__ = [
    "UserModel",
    "ReportModel",
    "CollectedWasteModel",
    "RewardModel",
    "TransactionModel",
    "NotificationModel",
]
