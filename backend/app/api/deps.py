"""API dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.collection.services import CollectionService
from app.domain.reports.drafts import ReportSubmissionFlow, draft_registry
from app.domain.reports.services import ReportService
from app.domain.reports.verification import ReportVerifier
from app.domain.rewards.services import RewardService
from app.domain.users.models import User
from app.domain.users.services import UserService, UserRepository
from app.infra.db.repositories.collected_waste_repo import CollectedWasteRepository
from app.infra.db.repositories.report_repo import ReportRepository
from app.infra.db.repositories.reward_repo import RewardRepositoryImpl
from app.infra.db.repositories.transaction_repo import TransactionRepository
from app.infra.db.repositories.user_repo import UserRepositoryImpl
from app.infra.db.session import get_db
from app.infra.security.jwt import user_id_from_token
from app.infra.vendors.geocoding import GeocodingClient
from app.services.notification_service import NotificationService

__all__ = ["get_db", "get_current_user"]

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    user_repo: UserRepository = UserRepositoryImpl(db)
    return UserService(user_repo, db)


def get_reward_service(db: AsyncSession = Depends(get_db)) -> RewardService:
    return RewardService(RewardRepositoryImpl(db), TransactionRepository(db), db)


def get_report_service(
    db: AsyncSession = Depends(get_db),
    rewards: RewardService = Depends(get_reward_service),
) -> ReportService:
    return ReportService(ReportRepository(db), rewards, db)


def get_collection_service(
    db: AsyncSession = Depends(get_db),
    rewards: RewardService = Depends(get_reward_service),
) -> CollectionService:
    return CollectionService(ReportRepository(db), CollectedWasteRepository(db), rewards, db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_report_flow(reports: ReportService = Depends(get_report_service)) -> ReportSubmissionFlow:
    return ReportSubmissionFlow(draft_registry, ReportVerifier(), reports)


def get_geocoding_client() -> GeocodingClient:
    return GeocodingClient()


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = user_id_from_token(token, "access")
    if user_id is None:
        raise credentials_exception

    user_repo: UserRepository = UserRepositoryImpl(db)
    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user
