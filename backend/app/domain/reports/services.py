"""Report domain services."""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import NotFoundError, ValidationError
from app.domain.common.types import format_points
from app.domain.reports.models import Report, ReportStatus
from app.domain.rewards.models import TransactionType
from app.domain.rewards.services import RewardService
from app.infra.db.repositories.report_repo import ReportRepository
from app.infra.db.session import unit_of_work
from app.infra.messaging.event_bus import EventBus, EventType, event_bus
from app.services.notification_service import NotificationService
from app.settings import settings

logger = logging.getLogger(__name__)

REPORT_DESCRIPTION = "Points earned for reporting waste"


def report_payload(report: Report) -> dict:
    return {
        "id": report.id,
        "location": report.location,
        "waste_type": report.waste_type,
        "amount": report.amount,
        "status": report.status.value,
        "collector_id": report.collector_id,
        "created_at": report.created_at.isoformat() if report.created_at else None,
    }


class ReportService:
    """Report service for business logic."""

    def __init__(
        self,
        repo: ReportRepository,
        rewards: RewardService,
        db: AsyncSession,
        events: Optional[EventBus] = None,
    ):
        self.repo = repo
        self.rewards = rewards
        self.db = db
        self.events = events or event_bus
        self.notifications = NotificationService(db, events=self.events)

    async def create_report(
        self,
        user_id: int,
        location: str,
        waste_type: str,
        amount: str,
        image_url: Optional[str] = None,
        verification_result: Optional[str] = None,
    ) -> Report:
        """Create a pending report and award the reporter.

        The report, the ledger credit, the earned_report transaction and the
        reward notification are written in one transaction.
        """
        location = (location or "").strip()
        if not location:
            raise ValidationError("Please enter a location")
        if not (waste_type or "").strip() or not (amount or "").strip():
            raise ValidationError("Waste type and amount are required")

        points = settings.report_points
        async with unit_of_work(self.db):
            report = await self.repo.create(
                user_id=user_id,
                location=location,
                waste_type=waste_type.strip(),
                amount=amount.strip(),
                image_url=image_url,
                verification_result=verification_result,
            )
            balance = await self.rewards.credit(user_id, points, TransactionType.EARNED_REPORT, REPORT_DESCRIPTION)
            notif = await self.notifications.create_notification(
                user_id,
                f"🎉 You've earned {format_points(points)} points for reporting {report.waste_type} ({report.amount})!",
                "reward",
            )

        logger.info(f"📝 [REPORTS] Report {report.id} by user {user_id}: {report.waste_type} ({report.amount})")
        await self.events.emit(EventType.REPORT_SUBMITTED, report_payload(report))
        await self.rewards.publish_balance(user_id, balance)
        await self.notifications.publish_created(notif)
        return report

    async def get_report(self, report_id: int) -> Report:
        report = await self.repo.get(report_id)
        if not report:
            raise NotFoundError("Report", str(report_id))
        return report

    async def get_reports_by_user_id(self, user_id: int) -> List[Report]:
        return await self.repo.list_by_user(user_id)

    async def get_recent_reports(self, limit: Optional[int] = None) -> List[Report]:
        return await self.repo.list_recent(limit or settings.recent_reports_limit)

    async def get_pending_reports(self) -> List[Report]:
        return await self.repo.list_by_status(ReportStatus.PENDING)

    async def update_report_status(self, report_id: int, status: ReportStatus) -> Report:
        """Overwrite a report's status. Transitions are not checked."""
        async with unit_of_work(self.db):
            report = await self.repo.update_status(report_id, status)
            if report is None:
                raise NotFoundError("Report", str(report_id))
        await self.events.emit(EventType.TASK_UPDATED, report_payload(report))
        return report
