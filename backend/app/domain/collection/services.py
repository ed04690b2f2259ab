"""Collection domain services: the task list, claims and pickup verification."""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.collection.models import CollectedWaste, CollectionOutcome, Task, TaskPage
from app.domain.collection.rewards import reward_breakdown
from app.domain.collection.verification import CollectionVerifier
from app.domain.common.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.domain.common.images import validate_image
from app.domain.common.types import format_date, format_points
from app.domain.reports.models import Report, ReportStatus
from app.domain.reports.services import report_payload
from app.domain.rewards.models import TransactionType
from app.domain.rewards.services import COLLECT_DESCRIPTION, RewardService
from app.infra.db.repositories.collected_waste_repo import CollectedWasteRepository
from app.infra.db.repositories.report_repo import ReportRepository
from app.infra.db.session import unit_of_work
from app.infra.messaging.event_bus import EventBus, EventType, event_bus
from app.settings import settings

logger = logging.getLogger(__name__)


def to_task(report: Report) -> Task:
    return Task(
        id=report.id,
        location=report.location,
        waste_type=report.waste_type,
        amount=report.amount,
        status=report.status,
        date=format_date(report.created_at),
        collector_id=report.collector_id,
    )


class CollectionService:
    """Collection service for business logic."""

    def __init__(
        self,
        reports: ReportRepository,
        collected: CollectedWasteRepository,
        rewards: RewardService,
        db: AsyncSession,
        events: Optional[EventBus] = None,
        verifier: Optional[CollectionVerifier] = None,
    ):
        self.reports = reports
        self.collected = collected
        self.rewards = rewards
        self.db = db
        self.events = events or event_bus
        self.verifier = verifier or CollectionVerifier()

    async def list_tasks(
        self,
        status: Optional[ReportStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> TaskPage:
        """One page of tasks, newest first, with total and pending counts for the same search."""
        page = max(page, 1)
        page_size = page_size or settings.tasks_page_size
        search = (search or "").strip() or None
        reports = await self.reports.list_tasks(status, search, offset=(page - 1) * page_size, limit=page_size)
        total = await self.reports.count_tasks(status, search)
        pending = await self.reports.count_tasks(ReportStatus.PENDING, search)
        return TaskPage(
            tasks=[to_task(r) for r in reports],
            total=total,
            pending=pending,
            page=page,
            page_size=page_size,
        )

    async def update_task_status(
        self, report_id: int, new_status: ReportStatus, collector_id: Optional[int] = None
    ) -> Task:
        """Overwrite status (and collector). No transition or ownership check: concurrent claims, last write wins."""
        async with unit_of_work(self.db):
            report = await self.reports.update_status(report_id, new_status, collector_id)
            if report is None:
                raise NotFoundError("Report", str(report_id))
        logger.info(f"🚛 [COLLECT] Task {report_id} -> {new_status.value} (collector {report.collector_id})")
        await self.events.emit(EventType.TASK_UPDATED, report_payload(report))
        return to_task(report)

    async def claim_task(self, report_id: int, collector_id: int) -> Task:
        return await self.update_task_status(report_id, ReportStatus.IN_PROGRESS, collector_id)

    async def save_collected_waste(self, report_id: int, collector_id: int, status: str = "verified") -> CollectedWaste:
        async with unit_of_work(self.db):
            if await self.reports.get(report_id) is None:
                raise NotFoundError("Report", str(report_id))
            return await self.collected.create(report_id, collector_id, status)

    async def create_collected_waste(self, report_id: int, collector_id: int) -> CollectedWaste:
        return await self.save_collected_waste(report_id, collector_id, status="collected")

    async def get_collected_wastes_by_collector(self, collector_id: int) -> List[CollectedWaste]:
        return await self.collected.list_by_collector(collector_id)

    def _check_verifiable(self, report: Optional[Report], report_id: int, collector_id: int) -> None:
        if report is None:
            raise NotFoundError("Report", str(report_id))
        if report.status == ReportStatus.VERIFIED:
            if not settings.allow_repeat_collection_rewards:
                raise ConflictError("Task has already been verified")
        elif report.status != ReportStatus.IN_PROGRESS:
            raise ConflictError("Task must be in progress before it can be verified")
        if report.collector_id != collector_id:
            raise AuthorizationError("Task is assigned to another collector")

    async def verify_collection(self, report_id: int, collector_id: int, image_data_url: Optional[str]) -> CollectionOutcome:
        """Verify a pickup and pay the collector.

        The status change, the collection reward (ledger + transaction) and the
        collected-waste row are one unit of work.
        """
        if not image_data_url:
            raise ValidationError("Please upload an image first")
        validate_image(image_data_url, settings.max_image_bytes)

        report = await self.reports.get(report_id)
        self._check_verifiable(report, report_id, collector_id)
        verification = await self.verifier.verify(report, image_data_url)
        breakdown = reward_breakdown(report.waste_type, report.amount)
        reward = breakdown["total"]

        async with unit_of_work(self.db):
            # Re-check: the task may have changed hands during the verification delay
            self._check_verifiable(await self.reports.get(report_id), report_id, collector_id)
            updated = await self.reports.update_status(report_id, ReportStatus.VERIFIED, collector_id)
            balance = await self.rewards.credit(collector_id, reward, TransactionType.EARNED_COLLECT, COLLECT_DESCRIPTION)
            collected = await self.collected.create(report_id, collector_id, "verified")

        logger.info(
            f"✅ [COLLECT] Task {report_id} verified by {collector_id}: +{format_points(reward)} "
            f"({verification.confidence}% confidence)"
        )
        await self.events.emit(EventType.TASK_UPDATED, report_payload(updated))
        await self.rewards.publish_balance(collector_id, balance)
        return CollectionOutcome(
            task=to_task(updated),
            verification=verification,
            reward=reward,
            balance=balance,
            collected_waste=collected,
            breakdown=breakdown,
        )
