"""Report repository."""
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_

from app.domain.reports.models import Report, ReportStatus
from app.infra.db.models.report import ReportModel


class ReportRepository:
    """Report repository. Reports double as collection tasks."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: int,
        location: str,
        waste_type: str,
        amount: str,
        image_url: Optional[str] = None,
        verification_result: Optional[str] = None,
    ) -> Report:
        """Create a pending report."""
        model = ReportModel(
            user_id=user_id,
            location=location,
            waste_type=waste_type,
            amount=amount,
            image_url=image_url,
            verification_result=verification_result,
            status=ReportStatus.PENDING.value,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model.to_entity()

    async def get(self, report_id: int) -> Optional[Report]:
        """Get a report by ID, always re-read from the database."""
        result = await self.session.execute(
            select(ReportModel)
            .where(ReportModel.id == report_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_by_user(self, user_id: int) -> List[Report]:
        """Reports submitted by a user, newest first."""
        result = await self.session.execute(
            select(ReportModel)
            .where(ReportModel.user_id == user_id)
            .order_by(ReportModel.created_at.desc(), ReportModel.id.desc())
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def list_recent(self, limit: int = 30) -> List[Report]:
        """Newest reports across all users."""
        result = await self.session.execute(
            select(ReportModel)
            .order_by(ReportModel.created_at.desc(), ReportModel.id.desc())
            .limit(limit)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def list_by_status(self, status: ReportStatus) -> List[Report]:
        """Reports in the given status, newest first."""
        result = await self.session.execute(
            select(ReportModel)
            .where(ReportModel.status == status.value)
            .order_by(ReportModel.created_at.desc(), ReportModel.id.desc())
        )
        return [m.to_entity() for m in result.scalars().all()]

    def _task_filter(self, q, status: Optional[ReportStatus], search: Optional[str]):
        if status is not None:
            q = q.where(ReportModel.status == status.value)
        if search:
            # Literal substring match: % and _ in the search text are escaped
            needle = search.lower()
            q = q.where(
                or_(
                    func.lower(ReportModel.location).contains(needle, autoescape=True),
                    func.lower(ReportModel.waste_type).contains(needle, autoescape=True),
                )
            )
        return q

    async def list_tasks(
        self,
        status: Optional[ReportStatus] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 5,
    ) -> List[Report]:
        """Task list: one query over reports, newest first."""
        q = self._task_filter(select(ReportModel), status, search)
        q = q.order_by(ReportModel.created_at.desc(), ReportModel.id.desc()).offset(offset).limit(limit)
        result = await self.session.execute(q)
        return [m.to_entity() for m in result.scalars().all()]

    async def count_tasks(self, status: Optional[ReportStatus] = None, search: Optional[str] = None) -> int:
        """Count reports matching the task filters."""
        q = self._task_filter(select(func.count()).select_from(ReportModel), status, search)
        result = await self.session.execute(q)
        return result.scalar() or 0

    async def update_status(
        self, report_id: int, status: ReportStatus, collector_id: Optional[int] = None
    ) -> Optional[Report]:
        """Overwrite status (and collector when given). Returns None if the report does not exist."""
        values = {"status": status.value}
        if collector_id is not None:
            values["collector_id"] = collector_id
        result = await self.session.execute(
            update(ReportModel).where(ReportModel.id == report_id).values(**values)
        )
        if not result.rowcount:
            return None
        await self.session.flush()
        return await self.get(report_id)
