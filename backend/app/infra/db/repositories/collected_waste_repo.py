"""Collected waste repository."""
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.domain.collection.models import CollectedWaste
from app.infra.db.models.report import CollectedWasteModel


class CollectedWasteRepository:
    """Collected waste repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, report_id: int, collector_id: int, status: str = "collected") -> CollectedWaste:
        """Record a collection."""
        model = CollectedWasteModel(report_id=report_id, collector_id=collector_id, status=status)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model.to_entity()

    async def list_by_collector(self, collector_id: int) -> List[CollectedWaste]:
        """Collections made by a collector, newest first."""
        result = await self.session.execute(
            select(CollectedWasteModel)
            .where(CollectedWasteModel.collector_id == collector_id)
            .order_by(CollectedWasteModel.collection_date.desc(), CollectedWasteModel.id.desc())
        )
        return [m.to_entity() for m in result.scalars().all()]
