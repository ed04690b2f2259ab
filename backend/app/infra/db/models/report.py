"""Report and collected-waste database models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Text, Index
from sqlalchemy.orm import relationship

from app.domain.reports.models import ReportStatus
from app.infra.db.base import Base

_REPORT_STATUSES = ", ".join(f"'{s.value}'" for s in ReportStatus)


class ReportModel(Base):
    """Waste report. Also the unit of work collectors pick up (a task)."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    location = Column(Text, nullable=False)
    waste_type = Column(String, nullable=False)
    amount = Column(String, nullable=False)
    image_url = Column(Text, nullable=True)
    verification_result = Column(Text, nullable=True)  # JSON text
    status = Column(String, nullable=False, default=ReportStatus.PENDING.value)
    collector_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    reporter = relationship("UserModel", foreign_keys=[user_id])
    collector = relationship("UserModel", foreign_keys=[collector_id])

    __table_args__ = (
        CheckConstraint(f"status IN ({_REPORT_STATUSES})", name="ck_reports_status"),
        Index("ix_reports_status_created_at", "status", "created_at"),
    )

    def to_entity(self):
        """Convert to domain entity."""
        from app.domain.reports.models import Report
        return Report(
            id=self.id,
            user_id=self.user_id,
            location=self.location,
            waste_type=self.waste_type,
            amount=self.amount,
            image_url=self.image_url,
            verification_result=self.verification_result,
            status=ReportStatus(self.status),
            collector_id=self.collector_id,
            created_at=self.created_at,
        )


class CollectedWasteModel(Base):
    """Record of a collector picking up a reported waste."""

    __tablename__ = "collected_wastes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    collector_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    collection_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(String, nullable=False, default="collected")

    report = relationship("ReportModel", backref="collections")

    def to_entity(self):
        """Convert to domain entity."""
        from app.domain.collection.models import CollectedWaste
        return CollectedWaste(
            id=self.id,
            report_id=self.report_id,
            collector_id=self.collector_id,
            collection_date=self.collection_date,
            status=self.status,
        )
