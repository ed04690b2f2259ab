"""Collection domain models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.domain.reports.models import ReportStatus


@dataclass
class Task:
    """A report seen from the collector's side."""
    id: int
    location: str
    waste_type: str
    amount: str
    status: ReportStatus
    date: str  # YYYY-MM-DD
    collector_id: Optional[int]


@dataclass
class TaskPage:
    """One page of the task list."""
    tasks: list[Task]
    total: int
    pending: int
    page: int
    page_size: int


@dataclass
class CollectedWaste:
    """Collected waste domain model."""
    id: int
    report_id: int
    collector_id: int
    collection_date: datetime
    status: str


@dataclass
class CollectionVerification:
    """Result of the simulated pickup verification."""
    waste_type_match: bool
    quantity_match: bool
    confidence: int

    def to_dict(self) -> dict:
        return {
            "wasteTypeMatch": self.waste_type_match,
            "quantityMatch": self.quantity_match,
            "confidence": self.confidence,
        }


@dataclass
class CollectionOutcome:
    """What verify_collection did: verification, awarded points, new state."""
    task: Task
    verification: CollectionVerification
    reward: float
    balance: float
    collected_waste: Optional[CollectedWaste] = None
    breakdown: dict = field(default_factory=dict)
