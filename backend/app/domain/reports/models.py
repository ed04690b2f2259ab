"""Report domain models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ReportStatus(str, Enum):
    """Report status enum. A report doubles as a collection task."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    VERIFIED = "verified"
    COMPLETED = "completed"


@dataclass
class Report:
    """Report domain model."""
    id: int
    user_id: int
    location: str
    waste_type: str
    amount: str  # free text, e.g. "4 kg" or "2-3 kg"
    image_url: Optional[str]
    verification_result: Optional[str]  # JSON text
    status: ReportStatus
    collector_id: Optional[int]
    created_at: datetime


@dataclass
class WasteAnalysis:
    """Result of the simulated report-image analysis."""
    waste_type: str
    quantity: str
    confidence: int

    def to_dict(self) -> dict:
        return {"wasteType": self.waste_type, "quantity": self.quantity, "confidence": self.confidence}
