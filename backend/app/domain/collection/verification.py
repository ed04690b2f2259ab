"""Simulated pickup verification."""
import asyncio
import random
from typing import Optional

from app.domain.collection.models import CollectionVerification
from app.domain.reports.models import Report
from app.settings import settings


class CollectionVerifier:
    """Always confirms the pickup after a fixed delay, with confidence 85-94."""

    def __init__(self, delay_seconds: Optional[float] = None, rng: Optional[random.Random] = None):
        self._delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    @property
    def delay_seconds(self) -> float:
        if self._delay_seconds is not None:
            return self._delay_seconds
        return settings.collection_verification_delay_seconds

    async def verify(self, report: Report, image_data_url: str) -> CollectionVerification:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return CollectionVerification(
            waste_type_match=True,
            quantity_match=True,
            confidence=self.rng.randint(85, 94),
        )
