"""Simulated waste analysis of a report image."""
import asyncio
import random
from typing import Optional

from app.domain.reports.models import WasteAnalysis
from app.settings import settings

# Possible analysis results; one is picked at random per verification
WASTE_ANALYSES = (
    WasteAnalysis("Plastic Bottles & Packaging", "2-3 kg", 87),
    WasteAnalysis("Paper & Cardboard Waste", "4-5 kg", 92),
    WasteAnalysis("Organic Food Waste", "1-2 kg", 83),
    WasteAnalysis("Mixed Recyclables", "3-4 kg", 78),
    WasteAnalysis("Electronic Waste", "1-2 kg", 91),
    WasteAnalysis("Glass Containers", "2-3 kg", 85),
    WasteAnalysis("Metal Cans & Scrap", "1-2 kg", 89),
    WasteAnalysis("Construction Debris", "5-7 kg", 82),
)


class ReportVerifier:
    """Stands in for an image classifier: waits, then returns a canned analysis."""

    def __init__(self, delay_seconds: Optional[float] = None, rng: Optional[random.Random] = None):
        self._delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    @property
    def delay_seconds(self) -> float:
        if self._delay_seconds is not None:
            return self._delay_seconds
        return settings.report_verification_delay_seconds

    async def analyze(self, image_url: str) -> WasteAnalysis:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return self.rng.choice(WASTE_ANALYSES)
