"""Report submission drafts.

A draft carries one submission through image selection, simulated
verification and final submission. Drafts live in process memory, belong to
the user that created them and expire after settings.report_draft_ttl_minutes.

States: idle -> file_selected -> verifying -> verified -> submitted, plus failed
when verification errors out. A failed or verified draft may be verified again.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional

from app.domain.common.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.domain.common.images import NOT_AN_IMAGE, validate_image
from app.domain.common.types import generate_id, utcnow
from app.domain.reports.models import Report, WasteAnalysis
from app.domain.reports.services import ReportService
from app.domain.reports.verification import ReportVerifier
from app.settings import settings

logger = logging.getLogger(__name__)

VERIFY_FIRST = "Please verify waste before submitting"


class DraftState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass
class ReportDraft:
    id: str
    owner_id: int
    state: DraftState = DraftState.IDLE
    image_url: Optional[str] = None
    analysis: Optional[WasteAnalysis] = None
    report_id: Optional[int] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    # Set while a submit is writing, so a double click cannot create two reports
    submitting: bool = False

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.updated_at + ttl

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "state": self.state.value,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "report_id": self.report_id,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


class DraftRegistry:
    """In-memory draft store guarded by one asyncio lock."""

    def __init__(self, ttl_minutes: Optional[int] = None):
        self._drafts: Dict[str, ReportDraft] = {}
        self._lock = asyncio.Lock()
        self._ttl_minutes = ttl_minutes

    @property
    def ttl(self) -> timedelta:
        minutes = self._ttl_minutes if self._ttl_minutes is not None else settings.report_draft_ttl_minutes
        return timedelta(minutes=minutes)

    def __len__(self) -> int:
        return len(self._drafts)

    def _purge_expired_locked(self) -> int:
        now = utcnow()
        expired = [
            d.id for d in self._drafts.values()
            if not d.submitting and d.expires_at(self.ttl) <= now
        ]
        for draft_id in expired:
            del self._drafts[draft_id]
        return len(expired)

    def _get_locked(self, draft_id: str, owner_id: int) -> ReportDraft:
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise NotFoundError("Report draft", draft_id)
        if draft.owner_id != owner_id:
            raise AuthorizationError("This draft belongs to another user")
        return draft

    def _touch(self, draft: ReportDraft, state: DraftState) -> ReportDraft:
        draft.state = state
        draft.updated_at = utcnow()
        return draft

    async def purge_expired(self) -> int:
        async with self._lock:
            return self._purge_expired_locked()

    async def create(self, owner_id: int, image_data_url: Optional[str] = None) -> ReportDraft:
        """New draft; file_selected when an image is given, idle otherwise."""
        if image_data_url is not None:
            validate_image(image_data_url, settings.max_image_bytes)
        async with self._lock:
            self._purge_expired_locked()
            draft = ReportDraft(id=generate_id(), owner_id=owner_id)
            if image_data_url is not None:
                draft.image_url = image_data_url
                draft.state = DraftState.FILE_SELECTED
            self._drafts[draft.id] = draft
            return draft

    async def get(self, draft_id: str, owner_id: int) -> ReportDraft:
        async with self._lock:
            self._purge_expired_locked()
            return self._get_locked(draft_id, owner_id)

    async def select_file(self, draft_id: str, owner_id: int, image_data_url: str) -> ReportDraft:
        """Attach or replace the image. Any previous analysis is discarded."""
        validate_image(image_data_url, settings.max_image_bytes)
        async with self._lock:
            draft = self._get_locked(draft_id, owner_id)
            if draft.state in (DraftState.VERIFYING, DraftState.SUBMITTED):
                raise ConflictError(f"Draft is {draft.state.value}")
            draft.image_url = image_data_url
            draft.analysis = None
            draft.error = None
            return self._touch(draft, DraftState.FILE_SELECTED)

    async def begin_verification(self, draft_id: str, owner_id: int) -> ReportDraft:
        async with self._lock:
            draft = self._get_locked(draft_id, owner_id)
            if draft.state in (DraftState.VERIFYING, DraftState.SUBMITTED):
                raise ConflictError(f"Draft is already {draft.state.value}")
            if not draft.image_url:
                raise ValidationError(NOT_AN_IMAGE)
            draft.error = None
            return self._touch(draft, DraftState.VERIFYING)

    async def complete_verification(self, draft_id: str, analysis: WasteAnalysis) -> ReportDraft:
        async with self._lock:
            draft = self._drafts[draft_id]
            draft.analysis = analysis
            return self._touch(draft, DraftState.VERIFIED)

    async def fail(self, draft_id: str, error: str) -> Optional[ReportDraft]:
        async with self._lock:
            draft = self._drafts.get(draft_id)
            if draft is None:
                return None
            draft.error = error
            return self._touch(draft, DraftState.FAILED)

    async def begin_submit(self, draft_id: str, owner_id: int) -> ReportDraft:
        async with self._lock:
            draft = self._get_locked(draft_id, owner_id)
            if draft.state == DraftState.SUBMITTED:
                raise ConflictError("Report already submitted")
            if draft.state != DraftState.VERIFIED or draft.analysis is None:
                raise ValidationError(VERIFY_FIRST)
            if draft.submitting:
                raise ConflictError("Report submission already in progress")
            draft.submitting = True
            return draft

    async def complete_submit(self, draft_id: str, report_id: Optional[int]) -> ReportDraft:
        """Finish a submit. report_id None means the write failed and the draft stays verified."""
        async with self._lock:
            draft = self._drafts[draft_id]
            draft.submitting = False
            if report_id is None:
                return draft
            draft.report_id = report_id
            return self._touch(draft, DraftState.SUBMITTED)


class ReportSubmissionFlow:
    """Drives a draft through verification and submission."""

    def __init__(self, registry: DraftRegistry, verifier: ReportVerifier, reports: ReportService):
        self.registry = registry
        self.verifier = verifier
        self.reports = reports

    async def start(self, owner_id: int, image_data_url: str) -> ReportDraft:
        draft = await self.registry.create(owner_id, image_data_url)
        logger.info(f"🖼️ [REPORTS] Draft {draft.id} created for user {owner_id}")
        return draft

    async def verify(self, draft_id: str, owner_id: int) -> ReportDraft:
        draft = await self.registry.begin_verification(draft_id, owner_id)
        try:
            analysis = await self.verifier.analyze(draft.image_url)
        except Exception as e:
            logger.error(f"❌ [REPORTS] Verification failed for draft {draft_id}: {e}")
            await self.registry.fail(draft_id, "Verification failed. Please try again.")
            raise
        return await self.registry.complete_verification(draft_id, analysis)

    async def submit(
        self,
        draft_id: str,
        owner_id: int,
        location: str,
        waste_type: Optional[str] = None,
        amount: Optional[str] = None,
    ) -> Report:
        """Create the report from a verified draft. Form fields default to the analysis."""
        if not (location or "").strip():
            raise ValidationError("Please enter a location")
        draft = await self.registry.begin_submit(draft_id, owner_id)
        report_id = None
        try:
            analysis = draft.analysis
            report = await self.reports.create_report(
                user_id=owner_id,
                location=location,
                waste_type=(waste_type or "").strip() or analysis.waste_type,
                amount=(amount or "").strip() or analysis.quantity,
                image_url=draft.image_url,
                verification_result=json.dumps(analysis.to_dict()),
            )
            report_id = report.id
        finally:
            await self.registry.complete_submit(draft_id, report_id)
        return report


# Global instance
draft_registry = DraftRegistry()
