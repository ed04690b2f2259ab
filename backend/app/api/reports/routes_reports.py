"""Report submission API routes.

Submitting a report is a three-step flow on a server-side draft:
create (with image) -> verify -> submit (with location).
"""
import json
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from typing import Optional, List

from app.api.deps import get_current_user, get_report_flow, get_report_service
from app.domain.common.types import format_date
from app.domain.reports.drafts import ReportDraft, ReportSubmissionFlow
from app.domain.reports.models import Report
from app.domain.reports.services import ReportService
from app.domain.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response Models
class DraftCreateRequest(BaseModel):
    """Image as a data URL (data:image/png;base64,...)."""
    image: str


class DraftSubmitRequest(BaseModel):
    """Submit form. waste_type and amount default to the verification result."""
    location: str = ""
    waste_type: Optional[str] = None
    amount: Optional[str] = None


class WasteAnalysisResponse(BaseModel):
    waste_type: str
    quantity: str
    confidence: int


class DraftResponse(BaseModel):
    id: str
    state: str
    analysis: Optional[WasteAnalysisResponse] = None
    report_id: Optional[int] = None
    error: Optional[str] = None
    created_at: datetime


class ReportResponse(BaseModel):
    id: int
    user_id: int
    location: str
    waste_type: str
    amount: str
    status: str
    collector_id: Optional[int] = None
    has_image: bool = False
    verification_result: Optional[dict] = None
    created_at: datetime
    date: str = Field(description="YYYY-MM-DD")


def _draft_response(draft: ReportDraft) -> DraftResponse:
    analysis = None
    if draft.analysis:
        analysis = WasteAnalysisResponse(
            waste_type=draft.analysis.waste_type,
            quantity=draft.analysis.quantity,
            confidence=draft.analysis.confidence,
        )
    return DraftResponse(
        id=draft.id,
        state=draft.state.value,
        analysis=analysis,
        report_id=draft.report_id,
        error=draft.error,
        created_at=draft.created_at,
    )


def _report_response(report: Report) -> ReportResponse:
    verification = None
    if report.verification_result:
        try:
            verification = json.loads(report.verification_result)
        except ValueError:
            logger.warning(f"⚠️ [REPORTS] Report {report.id} has unreadable verification_result")
    return ReportResponse(
        id=report.id,
        user_id=report.user_id,
        location=report.location,
        waste_type=report.waste_type,
        amount=report.amount,
        status=report.status.value,
        collector_id=report.collector_id,
        has_image=bool(report.image_url),
        verification_result=verification,
        created_at=report.created_at,
        date=format_date(report.created_at),
    )


@router.post("/drafts", response_model=DraftResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    request: DraftCreateRequest,
    current_user: User = Depends(get_current_user),
    flow: ReportSubmissionFlow = Depends(get_report_flow),
):
    """Start a report with an image (JPEG, PNG, ... up to 5MB)."""
    draft = await flow.start(current_user.id, request.image)
    return _draft_response(draft)


@router.get("/drafts/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    flow: ReportSubmissionFlow = Depends(get_report_flow),
):
    draft = await flow.registry.get(draft_id, current_user.id)
    return _draft_response(draft)


@router.post("/drafts/{draft_id}/verify", response_model=DraftResponse)
async def verify_draft(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    flow: ReportSubmissionFlow = Depends(get_report_flow),
):
    """Analyze the draft's image. Takes a few seconds."""
    draft = await flow.verify(draft_id, current_user.id)
    return _draft_response(draft)


@router.post("/drafts/{draft_id}/submit", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def submit_draft(
    draft_id: str,
    request: DraftSubmitRequest,
    current_user: User = Depends(get_current_user),
    flow: ReportSubmissionFlow = Depends(get_report_flow),
):
    """Create the report from a verified draft and award the reporting points."""
    report = await flow.submit(
        draft_id,
        current_user.id,
        location=request.location,
        waste_type=request.waste_type,
        amount=request.amount,
    )
    return _report_response(report)


@router.get("/mine", response_model=List[ReportResponse])
async def list_my_reports(
    current_user: User = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    return [_report_response(r) for r in await reports.get_reports_by_user_id(current_user.id)]


@router.get("/recent", response_model=List[ReportResponse])
async def list_recent_reports(
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    """Newest reports from everyone (30 by default)."""
    return [_report_response(r) for r in await reports.get_recent_reports(limit)]


@router.get("/pending", response_model=List[ReportResponse])
async def list_pending_reports(
    current_user: User = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    return [_report_response(r) for r in await reports.get_pending_reports()]


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    return _report_response(await reports.get_report(report_id))
