"""Collection task API routes."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import Optional, List

from app.api.deps import get_collection_service, get_current_user
from app.domain.collection.models import Task
from app.domain.collection.services import CollectionService
from app.domain.reports.models import ReportStatus
from app.domain.users.models import User

router = APIRouter()


class TaskResponse(BaseModel):
    id: int
    location: str
    waste_type: str
    amount: str
    status: ReportStatus
    date: str
    collector_id: Optional[int] = None


class TaskPageResponse(BaseModel):
    tasks: List[TaskResponse]
    total: int
    pending: int
    page: int
    page_size: int


class StatusUpdateRequest(BaseModel):
    status: ReportStatus


class VerifyRequest(BaseModel):
    """Photo of the pickup as a data URL."""
    image: Optional[str] = None


class VerificationResponse(BaseModel):
    waste_type_match: bool
    quantity_match: bool
    confidence: int


class VerifyResponse(BaseModel):
    task: TaskResponse
    verification: VerificationResponse
    reward: float
    balance: float
    breakdown: dict


class CollectedWasteResponse(BaseModel):
    id: int
    report_id: int
    collector_id: int
    collection_date: datetime
    status: str


def _task_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        location=task.location,
        waste_type=task.waste_type,
        amount=task.amount,
        status=task.status,
        date=task.date,
        collector_id=task.collector_id,
    )


@router.get("", response_model=TaskPageResponse)
async def list_tasks(
    status: Optional[ReportStatus] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    collection: CollectionService = Depends(get_collection_service),
):
    """Tasks newest first, filtered by status and a location / waste type search."""
    result = await collection.list_tasks(status=status, search=search, page=page, page_size=page_size)
    return TaskPageResponse(
        tasks=[_task_response(t) for t in result.tasks],
        total=result.total,
        pending=result.pending,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/collected", response_model=List[CollectedWasteResponse])
async def list_my_collections(
    current_user: User = Depends(get_current_user),
    collection: CollectionService = Depends(get_collection_service),
):
    items = await collection.get_collected_wastes_by_collector(current_user.id)
    return [CollectedWasteResponse(**vars(c)) for c in items]


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int,
    request: StatusUpdateRequest,
    current_user: User = Depends(get_current_user),
    collection: CollectionService = Depends(get_collection_service),
):
    """Set a task's status; the caller becomes its collector."""
    task = await collection.update_task_status(task_id, request.status, current_user.id)
    return _task_response(task)


@router.post("/{task_id}/claim", response_model=TaskResponse)
async def claim_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    collection: CollectionService = Depends(get_collection_service),
):
    """Start collecting. Not exclusive: a later claim replaces the collector."""
    task = await collection.claim_task(task_id, current_user.id)
    return _task_response(task)


@router.post("/{task_id}/verify", response_model=VerifyResponse)
async def verify_task(
    task_id: int,
    request: VerifyRequest,
    current_user: User = Depends(get_current_user),
    collection: CollectionService = Depends(get_collection_service),
):
    """Verify the pickup of a task you are collecting and receive the reward."""
    outcome = await collection.verify_collection(task_id, current_user.id, request.image)
    return VerifyResponse(
        task=_task_response(outcome.task),
        verification=VerificationResponse(
            waste_type_match=outcome.verification.waste_type_match,
            quantity_match=outcome.verification.quantity_match,
            confidence=outcome.verification.confidence,
        ),
        reward=outcome.reward,
        balance=outcome.balance,
        breakdown=outcome.breakdown,
    )
