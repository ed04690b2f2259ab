"""Reports API."""
from fastapi import APIRouter

from app.api.reports import routes_reports

router = APIRouter()

router.include_router(routes_reports.router, prefix="/reports", tags=["reports"])
