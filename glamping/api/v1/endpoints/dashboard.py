# File: glamping/api/v1/endpoints/dashboard.py
from typing import Any
from fastapi import APIRouter, Depends
from glamping.api.deps import get_state_service
from glamping.schemas.dashboard import DailyBriefing, DashboardSummary
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/", response_model=DashboardSummary, operation_id="dashboard_summary")
def dashboard_summary(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Live occupancy, visitors, member totals and tomorrow's check-outs"""
    return service.dashboard()


@router.get("/briefing", response_model=DailyBriefing, operation_id="daily_briefing")
def daily_briefing(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return DailyBriefing(date=service.clock().date().isoformat(), briefing=service.daily_briefing())
