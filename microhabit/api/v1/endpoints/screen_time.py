"""
Screen time endpoints.

Clients report today's usage numbers; the service analyzes them, or the demo
data set when demo mode is on.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from microhabit.core.config import settings
from microhabit.core.dependencies import get_ai_agent_service
from microhabit.services.ai_agent_service import AIAgentService
from microhabit.services.screen_time_service import ReportedScreenTimeProvider

router = APIRouter(redirect_slashes=False)


class ScreenTimeAnalyzeRequest(BaseModel):
    hours: Optional[float] = Field(
        default=None, ge=0, le=24, description="Total screen time today; omit to use the stored report"
    )
    app_usage: Optional[Dict[str, float]] = Field(
        default=None, description="Hours per app package name"
    )


def _require_tracking() -> None:
    if not settings.ENABLE_SCREEN_TIME_TRACKING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Screen time tracking is disabled",
        )


@router.post("/analyze")
async def analyze_screen_time(
    request: ScreenTimeAnalyzeRequest,
    agent: AIAgentService = Depends(get_ai_agent_service),
):
    _require_tracking()

    if request.app_usage and any(value < 0 for value in request.app_usage.values()):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="App usage hours must not be negative",
        )

    provider = agent.screen_time.provider
    if request.hours is not None and isinstance(provider, ReportedScreenTimeProvider):
        provider.report(request.hours, request.app_usage)

    return await agent.analyze_screen_time_and_usage(request.hours, request.app_usage)


@router.get("/report")
async def get_screen_time_report(agent: AIAgentService = Depends(get_ai_agent_service)):
    """Today's screen time with top apps"""
    _require_tracking()
    analysis = await agent.screen_time.get_screen_time_analysis()
    analysis["support_message"] = agent.get_screen_time_support_message()
    return analysis


@router.get("/insights")
async def get_screen_time_insights(agent: AIAgentService = Depends(get_ai_agent_service)):
    _require_tracking()
    return await agent.get_screen_time_insights()
