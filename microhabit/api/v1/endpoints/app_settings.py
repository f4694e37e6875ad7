"""
App settings endpoints: configuration flags, demo mode, data reset
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from microhabit.core.config import settings
from microhabit.core.dependencies import get_app_service
from microhabit.services.app_service import AppService
from microhabit.services.notification_service import get_outbox

router = APIRouter(redirect_slashes=False)


class DemoModeRequest(BaseModel):
    enabled: bool


@router.get("/config")
async def get_config(app: AppService = Depends(get_app_service)):
    """Feature flags and configuration warnings. Never exposes secrets."""
    return {
        **settings.config_status(),
        "demo_mode": app.storage.get_demo_mode(default=settings.DEMO_MODE),
        "warnings": settings.validate_configuration(),
    }


@router.get("/demo-mode")
async def get_demo_mode(app: AppService = Depends(get_app_service)):
    return {"enabled": app.storage.get_demo_mode(default=settings.DEMO_MODE)}


@router.put("/demo-mode")
async def set_demo_mode(request: DemoModeRequest, app: AppService = Depends(get_app_service)):
    app.storage.set_demo_mode(request.enabled)
    return {"enabled": request.enabled}


@router.post("/reset")
async def reset_app_data(app: AppService = Depends(get_app_service)):
    """Delete the profile, habits, behavior log and scheduled reminders"""
    app.reset_app_data()
    return {"reset": True}


@router.get("/notifications/outbox")
async def get_notification_outbox(app: AppService = Depends(get_app_service)):
    return {
        "daily_reminder": app.notifications.get_daily_reminder(),
        "notifications": get_outbox(),
    }
