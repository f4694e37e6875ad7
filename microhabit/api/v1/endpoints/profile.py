"""
User profile endpoints: mood, preferences and reminder settings
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from microhabit.core.dependencies import get_app_service
from microhabit.core.exceptions import ProfileNotFoundError
from microhabit.models.habit import HabitCategory, UserMood
from microhabit.services.app_service import AppService
from microhabit.services.logger import logger

router = APIRouter(redirect_slashes=False)


class MoodUpdateRequest(BaseModel):
    mood: UserMood


class PreferencesUpdateRequest(BaseModel):
    preferences: List[HabitCategory] = Field(default_factory=list)


class NotificationSettingsRequest(BaseModel):
    enabled: bool
    hour: int = Field(9, ge=0, le=23)
    minute: int = Field(0, ge=0, le=59)


@router.get("")
async def get_profile(app: AppService = Depends(get_app_service)):
    profile = app.storage.get_user_profile()
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found"
        )
    return profile.to_json()


@router.put("/mood")
async def update_mood(
    request: MoodUpdateRequest, app: AppService = Depends(get_app_service)
):
    """Save the new mood and regenerate the current suggestion"""
    try:
        result = await app.update_mood(request.mood)
        return {"profile": result["profile"].to_json(), "suggestion": result["suggestion"]}
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.exception(f"Error updating mood: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update mood",
        )


@router.put("/preferences")
async def update_preferences(
    request: PreferencesUpdateRequest, app: AppService = Depends(get_app_service)
):
    try:
        result = await app.update_preferences(request.preferences)
        return {"profile": result["profile"].to_json(), "suggestion": result["suggestion"]}
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Error updating preferences: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update preferences",
        )


@router.put("/notifications")
async def update_notification_settings(
    request: NotificationSettingsRequest, app: AppService = Depends(get_app_service)
):
    try:
        result = app.update_notification_settings(
            request.enabled, request.hour, request.minute
        )
        return {"profile": result["profile"].to_json(), "schedule": result["schedule"]}
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/motivation")
async def get_motivation(app: AppService = Depends(get_app_service)):
    return {"message": app.motivational_message()}
