"""
Onboarding API endpoints: greeting, first-launch status, profile creation
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from microhabit.core.dependencies import get_app_service
from microhabit.models.habit import HabitCategory, UserMood
from microhabit.services import suggestion_engine as engine
from microhabit.services.app_service import AppService
from microhabit.services.logger import logger

router = APIRouter(redirect_slashes=False)


class CompleteOnboardingRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=80, description="How the user wants to be called")
    mood: UserMood = Field(..., description="Mood selected on the mood screen")
    preferences: List[HabitCategory] = Field(
        default_factory=list, description="Habit categories the user wants to focus on"
    )


@router.get("/welcome")
async def get_welcome():
    """Greeting plus the options shown on the mood and preference screens"""
    return {
        "message": engine.random_message(engine.WELCOME_MESSAGES),
        "mood_prompt": engine.MOOD_PROMPT,
        "preference_prompt": engine.PREFERENCE_PROMPT,
        "moods": [
            {"value": mood.value, "display_name": mood.display_name, "emoji": mood.emoji}
            for mood in UserMood
        ],
        "categories": [
            {
                "value": category.value,
                "display_name": category.display_name,
                "emoji": category.emoji,
            }
            for category in HabitCategory
        ],
    }


@router.get("/status")
async def get_onboarding_status(app: AppService = Depends(get_app_service)):
    state = app.initialize()
    profile = state["profile"]
    todays_habit = state["todays_habit"]
    return {
        "is_first_launch": state["is_first_launch"],
        "has_profile": state["has_profile"],
        "profile": profile.to_json() if profile else None,
        "todays_habit": todays_habit.to_response() if todays_habit else None,
        "current_suggestion": state["current_suggestion"],
    }


@router.post("/complete")
async def complete_onboarding(
    request: CompleteOnboardingRequest,
    app: AppService = Depends(get_app_service),
) -> Dict[str, Any]:
    """Create the user profile and the first habit suggestion"""
    try:
        result = await app.complete_onboarding(
            request.name.strip(), request.mood, request.preferences
        )
        return {
            "profile": result["profile"].to_json(),
            "suggestion": result["suggestion"],
        }
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Error completing onboarding: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete onboarding",
        )
