"""
Habit suggestion endpoints: rule-based, from free text, and AI-written
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from microhabit.core.dependencies import get_ai_agent_service, get_app_service
from microhabit.core.exceptions import NoSuggestionError, ProfileNotFoundError
from microhabit.models.habit import HabitCategory
from microhabit.services.ai_agent_service import AIAgentService
from microhabit.services.app_service import AppService
from microhabit.services.logger import logger

router = APIRouter(redirect_slashes=False)


class MoodTextSuggestionRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000, description="How the user feels, in their own words")
    preferences: Optional[List[HabitCategory]] = None
    screen_time_hours: Optional[float] = Field(default=None, ge=0, le=24)
    current_streak: int = Field(default=0, ge=0)


class AISuggestionRequest(BaseModel):
    mood_text: str = Field(..., min_length=1, max_length=1000)
    preferences: Optional[List[HabitCategory]] = None
    screen_time_hours: Optional[float] = Field(default=None, ge=0, le=24)
    current_streak: int = Field(default=0, ge=0)


def _profile_preferences(app: AppService) -> List[HabitCategory]:
    profile = app.storage.get_user_profile()
    return profile.preferred_categories if profile else []


@router.get("/current")
async def get_current_suggestion(app: AppService = Depends(get_app_service)):
    return {"suggestion": app.get_current_suggestion()}


@router.post("/generate")
async def generate_suggestion(app: AppService = Depends(get_app_service)):
    """New rule-based suggestion for the stored mood and preferences"""
    try:
        return {"suggestion": await app.generate_habit_suggestion()}
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/accept")
async def accept_suggestion(app: AppService = Depends(get_app_service)):
    """Turn the current suggestion into a habit"""
    try:
        habit = app.accept_habit_suggestion()
        return {"habit": habit.to_response()}
    except (ProfileNotFoundError, NoSuggestionError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/next-day")
async def next_day_suggestion(app: AppService = Depends(get_app_service)):
    try:
        return {"suggestion": await app.generate_next_day_suggestion()}
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/from-text")
async def suggestion_from_mood_text(
    request: MoodTextSuggestionRequest,
    app: AppService = Depends(get_app_service),
    agent: AIAgentService = Depends(get_ai_agent_service),
):
    preferences = (
        request.preferences if request.preferences is not None else _profile_preferences(app)
    )
    try:
        return await agent.generate_habit_from_mood_text(
            request.text,
            preferences,
            screen_time_hours=request.screen_time_hours,
            current_streak=request.current_streak,
            recent_completions=app.recent_completions(),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.exception(f"Error generating habit from mood text: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate habit suggestion",
        )


@router.post("/ai")
async def ai_personalized_suggestion(
    request: AISuggestionRequest,
    app: AppService = Depends(get_app_service),
    agent: AIAgentService = Depends(get_ai_agent_service),
):
    """LLM-written suggestion; falls back to the rule engine when the model is unavailable"""
    preferences = (
        request.preferences if request.preferences is not None else _profile_preferences(app)
    )
    try:
        return await agent.generate_ai_personalized_habit_suggestion(
            request.mood_text,
            preferences,
            screen_time_hours=request.screen_time_hours,
            current_streak=request.current_streak,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.exception(f"Error generating AI habit suggestion: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate habit suggestion",
        )
