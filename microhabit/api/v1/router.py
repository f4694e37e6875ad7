from fastapi import APIRouter
from microhabit.api.v1.endpoints import (
    onboarding,
    profile,
    habits,
    suggestions,
    mood,
    screen_time,
    insights,
    app_settings,
)

# Create main API router
api_router = APIRouter(redirect_slashes=False)

# Include all endpoint routers
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["Onboarding"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(habits.router, prefix="/habits", tags=["Habits"])
api_router.include_router(
    suggestions.router, prefix="/suggestions", tags=["Habit Suggestions"]
)
api_router.include_router(mood.router, prefix="/mood", tags=["Mood Analysis"])
api_router.include_router(
    screen_time.router, prefix="/screen-time", tags=["Screen Time"]
)
api_router.include_router(insights.router, prefix="/insights", tags=["Insights"])
api_router.include_router(app_settings.router, prefix="/settings", tags=["Settings"])
