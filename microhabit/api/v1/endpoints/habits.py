"""
Habit endpoints: list, today's habit, stats, completion and misses
"""

from fastapi import APIRouter, Depends, HTTPException, status

from microhabit.core.dependencies import get_app_service
from microhabit.core.exceptions import HabitNotFoundError
from microhabit.services.app_service import AppService
from microhabit.services.logger import logger

router = APIRouter(redirect_slashes=False)


@router.get("")
async def list_habits(app: AppService = Depends(get_app_service)):
    return [habit.to_response() for habit in app.storage.get_habits()]


@router.get("/today")
async def get_todays_habit(app: AppService = Depends(get_app_service)):
    """First habit not yet completed today, or null"""
    habit = app.storage.get_todays_habit()
    return {"habit": habit.to_response() if habit else None}


@router.get("/stats")
async def get_completion_stats(app: AppService = Depends(get_app_service)):
    return app.get_completion_stats()


@router.post("/{habit_id}/complete")
async def complete_habit(habit_id: str, app: AppService = Depends(get_app_service)):
    """Mark the habit done for today. Completing twice on one day is a no-op."""
    try:
        result = app.complete_habit(habit_id)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.exception(f"Error completing habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete habit",
        )

    todays_habit = result["todays_habit"]
    result["habit"] = result["habit"].to_response()
    result["todays_habit"] = todays_habit.to_response() if todays_habit else None
    return result


@router.post("/{habit_id}/miss")
async def miss_habit(habit_id: str, app: AppService = Depends(get_app_service)):
    try:
        return app.miss_habit(habit_id)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.exception(f"Error recording missed habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record missed habit",
        )


@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, app: AppService = Depends(get_app_service)):
    if not app.delete_habit(habit_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Habit {habit_id} not found"
        )
    return {"deleted": True, "habit_id": habit_id}
