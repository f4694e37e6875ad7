from fastapi import APIRouter, Depends, HTTPException, status

from microhabit.core.dependencies import get_ai_agent_service
from microhabit.core.exceptions import ProfileNotFoundError
from microhabit.services.ai_agent_service import AIAgentService

router = APIRouter(redirect_slashes=False)


@router.get("/optimize")
async def optimize_suggestions(agent: AIAgentService = Depends(get_ai_agent_service)):
    """Performance summary, best timing and difficulty advice from the completion history"""
    try:
        return agent.optimize_habit_suggestions()
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
