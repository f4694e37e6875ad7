from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from microhabit.core.dependencies import get_ai_agent_service
from microhabit.models.suggestion import MoodAnalysis
from microhabit.services.ai_agent_service import AIAgentService

router = APIRouter(redirect_slashes=False)


class MoodTextRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)


@router.post("/analyze", response_model=MoodAnalysis)
async def analyze_mood(
    request: MoodTextRequest, agent: AIAgentService = Depends(get_ai_agent_service)
):
    """Detect mood from free text with keywords, plus the LLM when configured"""
    try:
        return await agent.analyze_mood_from_text(request.text)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
