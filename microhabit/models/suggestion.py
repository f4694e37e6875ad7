from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from microhabit.models.habit import HabitCategory, HabitDifficulty, UserMood


SuggestionSource = Literal["rules", "ai", "fallback"]
MoodSource = Literal["keywords", "ai", "combined", "default"]


class HabitSuggestion(BaseModel):
    title: str = Field(..., description="Short habit title shown on the card")
    description: str = Field(..., description="One-line explanation of the habit")
    category: HabitCategory = Field(..., description="Habit category enum name")
    duration: int = Field(5, ge=1, le=60, description="Duration in minutes")
    difficulty: HabitDifficulty = HabitDifficulty.EASY
    reasoning: str = Field("", description="Why this habit fits the user right now")
    motivation: Optional[str] = None
    tips: List[str] = Field(default_factory=list)
    source: SuggestionSource = "rules"
    created_at: datetime = Field(default_factory=datetime.now)


class KeywordAnalysis(BaseModel):
    found_keywords: List[str] = Field(default_factory=list)
    emotion_scores: Dict[UserMood, int] = Field(default_factory=dict)
    total_matches: int = 0
    detected_mood: Optional[UserMood] = None


class MoodAnalysis(BaseModel):
    detected_mood: UserMood
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""
    sentiment: Optional[str] = None
    keyword_analysis: KeywordAnalysis = Field(default_factory=KeywordAnalysis)
    source: MoodSource = "keywords"
    timestamp: datetime = Field(default_factory=datetime.now)
