from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from microhabit.models.habit import HabitCategory, UserMood, to_local_naive


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    current_mood: Optional[UserMood] = Field(default=None, alias="currentMood")
    preferred_categories: List[HabitCategory] = Field(
        default_factory=list, alias="preferredCategories"
    )
    last_mood_update: datetime = Field(
        default_factory=datetime.now, alias="lastMoodUpdate"
    )
    notifications_enabled: bool = Field(default=True, alias="notificationsEnabled")
    reminder_hour: int = Field(default=9, ge=0, le=23, alias="reminderHour")
    reminder_minute: int = Field(default=0, ge=0, le=59, alias="reminderMinute")
    total_habits_completed: int = Field(default=0, alias="totalHabitsCompleted")
    longest_streak: int = Field(default=0, alias="longestStreak")
    current_streak: int = Field(default=0, alias="currentStreak")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")

    @field_validator("current_mood", mode="before")
    @classmethod
    def _coerce_mood(cls, value: Any) -> Optional[UserMood]:
        if value is None or value == "":
            return None
        return UserMood.parse(value)

    @field_validator("preferred_categories", mode="before")
    @classmethod
    def _coerce_categories(cls, value: Any) -> List[HabitCategory]:
        if not value:
            return []
        categories: List[HabitCategory] = []
        for item in value:
            category = HabitCategory.parse(item)
            if category not in categories:
                categories.append(category)
        return categories

    @field_validator("last_mood_update", "created_at", mode="after")
    @classmethod
    def _normalize_timestamps(cls, value: datetime) -> datetime:
        return to_local_naive(value)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls.model_validate(data)
