from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HabitCategory(str, Enum):
    PHYSICAL = "physical"
    MINDFULNESS = "mindfulness"
    RELAXATION = "relaxation"
    PRODUCTIVITY = "productivity"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        return _CATEGORY_DISPLAY[self][1]

    @classmethod
    def parse(cls, value: Any, default: Optional["HabitCategory"] = None) -> "HabitCategory":
        """Accepts enum names, values or display names; unknown values fall back to mindfulness."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            needle = value.strip().lower()
            for category in cls:
                if needle in (
                    category.value,
                    category.name.lower(),
                    category.display_name.lower(),
                ):
                    return category
        return default or cls.MINDFULNESS


_CATEGORY_DISPLAY = {
    HabitCategory.PHYSICAL: ("Physical Activity", "🏃‍♂️"),
    HabitCategory.MINDFULNESS: ("Mindfulness", "🧘‍♀️"),
    HabitCategory.RELAXATION: ("Relaxation", "😌"),
    HabitCategory.PRODUCTIVITY: ("Productivity", "📝"),
}


class UserMood(str, Enum):
    HAPPY = "happy"
    STRESSED = "stressed"
    TIRED = "tired"
    ENERGIZED = "energized"

    @property
    def display_name(self) -> str:
        return _MOOD_DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        return _MOOD_DISPLAY[self][1]

    @classmethod
    def parse(cls, value: Any) -> "UserMood":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            needle = value.strip().lower()
            for mood in cls:
                if needle in (mood.value, mood.display_name.lower()):
                    return mood
        return cls.HAPPY


_MOOD_DISPLAY = {
    UserMood.HAPPY: ("Happy", "😊"),
    UserMood.STRESSED: ("Stressed", "😰"),
    UserMood.TIRED: ("Tired", "😴"),
    UserMood.ENERGIZED: ("Energized", "⚡"),
}


class HabitDifficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"


def to_local_naive(value: datetime) -> datetime:
    """Completion timestamps are compared as local calendar days."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class Habit(BaseModel):
    """A micro-habit the user accepted. Persisted verbatim as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    category: HabitCategory = HabitCategory.MINDFULNESS
    duration_minutes: int = Field(default=5, alias="durationMinutes")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")
    completed_dates: List[datetime] = Field(
        default_factory=list, alias="completedDates"
    )

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> HabitCategory:
        return HabitCategory.parse(value)

    @field_validator("created_at", mode="after")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return to_local_naive(value)

    @field_validator("completed_dates", mode="after")
    @classmethod
    def _normalize_completed_dates(cls, value: List[datetime]) -> List[datetime]:
        return [to_local_naive(item) for item in value]

    def current_streak(self, today: Optional[date] = None) -> int:
        """Consecutive calendar days with a completion, counting back from today."""
        if not self.completed_dates:
            return 0

        check_day = today or date.today()
        days = sorted({completed.date() for completed in self.completed_dates}, reverse=True)

        streak = 0
        for day in days:
            if day == check_day:
                streak += 1
                check_day = check_day - timedelta(days=1)
            elif day < check_day:
                break
        return streak

    def completed_on(self, day: date) -> bool:
        return any(completed.date() == day for completed in self.completed_dates)

    def is_completed_today(self, today: Optional[date] = None) -> bool:
        return self.completed_on(today or date.today())

    def completions_since(self, since: datetime) -> int:
        return sum(1 for completed in self.completed_dates if completed > since)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Habit":
        return cls.model_validate(data)

    def to_response(self, today: Optional[date] = None) -> Dict[str, Any]:
        payload = self.to_json()
        payload["currentStreak"] = self.current_streak(today)
        payload["isCompletedToday"] = self.is_completed_today(today)
        payload["categoryDisplayName"] = self.category.display_name
        return payload
