"""
Capped log of past mood, screen time and completion events.

Kept in the key-value store and used to bias rule-based suggestions toward
categories the user actually completes.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from microhabit.models.habit import HabitCategory
from microhabit.services.storage_service import StorageService

MOOD_ANALYSIS = "mood_analysis"
SCREEN_TIME_ANALYSIS = "screen_time_analysis"
COMPLETION_SUCCESS = "completion_success"
COMPLETION_MISSED = "completion_missed"

EVENT_CATEGORIES = (MOOD_ANALYSIS, SCREEN_TIME_ANALYSIS, COMPLETION_SUCCESS, COMPLETION_MISSED)

MAX_ENTRIES_PER_CATEGORY = 30

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DEFAULT_TIMING = {
    "best_day_of_week": "Monday",
    "best_time_of_day": "Morning",
    "consistency": "moderate",
    "recommendation": "Try scheduling habits in the morning for better consistency",
}


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    if 17 <= hour < 22:
        return "Evening"
    return "Night"


class BehaviorPatternService:
    def __init__(self, storage: StorageService):
        self.storage = storage

    def record(self, category: str, data: Dict[str, Any]) -> None:
        if category not in EVENT_CATEGORIES:
            raise ValueError(f"Unknown behavior event category: {category}")

        pattern = self.storage.get_behavior_pattern()
        entries = pattern.get(category, [])
        entries.append(data)
        pattern[category] = entries[-MAX_ENTRIES_PER_CATEGORY:]
        self.storage.save_behavior_pattern(pattern)

    def get_pattern(self) -> Dict[str, List[Dict[str, Any]]]:
        return self.storage.get_behavior_pattern()

    def category_bias(self) -> Dict[HabitCategory, int]:
        """Successes minus misses per habit category."""
        pattern = self.get_pattern()
        bias: Dict[HabitCategory, int] = {category: 0 for category in HabitCategory}

        for entry in pattern.get(COMPLETION_SUCCESS, []):
            category = entry.get("habitCategory")
            if category:
                bias[HabitCategory.parse(category)] += 1

        for entry in pattern.get(COMPLETION_MISSED, []):
            category = entry.get("habitCategory")
            if category:
                bias[HabitCategory.parse(category)] -= 1

        return bias

    def optimal_timing(self) -> Dict[str, Any]:
        successes = self.get_pattern().get(COMPLETION_SUCCESS, [])

        days: Counter = Counter()
        buckets: Counter = Counter()
        for entry in successes:
            timestamp = _parse_timestamp(entry.get("timestamp"))
            if timestamp is None:
                continue
            days[WEEKDAYS[timestamp.weekday()]] += 1
            buckets[time_of_day(timestamp.hour)] += 1

        if not days:
            return dict(DEFAULT_TIMING)

        best_day = days.most_common(1)[0][0]
        best_time, best_time_count = buckets.most_common(1)[0]
        total = sum(buckets.values())
        share = best_time_count / total

        if share >= 0.7:
            consistency = "high"
        elif share >= 0.4:
            consistency = "moderate"
        else:
            consistency = "low"

        return {
            "best_day_of_week": best_day,
            "best_time_of_day": best_time,
            "consistency": consistency,
            "recommendation": (
                f"You complete most habits in the {best_time.lower()}, "
                f"especially on {best_day}s. Try scheduling your habit then."
            ),
        }


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
