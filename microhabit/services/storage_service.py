"""
Persistence for the user profile, habits and app flags.

Everything is stored as plain JSON under fixed keys in the key-value store.
Read failures are logged and degrade to an empty result.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from microhabit.core.storage import KeyValueStore, get_store
from microhabit.models.habit import Habit
from microhabit.models.suggestion import HabitSuggestion
from microhabit.models.user_profile import UserProfile
from microhabit.services.logger import logger

USER_PROFILE_KEY = "user_profile"
HABITS_KEY = "habits"
IS_FIRST_LAUNCH_KEY = "is_first_launch"
DEMO_MODE_KEY = "demo_mode"
CURRENT_SUGGESTION_KEY = "current_suggestion"
BEHAVIOR_PATTERN_KEY = "behavior_pattern"
NOTIFICATION_SCHEDULE_KEY = "notification_schedule"


class StorageService:
    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else get_store()

    # User profile

    def save_user_profile(self, profile: UserProfile) -> None:
        self.store.set(USER_PROFILE_KEY, profile.to_json())

    def get_user_profile(self) -> Optional[UserProfile]:
        try:
            raw = self.store.get(USER_PROFILE_KEY)
            if raw is None:
                return None
            return UserProfile.from_json(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Error loading user profile: {e}")
            return None

    # Habits

    def save_habits(self, habits: List[Habit]) -> None:
        self.store.set(HABITS_KEY, [habit.to_json() for habit in habits])

    def get_habits(self) -> List[Habit]:
        try:
            raw = self.store.get(HABITS_KEY)
            if not raw:
                return []
            return [Habit.from_json(item) for item in raw]
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Error loading habits: {e}")
            return []

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.get_habits() if h.id == habit_id), None)

    def add_habit(self, habit: Habit) -> None:
        habits = self.get_habits()
        habits.append(habit)
        self.save_habits(habits)

    def update_habit(self, updated_habit: Habit) -> bool:
        habits = self.get_habits()
        for index, habit in enumerate(habits):
            if habit.id == updated_habit.id:
                habits[index] = updated_habit
                self.save_habits(habits)
                return True
        return False

    def delete_habit(self, habit_id: str) -> bool:
        habits = self.get_habits()
        remaining = [habit for habit in habits if habit.id != habit_id]
        if len(remaining) == len(habits):
            return False
        self.save_habits(remaining)
        return True

    def complete_habit(
        self, habit_id: str, now: Optional[datetime] = None
    ) -> Optional[Habit]:
        """Record a completion for today. A second completion on the same day is ignored."""
        now = now or datetime.now()
        habits = self.get_habits()

        for index, habit in enumerate(habits):
            if habit.id != habit_id:
                continue
            if habit.completed_on(now.date()):
                return habit

            updated = habit.model_copy(
                update={"completed_dates": [*habit.completed_dates, now]}
            )
            habits[index] = updated
            self.save_habits(habits)
            self._update_user_stats(habits, now)
            return updated

        return None

    def _update_user_stats(self, habits: List[Habit], now: datetime) -> None:
        profile = self.get_user_profile()
        if profile is None:
            return

        total_completed = sum(len(habit.completed_dates) for habit in habits)
        current_streak = max(
            (habit.current_streak(now.date()) for habit in habits), default=0
        )
        longest_streak = max(profile.longest_streak, current_streak)

        self.save_user_profile(
            profile.model_copy(
                update={
                    "total_habits_completed": total_completed,
                    "longest_streak": longest_streak,
                    "current_streak": current_streak,
                }
            )
        )

    # Flags

    def is_first_launch(self) -> bool:
        value = self.store.get(IS_FIRST_LAUNCH_KEY)
        return True if value is None else bool(value)

    def set_first_launch_complete(self) -> None:
        self.store.set(IS_FIRST_LAUNCH_KEY, False)

    def get_demo_mode(self, default: bool = False) -> bool:
        value = self.store.get(DEMO_MODE_KEY)
        return default if value is None else bool(value)

    def set_demo_mode(self, enabled: bool) -> None:
        self.store.set(DEMO_MODE_KEY, bool(enabled))

    # Current suggestion

    def get_current_suggestion(self) -> Optional[HabitSuggestion]:
        try:
            raw = self.store.get(CURRENT_SUGGESTION_KEY)
            if raw is None:
                return None
            return HabitSuggestion.model_validate(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Error loading current suggestion: {e}")
            return None

    def save_current_suggestion(self, suggestion: HabitSuggestion) -> None:
        self.store.set(CURRENT_SUGGESTION_KEY, suggestion.model_dump(mode="json"))

    def clear_current_suggestion(self) -> None:
        self.store.delete(CURRENT_SUGGESTION_KEY)

    # Behavior pattern

    def get_behavior_pattern(self) -> Dict[str, List[Dict[str, Any]]]:
        raw = self.store.get(BEHAVIOR_PATTERN_KEY)
        if not isinstance(raw, dict):
            if raw is not None:
                logger.error("Stored behavior pattern is not an object; ignoring it")
            return {}
        return {
            key: [entry for entry in entries if isinstance(entry, dict)]
            for key, entries in raw.items()
            if isinstance(entries, list)
        }

    def save_behavior_pattern(self, pattern: Dict[str, List[Dict[str, Any]]]) -> None:
        self.store.set(BEHAVIOR_PATTERN_KEY, pattern)

    # Notification schedule

    def get_notification_schedule(self) -> Optional[Dict[str, Any]]:
        raw = self.store.get(NOTIFICATION_SCHEDULE_KEY)
        return raw if isinstance(raw, dict) else None

    def save_notification_schedule(self, schedule: Dict[str, Any]) -> None:
        self.store.set(NOTIFICATION_SCHEDULE_KEY, schedule)

    def clear_notification_schedule(self) -> None:
        self.store.delete(NOTIFICATION_SCHEDULE_KEY)

    # Queries

    def get_todays_habit(self, now: Optional[datetime] = None) -> Optional[Habit]:
        today = (now or datetime.now()).date()
        return next(
            (habit for habit in self.get_habits() if not habit.is_completed_today(today)),
            None,
        )

    def get_completion_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        today = (now or datetime.now()).date()
        habits = self.get_habits()
        return {
            "total_habits": len(habits),
            "completed_today": sum(1 for h in habits if h.is_completed_today(today)),
            "total_completions": sum(len(h.completed_dates) for h in habits),
            "longest_streak": max((h.current_streak(today) for h in habits), default=0),
        }

    def clear_all_data(self) -> None:
        self.store.clear()
