"""
User flows: onboarding, mood and preference updates, suggestions,
completions and reminders. Keeps the current suggestion in storage.
"""

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from microhabit.core.exceptions import NoSuggestionError, ProfileNotFoundError
from microhabit.models.habit import Habit, HabitCategory, UserMood
from microhabit.models.suggestion import HabitSuggestion
from microhabit.models.user_profile import UserProfile
from microhabit.services import suggestion_engine as engine
from microhabit.services.ai_agent_service import AIAgentService
from microhabit.services.logger import logger
from microhabit.services.notification_service import NotificationService
from microhabit.services.storage_service import StorageService

DEFAULT_SUGGESTION_TITLE = "Mindful Breathing"
DEFAULT_SUGGESTION_DESCRIPTION = "Take 5 minutes to focus on your breathing"


class AppService:
    def __init__(
        self,
        storage: Optional[StorageService] = None,
        agent: Optional[AIAgentService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.storage = storage or StorageService()
        self.agent = agent or AIAgentService(self.storage)
        self.notifications = notifications or NotificationService(self.storage)

    def _require_profile(self) -> UserProfile:
        profile = self.storage.get_user_profile()
        if profile is None:
            raise ProfileNotFoundError()
        return profile

    def initialize(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        profile = self.storage.get_user_profile()
        todays_habit = None

        if profile is not None:
            todays_habit = self.storage.get_todays_habit(now)
            self._schedule_notifications(profile, now)

        return {
            "is_first_launch": self.storage.is_first_launch(),
            "has_profile": profile is not None,
            "profile": profile,
            "todays_habit": todays_habit,
            "current_suggestion": self.storage.get_current_suggestion(),
        }

    async def complete_onboarding(
        self,
        name: str,
        mood: UserMood,
        preferences: Sequence[HabitCategory],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        profile = UserProfile(
            id=str(uuid.uuid4()),
            name=name,
            current_mood=mood,
            preferred_categories=list(preferences),
            last_mood_update=now,
            created_at=now,
        )
        self.storage.save_user_profile(profile)
        self.storage.set_first_launch_complete()
        logger.info(f"Onboarding completed for {profile.id}")

        suggestion = await self.generate_habit_suggestion(now)
        self._schedule_notifications(profile, now)

        return {"profile": profile, "suggestion": suggestion}

    async def update_mood(
        self, mood: UserMood, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        profile = self._require_profile().model_copy(
            update={"current_mood": mood, "last_mood_update": now}
        )
        self.storage.save_user_profile(profile)
        suggestion = await self.generate_habit_suggestion(now)
        return {"profile": profile, "suggestion": suggestion}

    async def update_preferences(
        self, preferences: Sequence[HabitCategory], now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        deduped: List[HabitCategory] = []
        for category in preferences:
            if category not in deduped:
                deduped.append(category)

        profile = self._require_profile().model_copy(
            update={"preferred_categories": deduped}
        )
        self.storage.save_user_profile(profile)
        suggestion = await self.generate_habit_suggestion(now)
        return {"profile": profile, "suggestion": suggestion}

    def recent_completions(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Completions in the last 7 days, keyed by category display name."""
        since = (now or datetime.now()) - timedelta(days=7)
        counts: Dict[str, int] = {}
        for habit in self.storage.get_habits():
            recent = habit.completions_since(since)
            if recent > 0:
                key = habit.category.display_name
                counts[key] = counts.get(key, 0) + recent
        return counts

    def _current_streak(self, now: datetime) -> int:
        return self.storage.get_completion_stats(now)["longest_streak"]

    async def generate_habit_suggestion(
        self, now: Optional[datetime] = None, fallback_reasoning: Optional[str] = None
    ) -> HabitSuggestion:
        now = now or datetime.now()
        profile = self._require_profile()
        if profile.current_mood is None:
            raise ValueError("Set a mood before requesting a habit suggestion")

        mood = profile.current_mood
        preferences = profile.preferred_categories

        try:
            result = await self.agent.generate_personalized_habit_suggestion(
                mood,
                preferences,
                current_streak=self._current_streak(now),
                recent_completions=self.recent_completions(now),
            )
            suggestion = result["suggestion"].model_copy(
                update={"reasoning": result["reasoning"]}
            )
        except Exception as e:
            logger.error(f"Error generating habit suggestion, using basic suggestion: {e}")
            suggestion = self._basic_suggestion(mood, preferences, fallback_reasoning)

        self.storage.save_current_suggestion(suggestion)
        return suggestion

    def _basic_suggestion(
        self,
        mood: UserMood,
        preferences: Sequence[HabitCategory],
        fallback_reasoning: Optional[str] = None,
    ) -> HabitSuggestion:
        basic = engine.generate_habit_suggestion(mood, preferences)
        title = basic.get("title") or DEFAULT_SUGGESTION_TITLE
        description = basic.get("description") or DEFAULT_SUGGESTION_DESCRIPTION
        return HabitSuggestion(
            title=title,
            description=description,
            category=engine.category_from_title(title),
            duration=engine.duration_from_text(title, description),
            reasoning=basic.get("prompt")
            or fallback_reasoning
            or "Based on your current mood and preferences",
            source="rules",
        )

    def get_current_suggestion(self) -> Optional[HabitSuggestion]:
        return self.storage.get_current_suggestion()

    def accept_habit_suggestion(self, now: Optional[datetime] = None) -> Habit:
        self._require_profile()
        suggestion = self.storage.get_current_suggestion()
        if suggestion is None:
            raise NoSuggestionError()

        habit = Habit(
            id=str(uuid.uuid4()),
            title=suggestion.title,
            description=suggestion.description,
            category=suggestion.category,
            duration_minutes=suggestion.duration,
            created_at=now or datetime.now(),
        )
        self.storage.add_habit(habit)
        self.storage.clear_current_suggestion()
        logger.info(f"Accepted habit suggestion '{habit.title}' as {habit.id}")
        return habit

    async def generate_next_day_suggestion(
        self, now: Optional[datetime] = None
    ) -> HabitSuggestion:
        return await self.generate_habit_suggestion(
            now, fallback_reasoning="Based on your completed habit"
        )

    def complete_habit(
        self, habit_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        result = self.agent.process_habit_completion(habit_id, True, now)
        habit = self.storage.get_habit(habit_id)
        streak = result["new_streak"]

        notifications = []
        if not result["already_completed"]:
            notifications.append(
                self.notifications.habit_completion_notification(habit.title, streak)
            )
            if streak > 1:
                milestone = self.notifications.streak_milestone_notification(streak)
                if milestone is not None:
                    notifications.append(milestone)

        result.update(
            {
                "habit": habit,
                "completion_message": self.completion_message(streak),
                "notifications": notifications,
                "todays_habit": self.storage.get_todays_habit(now),
            }
        )
        return result

    def miss_habit(self, habit_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        result = self.agent.process_habit_completion(habit_id, False, now)
        result["missed_message"] = self.missed_habit_message()
        return result

    def delete_habit(self, habit_id: str) -> bool:
        return self.storage.delete_habit(habit_id)

    def _schedule_notifications(
        self, profile: UserProfile, now: Optional[datetime] = None
    ) -> Optional[Dict[str, Any]]:
        try:
            return self.notifications.schedule_daily_reminder(profile, now)
        except Exception as e:
            logger.error(f"Failed to schedule notifications: {e}")
            return None

    def update_notification_settings(
        self, enabled: bool, hour: int, minute: int, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError("Reminder time must be a valid hour (0-23) and minute (0-59)")

        profile = self._require_profile().model_copy(
            update={
                "notifications_enabled": enabled,
                "reminder_hour": hour,
                "reminder_minute": minute,
            }
        )
        self.storage.save_user_profile(profile)

        schedule = None
        if enabled:
            schedule = self._schedule_notifications(profile, now)
        else:
            self.notifications.cancel_daily_reminder()

        return {"profile": profile, "schedule": schedule}

    def get_completion_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        return self.storage.get_completion_stats(now)

    def motivational_message(self) -> str:
        profile = self.storage.get_user_profile()
        if profile is None:
            return "Welcome to your habit journey!"
        return engine.random_message(
            engine.progress_messages(profile.total_habits_completed, profile.longest_streak)
        )

    def completion_message(self, streak: int) -> str:
        return engine.random_message(engine.completion_messages(streak))

    def missed_habit_message(self) -> str:
        return engine.random_message(engine.MISSED_HABIT_MESSAGES)

    def reset_app_data(self) -> None:
        self.storage.clear_all_data()
        self.notifications.cancel_all_notifications()
        logger.info("App data reset")
