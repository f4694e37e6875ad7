"""
Reminder and celebration notifications.

Notifications are composed and scheduled as data. Delivery to a device is the
client's job: it reads the schedule and the outbox.
"""

from collections import deque
from datetime import datetime, timedelta
from typing import Any, Deque, Dict, List, Optional

import pytz

from microhabit.core.config import settings
from microhabit.models.user_profile import UserProfile
from microhabit.services.logger import logger
from microhabit.services.storage_service import StorageService
from microhabit.services.suggestion_engine import REMINDER_MESSAGES, random_message

DAILY_REMINDER_ID = 0
HABIT_COMPLETION_ID = 1
STREAK_MILESTONE_ID = 2
MOTIVATIONAL_ID = 3

DAILY_REMINDER_TITLE = "Micro-Habit Reminder 🌟"

MOTIVATIONAL_MESSAGES = [
    "Small steps lead to big changes! Keep going! 💪",
    "You're building something amazing, one habit at a time! ✨",
    "Consistency is key, and you've got it! 🗝️",
    "Every day you choose to grow is a victory! 🏆",
    "Your future self is cheering you on! 🎉",
]

OUTBOX_SIZE = 100

_outbox: Deque[Dict[str, Any]] = deque(maxlen=OUTBOX_SIZE)


def get_outbox() -> List[Dict[str, Any]]:
    return list(_outbox)


def clear_outbox() -> None:
    _outbox.clear()


def _resolve_timezone(tz_name: Optional[str]):
    try:
        return pytz.timezone(tz_name or "UTC")
    except pytz.exceptions.UnknownTimeZoneError:
        logger.error(f"Invalid reminder timezone {tz_name}, using UTC")
        return pytz.UTC


def next_instance_of_time(
    hour: int, minute: int, now: Optional[datetime] = None, tz_name: Optional[str] = None
) -> datetime:
    """Today at hour:minute in the given timezone, or tomorrow if that time has passed."""
    tz = _resolve_timezone(tz_name)
    if now is None:
        local_now = datetime.now(tz)
    elif now.tzinfo is None:
        local_now = tz.localize(now)
    else:
        local_now = now.astimezone(tz)

    scheduled = tz.localize(
        datetime(local_now.year, local_now.month, local_now.day, hour, minute)
    )
    if scheduled < local_now:
        scheduled = tz.normalize(scheduled + timedelta(days=1))
    return scheduled


class NotificationService:
    def __init__(self, storage: StorageService):
        self.storage = storage

    def _emit(self, notification_id: int, title: str, body: str, channel: str) -> Dict[str, Any]:
        notification = {
            "id": notification_id,
            "channel": channel,
            "title": title,
            "body": body,
            "created_at": datetime.now().isoformat(),
        }
        _outbox.append(notification)
        logger.info(f"Notification [{channel}] {title}: {body}")
        return notification

    def schedule_daily_reminder(
        self, profile: UserProfile, now: Optional[datetime] = None
    ) -> Optional[Dict[str, Any]]:
        if not settings.NOTIFICATIONS_ENABLED or not profile.notifications_enabled:
            return None

        self.cancel_daily_reminder()

        scheduled_for = next_instance_of_time(
            profile.reminder_hour,
            profile.reminder_minute,
            now=now,
            tz_name=settings.REMINDER_TIMEZONE,
        )
        schedule = {
            "id": DAILY_REMINDER_ID,
            "title": DAILY_REMINDER_TITLE,
            "body": random_message(REMINDER_MESSAGES),
            "scheduledFor": scheduled_for.isoformat(),
            "repeats": "daily",
        }
        self.storage.save_notification_schedule(schedule)
        logger.info(f"Daily reminder scheduled for {schedule['scheduledFor']}")
        return schedule

    def get_daily_reminder(self) -> Optional[Dict[str, Any]]:
        return self.storage.get_notification_schedule()

    def cancel_daily_reminder(self) -> None:
        self.storage.clear_notification_schedule()

    def cancel_all_notifications(self) -> None:
        self.cancel_daily_reminder()
        clear_outbox()

    def habit_completion_notification(self, habit_title: str, streak: int) -> Dict[str, Any]:
        if streak == 1:
            body = f'Great job completing "{habit_title}"! Your streak starts now! 🎉'
        else:
            body = f'Amazing! You\'ve completed "{habit_title}" for {streak} days in a row! 🔥'
        return self._emit(HABIT_COMPLETION_ID, "Habit Completed! 🎉", body, "habit_completion")

    def streak_milestone_notification(self, streak: int) -> Optional[Dict[str, Any]]:
        if streak == 7:
            title = "One Week Streak! 🏆"
            body = "Incredible! You've maintained your habit for a full week!"
        elif streak == 30:
            title = "One Month Streak! 🌟"
            body = "Outstanding! A full month of consistency. You're unstoppable!"
        elif streak == 100:
            title = "Century Streak! 💯"
            body = "Legendary! 100 days of dedication. You're a habit master!"
        elif streak > 0 and streak % 10 == 0:
            title = f"{streak} Day Streak! 🔥"
            body = f"Amazing milestone! {streak} consecutive days of building better habits!"
        else:
            return None
        return self._emit(STREAK_MILESTONE_ID, title, body, "streak_milestone")

    def motivational_notification(self) -> Dict[str, Any]:
        return self._emit(
            MOTIVATIONAL_ID,
            "You've Got This! 🌟",
            random_message(MOTIVATIONAL_MESSAGES),
            "motivation",
        )
