"""Tests for reminder scheduling and celebration notifications."""

from datetime import datetime

import pytest
import pytz

from microhabit.services.notification_service import (
    DAILY_REMINDER_ID,
    DAILY_REMINDER_TITLE,
    NotificationService,
    get_outbox,
    next_instance_of_time,
)


@pytest.fixture
def notifications(storage):
    return NotificationService(storage)


def test_next_instance_later_today():
    """A reminder time still ahead is scheduled for today."""
    scheduled = next_instance_of_time(9, 0, now=datetime(2026, 3, 10, 8, 0), tz_name="UTC")
    assert scheduled == pytz.UTC.localize(datetime(2026, 3, 10, 9, 0))


def test_next_instance_rolls_over_to_tomorrow():
    """A reminder time already passed is scheduled for tomorrow."""
    scheduled = next_instance_of_time(9, 0, now=datetime(2026, 3, 10, 10, 0), tz_name="UTC")
    assert scheduled == pytz.UTC.localize(datetime(2026, 3, 11, 9, 0))


def test_next_instance_respects_timezone():
    """Aware datetimes are converted into the reminder timezone first."""
    now = pytz.UTC.localize(datetime(2026, 3, 10, 15, 0))
    scheduled = next_instance_of_time(9, 30, now=now, tz_name="America/New_York")
    assert scheduled.tzinfo is not None
    assert (scheduled.hour, scheduled.minute) == (9, 30)
    assert scheduled.date() == datetime(2026, 3, 11).date()


def test_next_instance_unknown_timezone_uses_utc():
    """An invalid timezone name falls back to UTC."""
    scheduled = next_instance_of_time(9, 0, now=datetime(2026, 3, 10, 8, 0), tz_name="Mars/Base")
    assert scheduled.utcoffset().total_seconds() == 0


def test_schedule_daily_reminder_saves_schedule(notifications, storage, profile, now):
    """The daily reminder is stored with its id, title and next time."""
    schedule = notifications.schedule_daily_reminder(profile, now)

    assert schedule["id"] == DAILY_REMINDER_ID
    assert schedule["title"] == DAILY_REMINDER_TITLE
    assert schedule["repeats"] == "daily"
    assert storage.get_notification_schedule() == schedule


def test_schedule_skipped_when_profile_disables_notifications(notifications, storage, profile, now):
    """No reminder is scheduled for users who turned notifications off."""
    muted = profile.model_copy(update={"notifications_enabled": False})
    assert notifications.schedule_daily_reminder(muted, now) is None
    assert storage.get_notification_schedule() is None


def test_completion_notification_wording(notifications):
    """First completion and streak completions use different bodies."""
    first = notifications.habit_completion_notification("Quick Meditation", 1)
    later = notifications.habit_completion_notification("Quick Meditation", 4)

    assert "Your streak starts now" in first["body"]
    assert "4 days in a row" in later["body"]
    assert [n["channel"] for n in get_outbox()] == ["habit_completion", "habit_completion"]


@pytest.mark.parametrize(
    "streak,title",
    [
        (7, "One Week Streak! 🏆"),
        (20, "20 Day Streak! 🔥"),
        (30, "One Month Streak! 🌟"),
        (100, "Century Streak! 💯"),
    ],
)
def test_streak_milestones(notifications, streak, title):
    """Milestone streaks produce a milestone notification."""
    assert notifications.streak_milestone_notification(streak)["title"] == title


def test_non_milestone_streak_sends_nothing(notifications):
    """Ordinary streak days do not emit a milestone."""
    assert notifications.streak_milestone_notification(5) is None
    assert notifications.streak_milestone_notification(0) is None
    assert get_outbox() == []


def test_cancel_all_notifications(notifications, profile, now):
    """Cancelling clears the schedule and the outbox."""
    notifications.schedule_daily_reminder(profile, now)
    notifications.motivational_notification()

    notifications.cancel_all_notifications()

    assert notifications.get_daily_reminder() is None
    assert get_outbox() == []
