"""Tests for habit and profile models."""

from datetime import date, datetime, timedelta

from microhabit.models.habit import Habit, HabitCategory, UserMood
from microhabit.models.user_profile import UserProfile
from tests.conftest import daily_completions, make_habit


def test_streak_counts_consecutive_days_ending_today():
    """Seven daily completions ending today give a 7-day streak."""
    end = datetime(2026, 3, 10, 8, 0)
    habit = make_habit(completed_dates=daily_completions(end, 7))
    assert habit.current_streak(end.date()) == 7


def test_streak_is_zero_without_completion_today():
    """A habit last completed yesterday has no streak today."""
    yesterday = datetime(2026, 3, 9, 20, 0)
    habit = make_habit(completed_dates=daily_completions(yesterday, 3))
    assert habit.current_streak(date(2026, 3, 10)) == 0
    assert habit.is_completed_today(date(2026, 3, 10)) is False


def test_streak_stops_at_gap():
    """A missed day ends the streak."""
    today = datetime(2026, 3, 10, 9, 0)
    completed = [today, today - timedelta(days=1), today - timedelta(days=3)]
    habit = make_habit(completed_dates=completed)
    assert habit.current_streak(today.date()) == 2


def test_streak_ignores_duplicate_completions_on_one_day():
    """Several completions on the same day count once."""
    today = datetime(2026, 3, 10, 9, 0)
    habit = make_habit(completed_dates=[today, today.replace(hour=21)])
    assert habit.current_streak(today.date()) == 1


def test_habit_json_uses_camel_case_keys():
    """Habits serialize with camelCase keys and the category value."""
    habit = make_habit(category=HabitCategory.PHYSICAL, duration=10)
    data = habit.to_json()
    assert data["durationMinutes"] == 10
    assert data["category"] == "physical"
    assert "createdAt" in data
    assert data["completedDates"] == []


def test_habit_from_json_unknown_category_defaults_to_mindfulness():
    """An unrecognized category loads as mindfulness."""
    habit = Habit.from_json(
        {
            "id": "h1",
            "title": "Mystery",
            "description": "",
            "category": "juggling",
            "durationMinutes": 5,
            "createdAt": "2026-03-01T09:00:00",
            "completedDates": ["2026-03-01T09:05:00"],
        }
    )
    assert habit.category == HabitCategory.MINDFULNESS
    assert habit.completed_dates == [datetime(2026, 3, 1, 9, 5)]


def test_habit_response_adds_derived_fields():
    """The API view carries streak, today flag and display name."""
    today = datetime(2026, 3, 10, 9, 0)
    habit = make_habit(completed_dates=[today])
    payload = habit.to_response(today.date())
    assert payload["currentStreak"] == 1
    assert payload["isCompletedToday"] is True
    assert payload["categoryDisplayName"] == "Mindfulness"


def test_profile_parses_display_names_and_dedupes_preferences():
    """Profile accepts display names and drops duplicate categories."""
    profile = UserProfile.from_json(
        {
            "id": "u1",
            "name": "Sam",
            "currentMood": "Tired",
            "preferredCategories": ["Physical Activity", "physical", "relaxation"],
        }
    )
    assert profile.current_mood == UserMood.TIRED
    assert profile.preferred_categories == [HabitCategory.PHYSICAL, HabitCategory.RELAXATION]
    assert profile.reminder_hour == 9
    assert profile.notifications_enabled is True


def test_profile_defaults_are_serialized_in_camel_case():
    """Profile JSON uses camelCase keys."""
    data = UserProfile(id="u1", name="Sam").to_json()
    assert data["currentMood"] is None
    assert data["totalHabitsCompleted"] == 0
    assert data["longestStreak"] == 0
