"""Tests for the rule-based suggestion engine and message tables."""

from unittest.mock import patch

import pytest

from microhabit.models.habit import HabitCategory, HabitDifficulty, UserMood
from microhabit.services import suggestion_engine as engine
from tests.conftest import make_habit


def test_suggestions_filtered_by_preferences():
    """Only templates in a preferred category are returned when any match."""
    templates = engine.get_habit_suggestions(UserMood.STRESSED, [HabitCategory.MINDFULNESS])
    assert {t.title for t in templates} == {"5-Minute Deep Breathing", "Quick Meditation"}


def test_suggestions_fall_back_to_full_mood_table():
    """A preference with no match for the mood yields all four templates."""
    templates = engine.get_habit_suggestions(UserMood.STRESSED, [HabitCategory.RELAXATION])
    assert len(templates) == 4


def test_every_mood_has_four_templates():
    """Each mood has four templates of at most fifteen minutes."""
    for mood in UserMood:
        templates = engine.MOOD_TEMPLATES[mood]
        assert len(templates) == 4
        assert all(1 <= t.duration <= 15 for t in templates)


def test_recommended_categories_dedupes_preferences_first():
    """Preferences come first, then the mood's categories, without repeats."""
    categories = engine.recommended_categories(
        UserMood.STRESSED, [HabitCategory.RELAXATION, HabitCategory.PHYSICAL]
    )
    assert categories == [
        HabitCategory.RELAXATION,
        HabitCategory.PHYSICAL,
        HabitCategory.MINDFULNESS,
    ]


@pytest.mark.parametrize(
    "streak,recent,expected",
    [
        (0, {}, HabitDifficulty.EASY),
        (3, {"Mindfulness": 3}, HabitDifficulty.MODERATE),
        (7, {"Mindfulness": 2}, HabitDifficulty.EASY),
        (7, {"Mindfulness": 3}, HabitDifficulty.MODERATE),
        (7, {"Mindfulness": 3, "Physical Activity": 2}, HabitDifficulty.CHALLENGING),
        (10, {}, HabitDifficulty.EASY),
    ],
)
def test_calculate_difficulty(streak, recent, expected):
    """Difficulty needs both a streak and recent completions."""
    assert engine.calculate_difficulty(streak, recent) == expected


def test_adjust_by_difficulty_never_empty():
    """When nothing fits the limit the shortest templates remain."""
    templates = engine.get_habit_suggestions(UserMood.ENERGIZED, [HabitCategory.PHYSICAL])
    adjusted = engine.adjust_by_difficulty(templates, HabitDifficulty.EASY)
    assert [t.title for t in adjusted] == ["10-Minute Walk"]


def test_adjust_by_difficulty_challenging_keeps_all():
    """Challenging difficulty has no duration limit."""
    templates = engine.MOOD_TEMPLATES[UserMood.ENERGIZED]
    assert engine.adjust_by_difficulty(templates, HabitDifficulty.CHALLENGING) == templates


def test_screen_time_filter_prefers_offline_categories():
    """Moderate or high screen time keeps physical and mindfulness habits."""
    templates = engine.MOOD_TEMPLATES[UserMood.TIRED]
    filtered = engine.filter_for_screen_time(templates, 7.0)
    assert {t.category for t in filtered} == {HabitCategory.PHYSICAL}
    assert engine.filter_for_screen_time(templates, 1.0) == templates
    assert engine.filter_for_screen_time(templates, None) == templates


def test_score_templates_applies_capped_bias():
    """Behavior bias raises a category by at most two points."""
    templates = engine.MOOD_TEMPLATES[UserMood.HAPPY]
    scored = engine.score_templates(
        templates, UserMood.HAPPY, [], category_bias={HabitCategory.MINDFULNESS: 10}
    )
    top_score, top_template = scored[0]
    assert top_template.category == HabitCategory.MINDFULNESS
    assert top_score == 2


def test_optimized_suggestion_is_rule_sourced():
    """The optimized suggestion comes from the mood table."""
    suggestion = engine.generate_optimized_suggestion(
        UserMood.STRESSED, [HabitCategory.MINDFULNESS], screen_time_hours=7.0
    )
    titles = {t.title for t in engine.MOOD_TEMPLATES[UserMood.STRESSED]}
    assert suggestion.title in titles
    assert suggestion.category == HabitCategory.MINDFULNESS
    assert suggestion.source == "rules"
    assert suggestion.difficulty == HabitDifficulty.EASY
    assert "7.0 hours of screen time" in suggestion.reasoning


def test_generate_habit_suggestion_prompt_mentions_mood():
    """The conversational prompt names the mood and the habit."""
    with patch("microhabit.services.suggestion_engine.random.choice", side_effect=lambda seq: seq[0]):
        result = engine.generate_habit_suggestion(UserMood.STRESSED, [])
    assert result["title"] == "5-Minute Deep Breathing"
    assert "stressed" in result["prompt"]
    assert "5-minute deep breathing" in result["prompt"]


def test_suggestion_reasoning_lists_factors():
    """Reasoning mentions mood, preference, screen time and streak."""
    text = engine.suggestion_reasoning(
        UserMood.TIRED, [HabitCategory.RELAXATION], screen_time_hours=4.0, current_streak=3
    )
    assert text.startswith("Based on your tired mood")
    assert "relaxation" in text
    assert "4.0 hours" in text
    assert "3-day streak" in text


@pytest.mark.parametrize(
    "streak,marker",
    [(1, "🎉"), (3, "🔥"), (5, "⭐"), (10, "🏆"), (30, "👑")],
)
def test_celebration_message_bands(streak, marker):
    """Celebration messages escalate with the streak."""
    assert engine.celebration_message(streak).startswith(marker)


def test_completion_messages_include_streak():
    """Streak messages mention the streak length."""
    assert all("5" in message for message in engine.completion_messages(5))
    assert len(engine.completion_messages(1)) == 3


def test_next_day_suggestion_stays_in_category():
    """The follow-up habit keeps the completed habit's category."""
    habit = make_habit(category=HabitCategory.PHYSICAL)
    result = engine.next_day_suggestion(habit)
    assert result["category"] == "physical"
    assert "message" in result


def test_easier_habit_suggestion_is_two_minutes():
    """After a miss the suggested habit is one of the two-minute habits."""
    result = engine.easier_habit_suggestion()
    assert result["title"] in {t.title for t in engine.EASY_HABITS}


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Quick Meditation", HabitCategory.MINDFULNESS),
        ("10-Minute Walk", HabitCategory.PHYSICAL),
        ("Calming Music", HabitCategory.RELAXATION),
        ("Creative Writing", HabitCategory.PRODUCTIVITY),
        ("Something Else", HabitCategory.MINDFULNESS),
    ],
)
def test_category_from_title(title, expected):
    """Title keywords decide the category of a basic suggestion."""
    assert engine.category_from_title(title) == expected


def test_duration_from_text():
    """The first number in the title or description is the duration."""
    assert engine.duration_from_text("10-Minute Walk") == 10
    assert engine.duration_from_text("Walk", "for 7 minutes") == 7
    assert engine.duration_from_text("Dance Break") == 5
