"""Tests for the behavior pattern log."""

from datetime import datetime

import pytest

from microhabit.models.habit import HabitCategory
from microhabit.services.behavior_pattern_service import (
    COMPLETION_MISSED,
    COMPLETION_SUCCESS,
    DEFAULT_TIMING,
    MAX_ENTRIES_PER_CATEGORY,
    MOOD_ANALYSIS,
    BehaviorPatternService,
    time_of_day,
)


@pytest.fixture
def behavior(storage):
    return BehaviorPatternService(storage)


def test_record_keeps_latest_entries_only(behavior):
    """Each category keeps at most the 30 most recent entries."""
    for index in range(MAX_ENTRIES_PER_CATEGORY + 5):
        behavior.record(MOOD_ANALYSIS, {"index": index})

    entries = behavior.get_pattern()[MOOD_ANALYSIS]
    assert len(entries) == MAX_ENTRIES_PER_CATEGORY
    assert entries[0]["index"] == 5
    assert entries[-1]["index"] == MAX_ENTRIES_PER_CATEGORY + 4


def test_record_rejects_unknown_category(behavior):
    """Only the known event categories can be recorded."""
    with pytest.raises(ValueError):
        behavior.record("sleep_tracking", {})


def test_category_bias_counts_successes_minus_misses(behavior):
    """Bias is successes minus misses per habit category."""
    for _ in range(3):
        behavior.record(COMPLETION_SUCCESS, {"habitCategory": "physical"})
    behavior.record(COMPLETION_MISSED, {"habitCategory": "physical"})
    behavior.record(COMPLETION_MISSED, {"habitCategory": "relaxation"})

    bias = behavior.category_bias()
    assert bias[HabitCategory.PHYSICAL] == 2
    assert bias[HabitCategory.RELAXATION] == -1
    assert bias[HabitCategory.MINDFULNESS] == 0


def test_optimal_timing_defaults_without_history(behavior):
    """No completions means the default morning recommendation."""
    assert behavior.optimal_timing() == DEFAULT_TIMING


def test_optimal_timing_uses_completion_timestamps(behavior):
    """Timing follows the most common weekday and time of day."""
    # 2026-03-10 is a Tuesday
    for day in (3, 10, 17):
        behavior.record(
            COMPLETION_SUCCESS,
            {"habitCategory": "mindfulness", "timestamp": datetime(2026, 3, day, 19, 0).isoformat()},
        )

    timing = behavior.optimal_timing()
    assert timing["best_day_of_week"] == "Tuesday"
    assert timing["best_time_of_day"] == "Evening"
    assert timing["consistency"] == "high"


@pytest.mark.parametrize(
    "hour,expected",
    [(6, "Morning"), (13, "Afternoon"), (20, "Evening"), (23, "Night"), (2, "Night")],
)
def test_time_of_day_buckets(hour, expected):
    """Hours map to the four day buckets."""
    assert time_of_day(hour) == expected


def test_malformed_log_entries_are_ignored(storage, behavior):
    """Entries that are not objects are skipped by bias and timing."""
    storage.store.set(
        "behavior_pattern",
        {
            COMPLETION_SUCCESS: ["junk", 3, None, {"habitCategory": "physical"}],
            COMPLETION_MISSED: [["relaxation"]],
        },
    )

    bias = behavior.category_bias()
    assert bias[HabitCategory.PHYSICAL] == 1
    assert bias[HabitCategory.RELAXATION] == 0
    assert behavior.optimal_timing() == DEFAULT_TIMING

    behavior.record(COMPLETION_SUCCESS, {"habitCategory": "physical"})
    assert len(behavior.get_pattern()[COMPLETION_SUCCESS]) == 2
