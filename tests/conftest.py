"""
Pytest configuration and fixtures for the Micro-Habit API tests.

Every test gets its own JSON store in a temp directory. The LLM key is blanked
so nothing reaches the network unless a test mocks the client explicitly.
"""

from datetime import datetime, timedelta
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from microhabit.core.config import settings
from microhabit.core.storage import JsonFileStore, reset_store
from microhabit.models.habit import Habit, HabitCategory, UserMood
from microhabit.models.user_profile import UserProfile
from microhabit.services import llm_client
from microhabit.services.notification_service import clear_outbox
from microhabit.services.storage_service import StorageService


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch) -> Generator[JsonFileStore, None, None]:
    monkeypatch.setattr(settings, "LLM_API_KEY", "")
    monkeypatch.setattr(settings, "REDIS_URL", "")
    monkeypatch.setattr(settings, "DEMO_MODE", False)
    monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", True)
    monkeypatch.setattr(settings, "ENABLE_SCREEN_TIME_TRACKING", True)
    monkeypatch.setattr(settings, "ENABLE_SENTIMENT_ANALYSIS", True)
    monkeypatch.setattr(settings, "ENABLE_AI_SUGGESTIONS", True)
    monkeypatch.setattr(llm_client, "_llm_client", None)

    test_store = JsonFileStore(tmp_path / "microhabit.json")
    reset_store(test_store)
    clear_outbox()
    yield test_store
    reset_store(None)


@pytest.fixture
def storage(store) -> StorageService:
    return StorageService(store)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client for the FastAPI app."""
    from main import app

    with TestClient(app, base_url="http://test") as c:
        yield c


@pytest.fixture
def api_base() -> str:
    """Base path for API v1 endpoints."""
    return "/api/v1"


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 10, 18, 30)


@pytest.fixture
def profile(storage) -> UserProfile:
    user = UserProfile(
        id="user-1",
        name="Sam",
        current_mood=UserMood.STRESSED,
        preferred_categories=[HabitCategory.MINDFULNESS],
    )
    storage.save_user_profile(user)
    return user


def daily_completions(end: datetime, days: int) -> List[datetime]:
    """One completion per day for `days` days, ending on `end`."""
    return [end - timedelta(days=offset) for offset in range(days)]


def make_habit(
    habit_id: str = "habit-1",
    category: HabitCategory = HabitCategory.MINDFULNESS,
    completed_dates: List[datetime] = None,
    duration: int = 5,
) -> Habit:
    return Habit(
        id=habit_id,
        title="5-Minute Deep Breathing",
        description="Take slow, deep breaths to calm your mind",
        category=category,
        duration_minutes=duration,
        created_at=datetime(2026, 1, 1, 9, 0),
        completed_dates=completed_dates or [],
    )


def onboard(client: TestClient, api_base: str, mood: str = "stressed", preferences=None) -> dict:
    r = client.post(
        f"{api_base}/onboarding/complete",
        json={"name": "Sam", "mood": mood, "preferences": preferences or []},
    )
    assert r.status_code == 200, r.text
    return r.json()
