"""Tests for mood analysis endpoint."""

from unittest.mock import AsyncMock, patch

from microhabit.core.config import settings
from microhabit.services.llm_client import LLMClient


def test_analyze_mood_keywords(client, api_base):
    """POST /mood/analyze detects stress from keywords and emoji."""
    r = client.post(
        f"{api_base}/mood/analyze",
        json={"text": "I'm feeling really stressed today with all this work 😰"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["detected_mood"] == "stressed"
    assert data["source"] == "keywords"
    assert data["keyword_analysis"]["emotion_scores"]["stressed"] == 2
    assert 0 < data["confidence"] <= 1


def test_analyze_mood_default(client, api_base):
    """Neutral text gets the happy default."""
    r = client.post(f"{api_base}/mood/analyze", json={"text": "Just had lunch"})
    assert r.status_code == 200
    data = r.json()
    assert data["detected_mood"] == "happy"
    assert data["source"] == "default"


def test_analyze_mood_blank_text(client, api_base):
    """Whitespace-only text is rejected with 422."""
    r = client.post(f"{api_base}/mood/analyze", json={"text": "   "})
    assert r.status_code == 422


def test_analyze_mood_missing_text(client, api_base):
    """A body without text is rejected with 422."""
    r = client.post(f"{api_base}/mood/analyze", json={})
    assert r.status_code == 422


def test_analyze_mood_numeric_sentiment_from_llm(client, api_base, monkeypatch):
    """A numeric sentiment in the model reply does not break the response."""
    monkeypatch.setattr(settings, "LLM_API_KEY", "test-key")
    reply = '{"emotion": "tired", "sentiment": 0.2, "confidence": 0.7}'

    with patch.object(LLMClient, "complete", new_callable=AsyncMock, return_value=reply):
        r = client.post(f"{api_base}/mood/analyze", json={"text": "Long day at the office"})

    assert r.status_code == 200, r.text
    data = r.json()
    assert data["detected_mood"] == "tired"
    assert data["sentiment"] is None
    assert data["source"] == "ai"
