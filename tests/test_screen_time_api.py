"""Tests for screen time endpoints."""

from microhabit.core.config import settings


def test_report_without_data(client, api_base):
    """GET /screen-time/report without a report is zeroed with an error."""
    r = client.get(f"{api_base}/screen-time/report")
    assert r.status_code == 200
    data = r.json()
    assert data["total_hours"] == 0.0
    assert "error" in data
    assert data["support_message"]


def test_analyze_stores_report(client, api_base):
    """POST /screen-time/analyze with hours records today's report."""
    r = client.post(
        f"{api_base}/screen-time/analyze",
        json={"hours": 7, "app_usage": {"com.instagram.android": 3.0}},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["screen_time_level"] == "high"
    assert data["suggested_break_duration"] == 15
    assert data["app_usage_analysis"]["social_media_heavy"] is True

    report = client.get(f"{api_base}/screen-time/report").json()
    assert report["total_hours"] == 7
    assert report["top_apps"][0]["name"] == "Android"


def test_analyze_without_hours_requires_permission(client, api_base):
    """Without hours or a stored report the client must grant access."""
    r = client.post(f"{api_base}/screen-time/analyze", json={})
    assert r.status_code == 200
    assert r.json()["permission_required"] is True


def test_analyze_rejects_negative_usage(client, api_base):
    """Negative hours are rejected."""
    assert client.post(f"{api_base}/screen-time/analyze", json={"hours": -1}).status_code == 422
    r = client.post(
        f"{api_base}/screen-time/analyze",
        json={"hours": 2, "app_usage": {"com.tiktok": -3}},
    )
    assert r.status_code == 422


def test_demo_mode_insights(client, api_base):
    """Demo mode supplies simulated screen time."""
    client.put(f"{api_base}/settings/demo-mode", json={"enabled": True})

    report = client.get(f"{api_base}/screen-time/report").json()
    assert report["is_demo_mode"] is True
    assert report["total_hours"] == 8.2
    assert report["top_apps"][0]["name"] == "YouTube"

    insights = client.get(f"{api_base}/screen-time/insights").json()
    assert insights["analysis"]["category"] == "high"
    assert insights["recommendations"]


def test_tracking_disabled(client, api_base, monkeypatch):
    """All screen time endpoints return 400 when tracking is off."""
    monkeypatch.setattr(settings, "ENABLE_SCREEN_TIME_TRACKING", False)
    assert client.get(f"{api_base}/screen-time/report").status_code == 400
    assert client.get(f"{api_base}/screen-time/insights").status_code == 400
    assert client.post(f"{api_base}/screen-time/analyze", json={"hours": 2}).status_code == 400
