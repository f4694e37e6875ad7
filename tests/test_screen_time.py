"""Tests for screen time analysis and providers."""

import pytest

from microhabit.services.screen_time_service import (
    DemoScreenTimeProvider,
    ReportedScreenTimeProvider,
    ScreenTimeService,
    analyze_app_usage,
    break_duration,
    categorize_screen_time,
    create_screen_time_provider,
    format_package_name,
)


@pytest.mark.parametrize(
    "hours,expected",
    [(0.0, "low"), (2.99, "low"), (3.0, "moderate"), (5.99, "moderate"), (6.0, "high"), (11.5, "high")],
)
def test_categorize_screen_time_thresholds(hours, expected):
    """Six hours or more is high, three or more is moderate."""
    assert categorize_screen_time(hours) == expected


def test_break_duration_by_level():
    """Longer breaks are suggested for heavier screen time."""
    assert break_duration(7) == 15
    assert break_duration(4) == 10
    assert break_duration(1) == 5


def test_analyze_app_usage_flags_heavy_social_media():
    """More than two hours on a social app is flagged."""
    result = analyze_app_usage({"com.instagram.android": 2.5, "com.spotify.music": 1.0})
    assert result["top_app"] == "com.instagram.android"
    assert result["top_app_usage"] == 2.5
    assert result["social_media_heavy"] is True


def test_analyze_app_usage_balanced():
    """Non-social top apps are not flagged."""
    result = analyze_app_usage({"com.spotify.music": 3.0, "com.tiktok": 1.0})
    assert result["social_media_heavy"] is False
    assert analyze_app_usage({}) is None
    assert analyze_app_usage(None) is None


def test_format_package_name():
    """The last package segment is capitalized."""
    assert format_package_name("com.spotify.music") == "Music"
    assert format_package_name("com.whatsapp") == "Whatsapp"


def test_create_provider_by_mode(store):
    """Demo mode selects the demo provider."""
    assert isinstance(create_screen_time_provider(True, store), DemoScreenTimeProvider)
    assert isinstance(create_screen_time_provider(False, store), ReportedScreenTimeProvider)


@pytest.mark.asyncio
async def test_demo_analysis_lists_top_five_apps():
    """Demo data reports 8.2 hours with YouTube on top."""
    analysis = await ScreenTimeService(DemoScreenTimeProvider()).get_screen_time_analysis()

    assert analysis["total_hours"] == 8.2
    assert analysis["category"] == "high"
    assert analysis["app_count"] == 10
    assert analysis["is_demo_mode"] is True
    assert [app["name"] for app in analysis["top_apps"]] == [
        "YouTube",
        "Instagram",
        "TikTok",
        "WhatsApp",
        "Netflix",
    ]


@pytest.mark.asyncio
async def test_reported_provider_without_report_returns_error_analysis(store):
    """Without a report for today the analysis is zeroed with an error."""
    provider = ReportedScreenTimeProvider(store)
    analysis = await ScreenTimeService(provider).get_screen_time_analysis()

    assert provider.is_supported() is False
    assert analysis["total_hours"] == 0.0
    assert analysis["top_apps"] == []
    assert "error" in analysis


@pytest.mark.asyncio
async def test_reported_provider_uses_todays_report(store):
    """A report from today feeds the analysis."""
    provider = ReportedScreenTimeProvider(store)
    provider.report(4.5, {"com.spotify.music": 1.5, "com.whatsapp": 2.0})

    analysis = await ScreenTimeService(provider).get_screen_time_analysis()
    assert analysis["total_hours"] == 4.5
    assert analysis["category"] == "moderate"
    assert analysis["top_apps"][0]["name"] == "Whatsapp"
    assert "error" not in analysis


@pytest.mark.asyncio
async def test_reported_provider_ignores_stale_report(store):
    """Reports from another day do not count as today's data."""
    store.set(
        "screen_time_report",
        {"date": "2020-01-01", "total_hours": 9.0, "app_usage": {}},
    )
    provider = ReportedScreenTimeProvider(store)
    assert provider.is_supported() is False
    assert await provider.get_today_screen_time() == 0.0
