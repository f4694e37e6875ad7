"""
Screen time analysis.

Usage stats live on the device, so the service works from numbers the client
reports, or from a fixed demo data set when demo mode is on.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from microhabit.core.storage import KeyValueStore, get_store
from microhabit.services.logger import logger
from microhabit.services.suggestion_engine import (
    HIGH_SCREEN_TIME_THRESHOLD,
    MODERATE_SCREEN_TIME_THRESHOLD,
)

SCREEN_TIME_REPORT_KEY = "screen_time_report"

SOCIAL_MEDIA_APPS = ["instagram", "facebook", "twitter", "tiktok", "snapchat"]
SOCIAL_MEDIA_HEAVY_HOURS = 2.0
TOP_APPS_LIMIT = 5


def categorize_screen_time(hours: float) -> str:
    if hours >= HIGH_SCREEN_TIME_THRESHOLD:
        return "high"
    if hours >= MODERATE_SCREEN_TIME_THRESHOLD:
        return "moderate"
    return "low"


def screen_time_recommendation(hours: float) -> str:
    if hours >= HIGH_SCREEN_TIME_THRESHOLD:
        return "Screen time is excessive. Strongly recommend offline activities to reduce digital fatigue and eye strain."
    if hours >= MODERATE_SCREEN_TIME_THRESHOLD:
        return "Screen time is moderate. Consider balancing with some offline activities for better well-being."
    return "Screen time is low. Good balance maintained. Can include both digital and offline activities."


def break_duration(hours: float) -> int:
    """Suggested break length in minutes."""
    if hours >= HIGH_SCREEN_TIME_THRESHOLD:
        return 15
    if hours >= MODERATE_SCREEN_TIME_THRESHOLD:
        return 10
    return 5


def analyze_app_usage(app_usage: Optional[Mapping[str, float]]) -> Optional[Dict[str, Any]]:
    if not app_usage:
        return None

    top_app, top_hours = max(app_usage.items(), key=lambda item: item[1])
    social_media_heavy = top_hours > SOCIAL_MEDIA_HEAVY_HOURS and any(
        app in top_app.lower() for app in SOCIAL_MEDIA_APPS
    )

    return {
        "top_app": top_app,
        "top_app_usage": top_hours,
        "social_media_heavy": social_media_heavy,
        "recommendation": (
            "High social media usage detected. Consider mindfulness or physical activities."
            if social_media_heavy
            else "Balanced app usage. Continue with current patterns."
        ),
    }


def format_package_name(package_name: str) -> str:
    """com.spotify.music -> Music"""
    last = package_name.split(".")[-1]
    if not last:
        return package_name
    return last[0].upper() + last[1:]


class ScreenTimeProvider(ABC):
    demo = False

    @abstractmethod
    def is_supported(self) -> bool: ...

    @abstractmethod
    async def has_permissions(self) -> bool: ...

    @abstractmethod
    async def request_permissions(self) -> bool: ...

    @abstractmethod
    async def get_today_screen_time(self) -> float: ...

    @abstractmethod
    async def get_today_app_usage(self) -> Dict[str, float]: ...

    @abstractmethod
    async def get_screen_time_for_period(self, start: datetime, end: datetime) -> float: ...

    @abstractmethod
    def get_support_message(self) -> str: ...

    def app_name(self, package_name: str) -> str:
        return format_package_name(package_name)


class ReportedScreenTimeProvider(ScreenTimeProvider):
    """
    Screen time as reported by the client device.

    The latest report is kept in the key-value store together with its day.
    Reports from a previous day do not count as today's data.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else get_store()

    def _today_report(self) -> Optional[Dict[str, Any]]:
        report = self.store.get(SCREEN_TIME_REPORT_KEY)
        if not isinstance(report, dict):
            return None
        if report.get("date") != date.today().isoformat():
            return None
        return report

    def report(self, hours: float, app_usage: Optional[Mapping[str, float]] = None) -> None:
        self.store.set(
            SCREEN_TIME_REPORT_KEY,
            {
                "date": date.today().isoformat(),
                "total_hours": float(hours),
                "app_usage": {name: float(value) for name, value in (app_usage or {}).items()},
                "reported_at": datetime.now().isoformat(),
            },
        )

    def is_supported(self) -> bool:
        return self._today_report() is not None

    async def has_permissions(self) -> bool:
        return self._today_report() is not None

    async def request_permissions(self) -> bool:
        # Usage access is granted on the device
        return await self.has_permissions()

    async def get_today_screen_time(self) -> float:
        report = self._today_report()
        return float(report["total_hours"]) if report else 0.0

    async def get_today_app_usage(self) -> Dict[str, float]:
        report = self._today_report()
        return dict(report.get("app_usage") or {}) if report else {}

    async def get_screen_time_for_period(self, start: datetime, end: datetime) -> float:
        report = self._today_report()
        if report is None or not (start.date() <= date.today() <= end.date()):
            return 0.0
        return float(report["total_hours"])

    def get_support_message(self) -> str:
        if self.is_supported():
            return "Using screen time reported by your device today."
        return "No screen time reported today. Grant usage access on your device to send screen time data."


class DemoScreenTimeProvider(ScreenTimeProvider):
    demo = True

    TOTAL_SCREEN_TIME = 8.2

    APP_USAGE = {
        "com.instagram.android": 2.5,
        "com.whatsapp": 1.8,
        "com.spotify.music": 1.2,
        "com.twitter.android": 0.9,
        "com.google.android.youtube": 3.1,
        "com.facebook.katana": 1.4,
        "com.snapchat.android": 0.7,
        "com.tiktok": 2.2,
        "com.netflix.mediaclient": 1.6,
        "com.google.android.apps.messaging": 0.5,
    }

    APP_NAMES = {
        "com.instagram.android": "Instagram",
        "com.whatsapp": "WhatsApp",
        "com.spotify.music": "Spotify",
        "com.twitter.android": "Twitter",
        "com.google.android.youtube": "YouTube",
        "com.facebook.katana": "Facebook",
        "com.snapchat.android": "Snapchat",
        "com.tiktok": "TikTok",
        "com.netflix.mediaclient": "Netflix",
        "com.google.android.apps.messaging": "Messages",
    }

    def is_supported(self) -> bool:
        return True

    async def has_permissions(self) -> bool:
        return True

    async def request_permissions(self) -> bool:
        return True

    async def get_today_screen_time(self) -> float:
        return self.TOTAL_SCREEN_TIME

    async def get_today_app_usage(self) -> Dict[str, float]:
        return dict(self.APP_USAGE)

    async def get_screen_time_for_period(self, start: datetime, end: datetime) -> float:
        days = (end - start).days
        return self.TOTAL_SCREEN_TIME * (days if days > 0 else 1)

    def get_support_message(self) -> str:
        return "Running in demo mode with simulated screen time data."

    def app_name(self, package_name: str) -> str:
        return self.APP_NAMES.get(package_name) or format_package_name(package_name)


def create_screen_time_provider(
    demo_mode: bool, store: Optional[KeyValueStore] = None
) -> ScreenTimeProvider:
    if demo_mode:
        return DemoScreenTimeProvider()
    return ReportedScreenTimeProvider(store)


class ScreenTimeService:
    def __init__(self, provider: ScreenTimeProvider):
        self.provider = provider

    async def get_screen_time_analysis(self) -> Dict[str, Any]:
        try:
            if not self.provider.is_supported() or not await self.provider.has_permissions():
                raise RuntimeError("Screen time permissions not granted")

            total_hours = await self.provider.get_today_screen_time()
            app_usage = await self.provider.get_today_app_usage()

            top_apps: List[Dict[str, Any]] = [
                {
                    "name": self.provider.app_name(package),
                    "package_name": package,
                    "hours": hours,
                }
                for package, hours in sorted(
                    app_usage.items(), key=lambda item: item[1], reverse=True
                )[:TOP_APPS_LIMIT]
            ]

            return {
                "total_hours": total_hours,
                "category": categorize_screen_time(total_hours),
                "top_apps": top_apps,
                "app_count": len(app_usage),
                "timestamp": datetime.now().isoformat(),
                "is_demo_mode": self.provider.demo,
            }
        except Exception as e:
            logger.warning(f"Error in screen time analysis: {e}")
            return {
                "total_hours": 0.0,
                "category": "low",
                "top_apps": [],
                "app_count": 0,
                "timestamp": datetime.now().isoformat(),
                "is_demo_mode": self.provider.demo,
                "error": str(e),
            }
