"""
AI agent: mood, screen time and streak analysis feeding habit suggestions.

Combines the rule engine with optional LLM calls. Every LLM path has a
rule-based fallback, so callers always get a suggestion.
"""

import json
import math
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from microhabit.core.config import settings
from microhabit.core.exceptions import (
    HabitNotFoundError,
    LLMRequestError,
    LLMUnavailableError,
    ProfileNotFoundError,
)
from microhabit.models.habit import Habit, HabitCategory, HabitDifficulty, UserMood
from microhabit.models.suggestion import HabitSuggestion, MoodAnalysis
from microhabit.services import suggestion_engine as engine
from microhabit.services.behavior_pattern_service import (
    COMPLETION_MISSED,
    COMPLETION_SUCCESS,
    MOOD_ANALYSIS,
    SCREEN_TIME_ANALYSIS,
    BehaviorPatternService,
)
from microhabit.services.llm_client import LLMClient, extract_json_object, get_llm_client
from microhabit.services.logger import logger
from microhabit.services.mood_analyzer import MoodAnalyzer
from microhabit.services.screen_time_service import (
    ScreenTimeService,
    analyze_app_usage,
    break_duration,
    categorize_screen_time,
    create_screen_time_provider,
    screen_time_recommendation,
)
from microhabit.services.storage_service import StorageService

AI_SUGGESTION_TEMPERATURE = 0.8
AI_SUGGESTION_MAX_TOKENS = 500
MIN_HABIT_MINUTES = 2
MAX_HABIT_MINUTES = 15
MAX_TIPS = 5

FALLBACK_MOTIVATION = "Small steps lead to big changes. A few minutes today is a win!"

DEFAULT_TIPS = {
    HabitCategory.PHYSICAL: [
        "Put your phone in another room first",
        "Start slowly and listen to your body",
        "Drink some water afterwards",
    ],
    HabitCategory.MINDFULNESS: [
        "Find a quiet spot where you won't be interrupted",
        "Set a gentle timer so you don't watch the clock",
        "If your mind wanders, simply return to your breath",
    ],
    HabitCategory.RELAXATION: [
        "Dim the lights or close your eyes",
        "Loosen your shoulders and jaw",
        "Let notifications wait until you're done",
    ],
    HabitCategory.PRODUCTIVITY: [
        "Keep a pen and paper within reach",
        "Pick one small thing and finish it",
        "Stop when the timer ends, even mid-thought",
    ],
}

AI_SUGGESTION_SYSTEM_PROMPT = """You are a friendly micro-habit coach.
Suggest ONE short habit (2 to 15 minutes) that fits how the user feels right now.
Prefer offline activities when screen time is high. Keep it simple and doable today.
Reply with a JSON object only:
{"title": "short title",
 "description": "one sentence",
 "duration": minutes as an integer,
 "category": "physical" | "mindfulness" | "relaxation" | "productivity",
 "difficulty": "easy" | "moderate" | "challenging",
 "reasoning": "why this fits the user now",
 "motivation": "one encouraging sentence",
 "tips": ["up to five short tips"]}"""


class AIAgentService:
    def __init__(
        self,
        storage: StorageService,
        behavior: Optional[BehaviorPatternService] = None,
        screen_time: Optional[ScreenTimeService] = None,
        mood_analyzer: Optional[MoodAnalyzer] = None,
        llm: Optional[LLMClient] = None,
    ):
        self.storage = storage
        self.behavior = behavior or BehaviorPatternService(storage)
        self.screen_time = screen_time or ScreenTimeService(
            create_screen_time_provider(
                storage.get_demo_mode(default=settings.DEMO_MODE), storage.store
            )
        )
        self.llm = llm or get_llm_client()
        self.mood_analyzer = mood_analyzer or MoodAnalyzer(self.llm)

    # Mood and preferences

    def analyze_mood_and_preferences(
        self, mood: UserMood, preferences: Sequence[HabitCategory]
    ) -> Dict[str, Any]:
        analysis = {
            "mood": mood.value,
            "mood_analysis": engine.mood_analysis_text(mood),
            "preferences": [category.value for category in preferences],
            "recommended_categories": [
                category.value
                for category in engine.recommended_categories(mood, preferences)
            ],
            "emotional_state": engine.emotional_state_text(mood),
            "timestamp": datetime.now().isoformat(),
        }
        self.behavior.record(MOOD_ANALYSIS, analysis)
        return analysis

    # Screen time

    def is_screen_time_supported(self) -> bool:
        return self.screen_time.provider.is_supported()

    async def has_screen_time_permissions(self) -> bool:
        return await self.screen_time.provider.has_permissions()

    async def request_screen_time_permissions(self) -> bool:
        return await self.screen_time.provider.request_permissions()

    def get_screen_time_support_message(self) -> str:
        return self.screen_time.provider.get_support_message()

    async def analyze_screen_time_and_usage(
        self,
        screen_time_hours: Optional[float] = None,
        app_usage: Optional[Mapping[str, float]] = None,
    ) -> Dict[str, Any]:
        data_source = "manual"

        if screen_time_hours is None:
            provider = self.screen_time.provider
            if not provider.is_supported() or not await provider.has_permissions():
                return {
                    "screen_time_hours": 0.0,
                    "screen_time_level": "unknown",
                    "recommendation": "Please grant screen time permissions to get personalized suggestions",
                    "balance_needed": False,
                    "suggested_break_duration": 0,
                    "app_usage_analysis": None,
                    "timestamp": datetime.now().isoformat(),
                    "data_source": "none",
                    "permission_required": True,
                    "support_message": provider.get_support_message(),
                }

            data_source = "automatic"
            screen_time_hours = await provider.get_today_screen_time()
            if app_usage is None:
                app_usage = await provider.get_today_app_usage()

        analysis = {
            "screen_time_hours": screen_time_hours,
            "screen_time_level": categorize_screen_time(screen_time_hours),
            "recommendation": screen_time_recommendation(screen_time_hours),
            "balance_needed": screen_time_hours > engine.MODERATE_SCREEN_TIME_THRESHOLD,
            "suggested_break_duration": break_duration(screen_time_hours),
            "app_usage_analysis": analyze_app_usage(app_usage),
            "timestamp": datetime.now().isoformat(),
            "data_source": data_source,
            "permission_required": False,
        }
        self.behavior.record(SCREEN_TIME_ANALYSIS, analysis)
        return analysis

    async def get_screen_time_insights(self) -> Dict[str, Any]:
        analysis = await self.screen_time.get_screen_time_analysis()
        hours = analysis["total_hours"]

        if hours >= engine.HIGH_SCREEN_TIME_THRESHOLD:
            recommendations = [
                "📱 Your screen time is quite high today. Consider taking regular breaks.",
                "🚶‍♂️ Try the 20-20-20 rule: Every 20 minutes, look at something 20 feet away for 20 seconds.",
            ]
            habit_suggestions = [
                "Take a 10-minute walk without your phone",
                "Practice 5 minutes of deep breathing",
                "Do some stretching exercises",
            ]
        elif hours >= engine.MODERATE_SCREEN_TIME_THRESHOLD:
            recommendations = [
                "⚖️ Your screen time is moderate. Great balance!",
                "🎯 Consider adding some offline activities to your routine.",
            ]
            habit_suggestions = [
                "Read a few pages of a book",
                "Practice mindful breathing for 3 minutes",
                "Do a quick tidy-up of your space",
            ]
        else:
            recommendations = [
                "✨ Excellent screen time balance today!",
                "🌟 You're doing great at managing your digital consumption.",
            ]
            habit_suggestions = [
                "Continue your balanced approach",
                "Maybe try a new creative hobby",
            ]

        return {
            "analysis": analysis,
            "recommendations": recommendations,
            "habit_suggestions": habit_suggestions,
        }

    # Suggestions

    async def generate_personalized_habit_suggestion(
        self,
        mood: UserMood,
        preferences: Sequence[HabitCategory],
        screen_time_hours: Optional[float] = None,
        current_streak: int = 0,
        recent_completions: Optional[Mapping[str, int]] = None,
        screen_analysis: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Rule-based suggestion for a mood. A screen_analysis already computed by
        the caller is reused instead of analyzing screen_time_hours again.
        """
        mood_analysis = self.analyze_mood_and_preferences(mood, preferences)
        if screen_analysis is None and screen_time_hours is not None:
            screen_analysis = await self.analyze_screen_time_and_usage(screen_time_hours)

        suggestion = engine.generate_optimized_suggestion(
            mood,
            preferences,
            screen_time_hours=screen_time_hours,
            current_streak=current_streak,
            recent_completions=recent_completions,
            category_bias=self.behavior.category_bias(),
        )

        return {
            "suggestion": suggestion,
            "mood_analysis": mood_analysis,
            "screen_analysis": screen_analysis,
            "reasoning": engine.suggestion_reasoning(
                mood, preferences, screen_time_hours, current_streak
            ),
            "difficulty": suggestion.difficulty.value,
            "timestamp": datetime.now().isoformat(),
        }

    async def generate_smart_habit_suggestion(
        self,
        mood: UserMood,
        preferences: Sequence[HabitCategory],
        current_streak: int = 0,
        recent_completions: Optional[Mapping[str, int]] = None,
    ) -> Dict[str, Any]:
        """Like generate_personalized_habit_suggestion, with screen time from the provider."""
        screen_analysis = await self.analyze_screen_time_and_usage()
        if screen_analysis.get("permission_required"):
            screen_analysis = None
        screen_time_hours = screen_analysis["screen_time_hours"] if screen_analysis else None

        return await self.generate_personalized_habit_suggestion(
            mood,
            preferences,
            screen_time_hours=screen_time_hours,
            current_streak=current_streak,
            recent_completions=recent_completions,
            screen_analysis=screen_analysis,
        )

    # Completion tracking

    def process_habit_completion(
        self, habit_id: str, completed: bool, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        habit = self.storage.get_habit(habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)

        result: Dict[str, Any] = {
            "habit_id": habit_id,
            "completed": completed,
            "timestamp": now.isoformat(),
        }

        if completed:
            already_completed = habit.completed_on(now.date())
            if not already_completed:
                habit = self.storage.complete_habit(habit_id, now) or habit
            streak = habit.current_streak(now.date())
            result.update(
                {
                    "new_streak": streak,
                    "total_completions": len(habit.completed_dates),
                    "celebration_message": engine.celebration_message(streak),
                    "next_suggestion": engine.next_day_suggestion(habit),
                    "already_completed": already_completed,
                }
            )
            if already_completed:
                return result
            self.behavior.record(
                COMPLETION_SUCCESS,
                {
                    "habitCategory": habit.category.value,
                    "streak": streak,
                    "dayOfWeek": now.isoweekday(),
                    "timestamp": now.isoformat(),
                },
            )
        else:
            result.update(
                {
                    "encouragement_message": engine.encouragement_message(),
                    "easier_suggestion": engine.easier_habit_suggestion(),
                    "streak_reset": True,
                }
            )
            self.behavior.record(
                COMPLETION_MISSED,
                {
                    "habitId": habit_id,
                    "habitCategory": habit.category.value,
                    "dayOfWeek": now.isoweekday(),
                    "timestamp": now.isoformat(),
                },
            )

        return result

    # Optimization

    def optimize_habit_suggestions(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        today = (now or datetime.now()).date()
        profile = self.storage.get_user_profile()
        if profile is None:
            raise ProfileNotFoundError()

        habits = self.storage.get_habits()
        performance = _analyze_user_performance(habits, today)
        preferred = _identify_preferred_categories(habits)
        adjustment = _difficulty_adjustment(habits, today)

        return {
            "user_performance": performance,
            "preferred_categories": preferred,
            "optimal_timing": self.behavior.optimal_timing(),
            "difficulty_adjustment": adjustment,
            "recommendations": _optimization_recommendations(performance, adjustment, preferred),
            "timestamp": datetime.now().isoformat(),
        }

    # Free-text mood

    async def analyze_mood_from_text(self, text: str) -> MoodAnalysis:
        analysis = await self.mood_analyzer.analyze(text)
        self.behavior.record(
            MOOD_ANALYSIS,
            {
                "mood": analysis.detected_mood.value,
                "confidence": analysis.confidence,
                "source": analysis.source,
                "timestamp": analysis.timestamp.isoformat(),
            },
        )
        return analysis

    async def generate_habit_from_mood_text(
        self,
        text: str,
        preferences: Optional[Sequence[HabitCategory]] = None,
        screen_time_hours: Optional[float] = None,
        current_streak: int = 0,
        recent_completions: Optional[Mapping[str, int]] = None,
    ) -> Dict[str, Any]:
        mood_analysis = await self.analyze_mood_from_text(text)
        mood = mood_analysis.detected_mood

        result = await self.generate_personalized_habit_suggestion(
            mood,
            list(preferences or []),
            screen_time_hours=screen_time_hours,
            current_streak=current_streak,
            recent_completions=recent_completions,
        )

        return {
            "mood_analysis": mood_analysis,
            "habit_suggestion": result,
            "processing_message": (
                f"{mood.emoji} It sounds like you're feeling {mood.display_name.lower()}. "
                f"Here's a habit that fits: {result['suggestion'].title}."
            ),
        }

    async def generate_ai_personalized_habit_suggestion(
        self,
        mood_text: str,
        preferences: Optional[Sequence[HabitCategory]] = None,
        screen_time_hours: Optional[float] = None,
        current_streak: int = 0,
    ) -> Dict[str, Any]:
        preferences = list(preferences or [])
        mood_analysis = await self.analyze_mood_from_text(mood_text)
        mood = mood_analysis.detected_mood

        screen_analysis = None
        if screen_time_hours is not None:
            screen_analysis = await self.analyze_screen_time_and_usage(screen_time_hours)

        suggestion = None
        if settings.ENABLE_AI_SUGGESTIONS and self.llm.is_configured:
            suggestion = await self._ai_suggestion(
                mood_text, mood, preferences, screen_time_hours, current_streak
            )

        if suggestion is None:
            suggestion = self._fallback_suggestion(
                mood, preferences, screen_time_hours, current_streak
            )

        return {
            "success": True,
            "suggestion": suggestion,
            "mood_analysis": mood_analysis,
            "screen_time_analysis": screen_analysis,
            "source": suggestion.source,
            "timestamp": datetime.now().isoformat(),
        }

    async def _ai_suggestion(
        self,
        mood_text: str,
        mood: UserMood,
        preferences: List[HabitCategory],
        screen_time_hours: Optional[float],
        current_streak: int,
    ) -> Optional[HabitSuggestion]:
        context = {
            "how_i_feel": mood_text,
            "detected_mood": mood.value,
            "preferred_categories": [category.value for category in preferences],
            "screen_time_hours_today": screen_time_hours,
            "screen_time_level": (
                categorize_screen_time(screen_time_hours)
                if screen_time_hours is not None
                else None
            ),
            "current_streak_days": current_streak,
        }

        try:
            content = await self.llm.complete(
                AI_SUGGESTION_SYSTEM_PROMPT,
                json.dumps(context, ensure_ascii=False),
                temperature=AI_SUGGESTION_TEMPERATURE,
                max_tokens=AI_SUGGESTION_MAX_TOKENS,
            )
            data = extract_json_object(content)
            return _suggestion_from_ai_payload(data, mood, preferences, current_streak)
        except (LLMUnavailableError, LLMRequestError) as e:
            logger.warning(f"AI suggestion request failed, using rule engine: {e}")
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"AI suggestion reply was unusable, using rule engine: {e}")
        return None

    def _fallback_suggestion(
        self,
        mood: UserMood,
        preferences: List[HabitCategory],
        screen_time_hours: Optional[float],
        current_streak: int,
    ) -> HabitSuggestion:
        suggestion = engine.generate_optimized_suggestion(
            mood,
            preferences,
            screen_time_hours=screen_time_hours,
            current_streak=current_streak,
            category_bias=self.behavior.category_bias(),
        )
        return suggestion.model_copy(
            update={
                "reasoning": engine.suggestion_reasoning(
                    mood, preferences, screen_time_hours, current_streak
                ),
                "motivation": FALLBACK_MOTIVATION,
                "tips": list(DEFAULT_TIPS[suggestion.category]),
                "source": "fallback",
            }
        )


def _suggestion_from_ai_payload(
    data: Dict[str, Any],
    mood: UserMood,
    preferences: List[HabitCategory],
    current_streak: int,
) -> HabitSuggestion:
    title = str(data.get("title") or "").strip()
    if not title:
        raise ValueError("AI suggestion has no title")

    try:
        raw_duration = float(data.get("duration", 5))
    except (TypeError, ValueError):
        raw_duration = float("nan")
    if math.isfinite(raw_duration):
        duration = int(raw_duration)
    else:
        duration = engine.duration_from_text(title, str(data.get("description") or ""))
    duration = max(MIN_HABIT_MINUTES, min(MAX_HABIT_MINUTES, duration))

    default_category = (preferences or engine.MOOD_CATEGORIES[mood])[0]
    category = HabitCategory.parse(data.get("category"), default=default_category)

    try:
        difficulty = HabitDifficulty(str(data.get("difficulty", "")).lower())
    except ValueError:
        difficulty = engine.calculate_difficulty(current_streak)

    tips = data.get("tips")
    if isinstance(tips, str):
        tips = [tips]
    elif not isinstance(tips, list):
        tips = []
    tips = [str(tip).strip() for tip in tips if str(tip).strip()][:MAX_TIPS]

    return HabitSuggestion(
        title=title,
        description=str(data.get("description") or "").strip(),
        category=category,
        duration=duration,
        difficulty=difficulty,
        reasoning=str(data.get("reasoning") or "").strip(),
        motivation=str(data.get("motivation") or "").strip() or FALLBACK_MOTIVATION,
        tips=tips or list(DEFAULT_TIPS[category]),
        source="ai",
    )


def _analyze_user_performance(habits: List[Habit], today) -> Dict[str, Any]:
    if not habits:
        return {"status": "no_data", "message": "No habits to analyze yet"}

    total_completions = sum(len(habit.completed_dates) for habit in habits)
    average_streak = sum(habit.current_streak(today) for habit in habits) / len(habits)
    completion_rate = sum(1 for h in habits if h.is_completed_today(today)) / len(habits)

    if completion_rate >= 0.8:
        performance = "excellent"
    elif completion_rate >= 0.6:
        performance = "good"
    elif completion_rate >= 0.4:
        performance = "fair"
    else:
        performance = "needs_improvement"

    return {
        "total_completions": total_completions,
        "average_streak": round(average_streak),
        "completion_rate": round(completion_rate * 100),
        "performance": performance,
        "total_habits": len(habits),
    }


def _identify_preferred_categories(habits: List[Habit]) -> Dict[str, int]:
    completions: Dict[str, int] = {}
    for habit in habits:
        key = habit.category.value
        completions[key] = completions.get(key, 0) + len(habit.completed_dates)
    return completions


def _difficulty_adjustment(habits: List[Habit], today) -> str:
    if not habits:
        return "maintain"
    active = sum(1 for habit in habits if habit.current_streak(today) > 0) / len(habits)
    if active >= 0.8:
        return "increase"
    if active <= 0.3:
        return "decrease"
    return "maintain"


def _optimization_recommendations(
    performance: Dict[str, Any], adjustment: str, preferred: Dict[str, int]
) -> List[str]:
    recommendations = []

    if performance.get("performance") == "excellent":
        recommendations.append(
            "🌟 You're doing amazing! Consider adding a new habit category to expand your routine."
        )
    elif performance.get("performance") == "needs_improvement":
        recommendations.append("💪 Let's focus on easier, shorter habits to rebuild momentum.")

    if adjustment == "increase":
        recommendations.append(
            "🚀 Ready for a challenge? Try longer duration habits or new categories."
        )
    elif adjustment == "decrease":
        recommendations.append(
            "🌱 Let's simplify. Shorter, easier habits will help you get back on track."
        )

    if preferred:
        top_category = max(preferred.items(), key=lambda item: item[1])[0]
        recommendations.append(
            f"✨ You excel at {top_category} habits! Consider exploring related activities."
        )

    return recommendations
