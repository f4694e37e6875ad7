"""
Rule-based habit suggestions.

A fixed table of four templates per mood, filtered by preferences, screen time
and streak-based difficulty, then scored against the user's behavior pattern.
Also holds the message tables used across the app.
"""

import random
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from microhabit.models.habit import Habit, HabitCategory, HabitDifficulty, UserMood
from microhabit.models.suggestion import HabitSuggestion

HIGH_SCREEN_TIME_THRESHOLD = 6.0
MODERATE_SCREEN_TIME_THRESHOLD = 3.0

MAX_CATEGORY_BIAS = 2


@dataclass(frozen=True)
class HabitTemplate:
    title: str
    description: str
    category: HabitCategory
    duration: int


MOOD_TEMPLATES: Dict[UserMood, List[HabitTemplate]] = {
    UserMood.STRESSED: [
        HabitTemplate("5-Minute Deep Breathing", "Take slow, deep breaths to calm your mind", HabitCategory.MINDFULNESS, 5),
        HabitTemplate("Quick Meditation", "A brief mindfulness session to center yourself", HabitCategory.MINDFULNESS, 3),
        HabitTemplate("Gentle Stretching", "Light stretches to release tension", HabitCategory.PHYSICAL, 5),
        HabitTemplate("Gratitude Journaling", "Write down three things you're grateful for", HabitCategory.PRODUCTIVITY, 3),
    ],
    UserMood.ENERGIZED: [
        HabitTemplate("10-Minute Walk", "A brisk walk to channel your energy", HabitCategory.PHYSICAL, 10),
        HabitTemplate("Quick Workout", "High-energy exercises to boost your mood", HabitCategory.PHYSICAL, 15),
        HabitTemplate("Creative Writing", "Channel your energy into creative expression", HabitCategory.PRODUCTIVITY, 10),
        HabitTemplate("Learning Session", "Read or learn something new", HabitCategory.PRODUCTIVITY, 15),
    ],
    UserMood.TIRED: [
        HabitTemplate("Power Nap Preparation", "Gentle relaxation to prepare for rest", HabitCategory.RELAXATION, 5),
        HabitTemplate("Hydration Break", "Drink a glass of water mindfully", HabitCategory.PHYSICAL, 2),
        HabitTemplate("Gentle Yoga", "Restorative poses to re-energize gently", HabitCategory.PHYSICAL, 10),
        HabitTemplate("Calming Music", "Listen to soothing music for a few minutes", HabitCategory.RELAXATION, 5),
    ],
    UserMood.HAPPY: [
        HabitTemplate("Dance Break", "Move to your favorite song", HabitCategory.PHYSICAL, 5),
        HabitTemplate("Gratitude Practice", "Celebrate what makes you happy", HabitCategory.MINDFULNESS, 5),
        HabitTemplate("Social Connection", "Send a positive message to someone", HabitCategory.PRODUCTIVITY, 3),
        HabitTemplate("Goal Visualization", "Visualize achieving your dreams", HabitCategory.MINDFULNESS, 5),
    ],
}

MOOD_CATEGORIES: Dict[UserMood, List[HabitCategory]] = {
    UserMood.STRESSED: [HabitCategory.MINDFULNESS, HabitCategory.RELAXATION],
    UserMood.ENERGIZED: [HabitCategory.PHYSICAL, HabitCategory.PRODUCTIVITY],
    UserMood.TIRED: [HabitCategory.RELAXATION, HabitCategory.MINDFULNESS],
    UserMood.HAPPY: [HabitCategory.PHYSICAL, HabitCategory.PRODUCTIVITY],
}

OFFLINE_CATEGORIES = (HabitCategory.PHYSICAL, HabitCategory.MINDFULNESS)

EASY_HABITS = [
    HabitTemplate("2-Minute Breathing", "Just two minutes of deep breathing", HabitCategory.MINDFULNESS, 2),
    HabitTemplate("Drink Water", "Mindfully drink a glass of water", HabitCategory.PHYSICAL, 2),
    HabitTemplate("Gentle Stretch", "One simple stretch for 30 seconds", HabitCategory.PHYSICAL, 2),
    HabitTemplate("Gratitude Moment", "Think of one thing you're grateful for", HabitCategory.MINDFULNESS, 2),
]


# Messages

WELCOME_MESSAGES = [
    "Welcome to Micro-Habit Tracker! Let's get started by understanding how you're feeling today.",
    "Hello there! I'm your personal habit companion. Let's begin this journey together!",
    "Great to see you! I'm here to help you build amazing micro-habits. Let's start!",
]

MOOD_PROMPT = "How do you feel right now? Please select an option:"

PREFERENCE_PROMPT = "Great! Now, tell me what kind of habit you'd like to focus on today:"

MISSED_HABIT_MESSAGES = [
    "It looks like you missed today's habit. No worries, let's get back on track tomorrow. You've still got this!",
    "Don't worry about missing today! Tomorrow is a fresh start. Your journey continues!",
    "Missing a day happens to everyone. What matters is getting back up. Ready for tomorrow?",
    "One missed day doesn't define your journey. Let's refocus and continue building those amazing habits!",
]

REMINDER_MESSAGES = [
    "Hey there! Just a friendly reminder to complete your habit for today. Let's keep the momentum going!",
    "Time for your daily habit! Today's a great day to continue your streak!",
    "Your habit is waiting for you! A few minutes now will make your day even better!",
    "Gentle reminder: Your future self will thank you for completing today's habit!",
]

ADJUST_PREFERENCES_MESSAGES = [
    "You're doing great! Do you want to tweak your preferences for tomorrow's habit?",
    "How are you feeling about your current habit focus? Want to try something different tomorrow?",
    "Ready to explore new habit categories? Let's adjust your preferences!",
]

ENCOURAGEMENT_MESSAGES = [
    "No worries! Every habit journey has ups and downs. Tomorrow is a fresh start! 💪",
    "Missing one day doesn't define your journey. Let's get back on track tomorrow! 🌟",
    "It's okay! What matters is getting back up. You've got this! 🚀",
    "Don't be hard on yourself. Consistency is built over time, not perfection! ❤️",
]

_MOOD_ANALYSIS = {
    UserMood.STRESSED: "User is experiencing stress. Recommend calming, relaxation-focused activities to reduce cortisol levels and promote mental well-being.",
    UserMood.ENERGIZED: "User has high energy levels. Ideal time for physical activities or challenging tasks that can channel this energy productively.",
    UserMood.TIRED: "User is experiencing fatigue. Suggest gentle, restorative activities that don't overwhelm and can help re-energize gradually.",
    UserMood.HAPPY: "User is in a positive emotional state. Great opportunity for habit reinforcement and trying new, engaging activities.",
}

_EMOTIONAL_STATE = {
    UserMood.STRESSED: "High stress levels detected. Priority: stress reduction and emotional regulation.",
    UserMood.ENERGIZED: "High energy and motivation detected. Optimal for challenging activities.",
    UserMood.TIRED: "Low energy levels detected. Focus on gentle, restorative activities.",
    UserMood.HAPPY: "Positive emotional state detected. Excellent for habit building and reinforcement.",
}

_SUGGESTION_PROMPTS = {
    UserMood.STRESSED: "You're feeling stressed. I recommend {title} to help you relax. Would you like to proceed?",
    UserMood.ENERGIZED: "You're feeling energized! How about {title}? It'll give you a great boost!",
    UserMood.TIRED: "I can see you're feeling tired. Let's try {title} to gently re-energize yourself.",
    UserMood.HAPPY: "You're in a great mood! Perfect time for {title}. Let's keep that positive energy flowing!",
}


def random_message(messages: Sequence[str]) -> str:
    return random.choice(list(messages))


def completion_messages(streak: int) -> List[str]:
    if streak == 1:
        return [
            "You've completed your habit for today! Well done! Your current streak is 1 day. Would you like to continue tomorrow?",
            "Fantastic start! You've completed your first habit. Let's build on this momentum!",
            "Great job! You've taken the first step. Your journey to better habits begins now!",
        ]
    if streak <= 3:
        return [
            f"Amazing! You've kept up your {streak}-day streak! Keep it up, you're doing great!",
            f"Wonderful progress! {streak} days in a row. You're building something special!",
            f"Excellent work! Your {streak}-day streak shows real commitment!",
        ]
    if streak <= 7:
        return [
            f"Incredible! You've maintained a {streak}-day streak! You're on fire!",
            f"Outstanding! {streak} days of consistency. You're becoming unstoppable!",
            f"Phenomenal! Your {streak}-day streak is truly impressive!",
        ]
    return [
        f"Absolutely amazing! {streak} days of pure dedication! You're a habit master!",
        f"Legendary! Your {streak}-day streak is inspiring. You've built something incredible!",
        f"Extraordinary! {streak} consecutive days! You're proof that small habits create big changes!",
    ]


def progress_messages(total_completed: int, longest_streak: int) -> List[str]:
    return [
        f"You're doing great! You've completed {total_completed} habits total with your longest streak being {longest_streak} days!",
        f"Amazing progress! {total_completed} habits completed and a personal best of {longest_streak} days in a row!",
        f"Look at you go! {total_completed} total completions and an impressive {longest_streak}-day streak record!",
    ]


def celebration_message(streak: int) -> str:
    if streak <= 1:
        return "🎉 Fantastic start! You've completed your first habit. Every journey begins with a single step!"
    if streak <= 3:
        return f"🔥 Amazing! {streak} days in a row! You're building real momentum here!"
    if streak <= 7:
        return f"⭐ Incredible! {streak}-day streak! You're developing a powerful habit pattern!"
    if streak <= 14:
        return f"🏆 Outstanding! {streak} consecutive days! You're becoming a habit master!"
    return f"👑 Legendary! {streak} days of pure dedication! You're an inspiration!"


def encouragement_message() -> str:
    return random_message(ENCOURAGEMENT_MESSAGES)


def mood_analysis_text(mood: UserMood) -> str:
    return _MOOD_ANALYSIS[mood]


def emotional_state_text(mood: UserMood) -> str:
    return _EMOTIONAL_STATE[mood]


def suggestion_prompt(mood: UserMood, title: str) -> str:
    return _SUGGESTION_PROMPTS[mood].format(title=title.lower())


# Rule table


def get_habit_suggestions(
    mood: UserMood, preferences: Sequence[HabitCategory]
) -> List[HabitTemplate]:
    templates = list(MOOD_TEMPLATES[mood])
    if preferences:
        preferred = [t for t in templates if t.category in preferences]
        if preferred:
            return preferred
    return templates


def recommended_categories(
    mood: UserMood, preferences: Sequence[HabitCategory]
) -> List[HabitCategory]:
    combined: List[HabitCategory] = []
    for category in [*preferences, *MOOD_CATEGORIES[mood]]:
        if category not in combined:
            combined.append(category)
    return combined


def calculate_difficulty(
    current_streak: int, recent_completions: Optional[Mapping[str, int]] = None
) -> HabitDifficulty:
    total_recent = sum((recent_completions or {}).values())
    if current_streak >= 7 and total_recent >= 5:
        return HabitDifficulty.CHALLENGING
    if current_streak >= 3 and total_recent >= 3:
        return HabitDifficulty.MODERATE
    return HabitDifficulty.EASY


_MAX_DURATION = {
    HabitDifficulty.EASY: 5,
    HabitDifficulty.MODERATE: 10,
}


def adjust_by_difficulty(
    templates: Sequence[HabitTemplate], difficulty: HabitDifficulty
) -> List[HabitTemplate]:
    """Drop templates longer than the difficulty allows. Never returns an empty list."""
    if not templates:
        return []
    limit = _MAX_DURATION.get(difficulty)
    if limit is None:
        return list(templates)

    adjusted = [t for t in templates if t.duration <= limit]
    if adjusted:
        return adjusted

    shortest = min(t.duration for t in templates)
    return [t for t in templates if t.duration == shortest]


def filter_for_screen_time(
    templates: Sequence[HabitTemplate], screen_time_hours: Optional[float]
) -> List[HabitTemplate]:
    if screen_time_hours is None or screen_time_hours < MODERATE_SCREEN_TIME_THRESHOLD:
        return list(templates)
    offline = [t for t in templates if t.category in OFFLINE_CATEGORIES]
    return offline or list(templates)


def score_templates(
    templates: Sequence[HabitTemplate],
    mood: UserMood,
    preferences: Sequence[HabitCategory],
    screen_time_hours: Optional[float] = None,
    category_bias: Optional[Mapping[HabitCategory, int]] = None,
) -> List[tuple]:
    """Return (score, template) pairs, highest score first."""
    mood_categories = MOOD_CATEGORIES[mood]
    heavy_screen = (
        screen_time_hours is not None
        and screen_time_hours >= MODERATE_SCREEN_TIME_THRESHOLD
    )
    bias = category_bias or {}

    scored = []
    for template in templates:
        score = 0
        if template.category in preferences:
            score += 2
        if template.category in mood_categories:
            score += 1
        if heavy_screen and template.category in OFFLINE_CATEGORIES:
            score += 1
        score += max(-MAX_CATEGORY_BIAS, min(MAX_CATEGORY_BIAS, bias.get(template.category, 0)))
        scored.append((score, template))

    scored.sort(key=lambda item: item[0], reverse=True)
    return scored


def pick_best(scored: Sequence[tuple]) -> HabitTemplate:
    top_score = scored[0][0]
    return random.choice([template for score, template in scored if score == top_score])


def suggestion_reasoning(
    mood: UserMood,
    preferences: Sequence[HabitCategory],
    screen_time_hours: Optional[float] = None,
    current_streak: Optional[int] = None,
) -> str:
    reasons = [f"Based on your {mood.display_name.lower()} mood"]
    if preferences:
        reasons.append(
            f"aligned with your preference for {preferences[0].display_name.lower()}"
        )
    if screen_time_hours is not None and screen_time_hours >= MODERATE_SCREEN_TIME_THRESHOLD:
        reasons.append(
            f"considering your {screen_time_hours:.1f} hours of screen time today"
        )
    if current_streak:
        reasons.append(f"building on your {current_streak}-day streak")
    return f"{', '.join(reasons)}."


def detailed_reasoning(
    mood: UserMood, screen_time_hours: Optional[float], current_streak: int
) -> str:
    parts = [f"This suggestion is tailored for your current {mood.display_name.lower()} state. "]
    if screen_time_hours is not None and screen_time_hours >= MODERATE_SCREEN_TIME_THRESHOLD:
        parts.append(f"Given your {screen_time_hours:.1f} hours of screen time, ")
        parts.append("this offline activity will help balance your digital consumption. ")
    if current_streak > 0:
        parts.append(f"Your {current_streak}-day streak shows great commitment, ")
        parts.append("and this habit will help maintain your momentum.")
    else:
        parts.append("This is a great starting point to build a new habit streak.")
    return "".join(parts)


def generate_optimized_suggestion(
    mood: UserMood,
    preferences: Sequence[HabitCategory],
    screen_time_hours: Optional[float] = None,
    current_streak: int = 0,
    recent_completions: Optional[Mapping[str, int]] = None,
    category_bias: Optional[Mapping[HabitCategory, int]] = None,
) -> HabitSuggestion:
    templates = get_habit_suggestions(mood, preferences)
    templates = filter_for_screen_time(templates, screen_time_hours)

    difficulty = calculate_difficulty(current_streak, recent_completions)
    templates = adjust_by_difficulty(templates, difficulty)

    chosen = pick_best(
        score_templates(templates, mood, preferences, screen_time_hours, category_bias)
    )

    return HabitSuggestion(
        title=chosen.title,
        description=chosen.description,
        category=chosen.category,
        duration=chosen.duration,
        difficulty=difficulty,
        reasoning=detailed_reasoning(mood, screen_time_hours, current_streak),
        source="rules",
    )


def generate_habit_suggestion(
    mood: UserMood, preferences: Sequence[HabitCategory]
) -> Dict[str, str]:
    """Plain random pick from the mood table, with a conversational prompt."""
    template = random.choice(get_habit_suggestions(mood, preferences))
    return {
        "title": template.title,
        "description": template.description,
        "prompt": suggestion_prompt(mood, template.title),
    }


def next_day_suggestion(habit: Habit) -> Dict[str, str]:
    template = random.choice(get_habit_suggestions(UserMood.HAPPY, [habit.category]))
    return {
        "title": template.title,
        "description": template.description,
        "category": template.category.value,
        "message": "Ready for tomorrow? Here's a great follow-up habit!",
    }


def easier_habit_suggestion() -> Dict[str, str]:
    template = random.choice(EASY_HABITS)
    return {
        "title": template.title,
        "description": template.description,
        "category": template.category.value,
        "message": "Let's start small tomorrow. Here's an easy habit to get back on track!",
    }


_TITLE_CATEGORIES = [
    (("breathing", "meditation", "mindful", "gratitude"), HabitCategory.MINDFULNESS),
    (("walk", "exercise", "stretch", "yoga", "dance", "workout"), HabitCategory.PHYSICAL),
    (("nap", "music", "relax", "calm"), HabitCategory.RELAXATION),
    (("writing", "learning", "journal", "read"), HabitCategory.PRODUCTIVITY),
]


def category_from_title(title: str) -> HabitCategory:
    lowered = title.lower()
    for keywords, category in _TITLE_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return HabitCategory.MINDFULNESS


def duration_from_text(title: str, description: str = "") -> int:
    match = re.search(r"\d+", f"{title} {description}")
    if not match:
        return 5
    return int(match.group())
