"""
Mood detection from free text.

A multilingual keyword scan always runs. When sentiment analysis is enabled
and an LLM key is configured the chat endpoint is asked as well, and the two
results are combined. Any LLM failure degrades to the keyword scan.
"""

import json
import math
import re
from typing import Any, Dict, List, Optional

from microhabit.core.config import settings
from microhabit.core.exceptions import LLMRequestError, LLMUnavailableError
from microhabit.models.habit import UserMood
from microhabit.models.suggestion import KeywordAnalysis, MoodAnalysis
from microhabit.services.llm_client import LLMClient, extract_json_object, get_llm_client
from microhabit.services.logger import logger


# Table order breaks ties between moods with equal scores
EMOTION_KEYWORDS: Dict[UserMood, List[str]] = {
    UserMood.HAPPY: [
        # English
        "happy", "joyful", "joy", "glad", "great", "good", "amazing", "fantastic",
        "wonderful", "cheerful", "excited", "grateful", "content", "awesome", "delighted",
        # Spanish
        "feliz", "contento", "contenta", "alegre", "genial",
        # French
        "heureux", "heureuse", "joyeux", "ravi",
        # German
        "glücklich", "froh", "fröhlich", "zufrieden",
        # Emoji
        "😊", "😄", "😁", "🙂", "😃", "🎉", "❤️", "🥳",
    ],
    UserMood.STRESSED: [
        "stressed", "stress", "anxious", "anxiety", "worried", "overwhelmed", "nervous",
        "tense", "pressure", "frustrated", "panic", "upset", "angry", "sad",
        "estresado", "estresada", "ansioso", "ansiosa", "preocupado", "preocupada",
        "stressé", "stressée", "anxieux", "inquiet", "inquiète",
        "gestresst", "ängstlich", "besorgt", "überfordert",
        "😰", "😟", "😫", "😩", "😤", "😣", "😢",
    ],
    UserMood.TIRED: [
        "tired", "exhausted", "sleepy", "fatigued", "fatigue", "drained", "weary",
        "worn out", "lethargic", "sleep", "burned out", "burnt out",
        "cansado", "cansada", "agotado", "agotada", "sueño",
        "fatigué", "fatiguée", "épuisé", "épuisée",
        "müde", "erschöpft", "schläfrig",
        "😴", "🥱", "😪",
    ],
    UserMood.ENERGIZED: [
        "energized", "energetic", "energy", "motivated", "pumped", "dynamic", "ready",
        "productive", "active", "focused", "powerful", "unstoppable",
        "energético", "energética", "motivado", "motivada",
        "énergique", "motivé", "motivée",
        "energiegeladen", "motiviert", "tatkräftig",
        "⚡", "🔥", "💪", "🚀",
    ],
}

_MOOD_NAMES = {
    "happy": UserMood.HAPPY,
    "positive": UserMood.HAPPY,
    "stressed": UserMood.STRESSED,
    "negative": UserMood.STRESSED,
    "tired": UserMood.TIRED,
    "energized": UserMood.ENERGIZED,
    "energised": UserMood.ENERGIZED,
}

DEFAULT_MOOD = UserMood.HAPPY
DEFAULT_CONFIDENCE = 0.3

SENTIMENT_SYSTEM_PROMPT = """You classify how a person feels from a short message.
Reply with a JSON object only, no prose:
{"sentiment": "positive" | "negative" | "neutral",
 "emotion": "happy" | "stressed" | "tired" | "energized",
 "confidence": number between 0 and 1,
 "reasoning": "one short sentence"}
The message may be in English, Spanish, French or German and may contain emoji."""


def _is_word(keyword: str) -> bool:
    return any(ch.isalpha() for ch in keyword)


def _keyword_pattern(keyword: str) -> "re.Pattern[str]":
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.IGNORECASE)


_KEYWORD_PATTERNS = {
    keyword: _keyword_pattern(keyword)
    for keywords in EMOTION_KEYWORDS.values()
    for keyword in keywords
    if _is_word(keyword)
}


def analyze_keywords(text: str) -> KeywordAnalysis:
    """Whole-word match for words, substring match for emoji."""
    found: List[str] = []
    scores: Dict[UserMood, int] = {mood: 0 for mood in EMOTION_KEYWORDS}

    for mood, keywords in EMOTION_KEYWORDS.items():
        for keyword in keywords:
            if _is_word(keyword):
                matched = bool(_KEYWORD_PATTERNS[keyword].search(text))
            else:
                matched = keyword in text
            if matched:
                scores[mood] += 1
                found.append(keyword)

    total = sum(scores.values())
    detected = None
    if total:
        best = max(scores.values())
        detected = next(mood for mood in EMOTION_KEYWORDS if scores[mood] == best)

    return KeywordAnalysis(
        found_keywords=found,
        emotion_scores=scores,
        total_matches=total,
        detected_mood=detected,
    )


def keyword_confidence(total_matches: int, top_score: int) -> float:
    if top_score <= 0:
        return 0.0
    dominance = min(1.0, top_score / max(1, total_matches))
    strength = min(1.0, 0.4 + 0.2 * top_score)
    return round(dominance * strength, 3)


def map_emotion(emotion: Optional[str]) -> Optional[UserMood]:
    if not emotion:
        return None
    needle = emotion.strip().lower()
    if needle in _MOOD_NAMES:
        return _MOOD_NAMES[needle]
    for mood, keywords in EMOTION_KEYWORDS.items():
        if needle in (keyword.lower() for keyword in keywords):
            return mood
    return None


_FIELD_PATTERNS = {
    "emotion": re.compile(r'"emotion"\s*:\s*"([^"]+)"', re.IGNORECASE),
    "sentiment": re.compile(r'"sentiment"\s*:\s*"([^"]+)"', re.IGNORECASE),
    "reasoning": re.compile(r'"reasoning"\s*:\s*"([^"]*)"', re.IGNORECASE),
    "confidence": re.compile(r'"confidence"\s*:\s*([0-9]*\.?[0-9]+)', re.IGNORECASE),
}


def parse_sentiment_content(content: str) -> Optional[Dict[str, Any]]:
    """
    Parse the model's sentiment reply.

    Tries strict JSON first, then regex extraction of the expected fields,
    then a plain scan for a mood name. Returns None when nothing usable is found.
    """
    if not content:
        return None

    try:
        data = extract_json_object(content)
        mood = map_emotion(str(data.get("emotion", "")))
        if mood is not None:
            sentiment = data.get("sentiment")
            return {
                "emotion": mood,
                "sentiment": sentiment if isinstance(sentiment, str) else None,
                "confidence": _clamp_confidence(data.get("confidence")),
                "reasoning": str(data.get("reasoning") or ""),
            }
    except ValueError:
        pass

    emotion_match = _FIELD_PATTERNS["emotion"].search(content)
    if emotion_match:
        mood = map_emotion(emotion_match.group(1))
        if mood is not None:
            sentiment = _FIELD_PATTERNS["sentiment"].search(content)
            confidence = _FIELD_PATTERNS["confidence"].search(content)
            reasoning = _FIELD_PATTERNS["reasoning"].search(content)
            return {
                "emotion": mood,
                "sentiment": sentiment.group(1) if sentiment else None,
                "confidence": _clamp_confidence(confidence.group(1) if confidence else None),
                "reasoning": reasoning.group(1) if reasoning else "",
            }

    lowered = content.lower()
    for name in ("stressed", "tired", "energized", "happy"):
        if re.search(rf"\b{name}\b", lowered):
            return {
                "emotion": _MOOD_NAMES[name],
                "sentiment": None,
                "confidence": 0.5,
                "reasoning": "",
            }

    return None


def _clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.5
    if not math.isfinite(confidence):
        return 0.5
    return max(0.0, min(1.0, confidence))


def combine_confidence(keyword_conf: float, llm_conf: float, agree: bool) -> float:
    combined = 0.4 * keyword_conf + 0.6 * llm_conf
    if agree:
        combined += 0.1
    return round(min(1.0, combined), 3)


class MoodAnalyzer:
    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or get_llm_client()

    @property
    def llm_enabled(self) -> bool:
        return settings.ENABLE_SENTIMENT_ANALYSIS and self.llm.is_configured

    async def analyze(self, text: str) -> MoodAnalysis:
        if text is None or not text.strip():
            raise ValueError("Mood text must not be empty")

        keywords = analyze_keywords(text)
        top_score = max(keywords.emotion_scores.values(), default=0)
        keyword_conf = keyword_confidence(keywords.total_matches, top_score)

        llm_result = None
        if self.llm_enabled:
            llm_result = await self._ask_llm(text)

        if llm_result is not None:
            llm_mood = llm_result["emotion"]
            if keywords.detected_mood is None:
                return MoodAnalysis(
                    detected_mood=llm_mood,
                    confidence=llm_result["confidence"],
                    reasoning=llm_result["reasoning"] or "Classified by the language model",
                    sentiment=llm_result["sentiment"],
                    keyword_analysis=keywords,
                    source="ai",
                )

            agree = llm_mood == keywords.detected_mood
            return MoodAnalysis(
                detected_mood=llm_mood,
                confidence=combine_confidence(keyword_conf, llm_result["confidence"], agree),
                reasoning=llm_result["reasoning"]
                or f"Language model and keywords ({', '.join(keywords.found_keywords)})",
                sentiment=llm_result["sentiment"],
                keyword_analysis=keywords,
                source="combined",
            )

        if keywords.detected_mood is not None:
            return MoodAnalysis(
                detected_mood=keywords.detected_mood,
                confidence=keyword_conf,
                reasoning=f"Detected keywords: {', '.join(keywords.found_keywords)}",
                keyword_analysis=keywords,
                source="keywords",
            )

        return MoodAnalysis(
            detected_mood=DEFAULT_MOOD,
            confidence=DEFAULT_CONFIDENCE,
            reasoning="No clear emotional signal found; assuming a neutral, positive mood",
            keyword_analysis=keywords,
            source="default",
        )

    async def _ask_llm(self, text: str) -> Optional[Dict[str, Any]]:
        try:
            content = await self.llm.complete(
                SENTIMENT_SYSTEM_PROMPT,
                json.dumps({"message": text}, ensure_ascii=False),
                temperature=settings.LLM_TEMPERATURE,
            )
        except (LLMUnavailableError, LLMRequestError) as e:
            logger.warning(f"Sentiment request failed, using keyword analysis: {e}")
            return None

        parsed = parse_sentiment_content(content)
        if parsed is None:
            logger.warning("Could not parse sentiment reply, using keyword analysis")
        return parsed
