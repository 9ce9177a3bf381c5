"""Pre-authored lesson content bundled with the package.

Lessons are looked up before the model is asked to generate learning
material. Only one grade band has authored content; every other lookup
misses and the caller falls back to AI generation.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from math_tutor.core.config import get_settings
from math_tutor.schemas.content import LearnContent

LOGGER = logging.getLogger(__name__)

LESSONS_DIR = Path(__file__).resolve().parent.parent / "data" / "lessons"

LOCAL_CONTENT_GRADE = "9th Grade"
SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "lt")

# topic name -> lesson key (several names share one lesson)
TOPIC_KEY_MAP: dict[str, str] = {
    "Algebra Basics": "algebra-basics",
    "Linear Equations": "linear-equations",
    "Quadratic Equations": "quadratic-equations",
    "Functions": "functions",
    "Systems of Equations": "systems-of-equations",
    "Exponential Functions": "exponential-functions",
    "Polynomial Operations": "algebra-basics",
    "Factoring": "quadratic-equations",
    "Graphing Linear Functions": "linear-equations",
    "Inequalities": "linear-equations",
    "Radical Expressions": "functions",
    "Rational Functions": "functions",
    # catalog topics offered for 9th grade
    "Algebra I": "algebra-basics",
    "Geometry (Advanced)": "linear-equations",
}


@lru_cache(maxsize=len(SUPPORTED_LANGUAGES))
def _load_document(language: str) -> dict[str, Any]:
    path = LESSONS_DIR / f"{language}.json"
    if not path.exists():
        LOGGER.info("No lesson document for language=%s", language)
        return {}
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh) or {}


class LessonStore:
    """Lookup of bundled lessons by grade, topic name and language."""

    def __init__(self, default_language: str | None = None) -> None:
        self.default_language = default_language or get_settings().LESSON_DEFAULT_LANGUAGE

    def load_learn_content(
        self,
        grade: str,
        topic_name: str,
        language: str | None = None,
    ) -> Optional[LearnContent]:
        """Return the authored lesson, or None so the caller generates one."""
        if grade != LOCAL_CONTENT_GRADE:
            return None

        topic_key = TOPIC_KEY_MAP.get(topic_name)
        if not topic_key:
            LOGGER.info("No local content for topic: %s", topic_name)
            return None

        raw = self._find_raw(topic_key, language or self.default_language)
        if raw is None:
            LOGGER.info("Lesson key missing from documents: %s", topic_key)
            return None

        try:
            return LearnContent.model_validate(raw)
        except ValidationError as e:
            LOGGER.error("Bundled lesson %s is malformed: %s", topic_key, e)
            return None

    def has_local_content(self, grade: str, topic_name: str) -> bool:
        return grade == LOCAL_CONTENT_GRADE and topic_name in TOPIC_KEY_MAP

    def available_topics(self) -> list[str]:
        return list(TOPIC_KEY_MAP)

    def _find_raw(self, topic_key: str, language: str) -> Optional[dict[str, Any]]:
        languages = [language]
        if language != self.default_language:
            languages.append(self.default_language)
        for lang in languages:
            if lang not in SUPPORTED_LANGUAGES:
                continue
            try:
                document = _load_document(lang)
            except (OSError, json.JSONDecodeError) as e:
                LOGGER.error("Failed to read lesson document language=%s: %s", lang, e)
                continue
            if topic_key in document:
                return document[topic_key]
        return None


_instance: LessonStore | None = None


def get_lesson_store() -> LessonStore:
    """Return the shared lesson store instance."""
    global _instance
    if _instance is None:
        _instance = LessonStore()
    return _instance
