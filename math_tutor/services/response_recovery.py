"""Best-effort recovery of JSON answers from free-text model output.

Models asked for "JSON only" still wrap it in code fences, add prose around
it or double-encode it. These helpers strip that noise and parse what is
left. They never raise: a `learn` answer that cannot be parsed is replaced
by a minimal synthesized lesson, a `practice` answer by an empty list.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import ValidationError

from math_tutor.schemas.content import LearnContent, LearnExample, PracticeProblem, PracticeSet, SolutionStep

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
RecoveryStatus = Literal["parsed", "fallback", "empty"]

FALLBACK_THEORY_LINES = 10
MIN_THEORY_CHARS = 50

_JSON_FENCE_OPEN = re.compile(r"^```json\s*")
_ANY_FENCE_OPEN = re.compile(r"^```[a-z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


@dataclass(frozen=True)
class RecoveryResult(Generic[T]):
    """Tagged recovery outcome: parsed, fallback (synthesized) or empty."""

    status: RecoveryStatus
    value: T

    @property
    def parsed(self) -> bool:
        return self.status == "parsed"


def _mask_sensitive(text: str) -> str:
    """Mask credentials that might have been echoed into a log snippet."""
    return re.sub(
        r"(?i)\b(api[_-]?key|token|secret|password)\b\s*[:=]\s*([^\s,]+)",
        r"\1=[REDACTED]",
        text,
    )


def _snippet_for_logs(text: str, max_len: int = 500) -> str:
    cleaned = _mask_sensitive(text.replace("\n", "\\n"))
    if len(cleaned) <= max_len:
        return cleaned
    return f"{cleaned[:max_len]}...(truncated)"


def extract_json_from_response(raw: str) -> str:
    """Strip code fences and surrounding prose from a model answer."""
    cleaned = raw.strip()

    if cleaned.startswith("```json"):
        cleaned = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", cleaned, count=1), count=1)
    elif cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _ANY_FENCE_OPEN.sub("", cleaned, count=1), count=1)

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last != -1 and first < last:
        cleaned = cleaned[first : last + 1]

    # undo double encoding
    cleaned = cleaned.replace('\\"', '"').replace("\\n", "\n")
    return cleaned.strip()


def _topic_slug(topic: str) -> str:
    return re.sub(r"\s+", "-", topic.lower())


def build_fallback_learn_content(raw: str, grade: str, topic: str) -> LearnContent:
    """Minimal lesson built from unparseable model output."""
    lines = [line for line in raw.split("\n") if line.strip()]
    theory = "\n".join(lines[:FALLBACK_THEORY_LINES]).strip()
    if len(theory) < MIN_THEORY_CHARS:
        theory = (
            f"This is a {grade} level topic about {topic}. The AI provided content that couldn't be "
            "properly parsed, but you can still ask questions about this topic using the chat feature."
        )

    example = LearnExample(
        id="fallback-example",
        title=f"Example Problem - {topic}",
        problem=f"Here's a typical problem for {topic} at {grade} level.",
        solution=[
            SolutionStep(
                id="fallback-step-1",
                step=1,
                description="Analyze the problem",
                explanation="Start by understanding what the problem is asking for.",
            ),
            SolutionStep(
                id="fallback-step-2",
                step=2,
                description="Apply the appropriate method",
                explanation=f"Use the techniques learned in {topic} to solve this type of problem.",
            ),
        ],
    )
    return LearnContent(id=f"fallback-{_topic_slug(topic)}", theory=theory, examples=[example])


def recover_learn_content(raw: str, grade: str, topic: str) -> RecoveryResult[LearnContent]:
    cleaned = extract_json_from_response(raw)
    try:
        content = LearnContent.model_validate(json.loads(cleaned, strict=False))
    except (json.JSONDecodeError, ValidationError) as e:
        LOGGER.warning(
            "Failed to parse learning content (%s); using fallback. raw=%s",
            type(e).__name__,
            _snippet_for_logs(raw),
        )
        return RecoveryResult("fallback", build_fallback_learn_content(raw, grade, topic))
    return RecoveryResult("parsed", content)


def _random_id() -> str:
    return uuid.uuid4().hex[:9]


def recover_practice_problems(raw: str) -> RecoveryResult[list[PracticeProblem]]:
    cleaned = extract_json_from_response(raw)
    try:
        problem_set = PracticeSet.model_validate(json.loads(cleaned, strict=False))
    except (json.JSONDecodeError, ValidationError) as e:
        LOGGER.warning(
            "Failed to parse practice problems (%s). raw=%s",
            type(e).__name__,
            _snippet_for_logs(raw),
        )
        return RecoveryResult("empty", [])

    problems = [
        problem if problem.id else problem.model_copy(update={"id": _random_id()})
        for problem in problem_set.problems
    ]
    return RecoveryResult("parsed", problems)
