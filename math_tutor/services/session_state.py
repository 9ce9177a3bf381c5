"""Per-user tutor session: selected grade, topic and explanation mode.

`SessionState` holds the selection and notifies listeners on every change.
`PreferenceStore` persists it to a small JSON file so the selection survives
restarts; only the grade, the topic id and the step mode are written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from math_tutor.core.config import get_settings
from math_tutor.schemas.catalog import MathTopic
from math_tutor.schemas.tutor import RequestType, TutorMode, TutorRequest
from math_tutor.services.catalog import find_topic, is_known_grade, topics_for_grade

LOGGER = logging.getLogger(__name__)

StateListener = Callable[["SessionState"], None]


@dataclass
class SessionState:
    selected_grade: Optional[str] = None
    selected_topic: Optional[MathTopic] = None
    step_by_step_mode: bool = True
    _listeners: list[StateListener] = field(default_factory=list, repr=False, compare=False)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def set_grade(self, grade: Optional[str]) -> None:
        self.selected_grade = grade
        # a topic that is not taught at the new grade is dropped
        if self.selected_topic is not None and (grade is None or not self.selected_topic.applies_to(grade)):
            self.selected_topic = None
        self._notify()

    def set_topic(self, topic: Optional[MathTopic]) -> None:
        self.selected_topic = topic
        self._notify()

    def set_step_by_step_mode(self, enabled: bool) -> None:
        self.step_by_step_mode = enabled
        self._notify()

    def clear_selection(self) -> None:
        self.selected_grade = None
        self.selected_topic = None
        self.step_by_step_mode = True
        self._notify()

    def available_topics(self) -> list[MathTopic]:
        return topics_for_grade(self.selected_grade)

    @property
    def mode(self) -> TutorMode:
        return "step-by-step" if self.step_by_step_mode else "regular"

    def build_request(self, request_type: RequestType = "chat", **fields: Any) -> TutorRequest:
        """Build a tutor request for the current grade and topic.

        Raises:
            ValueError: no grade or no topic is selected
        """
        if not self.selected_grade or self.selected_topic is None:
            raise ValueError("Select a grade and a topic first")
        fields.setdefault("mode", self.mode)
        return TutorRequest(
            grade=self.selected_grade,
            topic=self.selected_topic.name,
            request_type=request_type,
            **fields,
        )

    def to_preferences(self) -> dict[str, Any]:
        return {
            "grade": self.selected_grade,
            "topic": self.selected_topic.id if self.selected_topic else None,
            "stepByStepMode": self.step_by_step_mode,
        }


class PreferenceStore:
    """JSON-file persistence for a `SessionState`."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path).expanduser() if path else get_settings().preferences_file

    def load(self) -> SessionState:
        """Read saved preferences; defaults when the file is missing or unreadable."""
        if not self.path.exists():
            return SessionState()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            LOGGER.warning("Ignoring unreadable preferences at %s: %s", self.path, e)
            return SessionState()
        if not isinstance(raw, dict):
            LOGGER.warning("Ignoring malformed preferences at %s", self.path)
            return SessionState()
        return self._from_preferences(raw)

    @staticmethod
    def _from_preferences(raw: dict[str, Any]) -> SessionState:
        grade = raw.get("grade")
        if not isinstance(grade, str) or not is_known_grade(grade):
            grade = None

        topic = None
        topic_id = raw.get("topic")
        if isinstance(topic_id, str):
            topic = find_topic(topic_id)
            if topic is not None and (grade is None or not topic.applies_to(grade)):
                topic = None

        step_mode = raw.get("stepByStepMode", True)
        return SessionState(
            selected_grade=grade,
            selected_topic=topic,
            step_by_step_mode=step_mode if isinstance(step_mode, bool) else True,
        )

    def save(self, state: SessionState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state.to_preferences(), indent=2), encoding="utf-8")

    def attach(self, state: SessionState) -> Callable[[], None]:
        """Save `state` after every change until the returned callable is invoked."""
        return state.subscribe(self.save)
