"""Schema validation tests."""

import pytest
from pydantic import ValidationError

from math_tutor.schemas.content import LearnContent, PracticeProblem, QuizQuestion
from math_tutor.schemas.tutor import StreamEvent, TutorRequest


class TestTutorRequest:
    def test_defaults(self):
        request = TutorRequest(grade="8th Grade", topic="Algebra", question="q")
        assert request.request_type == "chat"
        assert request.mode is None
        assert request.missing_fields() == []

    def test_accepts_wire_alias(self):
        request = TutorRequest.model_validate(
            {"grade": "8th Grade", "topic": "Algebra", "problem": "x + 1 = 2", "requestType": "hint"}
        )
        assert request.request_type == "hint"

    @pytest.mark.parametrize(
        "fields",
        [
            {"grade": "", "topic": "Algebra"},
            {"grade": "g" * 21, "topic": "Algebra"},
            {"grade": "8th Grade", "topic": ""},
            {"grade": "8th Grade", "topic": "t" * 101},
            {"grade": "8th Grade", "topic": "Algebra", "requestType": "quiz"},
            {"grade": "8th Grade", "topic": "Algebra", "mode": "turbo"},
        ],
    )
    def test_rejects_invalid_fields(self, fields):
        with pytest.raises(ValidationError):
            TutorRequest.model_validate(fields)

    def test_length_limits_are_inclusive(self):
        TutorRequest(grade="g" * 20, topic="t" * 100, question="q")

    @pytest.mark.parametrize(
        "request_type, missing",
        [
            ("chat", ["question"]),
            ("learn-question", ["question"]),
            ("hint", ["problem"]),
            ("solution", ["problem"]),
            ("practice", []),
            ("learn", []),
        ],
    )
    def test_missing_fields_per_request_type(self, request_type, missing):
        request = TutorRequest(grade="8th Grade", topic="Algebra", request_type=request_type)
        assert [field for field, _ in request.missing_fields()] == missing

    def test_payload_uses_camel_case_and_drops_unset(self):
        payload = TutorRequest(grade="8th Grade", topic="Algebra", request_type="practice").to_payload()
        assert payload == {"grade": "8th Grade", "topic": "Algebra", "requestType": "practice"}


def test_stream_event_terminal_flags():
    assert not StreamEvent.delta("x").is_terminal
    assert StreamEvent.done().is_terminal
    assert StreamEvent.failure("e").is_terminal


def test_learn_content_quiz_alias():
    content = LearnContent.model_validate(
        {
            "id": "x",
            "theory": "t",
            "quiz": [{"id": "q1", "question": "?", "options": ["a", "b"], "correctAnswer": 1, "explanation": "b"}],
        }
    )
    assert content.examples == []
    assert content.quiz[0].correct_answer == 1
    assert content.to_payload()["quiz"][0]["correctAnswer"] == 1
    assert "quiz" not in LearnContent(id="y", theory="t").to_payload()


def test_quiz_question_by_field_name():
    question = QuizQuestion(id="q", question="?", options=["a"], correct_answer=0, explanation="")
    assert question.correct_answer == 0


def test_practice_problem_difficulty():
    assert PracticeProblem(difficulty="medium", problem="p").id == ""
    with pytest.raises(ValidationError):
        PracticeProblem(difficulty="expert", problem="p")
