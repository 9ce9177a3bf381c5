"""Learning content API tests (/api/learn, /api/practice)."""

import json

import pytest
from fastapi.testclient import TestClient

from math_tutor.main import app

client = TestClient(app)


LEARN_JSON = {
    "id": "pre-algebra",
    "theory": "Variables stand for unknown numbers.",
    "examples": [
        {
            "id": "example-1",
            "title": "Evaluate an expression",
            "problem": "Evaluate 3x + 1 for x = 2.",
            "solution": [
                {"id": "step-1", "step": 1, "description": "Substitute x = 2", "explanation": "3(2) + 1"},
                {"id": "step-2", "step": 2, "description": "Simplify", "explanation": "6 + 1 = 7"},
            ],
        }
    ],
}


def test_learn_serves_bundled_lesson(fake_gateway):
    gateway = fake_gateway(answer="unused")
    response = client.post("/api/learn", json={"grade": "9th Grade", "topic": "Linear Equations"})
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "local"
    assert data["recovery"] is None
    assert data["content"]["id"] == "linear-equations"
    assert gateway.prompts == []


def test_learn_serves_translated_lesson(fake_gateway):
    fake_gateway(answer="unused")
    response = client.post(
        "/api/learn",
        json={"grade": "9th Grade", "topic": "Algebra Basics", "language": "lt"},
    )
    data = response.json()
    assert data["source"] == "local"
    assert data["content"]["theory"].startswith("Algebroje")


def test_learn_untranslated_lesson_falls_back_to_english(fake_gateway):
    fake_gateway(answer="unused")
    response = client.post(
        "/api/learn",
        json={"grade": "9th Grade", "topic": "Factoring", "language": "lt"},
    )
    data = response.json()
    assert data["source"] == "local"
    assert data["content"]["id"] == "quadratic-equations"


def test_learn_quiz_uses_camel_case(fake_gateway):
    fake_gateway(answer="unused")
    response = client.post("/api/learn", json={"grade": "9th Grade", "topic": "Functions"})
    quiz = response.json()["content"]["quiz"]
    assert quiz
    assert "correctAnswer" in quiz[0]


def test_learn_generates_when_no_bundled_lesson(fake_gateway):
    gateway = fake_gateway(answer=f"Here you go:\n```json\n{json.dumps(LEARN_JSON)}\n```")
    response = client.post("/api/learn", json={"grade": "7th Grade", "topic": "Pre-Algebra"})
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "ai"
    assert data["recovery"] == "parsed"
    assert data["content"]["id"] == "pre-algebra"
    assert len(data["content"]["examples"][0]["solution"]) == 2
    assert "LEARN MODE" in gateway.prompts[0].system_prompt


def test_learn_unparseable_answer_uses_fallback(fake_gateway):
    fake_gateway(answer="I cannot produce JSON today.")
    response = client.post("/api/learn", json={"grade": "7th Grade", "topic": "Pre Algebra"})
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "ai"
    assert data["recovery"] == "fallback"
    content = data["content"]
    assert content["id"] == "fallback-pre-algebra"
    assert content["theory"].startswith("This is a 7th Grade level topic about Pre Algebra.")
    assert [e["id"] for e in content["examples"]] == ["fallback-example"]
    assert [s["id"] for s in content["examples"][0]["solution"]] == ["fallback-step-1", "fallback-step-2"]


def test_learn_requires_topic(fake_gateway):
    fake_gateway(answer="unused")
    response = client.post("/api/learn", json={"grade": "9th Grade"})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "topic"


def test_practice_parses_problems(fake_gateway):
    answer = json.dumps(
        {
            "problems": [
                {"id": "1", "difficulty": "easy", "problem": "2 + 3"},
                {"difficulty": "easy", "problem": "4 + 5"},
                {"id": "3", "difficulty": "medium", "problem": "12 / 4 + 1"},
                {"id": "4", "difficulty": "medium", "problem": "(3 + 4) * 2"},
                {"id": "5", "difficulty": "hard", "problem": "2^5 - 3 * 7"},
            ]
        }
    )
    gateway = fake_gateway(answer=answer)
    response = client.post("/api/practice", json={"grade": "4th Grade", "topic": "Addition & Subtraction"})
    assert response.status_code == 200
    data = response.json()
    assert data["recovery"] == "parsed"
    assert [p["difficulty"] for p in data["problems"]] == ["easy", "easy", "medium", "medium", "hard"]
    assert len(data["problems"][1]["id"]) == 9
    assert "hint" not in data["problems"][0]
    assert "Generate practice problems for" in gateway.prompts[0].user_content


def test_practice_unparseable_answer_is_empty(fake_gateway):
    fake_gateway(answer="Problem 1: 2 + 2\nProblem 2: 3 + 3")
    response = client.post("/api/practice", json={"grade": "4th Grade", "topic": "Addition & Subtraction"})
    assert response.status_code == 200
    assert response.json() == {"recovery": "empty", "problems": []}


@pytest.mark.parametrize("url, payload", [
    ("/api/practice", {"grade": "4th Grade", "topic": "Integers"}),
    ("/api/learn", {"grade": "8th Grade", "topic": "Integers"}),
])
def test_content_upstream_rate_limit(fake_gateway, url, payload):
    fake_gateway(error=RuntimeError("rate limit reached for requests"))
    response = client.post(url, json=payload)
    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded. Please try again later."}
