"""Pytest configuration."""
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# settings are read at import time; tests never talk to OpenAI
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"


class FakeGateway:
    """Stand-in for `TutorGateway` with scripted answers and stream events."""

    model = "gpt-4o-mini"

    def __init__(self, answer="", events=None, error=None) -> None:
        self.answer = answer
        self.events = list(events or [])
        self.error = error
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer

    async def stream(self, prompt):
        self.prompts.append(prompt)
        for event in self.events:
            yield event


@pytest.fixture(scope="session")
def project_root():
    return PROJECT_ROOT


@pytest.fixture
def fake_gateway():
    """Install a FakeGateway for the app; returns a factory taking FakeGateway kwargs."""
    from math_tutor.main import app
    from math_tutor.services.tutor_gateway import get_tutor_gateway

    def _install(**kwargs) -> FakeGateway:
        gateway = FakeGateway(**kwargs)
        app.dependency_overrides[get_tutor_gateway] = lambda: gateway
        return gateway

    yield _install
    app.dependency_overrides.pop(get_tutor_gateway, None)
