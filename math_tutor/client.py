"""Async client for the tutor API.

Wraps the `/api/tutor` contract for frontends and scripts: one-shot answers,
streamed answers, and the structured `practice` / `learn` answers with
JSON recovery applied on the client side.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Any, AsyncGenerator, AsyncIterator, Callable, Optional

import httpx

from math_tutor.schemas.content import LearnContent, PracticeProblem
from math_tutor.schemas.tutor import StreamEvent, TutorRequest, TutorResponse
from math_tutor.services.lesson_store import LessonStore
from math_tutor.services.response_recovery import recover_learn_content, recover_practice_problems
from math_tutor.services.streaming import STREAM_MEDIA_TYPE, StreamEventDecoder, enforce_stream_order

LOGGER = logging.getLogger(__name__)

TUTOR_PATH = "/api/tutor"
UNKNOWN_STREAM_ERROR = "Unknown error occurred"


class TutorAPIError(RuntimeError):
    """Non-2xx answer from the tutor API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return default


class TutorStream:
    """One streamed tutor answer.

    Use as an async context manager, then iterate: zero or more ``content``
    events followed by exactly one ``done`` or ``error`` event. `cancel()`
    stops delivery; the HTTP response is closed on every exit path. A stream
    is read once: iterating it again yields nothing.
    """

    def __init__(self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]) -> None:
        self._client = client
        self._url = url
        self._payload = payload
        self._response: httpx.Response | None = None
        self._cancelled = False
        self._consumed = False

    async def __aenter__(self) -> "TutorStream":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def open(self) -> None:
        """Send the request; raises `TutorAPIError` when the server refuses it."""
        if self._response is not None:
            return
        request = self._client.build_request(
            "POST",
            self._url,
            json=self._payload,
            params={"stream": "true"},
            headers={"Accept": STREAM_MEDIA_TYPE},
        )
        response = await self._client.send(request, stream=True)
        if response.status_code >= 400:
            await response.aread()
            await response.aclose()
            raise TutorAPIError(
                response.status_code,
                _error_message(response, "Failed to get response from tutor"),
            )
        self._response = response

    async def cancel(self) -> None:
        """Stop delivering events and release the connection."""
        self._cancelled = True
        await self.aclose()

    async def aclose(self) -> None:
        if self._response is not None:
            await self._response.aclose()

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self._deliver()

    async def _read(self) -> AsyncGenerator[StreamEvent, None]:
        assert self._response is not None
        decoder = StreamEventDecoder()
        try:
            async for text in self._response.aiter_text():
                for event in decoder.feed(text):
                    yield event
            for event in decoder.flush():
                yield event
        except httpx.HTTPError as e:
            LOGGER.warning("Tutor stream interrupted: %s", e)
            yield StreamEvent.failure(f"Stream interrupted: {e}")

    async def _deliver(self) -> AsyncGenerator[StreamEvent, None]:
        if self._response is None:
            raise RuntimeError("TutorStream.open() must be awaited before iterating")
        if self._cancelled or self._consumed:
            return
        self._consumed = True
        try:
            async with aclosing(enforce_stream_order(self._read())) as events:
                async for event in events:
                    yield event
                    if self._cancelled:
                        return
        finally:
            await self.aclose()


class TutorAPIClient:
    """Client for the tutor HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        lesson_store: LessonStore | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
        self._lessons = lesson_store

    async def __aenter__(self) -> "TutorAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def lessons(self) -> LessonStore:
        if self._lessons is None:
            self._lessons = LessonStore()
        return self._lessons

    async def _post(self, tutor_request: TutorRequest, failure_message: str) -> TutorResponse:
        response = await self._http.post(TUTOR_PATH, json=tutor_request.to_payload())
        if response.status_code >= 400:
            raise TutorAPIError(response.status_code, _error_message(response, failure_message))
        return TutorResponse.model_validate(response.json())

    async def ask_question(self, tutor_request: TutorRequest) -> TutorResponse:
        return await self._post(tutor_request, "Failed to get response from tutor")

    def stream_question(self, tutor_request: TutorRequest) -> TutorStream:
        """Streamed answer; open it with ``async with``."""
        return TutorStream(self._http, TUTOR_PATH, tutor_request.to_payload())

    async def ask_question_stream(
        self,
        tutor_request: TutorRequest,
        on_content: Callable[[str], None],
        on_error: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        """Callback flavour of `stream_question`."""
        async with self.stream_question(tutor_request) as stream:
            async for event in stream:
                if event.type == "content":
                    if event.content:
                        on_content(event.content)
                elif event.type == "done":
                    if on_complete is not None:
                        on_complete()
                elif on_error is not None:
                    on_error(event.error or UNKNOWN_STREAM_ERROR)

    async def generate_practice_problems(self, grade: str, topic: str) -> list[PracticeProblem]:
        result = await self._post(
            TutorRequest(grade=grade, topic=topic, request_type="practice"),
            "Failed to generate practice problems",
        )
        return recover_practice_problems(result.answer).value

    async def get_hint(self, grade: str, topic: str, problem: str) -> str:
        result = await self._post(
            TutorRequest(grade=grade, topic=topic, problem=problem, request_type="hint"),
            "Failed to get hint",
        )
        return result.answer

    async def get_solution(self, grade: str, topic: str, problem: str) -> str:
        result = await self._post(
            TutorRequest(grade=grade, topic=topic, problem=problem, request_type="solution"),
            "Failed to get solution",
        )
        return result.answer

    async def generate_learn_content(self, grade: str, topic: str) -> LearnContent:
        """AI-generated lesson; a synthesized lesson when the answer is not valid JSON."""
        result = await self._post(
            TutorRequest(grade=grade, topic=topic, request_type="learn"),
            "Failed to generate learning content",
        )
        return recover_learn_content(result.answer, grade, topic).value

    async def ask_learn_question(self, grade: str, topic: str, question: str, context: str) -> str:
        result = await self._post(
            TutorRequest(
                grade=grade,
                topic=topic,
                question=question,
                context=context,
                request_type="learn-question",
            ),
            "Failed to get answer",
        )
        return result.answer

    async def load_learn_content(self, grade: str, topic: str, language: str | None = None) -> LearnContent:
        """Bundled lesson when one exists, otherwise an AI-generated one."""
        local = self.lessons.load_learn_content(grade, topic, language)
        if local is not None:
            return local
        LOGGER.info("No bundled lesson for %s / %s, generating", grade, topic)
        return await self.generate_learn_content(grade, topic)
