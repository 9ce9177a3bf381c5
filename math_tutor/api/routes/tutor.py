"""AI tutor endpoint: one-shot and streamed answers."""

import logging
from contextlib import aclosing
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse

from math_tutor.core.config import get_settings
from math_tutor.core.limiter import limiter
from math_tutor.schemas.tutor import TutorMetadata, TutorRequest, TutorResponse
from math_tutor.services.prompt_builder import PromptPair, build_prompt
from math_tutor.services.streaming import STREAM_MEDIA_TYPE, encode_event, enforce_stream_order, wants_stream
from math_tutor.services.tutor_gateway import TutorGateway, classify_upstream_error, get_tutor_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tutor", tags=["AI tutor"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# how often (in events) the client connection is checked while streaming
DISCONNECT_CHECK_INTERVAL = 10


def _require_fields(tutor_request: TutorRequest) -> None:
    missing = tutor_request.missing_fields()
    if missing:
        raise RequestValidationError(
            [{"loc": ("body", field), "msg": message, "type": "missing"} for field, message in missing]
        )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _log_context(tutor_request: TutorRequest, stream: bool) -> dict:
    return {
        "request_type": tutor_request.request_type,
        "grade": tutor_request.grade,
        "topic": tutor_request.topic,
        "stream": stream,
    }


async def _stream_answer(
    gateway: TutorGateway,
    prompt: PromptPair,
    http_request: Request,
) -> AsyncGenerator[str, None]:
    event_count = 0
    async with aclosing(enforce_stream_order(gateway.stream(prompt))) as events:
        async for event in events:
            event_count += 1
            if event_count % DISCONNECT_CHECK_INTERVAL == 0 and await http_request.is_disconnected():
                logger.info(
                    "Client disconnected, stopping stream after %d events",
                    event_count,
                    extra={"stream": True, "event_count": event_count},
                )
                return
            yield encode_event(event)


@router.post("", response_model=TutorResponse)
@limiter.limit(lambda: get_settings().TUTOR_RATE_LIMIT)
async def ask_tutor(
    request: Request,
    tutor_request: TutorRequest,
    stream: bool = Query(False, description="Stream the answer as data: frames"),
    gateway: TutorGateway = Depends(get_tutor_gateway),
):
    """
    Answer a tutor request.

    - **requestType**: chat, practice, hint, solution, learn or learn-question
    - **question**: required for chat and learn-question
    - **problem**: required for hint and solution

    Streams the answer when `Accept` names a stream media type or `?stream=true`.
    """
    _require_fields(tutor_request)
    prompt = build_prompt(tutor_request)

    if wants_stream(request.headers.get("accept"), stream):
        logger.info(
            "Streaming tutor answer type=%s grade=%s topic=%s",
            tutor_request.request_type,
            tutor_request.grade,
            tutor_request.topic,
            extra=_log_context(tutor_request, stream=True),
        )
        return StreamingResponse(
            _stream_answer(gateway, prompt, request),
            media_type="text/plain; charset=utf-8",
            headers=STREAM_HEADERS,
        )

    try:
        answer = await gateway.complete(prompt)
    except Exception as e:
        failure = classify_upstream_error(e)
        logger.error(
            "Tutor request failed status=%d: %s",
            failure.status_code,
            e,
            exc_info=True,
            extra=_log_context(tutor_request, stream=False),
        )
        raise HTTPException(status_code=failure.status_code, detail=failure.message)

    return TutorResponse(
        answer=answer,
        metadata=TutorMetadata(
            model=gateway.model,
            grade=tutor_request.grade,
            topic=tutor_request.topic,
            timestamp=_utc_timestamp(),
        ),
    )


@router.get("")
async def tutor_usage() -> dict:
    """Describe how to call the tutor endpoint."""
    return {
        "message": "AI Math Tutor API",
        "usage": {
            "method": "POST",
            "body": {
                "grade": "string (required) - Student grade level",
                "topic": "string (required) - Math topic",
                "question": "string (required) - Math question to ask",
            },
            "streaming": f"Add ?stream=true or set Accept: {STREAM_MEDIA_TYPE} header for streaming response",
        },
        "example": {
            "grade": "8th grade",
            "topic": "Algebra",
            "question": "How do I solve 2x + 5 = 15?",
        },
    }
