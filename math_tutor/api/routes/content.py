"""Structured learning content: lessons and practice sets."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from math_tutor.core.config import get_settings
from math_tutor.core.limiter import limiter
from math_tutor.schemas.content import LearnContentResponse, LearnRequest, PracticeRequest, PracticeResponse
from math_tutor.schemas.tutor import TutorRequest
from math_tutor.services.lesson_store import LessonStore, get_lesson_store
from math_tutor.services.prompt_builder import build_prompt
from math_tutor.services.response_recovery import recover_learn_content, recover_practice_problems
from math_tutor.services.tutor_gateway import TutorGateway, classify_upstream_error, get_tutor_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["learning content"])


async def _generate(gateway: TutorGateway, tutor_request: TutorRequest) -> str:
    try:
        return await gateway.complete(build_prompt(tutor_request))
    except Exception as e:
        failure = classify_upstream_error(e)
        logger.error(
            "%s generation failed status=%d: %s",
            tutor_request.request_type,
            failure.status_code,
            e,
            exc_info=True,
        )
        raise HTTPException(status_code=failure.status_code, detail=failure.message)


@router.post("/learn", response_model=LearnContentResponse)
@limiter.limit(lambda: get_settings().TUTOR_RATE_LIMIT)
async def learn(
    request: Request,
    learn_request: LearnRequest,
    gateway: TutorGateway = Depends(get_tutor_gateway),
    lessons: LessonStore = Depends(get_lesson_store),
) -> LearnContentResponse:
    """Lesson for a grade/topic: bundled content when available, otherwise generated."""
    local = lessons.load_learn_content(learn_request.grade, learn_request.topic, learn_request.language)
    if local is not None:
        logger.info("Serving local lesson %s (%s)", local.id, learn_request.language)
        return LearnContentResponse(source="local", content=local)

    raw = await _generate(
        gateway,
        TutorRequest(grade=learn_request.grade, topic=learn_request.topic, request_type="learn"),
    )
    result = recover_learn_content(raw, learn_request.grade, learn_request.topic)
    return LearnContentResponse(source="ai", recovery=result.status, content=result.value)


@router.post("/practice", response_model=PracticeResponse, response_model_exclude_none=True)
@limiter.limit(lambda: get_settings().TUTOR_RATE_LIMIT)
async def practice(
    request: Request,
    practice_request: PracticeRequest,
    gateway: TutorGateway = Depends(get_tutor_gateway),
) -> PracticeResponse:
    """Five generated practice problems (an empty list when the answer cannot be parsed)."""
    raw = await _generate(
        gateway,
        TutorRequest(grade=practice_request.grade, topic=practice_request.topic, request_type="practice"),
    )
    result = recover_practice_problems(raw)
    return PracticeResponse(recovery=result.status, problems=result.value)
