"""Grade and topic catalog."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from math_tutor.schemas.catalog import MathTopic
from math_tutor.services.catalog import grade_categories, list_grades, topics_for_grade
from math_tutor.services.lesson_store import LOCAL_CONTENT_GRADE, SUPPORTED_LANGUAGES, LessonStore, get_lesson_store

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/grades")
async def get_grades() -> dict:
    """All grade levels, flat and grouped by school stage."""
    return {
        "grades": list_grades(),
        "categories": [category.model_dump() for category in grade_categories()],
    }


@router.get("/topics", response_model=list[MathTopic])
async def get_topics(grade: Optional[str] = Query(None, description="Grade label, e.g. '9th Grade'")) -> list[MathTopic]:
    """Topics taught at `grade` (empty without a grade)."""
    return topics_for_grade(grade)


@router.get("/lessons")
async def get_lessons(lessons: LessonStore = Depends(get_lesson_store)) -> dict:
    """Topics that have bundled lessons."""
    return {
        "grade": LOCAL_CONTENT_GRADE,
        "languages": list(SUPPORTED_LANGUAGES),
        "default_language": lessons.default_language,
        "topics": lessons.available_topics(),
    }
