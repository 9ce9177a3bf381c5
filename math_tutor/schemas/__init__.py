"""Pydantic schemas for API requests and responses."""

from math_tutor.schemas.catalog import GradeCategory, MathTopic
from math_tutor.schemas.content import (
    LearnContent,
    LearnContentResponse,
    LearnExample,
    LearnRequest,
    PracticeProblem,
    PracticeRequest,
    PracticeResponse,
    PracticeSet,
    QuizQuestion,
    SolutionStep,
)
from math_tutor.schemas.tutor import (
    ErrorBody,
    StreamEvent,
    TutorMetadata,
    TutorRequest,
    TutorResponse,
    ValidationIssue,
)
