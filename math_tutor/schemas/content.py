"""Learning content schemas (lessons, worked examples, quizzes, practice)."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["easy", "medium", "hard"]


class SolutionStep(BaseModel):
    id: str
    step: int
    description: str
    explanation: str


class LearnExample(BaseModel):
    id: str
    title: str
    problem: str
    solution: list[SolutionStep] = Field(default_factory=list)
    answer: Optional[str] = None
    explanation: Optional[str] = None


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    question: str
    options: list[str]
    correct_answer: int = Field(alias="correctAnswer")
    explanation: str


class LearnContent(BaseModel):
    """Theory, worked examples and an optional quiz for one topic."""

    id: str
    theory: str
    examples: list[LearnExample] = Field(default_factory=list)
    quiz: Optional[list[QuizQuestion]] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PracticeProblem(BaseModel):
    id: str = ""
    difficulty: Difficulty
    problem: str
    hint: Optional[str] = None
    solution: Optional[str] = None


class PracticeSet(BaseModel):
    problems: list[PracticeProblem]


class LearnRequest(BaseModel):
    grade: str = Field(min_length=1, max_length=20)
    topic: str = Field(min_length=1, max_length=100)
    language: str = "en"


class LearnContentResponse(BaseModel):
    source: Literal["local", "ai"]
    recovery: Optional[Literal["parsed", "fallback"]] = None
    content: LearnContent


class PracticeRequest(BaseModel):
    grade: str = Field(min_length=1, max_length=20)
    topic: str = Field(min_length=1, max_length=100)


class PracticeResponse(BaseModel):
    recovery: Literal["parsed", "empty"]
    problems: list[PracticeProblem]
