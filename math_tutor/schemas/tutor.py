"""AI Tutor request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RequestType = Literal["chat", "practice", "hint", "solution", "learn", "learn-question"]
TutorMode = Literal["step-by-step", "regular"]

REQUEST_TYPES: tuple[str, ...] = ("chat", "practice", "hint", "solution", "learn", "learn-question")

# request types that need `question` / `problem` to be present
QUESTION_REQUIRED: frozenset[str] = frozenset({"chat", "learn-question"})
PROBLEM_REQUIRED: frozenset[str] = frozenset({"hint", "solution"})


class TutorRequest(BaseModel):
    """Request for the AI tutor (`POST /api/tutor`)."""

    model_config = ConfigDict(populate_by_name=True)

    grade: str = Field(min_length=1, max_length=20)
    topic: str = Field(min_length=1, max_length=100)
    question: Optional[str] = None
    problem: Optional[str] = None
    mode: Optional[TutorMode] = None
    request_type: RequestType = Field(default="chat", alias="requestType")
    context: Optional[str] = None

    def missing_fields(self) -> list[tuple[str, str]]:
        """Return (field, message) pairs for fields the request type requires."""
        missing: list[tuple[str, str]] = []
        if self.request_type in QUESTION_REQUIRED and not self.question:
            missing.append(("question", f"question is required for {self.request_type} requests"))
        if self.request_type in PROBLEM_REQUIRED and not self.problem:
            missing.append(("problem", f"problem is required for {self.request_type} requests"))
        return missing

    def to_payload(self) -> dict:
        """Wire representation (camelCase, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TutorMetadata(BaseModel):
    model: str
    grade: str
    topic: str
    timestamp: str


class TutorResponse(BaseModel):
    """Non-streaming tutor answer."""

    answer: str
    metadata: TutorMetadata


class StreamEvent(BaseModel):
    """One frame of a streamed tutor answer."""

    type: Literal["content", "done", "error"]
    content: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def delta(cls, content: str) -> "StreamEvent":
        return cls(type="content", content=content)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(type="done")

    @classmethod
    def failure(cls, message: str) -> "StreamEvent":
        return cls(type="error", error=message)

    @property
    def is_terminal(self) -> bool:
        return self.type != "content"


class ValidationIssue(BaseModel):
    field: str
    message: str


class ErrorBody(BaseModel):
    """Error payload returned for 4xx/5xx responses."""

    error: str
    details: Optional[list[ValidationIssue]] = None
