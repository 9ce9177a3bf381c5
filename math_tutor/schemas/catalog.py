"""Catalog schemas."""

from pydantic import BaseModel


class MathTopic(BaseModel):
    id: str
    name: str
    description: str
    grades: list[str]

    def applies_to(self, grade: str) -> bool:
        return grade in self.grades


class GradeCategory(BaseModel):
    label: str
    grades: list[str]
