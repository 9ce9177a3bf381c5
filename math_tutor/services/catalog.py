"""Grade levels and math topics offered by the tutor."""

from __future__ import annotations

from typing import Optional

from math_tutor.schemas.catalog import GradeCategory, MathTopic

GRADES: tuple[str, ...] = (
    "1st Grade", "2nd Grade", "3rd Grade", "4th Grade", "5th Grade", "6th Grade",
    "7th Grade", "8th Grade", "9th Grade", "10th Grade", "11th Grade", "12th Grade",
    "College", "Graduate",
)

_CATEGORY_BOUNDS: tuple[tuple[str, int, int], ...] = (
    ("Elementary", 0, 5),
    ("Middle School", 5, 8),
    ("High School", 8, 12),
    ("Higher Education", 12, len(GRADES)),
)


def _topic(id: str, name: str, description: str, *grades: str) -> MathTopic:
    return MathTopic(id=id, name=name, description=description, grades=list(grades))


# ordered by complexity
MATH_TOPICS: tuple[MathTopic, ...] = (
    # Elementary (1-5)
    _topic("counting", "Counting & Numbers", "Basic counting, number recognition, and place value",
           "1st Grade", "2nd Grade", "3rd Grade"),
    _topic("addition-subtraction", "Addition & Subtraction", "Basic arithmetic operations",
           "1st Grade", "2nd Grade", "3rd Grade", "4th Grade"),
    _topic("multiplication-division", "Multiplication & Division", "Times tables and basic division",
           "3rd Grade", "4th Grade", "5th Grade"),
    _topic("fractions-basic", "Fractions (Basic)", "Introduction to fractions, parts of a whole",
           "3rd Grade", "4th Grade", "5th Grade"),
    _topic("decimals-basic", "Decimals (Basic)", "Introduction to decimal numbers",
           "4th Grade", "5th Grade"),
    _topic("geometry-basic", "Basic Geometry", "Shapes, perimeter, area basics",
           "3rd Grade", "4th Grade", "5th Grade"),
    # Middle school (6-8)
    _topic("fractions-advanced", "Fractions (Advanced)", "Operations with fractions, mixed numbers",
           "6th Grade", "7th Grade", "8th Grade"),
    _topic("decimals-advanced", "Decimals & Percentages", "Decimal operations, percentage calculations",
           "6th Grade", "7th Grade", "8th Grade"),
    _topic("integers", "Integers", "Positive and negative numbers, operations",
           "6th Grade", "7th Grade", "8th Grade"),
    _topic("ratios-proportions", "Ratios & Proportions", "Understanding ratios, solving proportions",
           "6th Grade", "7th Grade", "8th Grade"),
    _topic("pre-algebra", "Pre-Algebra", "Variables, expressions, basic equations",
           "7th Grade", "8th Grade"),
    _topic("geometry-intermediate", "Geometry (Intermediate)", "Angles, triangles, coordinate plane",
           "6th Grade", "7th Grade", "8th Grade"),
    # High school (9-12)
    _topic("algebra1", "Algebra I", "Linear equations, inequalities, systems",
           "9th Grade", "10th Grade"),
    _topic("geometry-advanced", "Geometry (Advanced)", "Proofs, theorems, advanced shapes",
           "9th Grade", "10th Grade"),
    _topic("algebra2", "Algebra II", "Quadratics, polynomials, exponentials",
           "10th Grade", "11th Grade"),
    _topic("trigonometry", "Trigonometry", "Trig functions, identities, applications",
           "11th Grade", "12th Grade"),
    _topic("pre-calculus", "Pre-Calculus", "Advanced functions, limits preparation",
           "11th Grade", "12th Grade"),
    _topic("statistics", "Statistics & Probability", "Data analysis, probability theory",
           "10th Grade", "11th Grade", "12th Grade"),
    # College and beyond
    _topic("calculus1", "Calculus I", "Limits, derivatives, basic integration",
           "12th Grade", "College"),
    _topic("calculus2", "Calculus II", "Integration techniques, sequences, series",
           "College"),
    _topic("calculus3", "Calculus III", "Multivariable calculus, vector calculus",
           "College"),
    _topic("linear-algebra", "Linear Algebra", "Matrices, vectors, linear transformations",
           "College", "Graduate"),
    _topic("differential-equations", "Differential Equations", "ODEs, PDEs, applications",
           "College", "Graduate"),
    _topic("discrete-math", "Discrete Mathematics", "Logic, set theory, graph theory",
           "College", "Graduate"),
)


def list_grades() -> list[str]:
    return list(GRADES)


def is_known_grade(grade: str) -> bool:
    return grade in GRADES


def grade_categories() -> list[GradeCategory]:
    return [
        GradeCategory(label=label, grades=list(GRADES[start:end]))
        for label, start, end in _CATEGORY_BOUNDS
    ]


def topics_for_grade(grade: Optional[str]) -> list[MathTopic]:
    """Topics that apply to `grade` (empty when no grade is selected)."""
    if not grade:
        return []
    return [topic for topic in MATH_TOPICS if topic.applies_to(grade)]


def find_topic(key: str) -> MathTopic | None:
    """Look a topic up by id or display name."""
    for topic in MATH_TOPICS:
        if topic.id == key or topic.name == key:
            return topic
    return None
