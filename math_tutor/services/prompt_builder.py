"""System/user prompt construction for every tutor request type.

Every request type appends its own instruction block to a shared tutor
persona. `practice` and `learn` spell out the JSON schema the model must
return, since their answers are parsed downstream.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from math_tutor.schemas.tutor import TutorRequest


class PromptPair(NamedTuple):
    system_prompt: str
    user_content: str

    def messages(self) -> list[dict[str, str]]:
        """OpenAI chat-completion message list."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_content},
        ]


def _base_prompt(grade: str, topic: str) -> str:
    return (
        "You are an expert AI Math Tutor designed to help students learn mathematics effectively. "
        "Your role is to:\n"
        "\n"
        f"1. Provide clear explanations appropriate for a {grade} student\n"
        f"2. Focus on the topic of {topic}\n"
        "3. Use encouraging and supportive language\n"
        "4. Provide helpful tips and strategies\n"
        "5. Suggest next steps for continued learning\n"
        "\n"
        "Guidelines:\n"
        "- Always explain your reasoning clearly\n"
        "- Use appropriate mathematical notation\n"
        "- Provide examples when helpful\n"
        "- Encourage the student to think critically\n"
        "- If the question is unclear, ask for clarification\n"
        "- Keep explanations at an appropriate level for the grade\n"
        "- Be patient and supportive\n"
        "\n"
        "Remember: Your goal is to help the student understand the concept, not just provide the answer."
    )


_PRACTICE_SCHEMA = """{
  "problems": [
    {"id": "1", "difficulty": "easy", "problem": "[Clear problem statement]"},
    {"id": "2", "difficulty": "easy", "problem": "[Clear problem statement]"},
    {"id": "3", "difficulty": "medium", "problem": "[Clear problem statement]"},
    {"id": "4", "difficulty": "medium", "problem": "[Clear problem statement]"},
    {"id": "5", "difficulty": "hard", "problem": "[Clear problem statement]"}
  ]
}"""

_LEARN_SCHEMA = """{
  "id": "unique-id",
  "theory": "[Comprehensive theory explanation covering key concepts, definitions, formulas, and principles]",
  "examples": [
    {
      "id": "example-1",
      "title": "[Descriptive title for the example]",
      "problem": "[Clear problem statement]",
      "solution": [
        {
          "id": "step-1",
          "step": 1,
          "description": "[What we do in this step]",
          "explanation": "[Why we do this step and how it connects to the theory]"
        },
        {
          "id": "step-2",
          "step": 2,
          "description": "[What we do in this step]",
          "explanation": "[Why we do this step and how it connects to the theory]"
        }
      ]
    },
    {
      "id": "example-2",
      "title": "[Second example with different complexity/approach]",
      "problem": "[Clear problem statement]",
      "solution": [
        {
          "id": "step-1",
          "step": 1,
          "description": "[What we do in this step]",
          "explanation": "[Why we do this step and how it connects to the theory]"
        }
      ]
    }
  ]
}"""


def _practice_block(grade: str, topic: str) -> str:
    return (
        "PRACTICE PROBLEM GENERATOR MODE:\n"
        f"Generate exactly 5 practice problems for {grade} level {topic}.\n"
        "Include:\n"
        "- 2 EASY problems (basic concept application)\n"
        "- 2 MEDIUM problems (requires multiple steps)\n"
        "- 1 HARD problem (challenging application)\n"
        "\n"
        "Format your entire response as a single JSON object, with no text before or after it:\n"
        f"{_PRACTICE_SCHEMA}\n"
        "\n"
        "Make sure problems are:\n"
        f"- Age-appropriate for {grade}\n"
        f"- Relevant to {topic}\n"
        "- Clearly stated with all necessary information\n"
        "- Progressive in difficulty\n"
        "- Solvable with grade-level knowledge"
    )


def _hint_block(grade: str, topic: str) -> str:
    return (
        "HINT MODE:\n"
        "Provide a helpful hint for this problem without giving away the complete solution.\n"
        "Your hint should:\n"
        "- Guide the student toward the right approach\n"
        "- Not solve the problem completely\n"
        "- Give just enough information to get them started\n"
        "- Be encouraging and supportive\n"
        "- Suggest what concept or method to use\n"
        "- Point out important information in the problem"
    )


def _solution_block(grade: str, topic: str) -> str:
    return (
        "SOLUTION MODE:\n"
        "Provide a complete, detailed solution to this problem.\n"
        "Your solution should:\n"
        "- Show all steps clearly\n"
        "- Explain the reasoning for each step\n"
        "- Include all calculations\n"
        "- Verify the answer when possible\n"
        "- Be educational, not just computational\n"
        "- Help the student understand the process"
    )


def _learn_block(grade: str, topic: str) -> str:
    return (
        "LEARN MODE:\n"
        f"Generate comprehensive learning material for {grade} level {topic}.\n"
        "Format your entire response as a single JSON object with this structure, "
        "with no text before or after it:\n"
        "\n"
        f"{_LEARN_SCHEMA}\n"
        "\n"
        "Requirements:\n"
        f"- Theory should be comprehensive but digestible for {grade} students\n"
        "- Include 2-3 examples of varying difficulty\n"
        "- Each solution step should have clear description AND explanation\n"
        "- Connect examples back to theory concepts\n"
        "- Use proper mathematical notation\n"
        "- Make content engaging and educational"
    )


def _learn_question_block(grade: str, topic: str) -> str:
    return (
        "LEARN QUESTION MODE:\n"
        "Answer the student's question about the provided theory or solution steps.\n"
        "The student has asked about specific content, so:\n"
        "- Reference the context they provided\n"
        "- Give a focused answer to their specific question\n"
        "- Connect your answer back to the broader concept\n"
        "- Provide additional clarification if helpful\n"
        "- Encourage further questions\n"
        f"- Keep the explanation at {grade} level"
    )


def _step_by_step_block(grade: str, topic: str) -> str:
    return (
        "STEP-BY-STEP MODE ENABLED:\n"
        "- Break down EVERY problem into numbered steps\n"
        "- Show ALL intermediate calculations\n"
        "- Explain WHY each step is necessary\n"
        "- Use clear formatting like:\n"
        "  Step 1: [Action] - [Explanation]\n"
        "  Step 2: [Action] - [Explanation]\n"
        "- Include verification/checking steps when applicable\n"
        "- Provide detailed reasoning for each mathematical operation\n"
        "- Use examples to illustrate concepts when helpful\n"
        "- Make each step crystal clear and easy to follow"
    )


_MODE_BLOCKS = {
    "practice": _practice_block,
    "hint": _hint_block,
    "solution": _solution_block,
    "learn": _learn_block,
    "learn-question": _learn_question_block,
}


def build_system_prompt(
    grade: str,
    topic: str,
    request_type: Optional[str] = None,
    mode: Optional[str] = None,
) -> str:
    request_type = request_type or "chat"
    prompt = _base_prompt(grade, topic)

    block = _MODE_BLOCKS.get(request_type)
    if block is None and mode == "step-by-step":
        block = _step_by_step_block
    if block is None:
        return prompt
    return f"{prompt}\n\n{block(grade, topic)}"


def build_user_content(
    grade: str,
    topic: str,
    request_type: Optional[str] = None,
    question: Optional[str] = None,
    problem: Optional[str] = None,
    context: Optional[str] = None,
) -> str:
    request_type = request_type or "chat"
    if request_type == "practice":
        return (
            f"Generate practice problems for:\nGrade: {grade}\nTopic: {topic}\n\n"
            "Please provide 5 problems (2 easy, 2 medium, 1 hard) in JSON format."
        )
    if request_type == "hint":
        return (
            f"Please provide a hint for this problem:\n\nProblem: {problem}\n\n"
            f"Grade Level: {grade}\nTopic: {topic}"
        )
    if request_type == "solution":
        return (
            f"Please provide a complete solution for this problem:\n\nProblem: {problem}\n\n"
            f"Grade Level: {grade}\nTopic: {topic}"
        )
    if request_type == "learn":
        return (
            f"Generate comprehensive learning material for:\nGrade: {grade}\nTopic: {topic}\n\n"
            "Please provide theory, examples, and step-by-step solutions in JSON format."
        )
    if request_type == "learn-question":
        return (
            f"Context: {context or ''}\n\nGrade: {grade}\nTopic: {topic}\nQuestion: {question}\n\n"
            "Please answer this question about the theory or solution steps provided in the context."
        )
    return f"Grade: {grade}\nTopic: {topic}\nQuestion: {question}"


def build_prompt(request: TutorRequest) -> PromptPair:
    """Build the (system, user) prompt pair for a validated request."""
    return PromptPair(
        system_prompt=build_system_prompt(
            request.grade, request.topic, request.request_type, request.mode
        ),
        user_content=build_user_content(
            request.grade,
            request.topic,
            request.request_type,
            question=request.question,
            problem=request.problem,
            context=request.context,
        ),
    )
