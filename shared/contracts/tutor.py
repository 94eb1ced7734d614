"""
Request and response contracts for the tutor API.

Wire names are camelCase (the frontend's convention); Python attributes are
snake_case. Request models are deliberately loose: presence checks and
length limits are enforced by the handlers and the prompt validator so that
their error messages stay stable.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class CurriculumContext(_CamelModel):
    curriculum_type: str | None = Field(default=None, alias="curriculumType")
    board: str | None = None
    grade: str | None = None
    exam: str | None = None
    subject: str | None = None
    topic: str | None = None

    def describe(self, include_topic: bool = False) -> str:
        """One-line learner context, or "" for unknown curriculum types."""
        if self.curriculum_type == "school":
            text = f"{self.grade} student, {self.board} Board, Subject: {self.subject}"
        elif self.curriculum_type == "competitive":
            text = f"Preparing for {self.exam}, Subject: {self.subject}"
        else:
            return ""
        if include_topic:
            text += f", Topic: {self.topic or 'General'}"
        return text


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class GenerateContentRequest(_CamelModel):
    prompt: str | None = None
    model: str | None = None


class ResolveDoubtRequest(_CamelModel):
    question: str | None = None
    context: str | None = None
    curriculum_context: CurriculumContext | None = Field(default=None, alias="curriculumContext")
    model: str | None = None


class GenerateTeachingContentRequest(_CamelModel):
    topic: str | None = None
    prompt: str | None = None
    curriculum_context: CurriculumContext | None = Field(default=None, alias="curriculumContext")
    model: str | None = None


class GenerateQuizRequest(_CamelModel):
    topic: str | None = None
    context: str | None = None
    curriculum_context: CurriculumContext | None = Field(default=None, alias="curriculumContext")
    model: str | None = None


class ClassifyChatRequest(_CamelModel):
    message: str | None = None
    topic_name: str | None = Field(default=None, alias="topicName")
    subject_name: str | None = Field(default=None, alias="subjectName")
    model: str | None = None


# ---------------------------------------------------------------------------
# Responses (structured results)
# ---------------------------------------------------------------------------


class GeneratedContent(_CamelModel):
    content: str
    model: str


class DoubtResolution(_CamelModel):
    explanation: str
    examples: list[Any] = Field(default_factory=list)
    quiz_question: dict[str, Any] | None = Field(default=None, alias="quizQuestion")


class TeachingContent(_CamelModel):
    title: str
    sections: list[dict[str, Any]] = Field(default_factory=list)
    summary: str = ""


class QuizSet(_CamelModel):
    questions: list[dict[str, Any]] = Field(default_factory=list)


class ChatClassification(_CamelModel):
    mode: Literal["general", "subject_specific"] = "general"
