"""
Prompt builders for each tutoring task.

Every builder is pure: it returns the system prompt (if any), the user
prompt and the response model the reply is expected to fill. Literal JSON
braces in the templates are doubled for str.format.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from shared.contracts.tutor import (
    ChatClassification,
    CurriculumContext,
    DoubtResolution,
    QuizSet,
    TeachingContent,
)

SCOPE_RULES = """MANDATORY: STAY STRICTLY WITHIN THE SELECTED SUBJECT AND TOPIC.
- No cross-topic, cross-subject or out-of-syllabus explanations.
- Do NOT introduce concepts or examples outside the topic scope.
- Assume the learner can see the standard static visual (diagram, illustration, board-style) for this topic and refer to it where it helps."""

DOUBT_PROMPT = """You are an expert AI tutor. A student has a doubt about a specific topic.
{curriculum}
Topic Context: {context}
Student Question: {question}

{scope_rules}

Provide a clear, concise, and helpful explanation.
If appropriate, include 2-3 real-world examples.
Also provide a single multiple-choice quiz question (4 options, correct answer index 0-3) to verify their understanding.

Respond with only valid JSON, no markdown or extra text:
{{
  "explanation": "...",
  "examples": ["...", "..."],
  "quizQuestion": {{
    "question": "...",
    "options": ["...", "...", "...", "..."],
    "correctAnswer": 0,
    "explanation": "..."
  }}
}}"""

TEACHING_SYSTEM_PROMPT = "You are an expert curriculum designer."

TEACHING_PROMPT = """Generate a structured learning lesson for the topic: "{topic}".
{curriculum}
{scope_rules}

Include a title, 3 sections with detailed content, and a final summary.

Respond with only valid JSON:
{{
  "title": "...",
  "sections": [
    {{ "title": "...", "content": "..." }},
    {{ "title": "...", "content": "..." }},
    {{ "title": "...", "content": "..." }}
  ],
  "summary": "..."
}}"""

QUIZ_SYSTEM_PROMPT = "You are an expert assessment creator."

QUIZ_PROMPT = """Generate a 5-question multiple choice quiz about "{topic}" based on this context: "{context}".
{curriculum}
Each question should have 4 options and a clear explanation for the correct answer. Match the difficulty to the student's level.

{scope_rules}

Respond with only valid JSON:
{{
  "questions": [
    {{
      "question": "...",
      "options": ["...", "...", "...", "..."],
      "correctAnswer": 0,
      "explanation": "..."
    }}
  ]
}}"""

CLASSIFICATION_PROMPT = """You are a classifier. Given a user message and optional learning context, determine if the message is specifically about the current lesson/subject (subject_specific) or is a general question/chat (general).

Context: {context}
User message: "{message}"

Respond with ONLY a single word: "subject_specific" or "general". No other text."""


@dataclass(frozen=True)
class PromptTemplate:
    user_prompt: str
    system_prompt: str | None = None
    expected_shape: type[BaseModel] | None = None


def _curriculum_line(curriculum: CurriculumContext | None, include_topic: bool = False) -> str:
    if curriculum is None:
        return ""
    described = curriculum.describe(include_topic=include_topic)
    return f"\nCurriculum Context: {described}" if described else ""


def build_doubt_prompt(
    question: str,
    context: str,
    curriculum: CurriculumContext | None = None,
) -> PromptTemplate:
    return PromptTemplate(
        user_prompt=DOUBT_PROMPT.format(
            curriculum=_curriculum_line(curriculum, include_topic=True),
            context=context,
            question=question,
            scope_rules=SCOPE_RULES,
        ),
        expected_shape=DoubtResolution,
    )


def build_teaching_prompt(
    topic: str | None = None,
    curriculum: CurriculumContext | None = None,
    prompt: str | None = None,
) -> PromptTemplate:
    """A caller-built prompt is sent untouched and skips the lesson template."""
    if prompt:
        return PromptTemplate(user_prompt=prompt, expected_shape=TeachingContent)
    if not topic:
        raise ValueError("build_teaching_prompt needs a topic or a prompt")
    return PromptTemplate(
        user_prompt=TEACHING_PROMPT.format(
            topic=topic,
            curriculum=_curriculum_line(curriculum),
            scope_rules=SCOPE_RULES,
        ),
        system_prompt=TEACHING_SYSTEM_PROMPT,
        expected_shape=TeachingContent,
    )


def build_quiz_prompt(
    topic: str,
    context: str,
    curriculum: CurriculumContext | None = None,
) -> PromptTemplate:
    return PromptTemplate(
        user_prompt=QUIZ_PROMPT.format(
            topic=topic,
            context=context,
            curriculum=_curriculum_line(curriculum),
            scope_rules=SCOPE_RULES,
        ),
        system_prompt=QUIZ_SYSTEM_PROMPT,
        expected_shape=QuizSet,
    )


def build_classification_prompt(
    message: str,
    topic_name: str | None = None,
    subject_name: str | None = None,
) -> PromptTemplate:
    context = ", ".join(n for n in (topic_name, subject_name) if n) or "General conversation"
    return PromptTemplate(
        user_prompt=CLASSIFICATION_PROMPT.format(context=context, message=message),
        expected_shape=ChatClassification,
    )


def classify_reply(text: str | None) -> ChatClassification:
    # substring, not equality: '"Subject_specific."' counts
    if "subject_specific" in (text or "").strip().lower():
        return ChatClassification(mode="subject_specific")
    return ChatClassification(mode="general")
