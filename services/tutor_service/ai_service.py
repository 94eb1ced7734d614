"""
Tutoring operations on top of the LLM adapter.

Each operation builds its prompt from a template, dispatches it to the
selected provider through the retry wrapper, and normalises the reply:

- generate_content      raw text passthrough
- resolve_doubt         JSON, degrades to the raw text as the explanation
- classify_chat_message single word, degrades to "general"
- generate_teaching_*   JSON, StructuredGenerationError when unusable
- generate_quiz         JSON, StructuredGenerationError when unusable
"""

from __future__ import annotations

import logging
import time

from shared.contracts.tutor import (
    ChatClassification,
    CurriculumContext,
    DoubtResolution,
    GeneratedContent,
    QuizSet,
    TeachingContent,
)
from shared.llm_adapter import (
    LLMProvider,
    LLMRequest,
    ModelType,
    build_messages,
    with_retry,
)
from shared.observability.metrics import llm_generation_time, llm_tokens
from services.tutor_service.config import TutorConfig
from services.tutor_service.extractor import (
    extract_json,
    read_list,
    read_object,
    read_objects,
    read_str,
)
from services.tutor_service.templates import (
    PromptTemplate,
    build_classification_prompt,
    build_doubt_prompt,
    build_quiz_prompt,
    build_teaching_prompt,
    classify_reply,
)
from services.tutor_service.validation import validate_prompt, validate_question

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "General Education"


class AIService:

    def __init__(self, providers: dict[ModelType, LLMProvider], config: TutorConfig) -> None:
        self._providers = providers
        self._cfg = config

    def available_models(self) -> dict[str, bool]:
        return {
            model.value: bool(self._providers.get(model) and self._providers[model].configured)
            for model in ModelType
        }

    def resolve_model(self, model: ModelType | None) -> ModelType:
        """Explicit choice wins; otherwise the configured default, if it is usable."""
        if model is not None:
            return model
        default = self._cfg.default_model
        if default is ModelType.MISTRAL and not self.available_models()[ModelType.MISTRAL.value]:
            return ModelType.LLAMA
        return default

    async def generate_response(
        self,
        prompt: str,
        model: ModelType = ModelType.LLAMA,
        system_prompt: str | None = None,
    ) -> str:
        validate_prompt(prompt)
        provider = self._providers[model]
        request = LLMRequest(messages=build_messages(prompt, system_prompt))

        t0 = time.perf_counter()
        with llm_generation_time.labels(provider=model.value).time():
            response = await with_retry(
                lambda: provider.generate(request),
                max_retries=self._cfg.max_retries,
                base_delay_s=self._cfg.retry_base_delay_s,
                operation_name=f"{model.value}.generate",
            )

        if response.prompt_tokens or response.completion_tokens:
            llm_tokens.labels(provider=model.value, direction="prompt").inc(response.prompt_tokens)
            llm_tokens.labels(provider=model.value, direction="completion").inc(
                response.completion_tokens
            )
        logger.debug(
            "%s replied with %d chars in %.0fms",
            model.value, len(response.content), (time.perf_counter() - t0) * 1000,
        )
        return response.content

    async def _run(self, template: PromptTemplate, model: ModelType) -> str:
        return await self.generate_response(template.user_prompt, model, template.system_prompt)

    async def generate_content(
        self, prompt: str, model: ModelType | None = None
    ) -> GeneratedContent:
        model_type = model or ModelType.LLAMA
        trimmed = prompt.strip() if isinstance(prompt, str) else ""
        content = await self.generate_response(trimmed, model_type)
        return GeneratedContent(content=content, model=model_type.value)

    async def resolve_doubt(
        self,
        question: str,
        context: str | None = None,
        curriculum: CurriculumContext | None = None,
        model: ModelType | None = None,
    ) -> DoubtResolution:
        validate_question(question)
        template = build_doubt_prompt(question, context or DEFAULT_CONTEXT, curriculum)
        raw = await self._run(template, self.resolve_model(model))

        parsed = extract_json(raw)
        return DoubtResolution(
            explanation=read_str(parsed, "explanation", raw),
            examples=read_list(parsed, "examples"),
            quiz_question=read_object(parsed, "quizQuestion"),
        )

    async def classify_chat_message(
        self,
        message: str,
        topic_name: str | None = None,
        subject_name: str | None = None,
        model: ModelType | None = None,
    ) -> ChatClassification:
        trimmed = message.strip() if isinstance(message, str) else ""
        if not trimmed:
            return ChatClassification(mode="general")
        template = build_classification_prompt(trimmed, topic_name, subject_name)
        raw = await self._run(template, model or ModelType.LLAMA)
        return classify_reply(raw)

    async def generate_teaching_content(
        self,
        topic: str,
        curriculum: CurriculumContext | None = None,
        model: ModelType | None = None,
    ) -> TeachingContent:
        template = build_teaching_prompt(topic=topic, curriculum=curriculum)
        raw = await self._run(template, self.resolve_model(model))

        parsed = extract_json(raw, strict=True)
        return TeachingContent(
            title=read_str(parsed, "title", topic),
            sections=read_objects(parsed, "sections"),
            summary=read_str(parsed, "summary", ""),
        )

    async def generate_teaching_content_from_prompt(
        self, prompt: str, model: ModelType | None = None
    ) -> TeachingContent:
        """Caller-built lesson prompt; extra section keys are passed through."""
        validate_prompt(prompt)
        template = build_teaching_prompt(prompt=prompt)
        raw = await self._run(template, self.resolve_model(model))

        parsed = extract_json(raw, strict=True)
        return TeachingContent(
            title=read_str(parsed, "title", "Lesson"),
            sections=read_objects(parsed, "sections"),
            summary=read_str(parsed, "summary", ""),
        )

    async def generate_quiz(
        self,
        topic: str,
        context: str | None = None,
        curriculum: CurriculumContext | None = None,
        model: ModelType | None = None,
    ) -> QuizSet:
        template = build_quiz_prompt(topic, context or DEFAULT_CONTEXT, curriculum)
        raw = await self._run(template, self.resolve_model(model))

        parsed = extract_json(raw, strict=True)
        return QuizSet(questions=read_objects(parsed, "questions"))
