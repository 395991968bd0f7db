"""
Answer Generator
Retrieval-augmented question answering over the publication corpus.

Every public method returns an AnswerResult. Upstream failures are turned
into an error-flagged result rather than raised, so callers always have
something to render.
"""

import logging
from typing import Optional, Protocol, Sequence

from bioexplorer.config import Settings, settings as default_settings
from bioexplorer.errors import InvalidRequestError
from bioexplorer.generation.fallback import (
    GenerationSuccess,
    ModelDescriptor,
    generate_with_fallback,
    models_from_settings,
)
from bioexplorer.generation.prompts import (
    ANALYZE_PROMPT,
    ANALYZE_TITLE_ONLY_PROMPT,
    ANSWER_PROMPT,
    CHAT_PROMPT,
    GENERATION_FAILED_ANSWER,
    INSIGHT_QUESTIONS,
    NO_PUBLICATIONS_CONTEXT,
    NO_RESULTS_ANSWER,
    OVERALL_INSIGHTS_PROMPT,
    SEARCH_FAILED_ANSWER,
)
from bioexplorer.generation.roles import get_role_prompt, get_role_system_prompt
from bioexplorer.models import AnswerResult, Publication, RetrievedChunk, Source
from bioexplorer.retrieval.retriever import ANSWER_SNIPPET_LENGTH, PublicationRetriever

logger = logging.getLogger(__name__)

CHAT_CONTEXT_PUBLICATIONS = 5
OVERVIEW_TITLE_LIMIT = 50


class TextGenerator(Protocol):
    def complete(self, descriptor: ModelDescriptor, prompt: str, system_prompt: str = "") -> str: ...


def build_context(chunks: Sequence[RetrievedChunk], max_chars: int) -> str:
    """
    Label each hit with its rank and title and join them, cut at max_chars.

    The cut is a plain character slice, not sentence aware.
    """
    blocks = []
    for i, chunk in enumerate(chunks, 1):
        title = chunk.metadata.get("title") or "Unknown Source"
        blocks.append(f"[Source {i}: {title}]\n{chunk.text}")
    context = "\n\n".join(blocks)
    return context[:max_chars]


class AnswerGenerator:
    """Answers questions from retrieved publication chunks with model fallback."""

    def __init__(
        self,
        retriever: PublicationRetriever,
        text_generator: TextGenerator,
        settings: Optional[Settings] = None,
        models: Optional[Sequence[ModelDescriptor]] = None,
    ):
        """
        Args:
            retriever: Retriever used for context and sources.
            text_generator: Performs one completion against one model.
            settings: Application settings (defaults to the module singleton).
            models: Fallback list in priority order (defaults to GENERATION_MODELS).
        """
        self.retriever = retriever
        self.text_generator = text_generator
        self.settings = settings or default_settings
        self.models = list(models) if models is not None else models_from_settings(self.settings)
        logger.info(f"AnswerGenerator initialized with models: {[m.model for m in self.models]}")

    def answer(self, question: str, role: Optional[str] = None) -> AnswerResult:
        """
        Answer a question from the embedded publications.

        Args:
            question: The user's question.
            role: Optional persona id; wraps the question before retrieval.

        Returns:
            AnswerResult with sources. On generation failure the sources are
            still filled in and error is set.

        Raises:
            InvalidRequestError: If the question is empty.
        """
        if not question or not question.strip():
            raise InvalidRequestError("Question is required")

        prompt_question = get_role_prompt(role, question)
        logger.info(f"Answering question: '{question[:80]}' (role={role})")

        try:
            chunks = self.retriever.search_chunks(prompt_question, self.settings.answer_result_limit)
            sources = self.retriever.to_sources(chunks, ANSWER_SNIPPET_LENGTH, max_sources=5)
        except Exception as e:
            logger.error(f"Retrieval failed: {e}", exc_info=True)
            return AnswerResult(
                question=question,
                answer=SEARCH_FAILED_ANSWER.format(error=e),
                error=str(e),
            )

        if not chunks:
            return AnswerResult(question=question, answer=NO_RESULTS_ANSWER, sources=[])

        context = build_context(chunks, self.settings.max_context_chars)
        prompt = ANSWER_PROMPT.format(question=prompt_question, context=context)
        return self._generate(question, prompt, sources, get_role_system_prompt(role))

    def analyze_publication(self, title: str, abstract: str = "") -> AnswerResult:
        """Extract topics, organisms, and key findings from a single publication."""
        if not title or not title.strip():
            raise InvalidRequestError("Title is required")

        if abstract and abstract.strip():
            prompt = ANALYZE_PROMPT.format(title=title, abstract=abstract)
        else:
            prompt = ANALYZE_TITLE_ONLY_PROMPT.format(title=title)
        return self._generate(title, prompt, [])

    def chat(self, query: str, publications: Sequence[Publication]) -> AnswerResult:
        """
        Answer from publications supplied by the caller, without retrieval.

        Only the first five publications are used as context and returned as sources.
        """
        if not query or not query.strip():
            raise InvalidRequestError("Query is required")

        selected = list(publications)[:CHAT_CONTEXT_PUBLICATIONS]
        if selected:
            context = "\n\n".join(
                f"Title: {pub.title}\nSummary: {pub.summary or 'N/A'}" for pub in selected
            )
        else:
            context = NO_PUBLICATIONS_CONTEXT

        sources = [
            Source(
                publication_id=pub.id or None,
                title=pub.title,
                url=pub.url,
                snippet=(pub.summary or pub.abstract)[:ANSWER_SNIPPET_LENGTH],
            )
            for pub in selected
        ]
        prompt = CHAT_PROMPT.format(query=query, context=context)
        return self._generate(query, prompt, sources)

    def overall_insights(self, publications: Sequence[Publication]) -> AnswerResult:
        """Themes, progress, gaps and consensus across the first 50 titles."""
        titles = "\n".join(pub.title for pub in list(publications)[:OVERVIEW_TITLE_LIMIT])
        prompt = OVERALL_INSIGHTS_PROMPT.format(titles=titles)
        return self._generate("overall insights", prompt, [])

    def insight(self, kind: str, role: Optional[str] = None) -> AnswerResult:
        """
        Run one of the canned landscape questions.

        Raises:
            InvalidRequestError: If kind is not progress, gaps, consensus or actionable.
        """
        question = INSIGHT_QUESTIONS.get(kind)
        if question is None:
            raise InvalidRequestError(
                f"Unknown insight type '{kind}'. Expected one of: {sorted(INSIGHT_QUESTIONS)}"
            )
        return self.answer(question, role=role)

    def _generate(
        self,
        question: str,
        prompt: str,
        sources: list[Source],
        system_prompt: str = "",
    ) -> AnswerResult:
        def complete(descriptor: ModelDescriptor, text: str) -> str:
            return self.text_generator.complete(descriptor, text, system_prompt=system_prompt)

        outcome = generate_with_fallback(self.models, prompt, complete)

        if isinstance(outcome, GenerationSuccess):
            return AnswerResult(
                question=question,
                answer=outcome.text,
                sources=sources,
                model_used=outcome.model,
            )

        logger.error(f"All {len(outcome.attempts)} generation models failed: {outcome.last_error}")
        return AnswerResult(
            question=question,
            answer=GENERATION_FAILED_ANSWER.format(
                error=outcome.last_error, source_count=len(sources)
            ),
            sources=sources,
            error=outcome.last_error,
        )
