"""
Model Fallback
Tries an ordered list of generation models until one returns text.

Each model is attempted exactly once, in list order; there is no retry or
backoff. The outcome is a tagged result instead of a nullable string.
"""

import logging
from typing import Callable, Optional, Sequence, Union

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from bioexplorer.config import Settings, settings as default_settings
from bioexplorer.errors import GenerationServiceError

logger = logging.getLogger(__name__)


class ModelDescriptor(BaseModel):
    provider: str = "google"
    model: str

    def __str__(self) -> str:
        return self.model


class ModelAttempt(BaseModel):
    """A failed attempt against one model."""

    model: str
    error: str


class GenerationSuccess(BaseModel):
    model: str
    text: str
    attempts: list[ModelAttempt] = Field(default_factory=list)


class GenerationFailure(BaseModel):
    attempts: list[ModelAttempt] = Field(default_factory=list)

    @property
    def last_error(self) -> str:
        return self.attempts[-1].error if self.attempts else "no generation models configured"


GenerationOutcome = Union[GenerationSuccess, GenerationFailure]


def models_from_settings(settings: Optional[Settings] = None) -> list[ModelDescriptor]:
    """Build the fallback list from GENERATION_MODELS."""
    settings = settings or default_settings
    return [ModelDescriptor(model=name) for name in settings.generation_models]


def generate_with_fallback(
    models: Sequence[ModelDescriptor],
    prompt: str,
    complete: Callable[[ModelDescriptor, str], str],
) -> GenerationOutcome:
    """
    Run the prompt against each model in order, stopping at the first success.

    Args:
        models: Models in priority order.
        prompt: Fully rendered prompt text.
        complete: Performs one generation call; raises on failure.

    Returns:
        GenerationSuccess with the winning model, or GenerationFailure
        listing every attempt.
    """
    attempts: list[ModelAttempt] = []
    for descriptor in models:
        logger.info(f"Trying model: {descriptor}")
        try:
            text = complete(descriptor, prompt)
        except Exception as e:
            logger.warning(f"Failed with {descriptor}: {e}")
            attempts.append(ModelAttempt(model=descriptor.model, error=str(e)))
            continue

        logger.info(f"Success with model: {descriptor}")
        return GenerationSuccess(model=descriptor.model, text=text, attempts=attempts)

    return GenerationFailure(attempts=attempts)


class GeminiTextGenerator:
    """Single-shot text completion against one Gemini model."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        chat_model_factory: Optional[Callable[[ModelDescriptor], object]] = None,
    ):
        """
        Args:
            settings: Application settings (defaults to the module singleton).
            chat_model_factory: Builds a LangChain chat model for a descriptor.

        Raises:
            MissingCredentialError: If no API key is configured and no
                factory was given.
        """
        self.settings = settings or default_settings
        if chat_model_factory is None:
            self._api_key = self.settings.require_api_key()
            chat_model_factory = self._build_chat_model
        self._chat_model_factory = chat_model_factory
        self.prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])
        self.prompt_with_system = ChatPromptTemplate.from_messages(
            [("system", "{system_prompt}"), ("human", "{prompt}")]
        )

    def _build_chat_model(self, descriptor: ModelDescriptor) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=descriptor.model,
            google_api_key=self._api_key,
            temperature=self.settings.llm_temperature,
            timeout=self.settings.request_timeout_seconds,
            max_retries=self.settings.llm_max_retries,
        )

    def complete(self, descriptor: ModelDescriptor, prompt: str, system_prompt: str = "") -> str:
        """
        Generate text for a prompt with one model.

        A non-empty system_prompt is sent as a system message ahead of the prompt.

        Raises:
            GenerationServiceError: On any upstream failure or empty output.
        """
        try:
            template = self.prompt_with_system if system_prompt else self.prompt
            chain = template | self._chat_model_factory(descriptor) | StrOutputParser()
            text = chain.invoke({"prompt": prompt, "system_prompt": system_prompt})
        except Exception as e:
            raise GenerationServiceError(str(e), model=descriptor.model) from e

        if not text or not text.strip():
            raise GenerationServiceError("Model returned an empty response", model=descriptor.model)
        return text.strip()
