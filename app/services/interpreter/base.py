"""Base class for LLM interpreters.

The base owns the Anthropic client and the request/response round trip;
subclasses define the prompt and how to parse the answer.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import anthropic

from app.config import settings

logger = logging.getLogger(__name__)

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class InterpreterError(Exception):
    """Base class for interpreter failures."""


class InterpreterNotConfiguredError(InterpreterError):
    """No Anthropic API key is configured."""


class InterpreterParseError(InterpreterError):
    """The model's answer could not be parsed into the expected output."""

    def __init__(self, message: str, raw_response: str = ""):
        self.raw_response = raw_response
        super().__init__(message)


class BaseInterpreter(ABC, Generic[TInput, TOutput]):
    """Abstract base for all interpreters.

    Subclass this to turn some typed input into typed output via Claude.
    """

    # Override in subclasses; None falls back to settings
    model: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.3

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or settings.anthropic_api_key
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    @abstractmethod
    def get_system_prompt(self) -> str:
        """Return the system prompt for this interpreter."""
        ...

    @abstractmethod
    def format_input(self, input_data: TInput) -> str:
        """Convert typed input to prompt string."""
        ...

    @abstractmethod
    def parse_output(self, response_text: str) -> TOutput:
        """Parse LLM response into typed output. Raise InterpreterParseError on failure."""
        ...

    async def interpret(self, input_data: TInput) -> TOutput:
        """Main entry point: interpret input and return structured output."""
        if not self.is_configured:
            raise InterpreterNotConfiguredError("ANTHROPIC_API_KEY is not configured")

        user_message = self.format_input(input_data)
        model = self.model or settings.summary_model

        started = time.perf_counter()
        response = await self.client.messages.create(
            model=model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=self.get_system_prompt(),
            messages=[{"role": "user", "content": user_message}],
        )
        logger.debug(
            f"{type(self).__name__} got response from {model} "
            f"in {(time.perf_counter() - started) * 1000:.0f}ms"
        )

        response_text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return self.parse_output(response_text)
