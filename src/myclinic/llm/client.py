"""Wrapper around the Anthropic Claude SDK."""

from __future__ import annotations

from anthropic import Anthropic, APIConnectionError, APIStatusError, AuthenticationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from myclinic.config import Settings


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for transient API errors (connection drops, rate-limits, server errors).

    Authentication errors (401) and bad-request errors (400) should NOT be
    retried; they will never succeed without a config change. Anything
    that is not an API error is a bug or bad data and is not retried either.
    """
    if isinstance(exc, AuthenticationError):
        return False
    if isinstance(exc, APIStatusError):
        return exc.status_code == 429 or exc.status_code >= 500
    return isinstance(exc, APIConnectionError)


class ClaudeClient:
    """Thin wrapper providing retry logic, JSON mode and token tracking."""

    def __init__(self, settings: Settings) -> None:
        self._client = Anthropic(api_key=settings.anthropic_api_key)
        self._model = settings.model
        self._fast_model = settings.fast_model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._total_input_tokens = 0
        self._total_output_tokens = 0

    @property
    def fast_model(self) -> str:
        return self._fast_model

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    def generate(
        self,
        system: str,
        messages: list[dict],
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send a message to Claude and return the text response.

        With ``json_mode`` the assistant turn is prefilled with ``{`` so the
        reply continues a JSON object; the returned text includes the brace.
        """
        if json_mode:
            messages = [*messages, {"role": "assistant", "content": "{"}]

        response = self._client.messages.create(
            model=model or self._model,
            max_tokens=max_tokens or self._max_tokens,
            temperature=temperature if temperature is not None else self._temperature,
            system=system,
            messages=messages,
        )
        self._total_input_tokens += response.usage.input_tokens
        self._total_output_tokens += response.usage.output_tokens

        text = response.content[0].text
        if json_mode:
            return "{" + text
        return text

    @property
    def usage_summary(self) -> dict:
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
        }
