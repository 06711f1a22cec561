"""OpenAI chat completions client for image analysis."""

import asyncio
import logging
from dataclasses import dataclass

import httpx
import openai
from openai import AsyncOpenAI

from calorie_lens.domain.errors import (
    AnalysisTimeoutError,
    BadRequestError,
    CompletionError,
    EmptyResponseError,
    MalformedResponseError,
    MissingCredentialError,
    NetworkError,
    ProviderError,
    RateLimitedError,
    UnauthenticatedError,
)
from calorie_lens.services.analysis import CompletionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI
    model: str = "gpt-4o"
    temperature: float = 0.1
    max_tokens: int = 1000
    image_detail: str = "high"
    timeout_seconds: float = 30.0

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str | None,
        *,
        base_url: str | None = None,
        model: str = "gpt-4o",
        temperature: float = 0.1,
        max_tokens: int = 1000,
        image_detail: str = "high",
        timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> "OpenAICompletionClient":
        """Create a client; retries are disabled so each call is one attempt."""
        if not api_key:
            raise MissingCredentialError()
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )
        return cls(
            client=client,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            image_detail=image_detail,
            timeout_seconds=timeout_seconds,
        )

    async def analyze(self, *, image_data_uri: str, prompt: str) -> str:
        """Send the prompt and image, returning the first completion's text."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": image_data_uri,
                            "detail": self.image_detail,
                        },
                    },
                ],
            }
        ]
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise AnalysisTimeoutError(
                f"No response from OpenAI within {self.timeout_seconds:g}s"
            ) from exc
        except openai.APITimeoutError as exc:
            raise AnalysisTimeoutError("OpenAI request timed out") from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(f"Could not reach OpenAI: {exc}") from exc
        except openai.APIStatusError as exc:
            raise _map_status_error(exc) from exc
        except openai.APIError as exc:
            _logger.warning("OpenAI returned an unusable response: %s", exc)
            raise MalformedResponseError(
                f"OpenAI returned an unusable response: {exc}"
            ) from exc

        try:
            content = response.choices[0].message.content if response.choices else None
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            _logger.warning("OpenAI completion has an unexpected shape: %r", response)
            raise MalformedResponseError(
                "OpenAI completion has an unexpected shape"
            ) from exc
        if not isinstance(content, str) or not content.strip():
            raise EmptyResponseError("OpenAI returned an empty response")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _map_status_error(exc: openai.APIStatusError) -> CompletionError:
    body = exc.response.text
    _logger.warning("OpenAI API error %s: %s", exc.status_code, body)
    if exc.status_code == 401:
        return UnauthenticatedError(body)
    if exc.status_code == 429:
        return RateLimitedError(body)
    if exc.status_code == 400:
        return BadRequestError(body)
    return ProviderError(exc.status_code, body)
