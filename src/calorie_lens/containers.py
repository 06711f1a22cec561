"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_lens.adapters.openai_completion_client import OpenAICompletionClient
from calorie_lens.config import Settings
from calorie_lens.services.analysis import AnalysisService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Without an API key the container carries no analysis service; front ends
    report the missing credential instead of calling the provider.
    """
    resolved_settings = settings or Settings()
    if not resolved_settings.openai_api_key:

        async def close_nothing() -> None:
            return None

        return AppContainer(
            settings=resolved_settings,
            analysis_service=None,
            close_resources=close_nothing,
        )

    completion_client = OpenAICompletionClient.create(
        resolved_settings.openai_api_key,
        base_url=resolved_settings.openai_base_url,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        max_tokens=resolved_settings.openai_max_tokens,
        image_detail=resolved_settings.openai_image_detail,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    analysis_service = AnalysisService(
        client=completion_client,
        min_image_length=resolved_settings.min_image_length,
    )

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
