"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import pytest

from calorie_lens.config import Settings
from calorie_lens.containers import AppContainer
from calorie_lens.domain.errors import AnalysisError
from calorie_lens.services.analysis import AnalysisService, CompletionClient

JPEG_BYTES = b"\xff\xd8\xff\xe0" + bytes(range(256)) * 4


def nutrition_payload() -> dict[str, object]:
    return {
        "foodName": "Salad",
        "calories": 300,
        "macros": {"protein": 10, "carbs": 20, "fat": 5, "sugar": 2},
        "vitamins": {
            "vitaminA": "100 mcg",
            "vitaminC": "10 mg",
            "vitaminD": "1 mcg",
            "vitaminB12": "0.5 mcg",
            "calcium": "50 mg",
            "iron": "1 mg",
        },
        "confidence": 90,
    }


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client returning fixed text or raising a fixed error."""

    text: str = field(default_factory=lambda: json.dumps(nutrition_payload()))
    error: AnalysisError | None = None
    calls: list[dict[str, str]] = field(default_factory=list)

    async def analyze(self, *, image_data_uri: str, prompt: str) -> str:
        self.calls.append({"image_data_uri": image_data_uri, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings, completion_client: FakeCompletionClient
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=AnalysisService(client=completion_client),
        close_resources=close_resources,
    )
