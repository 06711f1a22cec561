"""Tests for the analysis proxy endpoint."""

import base64
import json

import pytest
from fastapi.testclient import TestClient

from calorie_lens.api.app import create_app
from calorie_lens.domain.errors import (
    EmptyResponseError,
    NetworkError,
    ProviderError,
    UnauthenticatedError,
)
from tests.conftest import JPEG_BYTES, FakeCompletionClient, nutrition_payload

IMAGE_BASE64 = base64.b64encode(JPEG_BYTES).decode()

CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, Authorization",
}


def _assert_cors(response) -> None:
    for name, value in CORS.items():
        assert response.headers[name] == value


def test_post_returns_nutrition_record(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 200
    assert response.json() == nutrition_payload()
    assert response.headers["content-type"] == "application/json"
    _assert_cors(response)


def test_options_preflight(container) -> None:
    client = TestClient(create_app(container))

    response = client.options("/anything")

    assert response.status_code == 200
    assert response.content == b""
    _assert_cors(response)


@pytest.mark.parametrize("method", ["get", "put", "delete", "patch", "trace"])
def test_other_methods_not_allowed(container, method: str) -> None:
    client = TestClient(create_app(container))

    response = client.request(method.upper(), "/")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    _assert_cors(response)


@pytest.mark.parametrize(
    "body", [{}, {"imageBase64": ""}, {"imageBase64": None}, {"imageBase64": 12}]
)
def test_missing_image_is_bad_request(container, body: dict) -> None:
    client = TestClient(create_app(container))

    response = client.post("/", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Image data is required"}
    _assert_cors(response)


def test_invalid_image_is_bad_request(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": "abcd"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid image data"}


def test_missing_server_key(container) -> None:
    container.analysis_service = None
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key not configured"}


@pytest.mark.parametrize(
    "error",
    [
        UnauthenticatedError("invalid api key"),
        ProviderError(502, "bad gateway"),
        NetworkError("down"),
    ],
)
def test_provider_failures_hide_details(
    container, completion_client: FakeCompletionClient, error
) -> None:
    completion_client.error = error
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze image"}


def test_empty_completion(container, completion_client: FakeCompletionClient) -> None:
    completion_client.error = EmptyResponseError("empty")
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 500
    assert response.json() == {"error": "No analysis received from OpenAI"}


@pytest.mark.parametrize(
    "text", ["I think this is a salad", '{"foodName": "Salad", "calories": 300}']
)
def test_unparseable_output(
    container, completion_client: FakeCompletionClient, text: str
) -> None:
    completion_client.text = text
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse analysis results"}


def test_unreadable_body_is_internal_error(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    _assert_cors(response)


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_non_finite_numbers_are_unparseable(
    container, completion_client: FakeCompletionClient
) -> None:
    payload = nutrition_payload()
    payload["calories"] = float("inf")
    completion_client.text = json.dumps(payload)
    client = TestClient(create_app(container))

    response = client.post("/", json={"imageBase64": IMAGE_BASE64})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse analysis results"}


def test_wrong_method_on_other_route(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/health")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
