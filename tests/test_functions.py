"""Tests for the nugget functions HTTP app."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from eunoia.config.schema import Config, NuggetsConfig
from eunoia.errors import AIServiceUnavailableError
from eunoia.functions.app import create_app
from eunoia.providers.base import LLMProvider, LLMResponse
from eunoia.remote.base import LEARNING_NUGGETS
from eunoia.remote.memory_store import InMemoryDocumentStore

TITLE_CONTENT = "\n".join(f"{i}. Title: T{i}\nContent: C{i}" for i in range(1, 4))
JSON_ARRAY = '[{"title": "A", "content": "B"}, {"title": "C", "content": "D"}]'


def _provider(content: str, finish_reason: str = "stop") -> MagicMock:
    provider = MagicMock(spec=LLMProvider)
    provider.get_default_model.return_value = "test-model"
    provider.chat = AsyncMock(return_value=LLMResponse(content=content, finish_reason=finish_reason))
    return provider


def _client(store: InMemoryDocumentStore, provider: MagicMock | None = None, factory=None) -> TestClient:
    config = Config(nuggets=NuggetsConfig(nuggets_per_category=3))
    app = create_app(
        config,
        store,
        provider_factory=factory or (lambda choice: provider),
        verify_token=lambda token: "u1" if token == "good-token" else None,
    )
    return TestClient(app)


AUTH = {"Authorization": "Bearer good-token"}


def test_health(remote: InMemoryDocumentStore) -> None:
    response = _client(remote, _provider("")).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize("method", ["get", "post"])
def test_generate_new_nuggets(remote: InMemoryDocumentStore, method: str) -> None:
    client = _client(remote, _provider(TITLE_CONTENT))

    response = getattr(client, method)("/generateNewNuggets", params={"category": "health"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "category": "health", "count": 3}
    assert len(remote._collections[LEARNING_NUGGETS]) == 3


def test_generate_new_nuggets_rejects_bad_category(remote: InMemoryDocumentStore) -> None:
    client = _client(remote, _provider(TITLE_CONTENT))

    assert client.get("/generateNewNuggets").status_code == 400
    response = client.get("/generateNewNuggets", params={"category": "astrology"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or missing category"}


def test_generate_new_nuggets_reports_generation_failure(remote: InMemoryDocumentStore) -> None:
    client = _client(remote, _provider("Error calling LLM: boom", finish_reason="error"))

    response = client.get("/generateNewNuggets", params={"category": "health"})

    assert response.status_code == 500
    assert "error" in response.json()


def test_initialize_all_categories(remote: InMemoryDocumentStore) -> None:
    client = _client(remote, _provider(TITLE_CONTENT))

    first = client.post("/initializeNuggetsForAllCategories").json()
    second = client.post("/initializeNuggetsForAllCategories").json()

    assert first["total"] == 3 * len(first["results"])
    assert second["total"] == 0


def test_callable_requires_auth(remote: InMemoryDocumentStore) -> None:
    client = _client(remote, _provider(JSON_ARRAY))

    for headers in ({}, {"Authorization": "Bearer wrong"}, {"Authorization": "Basic abc"}):
        response = client.post("/generateLearningNuggets", json={"data": {"category": "health"}}, headers=headers)
        assert response.status_code == 401
        assert response.json()["error"]["status"] == "UNAUTHENTICATED"


def test_callable_generates_and_stores(remote: InMemoryDocumentStore) -> None:
    provider = _provider(JSON_ARRAY)
    client = _client(remote, provider)

    response = client.post(
        "/generateLearningNuggets",
        json={"data": {"category": "Gesundheit", "count": 2, "model": "deepseek"}},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert response.json() == {"result": {"count": 2}}
    stored = list(remote._collections[LEARNING_NUGGETS].values())
    assert {doc["title"] for doc in stored} == {"A", "C"}
    assert all(doc["category"] == "health" for doc in stored)
    assert provider.chat.await_args.kwargs["model"] == "deepseek-chat"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"category": "nope"},
        {"category": "health", "count": 0},
        {"category": "health", "count": 500},
        {"category": "health", "model": "claude"},
    ],
)
def test_callable_invalid_arguments(remote: InMemoryDocumentStore, data: dict) -> None:
    client = _client(remote, _provider(JSON_ARRAY))

    response = client.post("/generateLearningNuggets", json={"data": data}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"]["status"] == "INVALID_ARGUMENT"


def test_callable_without_provider_key(remote: InMemoryDocumentStore) -> None:
    def _factory(choice: str) -> LLMProvider:
        raise AIServiceUnavailableError(f"No API key configured for {choice}")

    client = _client(remote, factory=_factory)

    response = client.post("/generateLearningNuggets", json={"data": {"category": "health"}}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"]["status"] == "FAILED_PRECONDITION"


def test_callable_generation_failure_is_internal(remote: InMemoryDocumentStore) -> None:
    client = _client(remote, _provider("no json here"))

    response = client.post("/generateLearningNuggets", json={"data": {"category": "health"}}, headers=AUTH)

    assert response.status_code == 500
    assert response.json()["error"]["status"] == "INTERNAL"
