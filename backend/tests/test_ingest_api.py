from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from lacura.core.dependencies import get_ingest_service, get_search_gateway
from lacura.main import app
from lacura.schemas.search import SearchDocument, UpsertResult
from lacura.services.ingest_service import IngestService


@pytest.fixture
def gateway():
    mock = MagicMock()
    mock.ensure_index = AsyncMock(return_value=False)
    mock.upsert = AsyncMock(side_effect=lambda docs: UpsertResult(succeeded=[d.id for d in docs]))
    mock.search = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_ingest_service] = lambda: IngestService(gateway)
    app.dependency_overrides[get_search_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_ingest_documents(client, gateway):
    response = client.post("/ingest", json={"documents": [
        {"id": "faq-1", "content": "Sessions are 30 minutes", "title": "FAQ"},
        {"content": "We are closed on weekends"},
    ]})

    assert response.status_code == 200
    assert response.json() == {"upserted": 2}
    gateway.ensure_index.assert_awaited_once()
    docs = gateway.upsert.call_args[0][0]
    assert docs[0].id == "faq-1"
    assert docs[1].id.endswith("-1")
    assert docs[1].source == "manual"
    assert docs[1].timestamp is not None


def test_ingest_single_text(client, gateway):
    response = client.post("/ingest", json={"text": "Hello", "source": "newsletter", "title": "Issue 1"})

    assert response.json() == {"upserted": 1}
    doc = gateway.upsert.call_args[0][0][0]
    assert (doc.content, doc.source, doc.title) == ("Hello", "newsletter", "Issue 1")


def test_ingest_partial_failure_returns_207(client, gateway):
    gateway.upsert.side_effect = None
    gateway.upsert.return_value = UpsertResult(succeeded=["a"], failed=["b"])

    response = client.post("/ingest", json={"documents": [{"id": "a", "content": "x"}, {"id": "b", "content": "y"}]})

    assert response.status_code == 207
    assert response.json() == {"upserted": 1, "failed": ["b"]}


def test_ingest_without_content_is_bad_request(client, gateway):
    response = client.post("/ingest", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "No content provided"}
    gateway.upsert.assert_not_called()


def test_search(client, gateway):
    gateway.search.return_value = [SearchDocument(id="faq-1", content="Sessions are 30 minutes")]

    response = client.post("/search", json={"query": "sessions", "limit": 2})

    assert response.status_code == 200
    assert response.json()["results"][0]["id"] == "faq-1"
    gateway.search.assert_awaited_once_with("sessions", limit=2)


def test_search_limit_is_validated(client):
    response = client.post("/search", json={"query": "sessions", "limit": 0})
    assert response.status_code == 400
