import json
import httpx
import pytest
from datetime import datetime, timezone

from lacura.core.exceptions import ConfigurationError, UpstreamError
from lacura.schemas.search import MAX_CONTENT_CHARS, SearchDocument
from lacura.services.search_gateway import SearchGateway


class FakeSearchService:
    """In-memory stand-in for the AI Search REST API."""

    def __init__(self, fail_keys=()):
        self.indexes = {}
        self.documents = {}
        self.fail_keys = set(fail_keys)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["api-key"] == "search-key"
        assert request.url.params["api-version"] == "2023-11-01"
        path = request.url.path

        if path.endswith("/docs/index"):
            results = []
            for doc in json.loads(request.content)["value"]:
                ok = doc["id"] not in self.fail_keys
                if ok:
                    self.documents[doc["id"]] = doc
                results.append({"key": doc["id"], "status": ok, "statusCode": 200 if ok else 400,
                                "errorMessage": None if ok else "Invalid document"})
            status = 207 if any(not r["status"] for r in results) else 200
            return httpx.Response(status, json={"value": results})

        if path.endswith("/docs/search"):
            query = json.loads(request.content)["search"].lower()
            top = json.loads(request.content)["top"]
            hits = [d for d in self.documents.values() if query in d["content"].lower()]
            return httpx.Response(200, json={"value": hits[:top]})

        name = path.rsplit("/", 1)[-1]
        if request.method == "GET":
            if name in self.indexes:
                return httpx.Response(200, json=self.indexes[name])
            return httpx.Response(404, json={"error": {"code": "ResourceNotFound"}})
        if request.method == "PUT":
            self.indexes[name] = json.loads(request.content)
            return httpx.Response(201, json=self.indexes[name])
        return httpx.Response(400)


def make_gateway(settings, service):
    return SearchGateway(settings, transport=httpx.MockTransport(service))


def doc(id, content, **kwargs):
    return SearchDocument(id=id, content=content, timestamp=datetime(2024, 11, 4, tzinfo=timezone.utc), **kwargs)


@pytest.mark.asyncio
async def test_ensure_index_is_idempotent(settings):
    service = FakeSearchService()
    gateway = make_gateway(settings, service)

    assert await gateway.ensure_index() is True
    schema = dict(service.indexes["content"])
    assert await gateway.ensure_index() is False

    assert service.indexes["content"] == schema
    assert [f["name"] for f in schema["fields"]] == ["id", "content", "source", "title", "timestamp"]
    assert [r.method for r in service.requests] == ["GET", "PUT", "GET"]


@pytest.mark.asyncio
async def test_upsert_then_search_finds_document(settings):
    service = FakeSearchService()
    gateway = make_gateway(settings, service)

    result = await gateway.upsert([doc("a1", "Gentle detox sessions every Monday", title="Detox")])
    found = await gateway.search("detox")

    assert result.succeeded == ["a1"]
    assert result.failed == []
    assert [d.id for d in found] == ["a1"]
    assert found[0].title == "Detox"
    assert found[0].timestamp == datetime(2024, 11, 4, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_upsert_reports_partial_failure(settings):
    service = FakeSearchService(fail_keys={"bad"})
    gateway = make_gateway(settings, service)

    result = await gateway.upsert([doc("good", "fine"), doc("bad", "broken")])

    assert result.succeeded == ["good"]
    assert result.failed == ["bad"]
    payload = json.loads(service.requests[0].content)
    assert all(d["@search.action"] == "mergeOrUpload" for d in payload["value"])


@pytest.mark.asyncio
async def test_upsert_error_status_raises(settings):
    gateway = make_gateway(settings, lambda request: httpx.Response(503, json={}))

    with pytest.raises(UpstreamError):
        await gateway.upsert([doc("a1", "text")])


def test_content_is_truncated_not_rejected():
    document = SearchDocument(id="long", content="x" * (MAX_CONTENT_CHARS + 500))
    assert len(document.content) == MAX_CONTENT_CHARS


def test_requires_configuration(settings_factory):
    with pytest.raises(ConfigurationError):
        SearchGateway(settings_factory(AI_SEARCH_ENDPOINT=None))
