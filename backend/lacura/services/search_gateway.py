import httpx
from typing import List, Optional, Dict, Any

from lacura.core.config import Settings
from lacura.core.exceptions import ConfigurationError, UpstreamError
from lacura.schemas.search import SearchDocument, UpsertResult
from lacura.utils.datetime_utils import format_iso_z, parse_iso_datetime
from lacura.utils.logger import get_logger

logger = get_logger("search_gateway")

# Minimal text index (BM25). Vector fields can be added later.
INDEX_FIELDS: List[Dict[str, Any]] = [
    {"name": "id", "type": "Edm.String", "key": True, "filterable": True},
    {"name": "content", "type": "Edm.String", "searchable": True},
    {"name": "source", "type": "Edm.String", "filterable": True, "facetable": True},
    {"name": "title", "type": "Edm.String", "searchable": True},
    {"name": "timestamp", "type": "Edm.DateTimeOffset", "filterable": True, "sortable": True},
]


class SearchGateway:
    """Azure AI Search over its REST API: one keyword index of site content."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not settings.search_configured:
            raise ConfigurationError("AI Search not configured")
        self.settings = settings
        self.endpoint = settings.AI_SEARCH_ENDPOINT.rstrip("/")
        self.index_name = settings.AI_SEARCH_INDEX
        self.params = {"api-version": settings.AI_SEARCH_API_VERSION}
        self.headers = {
            "api-key": settings.AI_SEARCH_API_KEY,
            "Content-Type": "application/json",
        }
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.endpoint, headers=self.headers, params=self.params, transport=self._transport)

    def index_definition(self) -> Dict[str, Any]:
        return {"name": self.index_name, "fields": INDEX_FIELDS}

    async def ensure_index(self) -> bool:
        """Create the index if it is missing. Returns True when it was created."""
        async with self._client() as client:
            response = await client.get(f"/indexes/{self.index_name}")
            if response.status_code == 200:
                return False
            if response.status_code != 404:
                raise UpstreamError(f"Index lookup failed with status {response.status_code}", upstream_status=response.status_code)

            response = await client.put(f"/indexes/{self.index_name}", json=self.index_definition())
            if response.is_error:
                raise UpstreamError(f"Index creation failed with status {response.status_code}", upstream_status=response.status_code)

        logger.info(f"Created AI Search index '{self.index_name}'.")
        return True

    async def upsert(self, documents: List[SearchDocument]) -> UpsertResult:
        if not documents:
            return UpsertResult()

        payload = {
            "value": [
                {
                    "@search.action": "mergeOrUpload",
                    "id": doc.id,
                    "content": doc.content,
                    "source": doc.source,
                    "title": doc.title,
                    "timestamp": format_iso_z(doc.timestamp) if doc.timestamp else None,
                }
                for doc in documents
            ]
        }

        async with self._client() as client:
            response = await client.post(f"/indexes/{self.index_name}/docs/index", json=payload)

        # 207 means some documents failed; the per-document statuses say which
        if response.status_code not in (200, 207):
            raise UpstreamError(f"Document upload failed with status {response.status_code}", upstream_status=response.status_code)

        result = UpsertResult()
        for item in response.json().get("value", []):
            key = item.get("key")
            if item.get("status"):
                result.succeeded.append(key)
            else:
                logger.warning(f"Document {key} failed to index: {item.get('errorMessage')}")
                result.failed.append(key)
        return result

    async def search(self, query: str, limit: int = 5) -> List[SearchDocument]:
        body = {
            "search": query,
            "queryType": "simple",
            "searchMode": "any",
            "top": limit,
            "select": "id,content,source,title,timestamp",
        }
        async with self._client() as client:
            response = await client.post(f"/indexes/{self.index_name}/docs/search", json=body)
        if response.is_error:
            raise UpstreamError(f"Search failed with status {response.status_code}", upstream_status=response.status_code)

        results = []
        for item in response.json().get("value", []):
            ts = item.get("timestamp")
            results.append(SearchDocument(
                id=item["id"],
                content=item.get("content") or "",
                source=item.get("source") or "manual",
                title=item.get("title"),
                timestamp=parse_iso_datetime(ts) if ts else None,
            ))
        return results
