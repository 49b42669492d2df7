import time
from datetime import datetime, timezone
from typing import List

from lacura.core.exceptions import BadRequestError
from lacura.schemas.search import IngestRequest, SearchDocument, UpsertResult
from lacura.services.search_gateway import SearchGateway
from lacura.utils.logger import get_logger

logger = get_logger("ingest_service")


def shape_documents(request: IngestRequest) -> List[SearchDocument]:
    """Normalise either a document list or a single `text` body into index documents."""
    if request.documents:
        raw = request.documents
    elif request.text:
        raw = [{"content": request.text, "source": request.source, "title": request.title}]
    else:
        raw = []

    if not raw:
        raise BadRequestError("No content provided")

    now = datetime.now(timezone.utc)
    stamp = int(time.time() * 1000)
    documents = []
    for i, doc in enumerate(raw):
        data = doc if isinstance(doc, dict) else doc.model_dump()
        documents.append(SearchDocument(
            id=data.get("id") or f"{stamp}-{i}",
            content=data.get("content") or "",
            source=data.get("source") or "manual",
            title=data.get("title"),
            timestamp=now,
        ))
    return documents


class IngestService:
    def __init__(self, search: SearchGateway):
        self.search = search

    async def ingest(self, request: IngestRequest) -> UpsertResult:
        documents = shape_documents(request)
        await self.search.ensure_index()
        result = await self.search.upsert(documents)
        logger.info(f"Ingested {len(result.succeeded)} documents, {len(result.failed)} failed")
        return result
