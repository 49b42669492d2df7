from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lacura.core.dependencies import get_ingest_service, get_search_gateway
from lacura.schemas.search import IngestRequest, SearchRequest, SearchResponse
from lacura.services.ingest_service import IngestService
from lacura.services.search_gateway import SearchGateway

router = APIRouter(tags=["Content Index"])


@router.post("/ingest")
async def ingest(
    request: IngestRequest,
    service: IngestService = Depends(get_ingest_service),
):
    """Upsert site content into the search index; 207 when some documents fail."""
    result = await service.ingest(request)
    if result.failed:
        return JSONResponse(
            status_code=207,
            content={"upserted": len(result.succeeded), "failed": result.failed},
        )
    return {"upserted": len(result.succeeded)}


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    gateway: SearchGateway = Depends(get_search_gateway),
):
    results = await gateway.search(request.query, limit=request.limit)
    return SearchResponse(results=results)
