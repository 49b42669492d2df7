from fastapi import APIRouter

from lacura.schemas.content import ContentRequest, ContentResponse
from lacura.services.content_generator import generate_content

router = APIRouter(prefix="/content", tags=["Content"])


@router.post("/generate", response_model=ContentResponse, response_model_by_alias=True)
async def generate(request: ContentRequest):
    return generate_content(request)
