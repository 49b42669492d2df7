from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

MAX_CONTENT_CHARS = 8000

class SearchDocument(BaseModel):
    id: str
    content: str = ""
    source: str = "manual"
    title: Optional[str] = None
    timestamp: Optional[datetime] = None

    @field_validator("content", mode="before")
    @classmethod
    def truncate_content(cls, value):
        # Overflow is truncated on ingest, never rejected
        if value is None:
            return ""
        return str(value)[:MAX_CONTENT_CHARS]

class UpsertResult(BaseModel):
    succeeded: List[str] = []
    failed: List[str] = []

class IngestDocument(BaseModel):
    id: Optional[str] = None
    content: Optional[str] = None
    source: Optional[str] = None
    title: Optional[str] = None

class IngestRequest(BaseModel):
    documents: Optional[List[IngestDocument]] = None
    text: Optional[str] = None
    source: Optional[str] = None
    title: Optional[str] = None

class SearchRequest(BaseModel):
    query: str
    limit: int = Field(5, gt=0, le=50)

class SearchResponse(BaseModel):
    results: List[SearchDocument]
