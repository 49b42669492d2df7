from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, Dict
from enum import Enum

class ContentType(str, Enum):
    SOCIAL_POST = "social_post"
    NEWSLETTER = "newsletter"
    EMAIL_SEQUENCE = "email_sequence"
    BLOG_POST = "blog_post"

class ContentLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

class ContentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Optional[ContentType] = None
    topic: Optional[str] = None
    tone: Optional[str] = None
    practice_type: Optional[str] = Field(None, alias="practiceType")
    target_audience: Optional[str] = Field(None, alias="targetAudience")
    length: ContentLength = ContentLength.MEDIUM

class ContentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Any
    type: ContentType
    generated_at: str = Field(alias="generatedAt")
    metadata: Dict[str, Any]
