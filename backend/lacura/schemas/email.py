from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = None
    subject: Optional[str] = None
    html: Optional[str] = None
    sender: Optional[str] = Field(None, alias="from")

class SendEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: Optional[str] = Field(None, alias="messageId")
    status: str
