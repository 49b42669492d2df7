from pydantic import BaseModel
from typing import List, Optional, Literal
from enum import Enum

class MessageBase(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str

class ChatMessage(MessageBase):
    pass

class WorkflowType(str, Enum):
    SCHEDULE = "schedule"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"

class Intent(str, Enum):
    SCHEDULE = "schedule"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    UNRELATED = "unrelated"

class ChatAskRequest(BaseModel):
    messages: List[ChatMessage] = []
    # Opaque conversation state echoed back from a previous response
    state: Optional[str] = None

class ChatAskResponse(BaseModel):
    message: ChatMessage
    state: Optional[str] = None
