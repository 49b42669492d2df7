from fastapi import APIRouter, Depends

from lacura.core.dependencies import get_orchestrator
from lacura.schemas.chat import ChatAskRequest, ChatAskResponse
from lacura.services.chat import ConversationOrchestrator

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("/ask", response_model=ChatAskResponse)
async def ask(
    request: ChatAskRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    """
    One assistant turn for the booking chat.

    The client sends the full message history each time and echoes back the
    `state` token from the previous response.
    """
    reply = await orchestrator.reply(request.messages, state_token=request.state)
    return ChatAskResponse(message=reply.message, state=reply.state_token)
