from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from lacura.core.config import Settings
from lacura.providers.base import LLMProvider
from lacura.schemas.chat import ChatMessage, Intent
from lacura.services.microsoft_graph import MicrosoftGraphClient
from lacura.services.search_gateway import SearchGateway
from lacura.utils.logger import get_logger
from . import prompts
from .context_builder import ContextBuilder
from .intent import IntentResult, classify_intent
from .state import ConversationState

logger = get_logger("orchestrator")


@dataclass
class ChatReply:
    message: ChatMessage
    state: ConversationState
    intent: Intent

    @property
    def state_token(self) -> str:
        return self.state.to_token()


class ConversationOrchestrator:
    """
    One assistant turn of the booking chat.

    Classifies the request, advances the conversation state, gathers
    availability and reference context, then asks the model to phrase the
    reply. Never touches the calendar beyond reading availability; bookings
    are created by the booking endpoints once the user confirms.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[LLMProvider],
        calendar: Optional[MicrosoftGraphClient],
        search: Optional[SearchGateway] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings
        self.provider = provider
        self.context_builder = ContextBuilder(settings, calendar, search)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def reply(self, messages: Sequence[ChatMessage], state_token: Optional[str] = None) -> ChatReply:
        messages = list(messages)
        result = classify_intent(messages)
        logger.info(f"Processing user message: {result.log_fields()}")

        previous_state = self._previous_state(messages, state_token)

        if result.intent == Intent.UNRELATED:
            return self._reply(prompts.UNRELATED_REPLY, previous_state, result.intent)

        state = previous_state.advance(result)
        logger.info(f"Conversation state: workflow={state.workflow.value}, step={state.step.value}")

        if self.provider is None:
            logger.warning("Language model not configured, using scripted reply")
            return self._reply(prompts.UNCONFIGURED_REPLIES[state.workflow], state, result.intent)

        system_prompt = await self.context_builder.build_system_prompt(result, state, self.clock())
        llm_messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        llm_messages.extend(m.model_dump() for m in messages if m.role != "system")

        content = await self._complete(llm_messages, result)
        return self._reply(content, state, result.intent)

    def _previous_state(self, messages: List[ChatMessage], state_token: Optional[str]) -> ConversationState:
        """State before the latest user turn."""
        echoed = ConversationState.from_token(state_token)
        if echoed is not None:
            return echoed

        prior: List[ChatMessage] = list(messages)
        for index in range(len(prior) - 1, -1, -1):
            if prior[index].role == "user":
                prior = prior[:index]
                break
        return ConversationState.from_history(prior)

    async def _complete(self, llm_messages: List[Dict[str, Any]], result: IntentResult) -> str:
        start = time.time()
        try:
            response = await asyncio.wait_for(
                self.provider.generate(llm_messages),
                timeout=self.settings.LLM_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Model call timed out after {self.settings.LLM_TIMEOUT_SECONDS}s")
            return prompts.LLM_TIMEOUT_REPLY
        except Exception as e:
            logger.error(f"Model call failed: {e}", exc_info=True)
            return prompts.LLM_ERROR_REPLY if result.user_text else prompts.GREETING_REPLY

        content = response.content or ""
        logger.info(
            f"Generated response in {time.time() - start:.2f}s "
            f"(length={len(content)}, usage={response.meta_data.get('usage', 'unknown')})"
        )
        if response.is_empty:
            return prompts.EMPTY_COMPLETION_REPLY
        return content

    def _reply(self, content: str, state: ConversationState, intent: Intent) -> ChatReply:
        return ChatReply(
            message=ChatMessage(role="assistant", content=content),
            state=state,
            intent=intent,
        )
