from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import List, Optional

from lacura.core.config import Settings
from lacura.schemas.chat import WorkflowType
from lacura.services.availability import calculate_available_slots, format_available_slots, window_for_text
from lacura.services.microsoft_graph import MicrosoftGraphClient
from lacura.services.search_gateway import SearchGateway
from lacura.utils.logger import get_logger
from . import prompts
from .intent import IntentResult
from .state import ConversationState

logger = get_logger("context_builder")

NOTE_MAX_CHARS = 500


class ContextBuilder:
    """Builds the system prompt: base rules, workflow script, state, availability and notes."""

    def __init__(
        self,
        settings: Settings,
        calendar: Optional[MicrosoftGraphClient],
        search: Optional[SearchGateway] = None,
    ):
        self.settings = settings
        self.calendar = calendar
        self.search = search

    async def build_system_prompt(self, result: IntentResult, state: ConversationState, now: datetime) -> str:
        start_time = time.time()
        # An active flow outranks the per-turn keyword guess
        workflow = state.workflow or result.workflow
        sections: List[str] = [
            prompts.base_prompt(self.settings.AI_ASSISTANT_TONE),
            prompts.WORKFLOW_SCRIPTS[workflow],
        ]

        state_summary = state.describe()
        if state_summary:
            sections.append(state_summary)

        if workflow in (WorkflowType.SCHEDULE, WorkflowType.RESCHEDULE) and not result.is_booking_confirmation:
            sections.append(await self.availability_context(result.user_text, now))

        notes = await self.reference_context(result.user_text)
        if notes:
            sections.append(notes)

        logger.info(f"Context build took {time.time() - start_time:.4f}s. Sections: {len(sections)}.")
        return "\n\n".join(sections)

    async def availability_context(self, user_text: str, now: datetime) -> str:
        start, end, mentioned = window_for_text(user_text, now)
        logger.info(
            f"Checking availability {start.isoformat()} -> {end.isoformat()} "
            f"(user mentioned date: {mentioned.date is not None}, time: {mentioned.has_time})"
        )

        if self.calendar is None:
            logger.warning("Calendar gateway not configured, skipping availability check")
            return prompts.AVAILABILITY_UNAVAILABLE

        try:
            slots = await asyncio.wait_for(
                self._available_slots(start, end),
                timeout=self.settings.AVAILABILITY_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Availability check timed out after {self.settings.AVAILABILITY_TIMEOUT_SECONDS}s")
            return prompts.AVAILABILITY_UNAVAILABLE
        except Exception as e:
            logger.error(f"Availability check failed: {e}")
            return prompts.AVAILABILITY_UNAVAILABLE

        if not slots:
            return prompts.AVAILABILITY_EMPTY
        return prompts.AVAILABILITY_FOUND.format(slots=format_available_slots(slots))

    async def _available_slots(self, start: datetime, end: datetime) -> List[datetime]:
        busy = await self.calendar.get_free_busy(start, end)
        slots = calculate_available_slots(start, end, busy)
        logger.info(f"Generated {len(slots)} available slots from {len(busy)} busy intervals")
        return slots

    async def reference_context(self, user_text: str) -> str:
        if not (self.search and self.settings.CHAT_SEARCH_ENABLED and user_text.strip()):
            return ""
        try:
            documents = await self.search.search(user_text, limit=self.settings.CHAT_SEARCH_TOP)
        except Exception as e:
            logger.error(f"Reference search failed: {e}")
            return ""
        if not documents:
            return ""

        lines = []
        for doc in documents:
            content = doc.content.strip()
            if len(content) > NOTE_MAX_CHARS:
                content = content[:NOTE_MAX_CHARS - 3] + "..."
            title = f"{doc.title}: " if doc.title else ""
            lines.append(f"- {title}{content}")
        return prompts.REFERENCE_NOTES.format(notes="\n".join(lines))
