from __future__ import annotations

import base64
import binascii
import json
import re
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, ValidationError, model_validator

from lacura.schemas.chat import ChatMessage, Intent, WorkflowType
from lacura.utils.logger import get_logger
from .intent import IntentResult, classify_intent, explicit_workflow

logger = get_logger("conversation_state")

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
TIME_RE = re.compile(r"\b\d{1,2}(?::\d{2})?\s*(?:am|pm)\b|\b\d{1,2}:\d{2}\b", re.IGNORECASE)
ORDINAL_RE = re.compile(r"\b(first|second|third|fourth|fifth|last|\d{1,2})\b", re.IGNORECASE)
CONFIRM_RE = re.compile(r"\b(yes|yep|yeah|confirm|confirmed|correct|sure)\b|that works|sounds good|perfect", re.IGNORECASE)
DECLINE_RE = re.compile(r"\b(no|nope|not right|wrong)\b|actually", re.IGNORECASE)


class ConversationStep(str, Enum):
    IDLE = "idle"
    SCHEDULE_AWAITING_TIME = "schedule_awaiting_time"
    SCHEDULE_AWAITING_EMAIL = "schedule_awaiting_email"
    SCHEDULE_AWAITING_CONFIRMATION = "schedule_awaiting_confirmation"
    SCHEDULE_COMPLETE = "schedule_complete"
    CANCEL_AWAITING_EMAIL = "cancel_awaiting_email"
    CANCEL_AWAITING_SELECTION = "cancel_awaiting_selection"
    CANCEL_AWAITING_CONFIRMATION = "cancel_awaiting_confirmation"
    CANCEL_COMPLETE = "cancel_complete"
    RESCHEDULE_AWAITING_EMAIL = "reschedule_awaiting_email"
    RESCHEDULE_AWAITING_SELECTION = "reschedule_awaiting_selection"
    RESCHEDULE_AWAITING_TIME = "reschedule_awaiting_time"
    RESCHEDULE_AWAITING_CONFIRMATION = "reschedule_awaiting_confirmation"
    RESCHEDULE_COMPLETE = "reschedule_complete"


FIRST_STEP = {
    WorkflowType.SCHEDULE: ConversationStep.SCHEDULE_AWAITING_TIME,
    WorkflowType.CANCEL: ConversationStep.CANCEL_AWAITING_EMAIL,
    WorkflowType.RESCHEDULE: ConversationStep.RESCHEDULE_AWAITING_EMAIL,
}

COMPLETE_STEPS = {
    ConversationStep.SCHEDULE_COMPLETE,
    ConversationStep.CANCEL_COMPLETE,
    ConversationStep.RESCHEDULE_COMPLETE,
}

STEP_DESCRIPTIONS = {
    ConversationStep.IDLE: "no workflow started yet",
    ConversationStep.SCHEDULE_AWAITING_TIME: "scheduling STEP 2-3: show availability and wait for the user to pick a time",
    ConversationStep.SCHEDULE_AWAITING_EMAIL: "scheduling STEP 4: a time is selected, ask for the email address",
    ConversationStep.SCHEDULE_AWAITING_CONFIRMATION: "scheduling STEP 5: time and email captured, summarize and ask for confirmation",
    ConversationStep.SCHEDULE_COMPLETE: "scheduling STEP 6: the user confirmed, tell them the appointment is confirmed",
    ConversationStep.CANCEL_AWAITING_EMAIL: "cancel STEP 1-2: ask for the booking email address",
    ConversationStep.CANCEL_AWAITING_SELECTION: "cancel STEP 3: list the appointments and ask which one to cancel",
    ConversationStep.CANCEL_AWAITING_CONFIRMATION: "cancel STEP 4: confirm the selected appointment should be cancelled",
    ConversationStep.CANCEL_COMPLETE: "cancel STEP 5: the user confirmed, tell them the appointment is cancelled",
    ConversationStep.RESCHEDULE_AWAITING_EMAIL: "reschedule STEP 1-2: ask for the booking email address",
    ConversationStep.RESCHEDULE_AWAITING_SELECTION: "reschedule STEP 3: list the appointments and ask which one to move",
    ConversationStep.RESCHEDULE_AWAITING_TIME: "reschedule STEP 4-6: ask for / show new times and wait for a selection",
    ConversationStep.RESCHEDULE_AWAITING_CONFIRMATION: "reschedule STEP 7: summarize old and new time and ask for confirmation",
    ConversationStep.RESCHEDULE_COMPLETE: "reschedule STEP 8: the user confirmed, tell them the appointment was moved",
}


def extract_email(text: str) -> Optional[str]:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def extract_time(text: str) -> Optional[str]:
    match = TIME_RE.search(text)
    return match.group(0).strip() if match else None


def extract_selection(text: str) -> Optional[str]:
    match = ORDINAL_RE.search(text)
    if match:
        return match.group(1).lower()
    return extract_time(text)


class ConversationState(BaseModel):
    """
    Slot-filling record for one booking conversation.

    It is never stored server-side: it is either echoed back by the client
    as an opaque token or re-derived from the message history.
    """
    workflow: Optional[WorkflowType] = None
    step: ConversationStep = ConversationStep.IDLE
    email: Optional[str] = None
    selected_time: Optional[str] = None
    selected_booking: Optional[str] = None
    confirmed: bool = False

    @model_validator(mode="after")
    def _step_matches_workflow(self) -> "ConversationState":
        if self.workflow is None:
            if self.step != ConversationStep.IDLE:
                raise ValueError(f"step {self.step.value} without a workflow")
        elif not self.step.value.startswith(f"{self.workflow.value}_"):
            raise ValueError(f"step {self.step.value} does not belong to the {self.workflow.value} workflow")
        return self

    @property
    def is_complete(self) -> bool:
        return self.step in COMPLETE_STEPS

    @property
    def ready_to_book(self) -> bool:
        return (
            self.workflow == WorkflowType.SCHEDULE
            and bool(self.selected_time)
            and bool(self.email)
            and self.confirmed
        )

    # ----------------------------
    # Transitions
    # ----------------------------

    def start(self, workflow: WorkflowType) -> "ConversationState":
        return ConversationState(workflow=workflow, step=FIRST_STEP[workflow])

    def advance(self, result: IntentResult) -> "ConversationState":
        """Apply one user turn and return the next state."""
        if result.intent == Intent.UNRELATED:
            return self

        text = result.user_text
        requested = explicit_workflow(text)

        state = self
        if state.workflow is None or state.is_complete:
            state = state.start(requested or result.workflow)
        elif requested and requested != state.workflow:
            logger.info(f"Workflow switch {state.workflow.value} -> {requested.value}")
            state = state.start(requested)

        state = state.model_copy()
        email = extract_email(text)
        confirmed = bool(CONFIRM_RE.search(text))
        declined = bool(DECLINE_RE.search(text)) and not confirmed

        if state.workflow == WorkflowType.SCHEDULE:
            state._advance_schedule(text, email, confirmed, declined)
        elif state.workflow == WorkflowType.CANCEL:
            state._advance_cancel(text, email, confirmed, declined)
        elif state.workflow == WorkflowType.RESCHEDULE:
            state._advance_reschedule(text, email, confirmed, declined)
        return state

    def _advance_schedule(self, text: str, email: Optional[str], confirmed: bool, declined: bool) -> None:
        # An email given early is kept; the workflow still asks for the time first
        if email:
            self.email = email
        selected = extract_time(text)

        if self.step == ConversationStep.SCHEDULE_AWAITING_TIME:
            if selected:
                self.selected_time = selected
                self.step = (
                    ConversationStep.SCHEDULE_AWAITING_CONFIRMATION if self.email
                    else ConversationStep.SCHEDULE_AWAITING_EMAIL
                )
        elif self.step == ConversationStep.SCHEDULE_AWAITING_EMAIL:
            if selected:
                self.selected_time = selected
            if self.email:
                self.step = ConversationStep.SCHEDULE_AWAITING_CONFIRMATION
        elif self.step == ConversationStep.SCHEDULE_AWAITING_CONFIRMATION:
            if confirmed:
                self.confirmed = True
                self.step = ConversationStep.SCHEDULE_COMPLETE
            elif declined or selected:
                self.selected_time = selected
                self.step = (
                    ConversationStep.SCHEDULE_AWAITING_CONFIRMATION if selected
                    else ConversationStep.SCHEDULE_AWAITING_TIME
                )

    def _advance_cancel(self, text: str, email: Optional[str], confirmed: bool, declined: bool) -> None:
        if self.step == ConversationStep.CANCEL_AWAITING_EMAIL:
            if email:
                self.email = email
                self.step = ConversationStep.CANCEL_AWAITING_SELECTION
        elif self.step == ConversationStep.CANCEL_AWAITING_SELECTION:
            selection = extract_selection(text)
            if selection:
                self.selected_booking = selection
                self.step = ConversationStep.CANCEL_AWAITING_CONFIRMATION
        elif self.step == ConversationStep.CANCEL_AWAITING_CONFIRMATION:
            if confirmed:
                self.confirmed = True
                self.step = ConversationStep.CANCEL_COMPLETE
            elif declined:
                self.selected_booking = None
                self.step = ConversationStep.CANCEL_AWAITING_SELECTION

    def _advance_reschedule(self, text: str, email: Optional[str], confirmed: bool, declined: bool) -> None:
        if self.step == ConversationStep.RESCHEDULE_AWAITING_EMAIL:
            if email:
                self.email = email
                self.step = ConversationStep.RESCHEDULE_AWAITING_SELECTION
        elif self.step == ConversationStep.RESCHEDULE_AWAITING_SELECTION:
            selection = extract_selection(text)
            if selection:
                self.selected_booking = selection
                self.step = ConversationStep.RESCHEDULE_AWAITING_TIME
        elif self.step == ConversationStep.RESCHEDULE_AWAITING_TIME:
            selected = extract_time(text)
            if selected:
                self.selected_time = selected
                self.step = ConversationStep.RESCHEDULE_AWAITING_CONFIRMATION
        elif self.step == ConversationStep.RESCHEDULE_AWAITING_CONFIRMATION:
            if confirmed:
                self.confirmed = True
                self.step = ConversationStep.RESCHEDULE_COMPLETE
            elif declined:
                self.selected_time = None
                self.step = ConversationStep.RESCHEDULE_AWAITING_TIME

    # ----------------------------
    # Prompt + wire helpers
    # ----------------------------

    def describe(self) -> str:
        if self.workflow is None:
            return ""
        lines = [
            "CONVERSATION STATE (tracked by the booking system, treat as authoritative):",
            f"- Workflow: {self.workflow.value}",
            f"- Current step: {STEP_DESCRIPTIONS[self.step]}",
            f"- Email: {self.email or 'not provided yet'}",
        ]
        if self.workflow != WorkflowType.SCHEDULE:
            lines.append(f"- Selected appointment: {self.selected_booking or 'not selected yet'}")
        if self.workflow != WorkflowType.CANCEL:
            lines.append(f"- Selected time: {self.selected_time or 'not selected yet'}")
        lines.append(f"- User confirmed: {'yes' if self.confirmed else 'no'}")
        lines.append("Continue the script from the current step. Do not skip steps that are not complete.")
        return "\n".join(lines)

    def to_token(self) -> str:
        raw = json.dumps(self.model_dump(mode="json"), separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")

    @classmethod
    def from_token(cls, token: Optional[str]) -> Optional["ConversationState"]:
        if not token:
            return None
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
            return cls.model_validate(json.loads(raw))
        except (binascii.Error, ValueError, UnicodeError, ValidationError) as e:
            logger.warning(f"Ignoring invalid conversation state token: {e}")
            return None

    @classmethod
    def from_history(cls, messages: Sequence[ChatMessage]) -> "ConversationState":
        """Replay every earlier user turn through the state machine."""
        state = cls()
        history: List[ChatMessage] = []
        for message in messages:
            history.append(message)
            if message.role == "user":
                state = state.advance(classify_intent(history))
        return state
