"""
Keyword prefilter for the booking assistant.

The classifier only decides which workflow script the model receives and
whether the request is turned away with the static appointments-only reply.
The model is expected to reinterpret ambiguous wording itself, so the rules
here stay deliberately coarse and order-sensitive.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from lacura.schemas.chat import ChatMessage, Intent, WorkflowType

MAX_USER_TEXT_CHARS = 1000
EARLY_CONVERSATION_MESSAGES = 3

_AM_PM_RE = re.compile(r"\d+\s*(am|pm)", re.IGNORECASE)
_DIGIT_RE = re.compile(r"\d+")
_CLOCK_TIME_RE = re.compile(r"\d{1,2}:\d{2}")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

SCHEDULING_FLOW_MARKERS = ("schedule", "available", "slots", "date or time")

SCHEDULE_KEYWORDS = (
    "schedule",
    "book",
    "booking",
    "set up",
    "make an appointment",
    "need an appointment",
    "want to see",
    "get a time",
    "available time",
    "when are you available",
)
SCHEDULE_CONTINUATIONS = (
    "propose",
    "suggest",
    "show me",
    "what times",
    "what slots",
    "any time",
    "any slot",
    "prefer",
    "date",
    "time",
    "tomorrow",
) + WEEKDAYS

CANCEL_KEYWORDS = ("cancel", "remove", "delete", "can't make it", "cannot make it")
CANCEL_CONTINUATIONS = ("@", "first", "second", "yes", "confirm")

RESCHEDULE_KEYWORDS = (
    "reschedule",
    "move",
    "change",
    "different time",
    "different date",
    "another time",
    "another date",
)
RESCHEDULE_CONTINUATIONS = ("@", "prefer", "date", "time")

GREETING_WORDS = ("hi", "hello", "help")

UNRELATED_KEYWORDS = (
    "info about",
    "tell me about",
    "nutrition",
    "diet",
    "recipe",
    "ingredient",
    "menu",
    "price",
    "cost",
    "how much",
)

CONFIRMATION_PHRASES = ("@", "yes", "confirm", "that works", "sounds good", "perfect")


def _contains_any(text: str, needles: Sequence[str]) -> bool:
    return any(n in text for n in needles)


@dataclass
class IntentResult:
    intent: Intent
    workflow: WorkflowType
    user_text: str
    in_scheduling_flow: bool = False
    in_cancel_flow: bool = False
    in_reschedule_flow: bool = False
    is_schedule_query: bool = False
    is_cancel_query: bool = False
    is_reschedule_query: bool = False
    is_unrelated: bool = False
    is_early_conversation: bool = False
    is_general_greeting: bool = False
    is_booking_confirmation: bool = False

    @property
    def is_booking_query(self) -> bool:
        return self.is_schedule_query or self.is_cancel_query or self.is_reschedule_query

    def log_fields(self) -> dict:
        return {
            "intent": self.intent.value,
            "workflow": self.workflow.value,
            "userText": self.user_text[:100],
            "isScheduleQuery": self.is_schedule_query,
            "isCancelQuery": self.is_cancel_query,
            "isRescheduleQuery": self.is_reschedule_query,
            "isBookingQuery": self.is_booking_query,
            "isEarlyConversation": self.is_early_conversation,
            "inSchedulingFlow": self.in_scheduling_flow,
            "inCancelFlow": self.in_cancel_flow,
            "inRescheduleFlow": self.in_reschedule_flow,
            "isUnrelated": self.is_unrelated,
        }


def last_message(messages: Sequence[ChatMessage], role: str) -> Optional[ChatMessage]:
    for message in reversed(messages):
        if message.role == role:
            return message
    return None


def last_user_text(messages: Sequence[ChatMessage]) -> str:
    message = last_message(messages, "user")
    return (message.content if message else "")[:MAX_USER_TEXT_CHARS]


def flow_flags(previous_assistant: str) -> tuple:
    """(in_scheduling_flow, in_cancel_flow, in_reschedule_flow) from the last assistant turn."""
    text = previous_assistant.lower()
    in_scheduling = _contains_any(text, SCHEDULING_FLOW_MARKERS)
    in_cancel = "cancel" in text and "email" in text
    in_reschedule = "reschedule" in text and "email" in text
    return in_scheduling, in_cancel, in_reschedule


def is_unrelated_topic(lower: str) -> bool:
    if _contains_any(lower, UNRELATED_KEYWORDS):
        return True
    if "what is" in lower and ("service" in lower or "practice" in lower):
        return True
    if "practice" in lower and "appointment" not in lower:
        return True
    if "service" in lower and "appointment" not in lower:
        return True
    return False


def is_booking_confirmation(lower: str) -> bool:
    return _contains_any(lower, CONFIRMATION_PHRASES) or bool(_CLOCK_TIME_RE.search(lower))


def classify_intent(messages: Sequence[ChatMessage]) -> IntentResult:
    user_text = last_user_text(messages)
    lower = user_text.lower()

    previous = last_message(messages, "assistant")
    in_scheduling, in_cancel, in_reschedule = flow_flags(previous.content if previous else "")

    early = len(messages) <= EARLY_CONVERSATION_MESSAGES

    schedule_keywords = _contains_any(lower, SCHEDULE_KEYWORDS) or (
        "appointment" in lower and "cancel" not in lower and "reschedule" not in lower
    )
    schedule_continuation = in_scheduling and (
        _contains_any(lower, SCHEDULE_CONTINUATIONS) or bool(_AM_PM_RE.search(lower))
    )
    early_greeting = early and _contains_any(lower, GREETING_WORDS)
    is_schedule = schedule_keywords or schedule_continuation or early_greeting

    is_cancel = _contains_any(lower, CANCEL_KEYWORDS) or (
        in_cancel and (_contains_any(lower, CANCEL_CONTINUATIONS) or bool(_DIGIT_RE.search(lower)))
    )

    is_reschedule = _contains_any(lower, RESCHEDULE_KEYWORDS) or (
        in_reschedule and (_contains_any(lower, RESCHEDULE_CONTINUATIONS) or bool(_DIGIT_RE.search(lower)))
    )

    stripped = lower.strip()
    general_greeting = early and len(stripped) < 10

    # The greeting clause is left out here so FAQ questions are not let through by "hi" substrings
    explicit_booking = schedule_keywords or schedule_continuation or is_cancel or is_reschedule
    unrelated = (
        bool(stripped)
        and not general_greeting
        and is_unrelated_topic(lower)
        and not explicit_booking
    )

    if is_cancel and not is_schedule and not is_reschedule:
        workflow = WorkflowType.CANCEL
    elif is_reschedule and not is_schedule and not is_cancel:
        workflow = WorkflowType.RESCHEDULE
    else:
        workflow = WorkflowType.SCHEDULE

    intent = Intent.UNRELATED if unrelated else Intent(workflow.value)

    return IntentResult(
        intent=intent,
        workflow=workflow,
        user_text=user_text,
        in_scheduling_flow=in_scheduling,
        in_cancel_flow=in_cancel,
        in_reschedule_flow=in_reschedule,
        is_schedule_query=is_schedule,
        is_cancel_query=is_cancel,
        is_reschedule_query=is_reschedule,
        is_unrelated=unrelated,
        is_early_conversation=early,
        is_general_greeting=general_greeting,
        is_booking_confirmation=is_booking_confirmation(lower),
    )


def explicit_workflow(text: str) -> Optional[WorkflowType]:
    """
    The workflow the user asked for by name, ignoring flow continuations.

    Unlike `classify_intent`, "reschedule" does not also count as a
    "schedule" keyword here.
    """
    lower = text.lower()
    schedule_text = lower.replace("reschedule", "")
    wants_schedule = _contains_any(schedule_text, SCHEDULE_KEYWORDS) or (
        "appointment" in lower and "cancel" not in lower and "reschedule" not in lower
    )
    wants_cancel = _contains_any(lower, CANCEL_KEYWORDS)
    wants_reschedule = _contains_any(lower, RESCHEDULE_KEYWORDS)

    if wants_cancel and not wants_schedule and not wants_reschedule:
        return WorkflowType.CANCEL
    if wants_reschedule and not wants_schedule and not wants_cancel:
        return WorkflowType.RESCHEDULE
    if wants_schedule and not wants_cancel and not wants_reschedule:
        return WorkflowType.SCHEDULE
    return None
