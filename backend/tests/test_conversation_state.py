import base64

from lacura.schemas.chat import ChatMessage, WorkflowType
from lacura.services.chat.intent import classify_intent
from lacura.services.chat.state import (
    ConversationState,
    ConversationStep,
    extract_email,
    extract_selection,
    extract_time,
)


def user(text):
    return ChatMessage(role="user", content=text)


def assistant(text):
    return ChatMessage(role="assistant", content=text)


def run_turns(turns, state=None):
    state = state or ConversationState()
    history = []
    for text in turns:
        history.append(user(text))
        state = state.advance(classify_intent(history))
        history.append(assistant("ok"))
    return state


def test_extractors():
    assert extract_email("it's Jane.Doe@example.com thanks") == "Jane.Doe@example.com"
    assert extract_email("no address here") is None
    assert extract_time("Monday at 2pm works") == "2pm"
    assert extract_time("how about 14:30?") == "14:30"
    assert extract_time("monday") is None
    assert extract_selection("the second one") == "second"


def test_schedule_flow_walks_every_step():
    state = ConversationState()

    state = run_turns(["I'd like to book an appointment"], state)
    assert state.workflow == WorkflowType.SCHEDULE
    assert state.step == ConversationStep.SCHEDULE_AWAITING_TIME

    state = run_turns(["Monday at 2pm works"], state)
    assert state.step == ConversationStep.SCHEDULE_AWAITING_EMAIL
    assert state.selected_time == "2pm"

    state = run_turns(["jane@example.com"], state)
    assert state.step == ConversationStep.SCHEDULE_AWAITING_CONFIRMATION
    assert state.email == "jane@example.com"
    assert not state.ready_to_book

    state = run_turns(["Yes, please confirm"], state)
    assert state.step == ConversationStep.SCHEDULE_COMPLETE
    assert state.is_complete
    assert state.ready_to_book


def test_email_given_with_time_skips_email_step():
    state = run_turns(["book me in", "3pm tomorrow, my email is sam@example.org"])
    assert state.step == ConversationStep.SCHEDULE_AWAITING_CONFIRMATION
    assert state.selected_time == "3pm"
    assert state.email == "sam@example.org"


def test_decline_goes_back_to_time_selection():
    state = run_turns(["book a session", "2pm", "sam@example.org", "no"])
    assert state.step == ConversationStep.SCHEDULE_AWAITING_TIME
    assert state.selected_time is None


def test_cancel_flow():
    state = run_turns([
        "I need to cancel my appointment",
        "jane@example.com",
        "the first one",
        "yes",
    ])
    assert state.workflow == WorkflowType.CANCEL
    assert state.step == ConversationStep.CANCEL_COMPLETE
    assert state.selected_booking == "first"


def test_reschedule_flow():
    state = run_turns([
        "Can I reschedule?",
        "jane@example.com",
        "the second one",
        "4pm",
        "sounds good",
    ])
    assert state.workflow == WorkflowType.RESCHEDULE
    assert state.step == ConversationStep.RESCHEDULE_COMPLETE
    assert state.selected_booking == "second"
    assert state.selected_time == "4pm"


def test_explicit_switch_restarts_workflow():
    state = run_turns(["book a session", "2pm", "actually I want to cancel instead"])
    assert state.workflow == WorkflowType.CANCEL
    assert state.step == ConversationStep.CANCEL_AWAITING_EMAIL
    assert state.selected_time is None


def test_unrelated_turn_leaves_state_unchanged():
    state = run_turns(["book a session", "2pm"])
    after = run_turns(["tell me about your prices"], state)
    assert after == state


def test_token_round_trip():
    state = run_turns(["book a session", "2pm", "jane@example.com"])
    restored = ConversationState.from_token(state.to_token())
    assert restored == state


def test_invalid_token_is_ignored():
    assert ConversationState.from_token("not-a-token!!") is None
    assert ConversationState.from_token("") is None


def test_token_with_step_from_another_workflow_is_ignored():
    for payload in (
        b'{"workflow":"schedule","step":"idle"}',
        b'{"workflow":"cancel","step":"schedule_awaiting_time"}',
        b'{"workflow":null,"step":"cancel_awaiting_email"}',
    ):
        assert ConversationState.from_token(base64.urlsafe_b64encode(payload).decode("ascii")) is None


def test_from_history_matches_incremental_advance():
    messages = [
        user("I'd like to book an appointment"),
        assistant("Here are the available slots..."),
        user("2pm works"),
        assistant("What email should I use?"),
        user("jane@example.com"),
    ]
    state = ConversationState.from_history(messages)
    assert state.step == ConversationStep.SCHEDULE_AWAITING_CONFIRMATION
    assert state.email == "jane@example.com"
    assert state.selected_time == "2pm"


def test_describe_mentions_step_and_captured_values():
    state = run_turns(["book a session", "2pm"])
    summary = state.describe()
    assert "Workflow: schedule" in summary
    assert "Selected time: 2pm" in summary
    assert "Email: not provided yet" in summary
    assert ConversationState().describe() == ""
