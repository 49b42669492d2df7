from .orchestrator import ConversationOrchestrator, ChatReply
from .context_builder import ContextBuilder
from .intent import IntentResult, classify_intent
from .state import ConversationState, ConversationStep
