from reasontide.agent import ReasoningAgent
from reasontide.conversation import ConversationStore
from reasontide.core.config import Settings
from reasontide.core.models import (
    AskOutcome, Conversation, ConversationEntry, DiffRequest, DiffResult,
    DiffSummary, EngineResponse, ToolCall, ToolName, ToolResult
)
from reasontide.diff import DiffBuilder, DiffError
from reasontide.engine import OpenAIReasoningEngine
from reasontide.tools import ClaudeCodeBackend, ToolDispatcher, normalize_result

__version__ = "0.1.0"

__all__ = [
    "ReasoningAgent",
    "ConversationStore",
    "Settings",
    "AskOutcome",
    "Conversation",
    "ConversationEntry",
    "DiffRequest",
    "DiffResult",
    "DiffSummary",
    "EngineResponse",
    "ToolCall",
    "ToolName",
    "ToolResult",
    "DiffBuilder",
    "DiffError",
    "OpenAIReasoningEngine",
    "ClaudeCodeBackend",
    "ToolDispatcher",
    "normalize_result"
]
