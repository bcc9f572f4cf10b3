from .backend import ClaudeCodeBackend, ToolBackend, ToolBackendError
from .dispatcher import ToolDispatcher
from .normalizer import normalize_result, summarize_result, to_output_item

__all__ = [
    "ClaudeCodeBackend",
    "ToolBackend",
    "ToolBackendError",
    "ToolDispatcher",
    "normalize_result",
    "summarize_result",
    "to_output_item"
]
