from .client import EngineError, OpenAIReasoningEngine, ReasoningEngine
from .schema import FUNCTION_TOOLS, build_tool_schema

__all__ = [
    "EngineError",
    "OpenAIReasoningEngine",
    "ReasoningEngine",
    "FUNCTION_TOOLS",
    "build_tool_schema"
]
