from .loop import ReasoningAgent, default_conversation_id

__all__ = [
    "ReasoningAgent",
    "default_conversation_id"
]
