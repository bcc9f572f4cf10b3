from .ask import askReasoningEngine
from .reset import resetConversation
from .claude import claudeBash, claudeEdit, claudeGrep, claudeLs, claudeView, claudeWrite

__all__ = [
    "askReasoningEngine",
    "resetConversation",
    "claudeBash",
    "claudeEdit",
    "claudeGrep",
    "claudeLs",
    "claudeView",
    "claudeWrite"
]
