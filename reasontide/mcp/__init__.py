from .server import reasonTideMCPServer, serve
from .tools import askReasoningEngine, resetConversation, claudeView, claudeEdit, claudeLs, claudeWrite, claudeBash, claudeGrep

__all__ = [
    "reasonTideMCPServer",
    "serve",
    "askReasoningEngine",
    "resetConversation",
    "claudeView",
    "claudeEdit",
    "claudeLs",
    "claudeWrite",
    "claudeBash",
    "claudeGrep"
]
