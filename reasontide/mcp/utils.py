from ..conversation.store import ConversationStore
from ..engine.client import OpenAIReasoningEngine
from ..tools.backend import ClaudeCodeBackend
from ..tools.dispatcher import ToolDispatcher
from ..engine.schema import build_tool_schema
from ..core.config import Settings
from ..agent.loop import ReasoningAgent
from ..diff.builder import DiffBuilder

from pydantic import BaseModel, ConfigDict
from typing import Any, Optional
from loguru import logger

class Runtime(BaseModel):
    """Process-wide collaborators shared by every MCP tool call."""
    settings :Settings
    backend :Any
    dispatcher :ToolDispatcher
    store :ConversationStore
    agent :ReasoningAgent

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def default_conversation_id(self)->str:
        return self.agent.default_conversation_id

_runtime :Optional[Runtime] = None

def buildRuntime(settings :Settings)->Runtime:
    """Wires settings into the backend, dispatcher, store, engine and agent."""
    backend = ClaudeCodeBackend(
        command=settings.backend_command,
        args=settings.backend_args,
        timeout=settings.backend_timeout,
        supervision_interval=settings.supervision_interval
    )
    dispatcher = ToolDispatcher(backend, parallel=settings.parallel_tool_calls)
    store = ConversationStore(settings.storage_dir)
    engine = OpenAIReasoningEngine(
        api_key=settings.openai_api_key,
        model=settings.model,
        parallel_tool_calls=settings.parallel_tool_calls
    )
    agent = ReasoningAgent(
        engine=engine,
        dispatcher=dispatcher,
        store=store,
        diff_builder=DiffBuilder(settings.workdir),
        max_iterations=settings.max_iterations,
        context_entries=settings.context_entries,
        reasoning_effort=settings.reasoning_effort,
        tools=build_tool_schema(settings.web_search, settings.search_context_size)
    )
    logger.info(
        f"Runtime ready: model={settings.model} effort={settings.reasoning_effort} "
        f"default_conversation={agent.default_conversation_id}"
    )
    return Runtime(settings=settings, backend=backend, dispatcher=dispatcher, store=store, agent=agent)

def setRuntime(runtime :Optional[Runtime]):
    global _runtime
    _runtime = runtime

def getRuntime()->Runtime:
    """Returns the shared runtime, building it from the environment on first use."""
    global _runtime
    if _runtime is None:
        _runtime = buildRuntime(Settings.from_env())
    return _runtime
