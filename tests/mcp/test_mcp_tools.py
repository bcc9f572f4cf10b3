from reasontide.conversation.store import ConversationStore
from reasontide.mcp.utils import Runtime, setRuntime
from reasontide.tools.dispatcher import ToolDispatcher
from reasontide.core.models import EngineResponse
from reasontide.agent.loop import ReasoningAgent
from reasontide.core.config import Settings
from reasontide.mcp import reasonTideMCPServer

from fastmcp import Client
import pytest


class MockEngine:

    def __init__(self, text :str):
        self.text = text
        self.requests = []

    async def respond(self, request):
        self.requests.append(request)
        return EngineResponse.from_payload({
            "id": "resp_1",
            "output": [{"type": "message", "content": [{"type": "output_text", "text": self.text}]}]
        })


class MockBackend:

    def __init__(self):
        self.calls = []
        self.supervised = False
        self.closed = False

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        return {"content": [{"type": "text", "text": f"{name} says hi"}]}

    def start_supervision(self):
        self.supervised = True

    async def close(self):
        self.closed = True


@pytest.fixture
def runtime(tmp_path):
    backend = MockBackend()
    dispatcher = ToolDispatcher(backend)
    store = ConversationStore(tmp_path)
    agent = ReasoningAgent(
        engine=MockEngine("The answer is 42."),
        dispatcher=dispatcher,
        store=store,
        default_conversation_id="default_test"
    )
    runtime = Runtime(
        settings=Settings(storage_dir=tmp_path),
        backend=backend,
        dispatcher=dispatcher,
        store=store,
        agent=agent
    )
    setRuntime(runtime)
    yield runtime
    setRuntime(None)


def result_text(result)->str:
    return "\n".join(item.text for item in result.content if getattr(item, "text", None))


@pytest.mark.asyncio
async def test_all_tools_are_registered(runtime):
    async with Client(reasonTideMCPServer) as client:
        tools = await client.list_tools()

    assert {tool.name for tool in tools} == {
        "ask-reasoning-engine", "reset-conversation",
        "claude-view", "claude-edit", "claude-ls", "claude-write", "claude-bash", "claude-grep"
    }


@pytest.mark.asyncio
async def test_ask_appends_conversation_footer(runtime):
    async with Client(reasonTideMCPServer) as client:
        result = await client.call_tool_mcp("ask-reasoning-engine", {"input": "What is the answer?"})

    text = result_text(result)
    assert not result.isError
    assert text == "The answer is 42.\n\n---\nConversation ID: default_test"
    assert len(runtime.store.get("default_test").entries) == 1


@pytest.mark.asyncio
async def test_ask_with_invalid_ref_reports_error(runtime):
    async with Client(reasonTideMCPServer) as client:
        result = await client.call_tool_mcp(
            "ask-reasoning-engine",
            {"input": "what broke?", "conversation_id": "bad-diff", "from_ref": "-rf"}
        )

    text = result_text(result)
    assert text.startswith("Error: Invalid git reference format")
    assert "Conversation ID" not in text
    assert runtime.agent.engine.requests == []
    assert runtime.store.get("bad-diff") is None


@pytest.mark.asyncio
async def test_reset_conversation(runtime):
    await runtime.store.append("abc", "q", "a")

    async with Client(reasonTideMCPServer) as client:
        named = await client.call_tool_mcp("reset-conversation", {"conversation_id": "abc"})
        default = await client.call_tool_mcp("reset-conversation", {})

    assert result_text(named) == 'Conversation "abc" has been reset successfully.'
    assert result_text(default) == 'Conversation "default_test" has been reset successfully.'
    assert runtime.store.get("abc") is None


@pytest.mark.asyncio
async def test_direct_write_without_confirmation_is_refused(runtime):
    async with Client(reasonTideMCPServer) as client:
        result = await client.call_tool_mcp(
            "claude-write", {"file_path": "/tmp/x.txt", "content": "data", "confirm": "no"}
        )

    assert result.isError
    assert "User confirmation required" in result_text(result)
    assert runtime.backend.calls == []


@pytest.mark.asyncio
async def test_direct_tools_reach_backend(runtime):
    async with Client(reasonTideMCPServer) as client:
        view = await client.call_tool_mcp("claude-view", {"file_path": "/tmp/a.py"})
        bash = await client.call_tool_mcp("claude-bash", {"command": "ls", "confirm": "yes"})
        ls = await client.call_tool_mcp("claude-ls", {})

    assert result_text(view) == "Read says hi"
    assert result_text(bash) == "Bash says hi"
    assert result_text(ls) == "LS says hi"
    assert runtime.backend.calls == [
        ("Read", {"file_path": "/tmp/a.py"}),
        ("Bash", {"command": "ls"}),
        ("LS", {"path": "."})
    ]
