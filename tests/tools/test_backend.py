from reasontide.tools.backend import ClaudeCodeBackend, ToolBackendError
from reasontide.tools.dispatcher import ToolDispatcher
import reasontide.tools.backend as backend_module

import asyncio
import pytest


class MockTransport:
    instances = []

    def __init__(self, command, args, env=None, **kwargs):
        self.command = command
        self.args = args
        self.env = env
        self.closed = False
        MockTransport.instances.append(self)

    async def close(self):
        self.closed = True


class MockClient:
    instances = []
    fail_on_enter = False

    def __init__(self, transport, timeout=None):
        self.transport = transport
        self.timeout = timeout
        self.connected = False
        self.calls = []
        self.pings = 0
        MockClient.instances.append(self)

    async def __aenter__(self):
        if MockClient.fail_on_enter:
            raise OSError("spawn failed")
        self.connected = True
        return self

    async def __aexit__(self, *exc_info):
        self.connected = False

    def is_connected(self):
        return self.connected

    async def list_tools(self):
        return []

    async def ping(self):
        self.pings += 1
        return True

    async def call_tool_mcp(self, name, arguments):
        self.calls.append((name, arguments))
        return {"content": [{"type": "text", "text": f"{name} ok"}]}


@pytest.fixture(autouse=True)
def mock_fastmcp(monkeypatch):
    MockTransport.instances = []
    MockClient.instances = []
    MockClient.fail_on_enter = False
    monkeypatch.setattr(backend_module, "StdioTransport", MockTransport)
    monkeypatch.setattr(backend_module, "Client", MockClient)


@pytest.mark.asyncio
async def test_connects_lazily_and_reuses_client():
    backend = ClaudeCodeBackend(timeout=12)
    assert MockClient.instances == []
    assert not backend.connected

    await backend.call_tool("Read", {"file_path": "/a"})
    await backend.call_tool("LS", {"path": "."})

    assert len(MockClient.instances) == 1
    client = MockClient.instances[0]
    assert client.calls == [("Read", {"file_path": "/a"}), ("LS", {"path": "."})]
    assert client.timeout == 12
    assert backend.connected

    await backend.close()


@pytest.mark.asyncio
async def test_child_process_command_and_environment():
    backend = ClaudeCodeBackend(command="claude", args=["mcp", "serve"], env={"EXTRA": "1"}, timeout=30)
    await backend.ensure_connected()

    transport = MockTransport.instances[0]
    assert transport.command == "claude"
    assert transport.args == ["mcp", "serve"]
    assert transport.env["MCP_TIMEOUT"] == "30000"
    assert transport.env["EXTRA"] == "1"
    assert "PATH" in transport.env

    await backend.close()


@pytest.mark.asyncio
async def test_reconnects_after_connection_is_lost():
    backend = ClaudeCodeBackend()
    await backend.call_tool("Read", {"file_path": "/a"})
    first = MockClient.instances[0]

    first.connected = False
    await backend.call_tool("Read", {"file_path": "/b"})

    assert len(MockClient.instances) == 2
    assert MockTransport.instances[0].closed
    assert MockClient.instances[1].calls == [("Read", {"file_path": "/b"})]

    await backend.close()


@pytest.mark.asyncio
async def test_close_releases_child_process():
    backend = ClaudeCodeBackend()
    await backend.ensure_connected()
    await backend.close()

    assert not backend.connected
    assert MockTransport.instances[0].closed
    assert not MockClient.instances[0].connected


@pytest.mark.asyncio
async def test_spawn_failure_is_reported_as_tool_error():
    MockClient.fail_on_enter = True
    backend = ClaudeCodeBackend()

    with pytest.raises(ToolBackendError):
        await backend.call_tool("Read", {"file_path": "/a"})

    result = await ToolDispatcher(backend).execute("view", {"file_path": "/a"})
    assert result.is_error
    assert result.text.startswith("Error reading file: Failed to start tool backend")


@pytest.mark.asyncio
async def test_supervision_health_checks_until_stopped():
    backend = ClaudeCodeBackend(supervision_interval=0.01)
    backend.start_supervision()
    await asyncio.sleep(0.05)
    await backend.stop_supervision()

    assert MockClient.instances
    assert MockClient.instances[0].pings >= 1

    pings = MockClient.instances[0].pings
    await asyncio.sleep(0.03)
    assert MockClient.instances[0].pings == pings

    await backend.close()
