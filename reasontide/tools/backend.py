from ..core.defaults import (
    DEFAULT_BACKEND_ARGS, DEFAULT_BACKEND_COMMAND, DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_SUPERVISION_INTERVAL
)

from fastmcp.client.transports import StdioTransport
from typing import Any, Dict, List, Optional, Protocol
from contextlib import AsyncExitStack, suppress
from fastmcp import Client
from loguru import logger
import asyncio
import shutil
import os

class ToolBackendError(Exception):
    """Raised when the tool-execution backend cannot be reached."""

class ToolBackend(Protocol):
    async def call_tool(self, name :str, arguments :Dict[str, Any])->Any:
        ...

class ClaudeCodeBackend:
    """
    Tool-execution backend reached through a long-lived MCP child process.

    The connection is established lazily on the first call and re-established
    whenever the previous client is found closed or broken, so callers only
    ever see tool errors, never a "not connected" state.
    """

    def __init__(
        self,
        command :str=DEFAULT_BACKEND_COMMAND,
        args :Optional[List[str]]=None,
        env :Optional[Dict[str, str]]=None,
        timeout :float=DEFAULT_BACKEND_TIMEOUT,
        supervision_interval :float=DEFAULT_SUPERVISION_INTERVAL
    ):
        self.command = command
        self.args = list(DEFAULT_BACKEND_ARGS) if args is None else list(args)
        self.env = env
        self.timeout = timeout
        self.supervision_interval = supervision_interval
        self._client :Optional[Client] = None
        self._stack :Optional[AsyncExitStack] = None
        self._transport :Optional[StdioTransport] = None
        self._lock = asyncio.Lock()
        self._supervision_task :Optional[asyncio.Task] = None

    def _build_env(self)->Dict[str, str]:
        env = dict(os.environ)
        command_path = shutil.which(self.command)
        if command_path:
            bin_dir = os.path.dirname(command_path)
            env["PATH"] = f"{bin_dir}{os.pathsep}{env.get('PATH', '')}"
        env["MCP_TIMEOUT"] = str(int(self.timeout * 1000))
        if self.env:
            env.update(self.env)
        return env

    @property
    def connected(self)->bool:
        return self._client is not None and self._client.is_connected()

    async def _connect(self):
        transport = StdioTransport(command=self.command, args=self.args, env=self._build_env())
        client = Client(transport, timeout=self.timeout)
        stack = AsyncExitStack()
        try:
            await stack.enter_async_context(client)
        except Exception as e:
            await stack.aclose()
            raise ToolBackendError(f"Failed to start tool backend `{self.command}`: {e}") from e

        try:
            await client.list_tools()
        except Exception as e:
            logger.debug(f"Tool listing failed right after connecting: {e}")

        self._client = client
        self._stack = stack
        self._transport = transport
        logger.info(f"Connected to tool backend: {self.command} {' '.join(self.args)}")

    async def _disconnect(self):
        stack, transport = self._stack, self._transport
        self._client = None
        self._stack = None
        self._transport = None
        try:
            if stack is not None:
                await stack.aclose()
            if transport is not None:
                await transport.close()
        except Exception as e:
            logger.warning(f"Error while closing tool backend: {e}")

    async def ensure_connected(self)->Client:
        async with self._lock:
            if not self.connected:
                if self._stack is not None:
                    logger.warning("Tool backend connection lost, reconnecting")
                    await self._disconnect()
                await self._connect()
            return self._client

    async def call_tool(self, name :str, arguments :Dict[str, Any])->Any:
        client = await self.ensure_connected()
        try:
            return await client.call_tool_mcp(name, arguments)
        except Exception:
            if not client.is_connected():
                async with self._lock:
                    if self._client is client:
                        await self._disconnect()
            raise

    async def health_check(self):
        """Pings the backend, dropping the client so the next check reconnects if it fails."""
        client = await self.ensure_connected()
        try:
            await client.ping()
        except Exception as e:
            logger.warning(f"Tool backend ping failed: {e}")
            async with self._lock:
                if self._client is client:
                    await self._disconnect()

    async def _supervise(self):
        while True:
            await asyncio.sleep(self.supervision_interval)
            try:
                await self.health_check()
            except Exception as e:
                logger.warning(f"Tool backend supervision error: {e}")

    def start_supervision(self):
        if self._supervision_task is not None and not self._supervision_task.done():
            return
        self._supervision_task = asyncio.create_task(self._supervise())

    async def stop_supervision(self):
        task = self._supervision_task
        self._supervision_task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    async def close(self):
        await self.stop_supervision()
        async with self._lock:
            await self._disconnect()
