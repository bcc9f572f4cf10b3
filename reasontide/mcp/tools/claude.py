from ...core.models import ToolName, ToolResult
from ..server import reasonTideMCPServer
from ..utils import getRuntime

from fastmcp.exceptions import ToolError
from typing import Any, Dict, Optional

async def runTool(name :ToolName, arguments :Dict[str, Any])->str:
    """Runs one tool through the shared dispatcher, raising ToolError for error results."""
    result :ToolResult = await getRuntime().dispatcher.execute(name.value, arguments)
    if result.is_error:
        raise ToolError(result.text)
    return result.text

@reasonTideMCPServer.tool(name="claude-view")
async def claudeView(file_path :str) -> str:
    """Read a file using Claude Code's Read tool. `file_path` must be absolute."""
    return await runTool(ToolName.VIEW, {"file_path": file_path})

@reasonTideMCPServer.tool(name="claude-edit")
async def claudeEdit(file_path :str, old_string :str, new_string :str) -> str:
    """Edit a file using Claude Code's Edit tool, replacing the exact `old_string` with `new_string`."""
    return await runTool(ToolName.EDIT, {
        "file_path": file_path,
        "old_string": old_string,
        "new_string": new_string
    })

@reasonTideMCPServer.tool(name="claude-ls")
async def claudeLs(path :Optional[str]=None) -> str:
    """List directory contents using Claude Code's LS tool (default: current directory)."""
    return await runTool(ToolName.LIST, {"path": path})

@reasonTideMCPServer.tool(name="claude-write")
async def claudeWrite(file_path :str, content :str, confirm :str) -> str:
    """Create a new file using Claude Code's Write tool. REQUIRES USER CONFIRMATION: `confirm` MUST be 'yes'."""
    return await runTool(ToolName.WRITE, {"file_path": file_path, "content": content, "confirm": confirm})

@reasonTideMCPServer.tool(name="claude-bash")
async def claudeBash(command :str, confirm :str) -> str:
    """Execute a command using Claude Code's Bash tool. REQUIRES USER CONFIRMATION: `confirm` MUST be 'yes'."""
    return await runTool(ToolName.BASH, {"command": command, "confirm": confirm})

@reasonTideMCPServer.tool(name="claude-grep")
async def claudeGrep(pattern :str, path :Optional[str]=None) -> str:
    """Search files using Claude Code's Grep tool, optionally limited to `path`."""
    return await runTool(ToolName.GREP, {"pattern": pattern, "path": path})
