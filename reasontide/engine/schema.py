from ..core.defaults import CONFIRMATION_VALUE, DEFAULT_SEARCH_CONTEXT_SIZE
from ..core.models import ToolName

from typing import Any, Dict, List

def _function(name :ToolName, description :str, properties :Dict[str, Any])->Dict[str, Any]:
    return {
        "type": "function",
        "name": name.value,
        "description": description,
        "parameters": {
            "type": "object",
            "properties": properties,
            "required": list(properties.keys()),
            "additionalProperties": False
        },
        "strict": True
    }

CONFIRM_PROPERTY = {
    "type": "string",
    "enum": [CONFIRMATION_VALUE],
    "description": f"MUST be '{CONFIRMATION_VALUE}' to proceed. User confirmation required."
}

# strict mode requires every property to be listed as required, optional ones are nullable
FUNCTION_TOOLS :List[Dict[str, Any]] = [
    _function(ToolName.VIEW, "Read a file using Claude Code's Read tool", {
        "file_path": {"type": "string", "description": "Absolute path to the file to read"}
    }),
    _function(ToolName.EDIT, "Edit a file using Claude Code's Edit tool for string replacement", {
        "file_path": {"type": "string", "description": "Absolute path to the file to edit"},
        "old_string": {"type": "string", "description": "The exact text to find and replace"},
        "new_string": {"type": "string", "description": "The replacement text"}
    }),
    _function(ToolName.LIST, "List directory contents using Claude Code's LS tool", {
        "path": {"type": ["string", "null"], "description": "Directory to list, defaults to the current directory"}
    }),
    _function(ToolName.WRITE, "Create a new file using Claude Code's Write tool. REQUIRES USER CONFIRMATION.", {
        "file_path": {"type": "string", "description": "Absolute path where to create the new file"},
        "content": {"type": "string", "description": "Content to write to the file"},
        "confirm": CONFIRM_PROPERTY
    }),
    _function(ToolName.BASH, "Execute a command using Claude Code's Bash tool. REQUIRES USER CONFIRMATION.", {
        "command": {"type": "string", "description": "Command to execute"},
        "confirm": CONFIRM_PROPERTY
    }),
    _function(ToolName.GREP, "Search files using Claude Code's Grep tool", {
        "pattern": {"type": "string", "description": "Pattern to search for"},
        "path": {"type": ["string", "null"], "description": "Directory to search in, defaults to the current directory"}
    })
]

def build_tool_schema(web_search :bool=True, search_context_size :str=DEFAULT_SEARCH_CONTEXT_SIZE)->List[Dict[str, Any]]:
    tools = []
    if web_search:
        tools.append({
            "type": "web_search_preview",
            "search_context_size": search_context_size
        })
    tools.extend(FUNCTION_TOOLS)
    return tools
