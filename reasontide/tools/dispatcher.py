from ..core.defaults import CONFIRMATION_VALUE
from ..core.models import ToolCall, ToolName, ToolResult
from .normalizer import normalize_result
from .backend import ToolBackend

from typing import Any, Dict, List, Optional, Union
from loguru import logger
import asyncio
import orjson

CANCELLED_MESSAGES = {
    ToolName.WRITE: "Write operation cancelled. User confirmation required.",
    ToolName.BASH: "Command execution cancelled. User confirmation required."
}

FAILURE_PREFIXES = {
    ToolName.VIEW: "Error reading file",
    ToolName.EDIT: "Error editing file",
    ToolName.LIST: "Error listing directory",
    ToolName.WRITE: "Error writing file",
    ToolName.BASH: "Error running command",
    ToolName.GREP: "Error searching files"
}

REQUIRED_ARGUMENTS = {
    ToolName.VIEW: ("file_path",),
    ToolName.EDIT: ("file_path", "old_string", "new_string"),
    ToolName.LIST: (),
    ToolName.WRITE: ("file_path", "content"),
    ToolName.BASH: ("command",),
    ToolName.GREP: ("pattern",)
}

class ToolDispatcher:
    """Maps tool invocations onto the backend, enforcing the confirmation gate."""

    def __init__(self, backend :ToolBackend, parallel :bool=True):
        self.backend = backend
        self.parallel = parallel

    @staticmethod
    def resolve(name :str)->Optional[ToolName]:
        try:
            return ToolName(name)
        except ValueError:
            return None

    @staticmethod
    def parse_arguments(arguments :Union[str, Dict[str, Any], None])->Dict[str, Any]:
        if arguments is None or arguments == "":
            return {}
        if isinstance(arguments, dict):
            return arguments
        parsed = orjson.loads(arguments)
        if not isinstance(parsed, dict):
            raise ValueError(f"tool arguments must be a JSON object, got {type(parsed).__name__}")
        return parsed

    @staticmethod
    def backend_arguments(tool :ToolName, args :Dict[str, Any])->Dict[str, Any]:
        if tool == ToolName.VIEW:
            return {"file_path": args["file_path"]}
        elif tool == ToolName.EDIT:
            return {
                "file_path": args["file_path"],
                "old_string": args["old_string"],
                "new_string": args["new_string"]
            }
        elif tool == ToolName.LIST:
            return {"path": args.get("path") or "."}
        elif tool == ToolName.WRITE:
            return {"file_path": args["file_path"], "content": args["content"]}
        elif tool == ToolName.BASH:
            return {"command": args["command"]}

        backend_args = {"pattern": args["pattern"]}
        if args.get("path"):
            backend_args["path"] = args["path"]
        return backend_args

    async def execute(self, name :str, arguments :Union[str, Dict[str, Any], None]=None)->ToolResult:
        """
        Runs a single named tool and returns its normalized result.

        Never raises: unknown tools, malformed arguments, a missing confirmation
        and backend failures are all reported as error results.
        """
        tool = self.resolve(name)
        if tool is None:
            return ToolResult.error(f"Unknown function: {name}")

        try:
            args = self.parse_arguments(arguments)
        except ValueError as e:
            return ToolResult.error(f"Invalid arguments for {name}: {e}")

        if tool.requires_confirmation and args.get("confirm") != CONFIRMATION_VALUE:
            logger.info(f"Refused {tool.value} without confirmation")
            return ToolResult.error(CANCELLED_MESSAGES[tool])

        missing = [key for key in REQUIRED_ARGUMENTS[tool] if args.get(key) is None]
        if missing:
            return ToolResult.error(f"Missing required arguments for {name}: {', '.join(missing)}")

        try:
            raw = await self.backend.call_tool(tool.backend_name, self.backend_arguments(tool, args))
        except Exception as e:
            logger.warning(f"Tool {tool.value} failed on backend: {e}")
            return ToolResult.error(f"{FAILURE_PREFIXES[tool]}: {e}")

        return normalize_result(raw)

    async def dispatch(self, calls :List[ToolCall])->List[ToolResult]:
        """
        Executes every call of one iteration, returning results in call order.

        All calls complete, successfully or not, before this returns.
        """
        for call in calls:
            logger.debug(f"Dispatching {call.name} ({call.call_id})")

        if self.parallel and len(calls) > 1:
            return list(await asyncio.gather(*[
                self.execute(call.name, call.arguments) for call in calls
            ]))

        results = []
        for call in calls:
            results.append(await self.execute(call.name, call.arguments))
        return results
