from ..core.defaults import NO_CONTENT_MESSAGE
from ..core.models import ToolResult

from pydantic import BaseModel
from typing import Any, Dict, List
import orjson

def _as_dict(value :Any)->Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value

def _content_of(result :Any)->Any:
    if isinstance(result, dict):
        return result.get("content")
    return getattr(result, "content", None)

def _is_error(result :Any)->bool:
    if isinstance(result, dict):
        return bool(result.get("isError") or result.get("is_error"))
    return bool(getattr(result, "isError", False) or getattr(result, "is_error", False))

def _item_to_text(item :Any)->str:
    item = _as_dict(item)
    if not isinstance(item, dict):
        return str(item)

    item_type = item.get("type")
    if item_type == "text" and item.get("text"):
        return item["text"]
    elif item_type == "image" and item.get("data"):
        return f"[Image data: {item.get('mimeType') or 'unknown'}]"
    elif item_type == "resource" and item.get("resource"):
        resource = _as_dict(item["resource"]) or {}
        return resource.get("text") or resource.get("uri") or "[Resource]"
    return orjson.dumps(item, default=str).decode()

def normalize_result(result :Any)->ToolResult:
    """
    Converts a backend tool result into a uniform ToolResult.

    The backend may hand back an MCP ``CallToolResult``, a plain dict with a
    ``content`` key or a bare list of content items. Text items pass through,
    images become a placeholder naming their media type, resources use their
    text or uri and anything else is serialized as JSON.

    Args:
        result: The raw backend result.

    Returns:
        ToolResult with one text segment per content item.
    """
    if isinstance(result, list):
        content = result
        is_error = False
    else:
        content = _content_of(_as_dict(result) if isinstance(result, BaseModel) else result)
        is_error = _is_error(result)

    if content is not None and not isinstance(content, list):
        content = [content]

    if not content:
        return ToolResult.error(NO_CONTENT_MESSAGE)

    segments :List[str] = [_item_to_text(item) for item in content]
    return ToolResult(segments=segments, is_error=is_error)

def summarize_result(name :str, result :ToolResult)->str:
    """Renders one trace line for the tools-used section."""
    if result.is_error:
        return f"**{name}** error: {result.text}"
    return f"**{name}** result:\n{result.text or 'No result'}"

def to_output_item(call_id :str, result :ToolResult)->Dict[str, str]:
    """Builds the function_call_output item fed back to the engine."""
    text = result.text or "No result"
    return {
        "type": "function_call_output",
        "call_id": call_id,
        "output": f"Error: {text}" if result.is_error else text
    }
