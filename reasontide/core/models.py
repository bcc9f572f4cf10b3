from .defaults import BREAKLINE

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime, timezone
from enum import Enum
from ulid import ULID

def utcnow()->datetime:
    return datetime.now(timezone.utc)

def generate_call_id()->str:
    return f"call_{ULID()}"

# ============================================================================
# Conversations
# ============================================================================

class ConversationEntry(BaseModel):
    """One request/response round of a conversation."""
    timestamp :datetime=Field(default_factory=utcnow)
    input :str
    file_paths :Optional[List[str]]=None
    response :str

class Conversation(BaseModel):
    id :str
    created_at :datetime=Field(default_factory=utcnow)
    updated_at :datetime=Field(default_factory=utcnow)
    entries :List[ConversationEntry]=Field(default_factory=list)

# ============================================================================
# Tools
# ============================================================================

class ToolName(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    LIST = "list"
    WRITE = "write"
    BASH = "bash"
    GREP = "grep"

    @property
    def backend_name(self)->str:
        """Logical tool name on the tool-execution backend."""
        return BACKEND_TOOL_NAMES[self]

    @property
    def requires_confirmation(self)->bool:
        return self in (ToolName.WRITE, ToolName.BASH)

BACKEND_TOOL_NAMES = {
    ToolName.VIEW: "Read",
    ToolName.EDIT: "Edit",
    ToolName.LIST: "LS",
    ToolName.WRITE: "Write",
    ToolName.BASH: "Bash",
    ToolName.GREP: "Grep"
}

class ToolCall(BaseModel):
    name :str
    call_id :str=Field(default_factory=generate_call_id)
    arguments :str="{}"

class ToolResult(BaseModel):
    segments :List[str]=Field(default_factory=list)
    is_error :bool=False

    @property
    def text(self)->str:
        return BREAKLINE.join(self.segments)

    @classmethod
    def error(cls, message :str)->"ToolResult":
        return cls(segments=[message], is_error=True)

# ============================================================================
# Diff
# ============================================================================

class DiffRequest(BaseModel):
    from_ref :str
    to_ref :Optional[str]=None
    unstaged :Optional[bool]=None

class DiffSummary(BaseModel):
    files_changed :int=0
    insertions :int=0
    deletions :int=0

    def __str__(self)->str:
        return f"{self.files_changed} files changed, {self.insertions} insertions(+), {self.deletions} deletions(-)"

class DiffResult(BaseModel):
    content :str
    summary :DiffSummary
    command :str
    line_count :int

# ============================================================================
# Reasoning engine
# ============================================================================

class MessageItem(BaseModel):
    type :Literal["message"]="message"
    segments :List[str]=Field(default_factory=list)

class FunctionCallItem(BaseModel):
    type :Literal["function_call"]="function_call"
    name :str
    arguments :str="{}"
    call_id :Optional[str]=None

    def as_tool_call(self)->ToolCall:
        if self.call_id:
            return ToolCall(name=self.name, call_id=self.call_id, arguments=self.arguments)
        return ToolCall(name=self.name, arguments=self.arguments)

OutputItem = Union[MessageItem, FunctionCallItem]

class EngineRequest(BaseModel):
    instructions :str
    input :List[Dict[str, Any]]
    tools :List[Dict[str, Any]]
    tool_choice :str="auto"
    previous_response_id :Optional[str]=None
    reasoning_effort :str="medium"

class EngineResponse(BaseModel):
    id :Optional[str]=None
    output :List[OutputItem]=Field(default_factory=list)

    @property
    def function_calls(self)->List[FunctionCallItem]:
        return [item for item in self.output if isinstance(item, FunctionCallItem)]

    @property
    def text(self)->str:
        segments = []
        for item in self.output:
            if isinstance(item, MessageItem):
                segments.extend(item.segments)
        return BREAKLINE.join(segments)

    @classmethod
    def from_payload(cls, payload :Dict[str, Any])->"EngineResponse":
        """Keeps message and function-call items, dropping reasoning and web search items."""
        output = []
        for item in payload.get("output") or []:
            if not isinstance(item, dict):
                continue
            item_type = item.get("type")
            if item_type == "message":
                segments = [
                    content.get("text")
                    for content in item.get("content") or []
                    if isinstance(content, dict) and content.get("type") == "output_text" and content.get("text")
                ]
                output.append(MessageItem(segments=segments))
            elif item_type == "function_call" and item.get("name"):
                output.append(FunctionCallItem(
                    name=item["name"],
                    arguments=item.get("arguments") or "{}",
                    call_id=item.get("call_id") or item.get("id")
                ))
        return cls(id=payload.get("id"), output=output)

# ============================================================================
# Loop
# ============================================================================

class LoopState(BaseModel):
    """Transient per-invocation state of the reasoning loop."""
    depth :int=0
    input_items :List[Dict[str, Any]]=Field(default_factory=list)
    previous_response_id :Optional[str]=None
    tool_summaries :List[str]=Field(default_factory=list)
    sent_items :int=0

    def pending_items(self)->List[Dict[str, Any]]:
        """Items the engine has not seen yet; the full list on the first call."""
        if self.previous_response_id is None:
            return list(self.input_items)
        return self.input_items[self.sent_items:]

    def mark_sent(self):
        self.sent_items = len(self.input_items)

class AskOutcome(BaseModel):
    text :str
    conversation_id :str
    iterations :int=0
    tool_summaries :List[str]=Field(default_factory=list)
    is_error :bool=False
