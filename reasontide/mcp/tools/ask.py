from ...agent.prompts import CONVERSATION_ID_FOOTER
from ...core.models import DiffRequest
from ..server import reasonTideMCPServer
from ..utils import getRuntime

from typing import List, Optional

@reasonTideMCPServer.tool(name="ask-reasoning-engine")
async def askReasoningEngine(
    input :str,
    file_paths :Optional[List[str]]=None,
    conversation_id :Optional[str]=None,
    from_ref :Optional[str]=None,
    to_ref :Optional[str]=None,
    unstaged :Optional[bool]=None) -> str:
    """
    Delegates a question to an advanced reasoning model that can read, search and (with confirmation) modify
    files and run commands on its own, with web search, persistent conversation memory and git diff analysis.

    Args:
        input: Your question, problem or request. Be specific and detailed, e.g. 'Analyze this code for bugs',
            'Help me fix this error', 'What's the latest information about X?'
        file_paths: Optional ABSOLUTE file paths whose contents are attached to the request. Relative paths are
            not supported. Unreadable files are reported inline instead of failing the request.
        conversation_id: Conversation to continue. Without it a default conversation that persists for the whole
            server session is used.
        from_ref: Git reference (branch, commit, tag) to diff from, e.g. 'HEAD~1', 'main'. Enables diff analysis.
        to_ref: Git reference to diff to. Without it the diff is taken against the working directory.
        unstaged: Whether to include unstaged changes when `to_ref` is omitted (default: True). When False the
            diff is taken against HEAD.

    Returns:
        The model's answer, a trace of the tools it used, and the conversation id to continue with.

    Perfect for:
    - "It was working before..." debugging scenarios
    - Post-refactoring issue identification and code review
    - Multi-step reasoning tasks that benefit from context retention
    """
    runtime = getRuntime()
    diff = DiffRequest(from_ref=from_ref, to_ref=to_ref, unstaged=unstaged) if from_ref else None
    outcome = await runtime.agent.ask(
        input,
        file_paths=file_paths,
        conversation_id=conversation_id,
        diff=diff
    )
    if outcome.is_error:
        return outcome.text
    return outcome.text + CONVERSATION_ID_FOOTER.format(CONVERSATION_ID=outcome.conversation_id)
