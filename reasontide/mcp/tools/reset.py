from ...agent.prompts import RESET_CONFIRMATION
from ..server import reasonTideMCPServer
from ..utils import getRuntime

from typing import Optional

@reasonTideMCPServer.tool(name="reset-conversation")
async def resetConversation(conversation_id :Optional[str]=None) -> str:
    """
    Clears conversation history to start fresh. Useful when switching topics or avoiding context confusion.

    Args:
        conversation_id: Conversation to reset. Without it the default conversation of this server session
            is cleared (affecting every later call made without a conversation id).

    Returns:
        A confirmation naming the conversation that was reset. Resetting an unknown id is not an error.
    """
    conversation_id = await getRuntime().agent.reset(conversation_id)
    return RESET_CONFIRMATION.format(CONVERSATION_ID=conversation_id)
