ENGINE_INSTRUCTIONS = """
You are being consulted by another AI agent. Answer its question accurately.
Use the available tools whenever they help you verify facts about the codebase, then give a concise, practical answer grounded in what you found.
File-mutating tools and shell commands require the `confirm` argument to be "yes"; only use them when the request clearly asks for such changes.
""".strip()

DIFF_PRIORITY_INSTRUCTIONS = (
    "A git diff is attached: prioritize identifying the cause of the reported problem "
    "in those changes and proposing a concrete fix."
)

DIFF_ANALYSIS_TEMPLATE = """
## Git Diff Analysis

**Command executed:** `{COMMAND}`
**Summary:** {SUMMARY}

### Code Changes:
```diff
{CONTENT}
```

**Analysis Instructions:**
The above diff shows code changes that may be related to the reported issue. Please:
1. Identify what functionality was added, modified, or removed
2. Look for potential issues like missing error handling, broken dependencies, or logic errors
3. Consider the impact of these changes on the overall system behavior
4. Suggest specific fixes if problems are identified
"""

FILE_CONTENT_TEMPLATE = """
## File: {PATH}
```
{CONTENT}
```
"""

FILE_ERROR_TEMPLATE = """
## File: {PATH}
Error reading file: {ERROR}
"""

FILES_HEADER = "## Files:\n"

EMPTY_ITERATION_NUDGE = (
    "Your previous reply contained neither a tool call nor any text. "
    "Please provide your final answer now."
)

TOOLS_USED_SEPARATOR = "\n\n---\n**Tools Used:**\n"

CONVERSATION_ID_FOOTER = "\n\n---\nConversation ID: {CONVERSATION_ID}"

RESET_CONFIRMATION = 'Conversation "{CONVERSATION_ID}" has been reset successfully.'
