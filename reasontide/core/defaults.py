from pathlib import Path
import os

INSTALLATION_DIR = Path(os.path.abspath(os.path.dirname(__file__))).parent

DEFAULT_ENCODING = "utf8"

DEFAULT_STATE_DIR = Path.home() / ".reasontide"
DEFAULT_STORAGE_PATH = DEFAULT_STATE_DIR / "conversations"
DEFAULT_LOGS_PATH = DEFAULT_STATE_DIR / "logs"
CONVERSATION_FILE_SUFFIX = ".json"

# Reasoning engine
DEFAULT_MODEL = "o3"
EFFORT_LEVELS = ("low", "medium", "high")
DEFAULT_REASONING_EFFORT = "medium"
DEFAULT_SEARCH_CONTEXT_SIZE = "medium"

# Loop
DEFAULT_MAX_ITERATIONS = 30
DEFAULT_CONTEXT_ENTRIES = 10

# Diff
DIFF_MAX_BUFFER_BYTES = 10 * 1024 * 1024
DIFF_MAX_LINES = 10_000
DIFF_READ_CHUNK_BYTES = 64 * 1024
GIT_REF_PATTERN = r"^(?!-)[A-Za-z0-9/_.~^-]+$"

# Tool backend
DEFAULT_BACKEND_COMMAND = "claude"
DEFAULT_BACKEND_ARGS = ["mcp", "serve"]
DEFAULT_BACKEND_TIMEOUT = 30.0
DEFAULT_SUPERVISION_INTERVAL = 10.0
CONFIRMATION_VALUE = "yes"

BREAKLINE = "\n"

NO_CONTENT_MESSAGE = "no content received"
FALLBACK_RESPONSE = "Could not obtain a final answer from the reasoning engine."
