from ..core.defaults import CONVERSATION_FILE_SUFFIX, DEFAULT_CONTEXT_ENTRIES, DEFAULT_STORAGE_PATH
from ..core.models import Conversation, ConversationEntry, utcnow

from typing import Dict, List, Optional, Union
from contextlib import asynccontextmanager, suppress
from pydantic import ValidationError
from pathlib import Path
from loguru import logger
import aiofiles.os
import aiofiles
import hashlib
import asyncio
import orjson
import re

CONTEXT_HEADER = "## Previous Conversation Context\n\n"

ENTRY_TEMPLATE = """### User Query ({TIMESTAMP}):
{INPUT}

{FILES}### AI Response:
{RESPONSE}

---

"""

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

def conversation_filename(conversation_id :str)->str:
    """Maps an opaque conversation id onto a filesystem-safe, collision-free name."""
    safe = UNSAFE_FILENAME_CHARS.sub("_", conversation_id)
    if safe != conversation_id or safe.startswith("."):
        digest = hashlib.sha1(conversation_id.encode("utf8")).hexdigest()[:10]
        safe = f"{safe.lstrip('.') or '_'}-{digest}"
    return f"{safe}{CONVERSATION_FILE_SUFFIX}"

class ConversationStore:
    """
    Durable dialogue history keyed by conversation id.

    Every conversation is kept as one JSON record under ``storage_dir``. All
    records are loaded eagerly on construction and each update rewrites the
    whole record through a temporary file that is atomically renamed into place.
    """

    def __init__(self, storage_dir :Optional[Union[str, Path]]=None, load :bool=True):
        self.storage_dir = Path(storage_dir) if storage_dir else DEFAULT_STORAGE_PATH
        self._conversations :Dict[str, Conversation] = {}
        self._locks :Dict[str, asyncio.Lock] = {}
        self._lock_users :Dict[str, int] = {}
        if load:
            self.load()

    def __len__(self)->int:
        return len(self._conversations)

    @property
    def ids(self)->List[str]:
        return list(self._conversations.keys())

    def load(self)->int:
        """Loads every record from disk, skipping (and logging) the ones that fail to parse."""
        self._conversations.clear()
        if not self.storage_dir.is_dir():
            return 0

        for path in sorted(self.storage_dir.glob(f"*{CONVERSATION_FILE_SUFFIX}")):
            try:
                conversation = Conversation.model_validate(orjson.loads(path.read_bytes()))
            except (OSError, orjson.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable conversation record {path}: {e}")
                continue
            self._conversations[conversation.id] = conversation

        logger.info(f"Loaded {len(self._conversations)} conversations from {self.storage_dir}")
        return len(self._conversations)

    def get(self, conversation_id :str)->Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def path_for(self, conversation_id :str)->Path:
        return self.storage_dir / conversation_filename(conversation_id)

    @asynccontextmanager
    async def _locked(self, conversation_id :str):
        """Serializes work per id; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[conversation_id] -= 1
            if not self._lock_users[conversation_id]:
                del self._lock_users[conversation_id]
                del self._locks[conversation_id]

    async def _persist(self, conversation :Conversation):
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(conversation.id)
        tmp_path = path.with_name(f"{path.name}.tmp")
        payload = orjson.dumps(conversation.model_dump(mode="json"), option=orjson.OPT_INDENT_2)
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except OSError:
            with suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            raise

    async def append(
        self,
        conversation_id :str,
        input :str,
        response :str,
        file_paths :Optional[List[str]]=None
    )->Conversation:
        """Appends one entry, creating the conversation when the id is new, and persists it."""
        entry = ConversationEntry(input=input, response=response, file_paths=file_paths or None)
        async with self._locked(conversation_id):
            current = self._conversations.get(conversation_id)
            if current is None:
                conversation = Conversation(id=conversation_id, entries=[entry])
            else:
                conversation = current.model_copy(update={
                    "entries": [*current.entries, entry],
                    "updated_at": utcnow()
                })

            # memory only follows a successful write, a failed one leaves the prior state
            await self._persist(conversation)
            self._conversations[conversation_id] = conversation

        logger.debug(f"Conversation {conversation_id} now holds {len(conversation.entries)} entries")
        return conversation

    async def reset(self, conversation_id :str):
        """Forgets a conversation in memory and on disk. Unknown ids are a no-op."""
        async with self._locked(conversation_id):
            self._conversations.pop(conversation_id, None)
            try:
                await aiofiles.os.remove(self.path_for(conversation_id))
            except FileNotFoundError:
                pass
        logger.info(f"Conversation {conversation_id} reset")

    @staticmethod
    def render_context(conversation :Optional[Conversation], max_entries :int=DEFAULT_CONTEXT_ENTRIES)->str:
        """Renders the most recent entries as a chronological transcript."""
        if conversation is None or max_entries <= 0:
            return ""

        recent_entries = conversation.entries[-max_entries:]
        if not recent_entries:
            return ""

        context = CONTEXT_HEADER
        for entry in recent_entries:
            files = ""
            if entry.file_paths:
                files = f"**Files analyzed:** {', '.join(entry.file_paths)}\n\n"
            context += ENTRY_TEMPLATE.format(
                TIMESTAMP=entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
                INPUT=entry.input,
                FILES=files,
                RESPONSE=entry.response
            )
        return context
