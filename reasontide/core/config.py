from .defaults import (
    DEFAULT_BACKEND_ARGS, DEFAULT_BACKEND_COMMAND, DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_CONTEXT_ENTRIES, DEFAULT_LOGS_PATH, DEFAULT_MAX_ITERATIONS, DEFAULT_MODEL,
    DEFAULT_REASONING_EFFORT, DEFAULT_SEARCH_CONTEXT_SIZE, DEFAULT_STORAGE_PATH,
    DEFAULT_SUPERVISION_INTERVAL, EFFORT_LEVELS
)

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union
from dotenv import load_dotenv
from pathlib import Path
import os

def _to_bool(value :Optional[str], default :bool)->bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default

def _to_number(value :Optional[str], default :Union[int, float], cast=int)->Union[int, float]:
    if value is None:
        return default
    try:
        parsed = cast(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default

def _to_effort(value :Optional[str], default :str)->str:
    if value and value.strip().lower() in EFFORT_LEVELS:
        return value.strip().lower()
    return default

class Settings(BaseModel):
    """Runtime settings for the reasoning server."""
    openai_api_key :Optional[str]=None
    model :str=DEFAULT_MODEL
    reasoning_effort :str=DEFAULT_REASONING_EFFORT
    search_context_size :str=DEFAULT_SEARCH_CONTEXT_SIZE
    web_search :bool=True
    max_iterations :int=Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    context_entries :int=Field(default=DEFAULT_CONTEXT_ENTRIES, ge=1)
    storage_dir :Path=DEFAULT_STORAGE_PATH
    log_dir :Path=DEFAULT_LOGS_PATH
    log_level :str="INFO"
    workdir :Path=Field(default_factory=Path.cwd)
    backend_command :str=DEFAULT_BACKEND_COMMAND
    backend_args :List[str]=Field(default_factory=lambda: list(DEFAULT_BACKEND_ARGS))
    backend_timeout :float=DEFAULT_BACKEND_TIMEOUT
    supervision_interval :float=DEFAULT_SUPERVISION_INTERVAL
    parallel_tool_calls :bool=True

    @field_validator("reasoning_effort", "search_context_size", mode="before")
    @classmethod
    def normalize_effort(cls, value :Optional[str])->str:
        return _to_effort(value, DEFAULT_REASONING_EFFORT)

    @field_validator("storage_dir", "log_dir", "workdir", mode="after")
    @classmethod
    def expand_path(cls, value :Path)->Path:
        return value.expanduser()

    @classmethod
    def from_env(cls, dotenv :bool=True)->"Settings":
        if dotenv:
            load_dotenv()

        backend_args = os.getenv("REASONTIDE_BACKEND_ARGS")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("REASONTIDE_MODEL") or DEFAULT_MODEL,
            reasoning_effort=_to_effort(os.getenv("REASONING_EFFORT"), DEFAULT_REASONING_EFFORT),
            search_context_size=_to_effort(os.getenv("SEARCH_CONTEXT_SIZE"), DEFAULT_SEARCH_CONTEXT_SIZE),
            web_search=_to_bool(os.getenv("REASONTIDE_WEB_SEARCH"), True),
            max_iterations=_to_number(os.getenv("REASONTIDE_MAX_ITERATIONS"), DEFAULT_MAX_ITERATIONS),
            context_entries=_to_number(os.getenv("REASONTIDE_CONTEXT_ENTRIES"), DEFAULT_CONTEXT_ENTRIES),
            storage_dir=Path(os.getenv("REASONTIDE_STORAGE_DIR") or DEFAULT_STORAGE_PATH),
            log_dir=Path(os.getenv("REASONTIDE_LOG_DIR") or DEFAULT_LOGS_PATH),
            log_level=(os.getenv("REASONTIDE_LOG_LEVEL") or "INFO").upper(),
            workdir=Path(os.getenv("REASONTIDE_WORKDIR") or Path.cwd()),
            backend_command=os.getenv("REASONTIDE_BACKEND_COMMAND") or DEFAULT_BACKEND_COMMAND,
            backend_args=backend_args.split() if backend_args else list(DEFAULT_BACKEND_ARGS),
            backend_timeout=_to_number(os.getenv("REASONTIDE_BACKEND_TIMEOUT"), DEFAULT_BACKEND_TIMEOUT, cast=float),
            supervision_interval=_to_number(
                os.getenv("REASONTIDE_SUPERVISION_INTERVAL"), DEFAULT_SUPERVISION_INTERVAL, cast=float
            ),
            parallel_tool_calls=_to_bool(os.getenv("REASONTIDE_PARALLEL_TOOL_CALLS"), True)
        )
