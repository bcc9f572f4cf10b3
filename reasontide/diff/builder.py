from ..core.defaults import (
    DEFAULT_ENCODING, DIFF_MAX_BUFFER_BYTES, DIFF_MAX_LINES, DIFF_READ_CHUNK_BYTES, GIT_REF_PATTERN
)
from ..core.models import DiffRequest, DiffResult, DiffSummary

from typing import List, Optional, Union
from contextlib import suppress
from pathlib import Path
from loguru import logger
import asyncio
import re

REF_REGEX = re.compile(GIT_REF_PATTERN)

BASE_ARGS = ["--no-pager", "diff", "--no-ext-diff", "--no-color"]

DIFF_TOO_LARGE_MESSAGE = """Diff too large ({LINE_COUNT} lines, limit: {LIMIT:,}). Consider:
- Specifying a smaller commit range
- Adding file paths to limit scope
- Breaking down the analysis into smaller parts"""

class DiffError(Exception):
    """Raised when a diff cannot be validated, executed or accepted."""

def validate_ref(ref :str)->str:
    """Rejects refs that could be read as options or that carry unexpected characters."""
    if not isinstance(ref, str) or not REF_REGEX.fullmatch(ref):
        raise DiffError(f"Invalid git reference format: {ref}")
    return ref

def build_diff_args(from_ref :str, to_ref :Optional[str]=None, unstaged :Optional[bool]=None)->List[str]:
    """
    Builds the git argument vector for a diff request.

    Args:
        from_ref: Reference to compare from.
        to_ref: Reference to compare to. When omitted the comparison target
            is the working tree, or HEAD if ``unstaged`` is explicitly False.
        unstaged: Whether to include unstaged changes when ``to_ref`` is omitted.

    Returns:
        Arguments to pass to ``git`` as a discrete vector.
    """
    validate_ref(from_ref)
    if to_ref:
        validate_ref(to_ref)

    args = list(BASE_ARGS)
    if to_ref:
        args.extend([from_ref, to_ref])
    elif unstaged is not False:
        # "--" keeps the ref from ever being read as a path
        args.extend([from_ref, "--"])
    else:
        args.extend([from_ref, "HEAD"])
    return args

def summarize_diff(content :str)->DiffSummary:
    """Counts changed files and content lines, leaving out the +++/--- file headers."""
    lines = content.split("\n")
    insertions = sum(1 for line in lines if line.startswith("+") and not line.startswith("+++"))
    deletions = sum(1 for line in lines if line.startswith("-") and not line.startswith("---"))

    changed_files = set()
    for line in lines:
        if not line.startswith("diff --git"):
            continue
        parts = line.split(" ")
        if len(parts) > 3 and parts[3]:
            path = parts[3][2:] if parts[3].startswith("b/") else parts[3]
            if path:
                changed_files.add(path)

    return DiffSummary(files_changed=len(changed_files), insertions=insertions, deletions=deletions)

def _is_warning_only(stderr :str)->bool:
    lines = [line for line in stderr.splitlines() if line.strip()]
    return all("warning" in line.lower() for line in lines)

class DiffBuilder:
    """Runs git diff for validated refs and packages the output with summary statistics."""

    def __init__(
        self,
        workdir :Optional[Union[str, Path]]=None,
        max_lines :int=DIFF_MAX_LINES,
        max_buffer :int=DIFF_MAX_BUFFER_BYTES,
        git_executable :str="git"
    ):
        self.workdir = Path(workdir) if workdir else Path.cwd()
        self.max_lines = max_lines
        self.max_buffer = max_buffer
        self.git_executable = git_executable

    async def _read_bounded(self, stream :asyncio.StreamReader)->bytes:
        """Reads stdout until EOF, failing as soon as it grows past ``max_buffer``."""
        chunks = []
        total = 0
        while True:
            chunk = await stream.read(DIFF_READ_CHUNK_BYTES)
            if not chunk:
                return b"".join(chunks)
            total += len(chunk)
            if total > self.max_buffer:
                raise DiffError(f"Git diff failed: output exceeds {self.max_buffer} bytes")
            chunks.append(chunk)

    async def _run_git(self, args :List[str])->str:
        if not self.workdir.is_dir():
            raise DiffError(f"Directory not found: {self.workdir}")

        try:
            process = await asyncio.create_subprocess_exec(
                self.git_executable, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.workdir
            )
        except FileNotFoundError as e:
            raise DiffError(f"Git diff failed: {self.git_executable} executable not found") from e

        # stderr drains alongside stdout so neither pipe can fill and stall git
        stderr_task = asyncio.ensure_future(process.stderr.read())
        try:
            stdout = await self._read_bounded(process.stdout)
            stderr = await stderr_task
            await process.wait()
        except BaseException:
            stderr_task.cancel()
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise

        stderr_text = stderr.decode(DEFAULT_ENCODING, errors="replace").strip()
        if process.returncode != 0:
            raise DiffError(f"Git diff failed: {stderr_text or f'exit status {process.returncode}'}")
        if stderr_text and not _is_warning_only(stderr_text):
            raise DiffError(f"Git diff failed: {stderr_text}")
        if stderr_text:
            logger.debug(f"git diff warnings: {stderr_text}")

        return stdout.decode(DEFAULT_ENCODING, errors="replace")

    async def run(self, request :DiffRequest)->DiffResult:
        args = build_diff_args(request.from_ref, request.to_ref, request.unstaged)
        command = " ".join([self.git_executable] + args)
        logger.info(f"Running {command} in {self.workdir}")

        content = await self._run_git(args)
        line_count = len(content.split("\n"))
        if line_count > self.max_lines:
            raise DiffError(DIFF_TOO_LARGE_MESSAGE.format(LINE_COUNT=line_count, LIMIT=self.max_lines))

        return DiffResult(
            content=content,
            summary=summarize_diff(content),
            command=command,
            line_count=line_count
        )
