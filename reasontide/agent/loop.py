from ..core.defaults import DEFAULT_CONTEXT_ENTRIES, DEFAULT_ENCODING, DEFAULT_MAX_ITERATIONS, FALLBACK_RESPONSE
from ..core.models import AskOutcome, DiffRequest, DiffResult, EngineRequest, LoopState, ToolCall
from ..tools.normalizer import summarize_result, to_output_item
from ..conversation.store import ConversationStore
from ..diff.builder import DiffBuilder, DiffError
from ..tools.dispatcher import ToolDispatcher
from ..engine.schema import build_tool_schema
from .prompts import (
    DIFF_ANALYSIS_TEMPLATE, DIFF_PRIORITY_INSTRUCTIONS, EMPTY_ITERATION_NUDGE, ENGINE_INSTRUCTIONS,
    FILE_CONTENT_TEMPLATE, FILE_ERROR_TEMPLATE, FILES_HEADER, TOOLS_USED_SEPARATOR
)

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Tuple
from loguru import logger
from ulid import ULID
import aiofiles

def default_conversation_id()->str:
    return f"default_{ULID()}"

class ReasoningAgent(BaseModel):
    """
    Drives the bounded tool-augmented reasoning loop for one task at a time.

    Each call to :meth:`ask` assembles the task with prior conversation context,
    an optional git diff and optional file contents, then repeatedly calls the
    reasoning engine, dispatching whatever tools it requests, until the engine
    answers with text and no tool calls or ``max_iterations`` is reached.
    """

    engine :Any
    dispatcher :ToolDispatcher
    store :ConversationStore
    diff_builder :DiffBuilder=Field(default_factory=DiffBuilder)
    max_iterations :int=Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    context_entries :int=DEFAULT_CONTEXT_ENTRIES
    reasoning_effort :str="medium"
    tools :List[Dict[str, Any]]=Field(default_factory=build_tool_schema)
    default_conversation_id :str=Field(default_factory=default_conversation_id)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # ========================================================================
    # Input assembly
    # ========================================================================

    @staticmethod
    def render_diff(diff_result :DiffResult)->str:
        return DIFF_ANALYSIS_TEMPLATE.format(
            COMMAND=diff_result.command,
            SUMMARY=str(diff_result.summary),
            CONTENT=diff_result.content
        )

    @staticmethod
    async def read_files(file_paths :Optional[List[str]])->str:
        """Reads every file, turning unreadable ones into an inline error note."""
        sections = []
        for file_path in file_paths or []:
            try:
                async with aiofiles.open(file_path, "r", encoding=DEFAULT_ENCODING) as f:
                    content = await f.read()
                sections.append(FILE_CONTENT_TEMPLATE.format(PATH=file_path, CONTENT=content))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read {file_path}: {e}")
                sections.append(FILE_ERROR_TEMPLATE.format(PATH=file_path, ERROR=e))
        return "".join(sections)

    @staticmethod
    def build_initial_input(
        task :str,
        context :str="",
        diff_report :Optional[str]=None,
        file_contents :Optional[str]=None
    )->List[Dict[str, Any]]:
        items = [{"role": "user", "content": f"{context}{task}"}]
        if diff_report:
            items.append({"role": "system", "content": diff_report})
        if file_contents:
            items.append({"role": "system", "content": f"{FILES_HEADER}{file_contents}"})
        return items

    @staticmethod
    def build_instructions(has_diff :bool)->str:
        if has_diff:
            return f"{ENGINE_INSTRUCTIONS}\n{DIFF_PRIORITY_INSTRUCTIONS}"
        return ENGINE_INSTRUCTIONS

    # ========================================================================
    # Loop
    # ========================================================================

    async def _fold_tool_results(self, state :LoopState, calls :List[ToolCall], keep_calls :bool):
        results = await self.dispatcher.dispatch(calls)
        for call, result in zip(calls, results):
            state.tool_summaries.append(summarize_result(call.name, result))
            if keep_calls:
                # without a response id the engine needs its own calls echoed back
                state.input_items.append({
                    "type": "function_call",
                    "call_id": call.call_id,
                    "name": call.name,
                    "arguments": call.arguments
                })
            state.input_items.append(to_output_item(call.call_id, result))

    async def run_loop(self, state :LoopState, instructions :str)->Tuple[str, int]:
        """
        Runs engine round trips until a final answer or the iteration cap.

        Returns:
            The final text (the fallback text on exhaustion) and the number of
            engine calls made.
        """
        final_text = None
        engine_calls = 0

        for depth in range(self.max_iterations):
            state.depth = depth
            request = EngineRequest(
                instructions=instructions,
                input=state.pending_items(),
                tools=self.tools,
                tool_choice="auto",
                previous_response_id=state.previous_response_id,
                reasoning_effort=self.reasoning_effort
            )
            logger.info(f"Iteration {depth + 1}/{self.max_iterations}: sending {len(request.input)} input items")
            response = await self.engine.respond(request)
            engine_calls += 1
            state.mark_sent()

            calls = [item.as_tool_call() for item in response.function_calls]
            candidate = response.text
            if response.id:
                state.previous_response_id = response.id

            if not calls:
                if candidate.strip():
                    final_text = candidate
                    break
                logger.warning(f"Iteration {depth + 1} produced neither tool calls nor text")
                if depth < self.max_iterations - 1:
                    state.input_items.append({"role": "user", "content": EMPTY_ITERATION_NUDGE})
                continue

            logger.info(f"Iteration {depth + 1}: dispatching {', '.join(call.name for call in calls)}")
            await self._fold_tool_results(state, calls, keep_calls=response.id is None)

        if final_text is None:
            logger.warning(f"No final answer after {engine_calls} engine calls")
            final_text = FALLBACK_RESPONSE

        return final_text, engine_calls

    # ========================================================================
    # Entry point
    # ========================================================================

    async def ask(
        self,
        input :str,
        file_paths :Optional[List[str]]=None,
        conversation_id :Optional[str]=None,
        diff :Optional[DiffRequest]=None
    )->AskOutcome:
        """
        Answers one task and records the exchange in the conversation.

        Args:
            input: The task or question.
            file_paths: Absolute paths whose contents are attached to the task.
            conversation_id: Conversation to continue, the session default if omitted.
            diff: Optional git diff to attach.

        Returns:
            AskOutcome with the final text and tool trace. Failures while
            preparing the request or calling the engine produce an error-flagged
            outcome and leave the conversation untouched.
        """
        conversation_id = conversation_id or self.default_conversation_id

        try:
            conversation = self.store.get(conversation_id)
            context = self.store.render_context(conversation, self.context_entries)

            diff_report = None
            if diff is not None:
                try:
                    diff_report = self.render_diff(await self.diff_builder.run(diff))
                except DiffError as e:
                    logger.warning(f"Diff failed: {e}")
                    return AskOutcome(text=f"Error: {e}", conversation_id=conversation_id, is_error=True)

            file_contents = await self.read_files(file_paths)
            state = LoopState(input_items=self.build_initial_input(input, context, diff_report, file_contents))
            final_text, iterations = await self.run_loop(state, self.build_instructions(diff_report is not None))

            if state.tool_summaries:
                final_text += TOOLS_USED_SEPARATOR + "\n\n".join(state.tool_summaries)

            await self.store.append(conversation_id, input, final_text, file_paths)

        except Exception as e:
            logger.exception(f"Reasoning request failed: {e}")
            return AskOutcome(text=f"Error: {e}", conversation_id=conversation_id, is_error=True)

        return AskOutcome(
            text=final_text,
            conversation_id=conversation_id,
            iterations=iterations,
            tool_summaries=state.tool_summaries
        )

    async def reset(self, conversation_id :Optional[str]=None)->str:
        conversation_id = conversation_id or self.default_conversation_id
        await self.store.reset(conversation_id)
        return conversation_id
