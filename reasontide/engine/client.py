from ..core.defaults import DEFAULT_MODEL
from ..core.models import EngineRequest, EngineResponse

from typing import Any, Dict, Optional, Protocol
from openai import AsyncOpenAI
from loguru import logger

class EngineError(Exception):
    """Raised when the reasoning engine is misconfigured or replies with something unusable."""

class ReasoningEngine(Protocol):
    async def respond(self, request :EngineRequest)->EngineResponse:
        ...

class OpenAIReasoningEngine:
    """Reasoning engine backed by the OpenAI Responses API."""

    def __init__(
        self,
        api_key :Optional[str]=None,
        model :str=DEFAULT_MODEL,
        parallel_tool_calls :bool=True,
        client :Optional[AsyncOpenAI]=None
    ):
        if client is None and not api_key:
            raise EngineError("OPENAI_API_KEY environment variable is required")
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.parallel_tool_calls = parallel_tool_calls

    def build_kwargs(self, request :EngineRequest)->Dict[str, Any]:
        kwargs = {
            "model": self.model,
            "instructions": request.instructions,
            "input": request.input,
            "tools": request.tools,
            "tool_choice": request.tool_choice,
            "parallel_tool_calls": self.parallel_tool_calls,
            "reasoning": {"effort": request.reasoning_effort}
        }
        if request.previous_response_id:
            kwargs["previous_response_id"] = request.previous_response_id
        return kwargs

    async def respond(self, request :EngineRequest)->EngineResponse:
        logger.debug(
            f"Calling {self.model} with {len(request.input)} input items "
            f"(previous_response_id={request.previous_response_id})"
        )
        response = await self.client.responses.create(**self.build_kwargs(request))

        payload = response.model_dump() if hasattr(response, "model_dump") else response
        if not isinstance(payload, dict):
            raise EngineError(f"Unexpected response type from reasoning engine: {type(response).__name__}")

        parsed = EngineResponse.from_payload(payload)
        logger.debug(
            f"Engine response {parsed.id}: {len(parsed.output)} items, "
            f"{len(parsed.function_calls)} function calls"
        )
        return parsed
