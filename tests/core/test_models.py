from reasontide.core.models import (
    DiffSummary, EngineResponse, FunctionCallItem, LoopState, MessageItem,
    ToolName, ToolResult
)

import pytest


@pytest.fixture
def responses_payload():
    """A Responses API payload mixing every output item kind."""
    return {
        "id": "resp_123",
        "output": [
            {"type": "reasoning", "id": "rs_1", "summary": []},
            {"type": "web_search_call", "id": "ws_1", "status": "completed"},
            {
                "type": "function_call",
                "id": "fc_1",
                "call_id": "call_abc",
                "name": "view",
                "arguments": "{\"file_path\": \"/tmp/a.py\"}"
            },
            {
                "type": "message",
                "role": "assistant",
                "content": [
                    {"type": "output_text", "text": "First part"},
                    {"type": "refusal", "refusal": "nope"},
                    {"type": "output_text", "text": "Second part"}
                ]
            }
        ]
    }


def test_from_payload_keeps_only_messages_and_function_calls(responses_payload):
    response = EngineResponse.from_payload(responses_payload)

    assert response.id == "resp_123"
    assert len(response.output) == 2
    assert isinstance(response.output[0], FunctionCallItem)
    assert isinstance(response.output[1], MessageItem)


def test_from_payload_extracts_function_call_fields(responses_payload):
    response = EngineResponse.from_payload(responses_payload)

    call = response.function_calls[0]
    assert call.name == "view"
    assert call.call_id == "call_abc"
    assert call.arguments == "{\"file_path\": \"/tmp/a.py\"}"


def test_from_payload_joins_output_text_segments(responses_payload):
    response = EngineResponse.from_payload(responses_payload)
    assert response.text == "First part\nSecond part"


def test_from_payload_falls_back_to_item_id_for_call_id():
    response = EngineResponse.from_payload({
        "id": "resp_1",
        "output": [{"type": "function_call", "id": "fc_9", "name": "list", "arguments": ""}]
    })
    call = response.function_calls[0]
    assert call.call_id == "fc_9"
    assert call.arguments == "{}"


def test_from_payload_handles_missing_output():
    response = EngineResponse.from_payload({"id": "resp_1", "output": None})
    assert response.output == []
    assert response.text == ""
    assert response.function_calls == []


def test_function_call_without_id_gets_generated_call_id():
    call = FunctionCallItem(name="grep", arguments="{}").as_tool_call()
    assert call.call_id.startswith("call_")
    other = FunctionCallItem(name="grep", arguments="{}").as_tool_call()
    assert call.call_id != other.call_id


def test_tool_result_text_and_error_helper():
    result = ToolResult(segments=["a", "b"])
    assert result.text == "a\nb"
    assert not result.is_error

    error = ToolResult.error("boom")
    assert error.is_error
    assert error.segments == ["boom"]


def test_diff_summary_renders_like_git_shortstat():
    summary = DiffSummary(files_changed=2, insertions=5, deletions=1)
    assert str(summary) == "2 files changed, 5 insertions(+), 1 deletions(-)"


@pytest.mark.parametrize("name, backend_name, gated", [
    (ToolName.VIEW, "Read", False),
    (ToolName.EDIT, "Edit", False),
    (ToolName.LIST, "LS", False),
    (ToolName.WRITE, "Write", True),
    (ToolName.BASH, "Bash", True),
    (ToolName.GREP, "Grep", False),
])
def test_tool_names_map_to_backend(name, backend_name, gated):
    assert name.backend_name == backend_name
    assert name.requires_confirmation is gated


def test_loop_state_sends_everything_until_a_response_id_exists():
    state = LoopState(input_items=[{"role": "user", "content": "hi"}])
    assert state.pending_items() == [{"role": "user", "content": "hi"}]

    state.mark_sent()
    state.input_items.append({"type": "function_call_output", "call_id": "c1", "output": "ok"})
    # no previous response id yet, so the whole list is still resent
    assert len(state.pending_items()) == 2

    state.previous_response_id = "resp_1"
    assert state.pending_items() == [{"type": "function_call_output", "call_id": "c1", "output": "ok"}]
