from reasontide.core.config import Settings
from reasontide.core.defaults import DEFAULT_MAX_ITERATIONS

from pathlib import Path
import pytest

ENV_VARS = [
    "OPENAI_API_KEY", "REASONTIDE_MODEL", "REASONING_EFFORT", "SEARCH_CONTEXT_SIZE",
    "REASONTIDE_WEB_SEARCH", "REASONTIDE_MAX_ITERATIONS", "REASONTIDE_CONTEXT_ENTRIES",
    "REASONTIDE_STORAGE_DIR", "REASONTIDE_LOG_DIR", "REASONTIDE_LOG_LEVEL", "REASONTIDE_WORKDIR",
    "REASONTIDE_BACKEND_COMMAND", "REASONTIDE_BACKEND_ARGS", "REASONTIDE_BACKEND_TIMEOUT",
    "REASONTIDE_SUPERVISION_INTERVAL", "REASONTIDE_PARALLEL_TOOL_CALLS"
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env(dotenv=False)

    assert settings.openai_api_key is None
    assert settings.model == "o3"
    assert settings.reasoning_effort == "medium"
    assert settings.search_context_size == "medium"
    assert settings.web_search is True
    assert settings.max_iterations == DEFAULT_MAX_ITERATIONS
    assert settings.context_entries == 10
    assert settings.backend_command == "claude"
    assert settings.backend_args == ["mcp", "serve"]
    assert settings.backend_timeout == 30.0
    assert settings.parallel_tool_calls is True


def test_reads_environment(clean_env, tmp_path):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("REASONTIDE_MODEL", "o4-mini")
    clean_env.setenv("REASONING_EFFORT", "HIGH")
    clean_env.setenv("SEARCH_CONTEXT_SIZE", "low")
    clean_env.setenv("REASONTIDE_WEB_SEARCH", "off")
    clean_env.setenv("REASONTIDE_MAX_ITERATIONS", "3")
    clean_env.setenv("REASONTIDE_STORAGE_DIR", str(tmp_path / "convs"))
    clean_env.setenv("REASONTIDE_BACKEND_ARGS", "mcp  serve --debug")
    clean_env.setenv("REASONTIDE_PARALLEL_TOOL_CALLS", "0")

    settings = Settings.from_env(dotenv=False)

    assert settings.openai_api_key == "sk-test"
    assert settings.model == "o4-mini"
    assert settings.reasoning_effort == "high"
    assert settings.search_context_size == "low"
    assert settings.web_search is False
    assert settings.max_iterations == 3
    assert settings.storage_dir == tmp_path / "convs"
    assert settings.backend_args == ["mcp", "serve", "--debug"]
    assert settings.parallel_tool_calls is False


@pytest.mark.parametrize("value", ["extreme", "", "  "])
def test_invalid_effort_falls_back_to_medium(clean_env, value):
    clean_env.setenv("REASONING_EFFORT", value)
    clean_env.setenv("SEARCH_CONTEXT_SIZE", value)
    settings = Settings.from_env(dotenv=False)
    assert settings.reasoning_effort == "medium"
    assert settings.search_context_size == "medium"


@pytest.mark.parametrize("value", ["abc", "0", "-4", "2.5"])
def test_invalid_iteration_cap_falls_back_to_default(clean_env, value):
    clean_env.setenv("REASONTIDE_MAX_ITERATIONS", value)
    assert Settings.from_env(dotenv=False).max_iterations == DEFAULT_MAX_ITERATIONS


def test_direct_construction_normalizes_effort_and_paths():
    settings = Settings(reasoning_effort="bogus", storage_dir=Path("~/somewhere"))
    assert settings.reasoning_effort == "medium"
    assert "~" not in str(settings.storage_dir)
