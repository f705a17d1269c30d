"""
Unit tests for error hierarchy.

Tests cover:
- Base ToolgateError behavior
- Configuration errors with context
- Tool errors with context
- Error serialization
"""

import pytest

from toolgate.errors import (
    ERROR_CONFIG_INVALID,
    ERROR_CONFIG_INVALID_AGENT,
    ERROR_CONFIG_UNKNOWN_CAPABILITY,
    ERROR_CONFIG_UNKNOWN_TOOL,
    ERROR_TOOL_NOT_FOUND,
    ConfigurationError,
    InvalidAgentConfigError,
    ToolError,
    ToolgateError,
    ToolNotFoundError,
    UnknownCapabilityError,
    UnknownToolError,
)


class TestToolgateError:
    """Tests for base ToolgateError."""

    def test_basic_error(self) -> None:
        err = ToolgateError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_includes_code_and_suggestion(self) -> None:
        err = ToolgateError(message="Failed", code=1, suggestion="Try again")
        assert str(err) == "[E1] Failed\nSuggestion: Try again"

    def test_is_exception(self) -> None:
        with pytest.raises(ToolgateError):
            raise ToolgateError(message="x")

    def test_to_dict(self) -> None:
        err = ToolgateError(message="m", code=2, context={"k": "v"})
        assert err.to_dict() == {
            "error_type": "ToolgateError",
            "message": "m",
            "code": 2,
            "suggestion": None,
            "context": {"k": "v"},
        }


class TestConfigurationErrors:
    """Tests for configuration errors."""

    def test_generic_configuration_error(self) -> None:
        err = ConfigurationError(message="bad")
        assert err.code == ERROR_CONFIG_INVALID

    def test_unknown_capability(self) -> None:
        err = UnknownCapabilityError(capability="unknown", available=["memory", "browser"])
        assert err.message == 'Unknown capability: "unknown"'
        assert err.code == ERROR_CONFIG_UNKNOWN_CAPABILITY
        assert err.suggestion == "Available: memory, browser"
        assert err.context == {"capability": "unknown", "available": ["memory", "browser"]}
        assert isinstance(err, ConfigurationError)

    def test_unknown_capability_empty_registry(self) -> None:
        err = UnknownCapabilityError(capability="x")
        assert err.suggestion == "Available: (none)"

    def test_unknown_tool(self) -> None:
        err = UnknownToolError(tool="missing", capability="memory", available=["a"])
        assert err.message == 'Unknown tool "missing" for capability "memory"'
        assert err.code == ERROR_CONFIG_UNKNOWN_TOOL
        assert err.context["tool"] == "missing"
        assert err.context["capability"] == "memory"

    def test_invalid_agent_config(self) -> None:
        err = InvalidAgentConfigError(source="agent.yaml", underlying_error="bad trust")
        assert err.code == ERROR_CONFIG_INVALID_AGENT
        assert "agent.yaml" in err.message
        assert err.context["underlying_error"] == "bad trust"


class TestToolErrors:
    """Tests for tool errors."""

    def test_tool_not_found(self) -> None:
        err = ToolNotFoundError(tool="forget", capability="memory")
        assert err.message == "Tool not found: forget in capability memory"
        assert err.code == ERROR_TOOL_NOT_FOUND
        assert err.context == {"tool": "forget", "capability": "memory"}
        assert isinstance(err, ToolError)

    def test_tool_not_found_without_capability(self) -> None:
        assert ToolNotFoundError(tool="x").message == "Tool not found: x"
