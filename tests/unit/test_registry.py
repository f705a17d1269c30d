"""
Unit tests for CapabilityRegistry.

Tests cover:
- Registration and introspection order
- Resolution of factories and static descriptors
- Unknown capability errors (no partial results, no factory runs)
- Factories returning None
- Allow-list plumbing
"""

from typing import Any

import pytest

from toolgate.capabilities import CapabilityRegistry, Factory, ResolverContext, StaticDescriptor
from toolgate.errors import (
    ERROR_CONFIG_UNKNOWN_CAPABILITY,
    ConfigurationError,
    UnknownCapabilityError,
)
from toolgate.schema import CapabilityConfig, SubprocessServer, ToolDescriptor


class RecordingFactory:
    """Factory that records its calls."""

    def __init__(self, result: Any = "instance") -> None:
        self.result = result
        self.calls: list[tuple[ResolverContext, list[str] | None]] = []

    def __call__(self, ctx: ResolverContext, allowed: list[str] | None) -> Any:
        self.calls.append((ctx, allowed))
        return self.result


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    """Registration and introspection."""

    def test_empty_registry(self, registry: CapabilityRegistry) -> None:
        assert registry.known_keys() == []
        assert registry.known_capabilities() == []
        assert len(registry) == 0

    def test_registration_order(self, registry: CapabilityRegistry) -> None:
        for key in ("zeta", "alpha", "mid"):
            registry.register(key, Factory(RecordingFactory()), [])
        assert registry.known_keys() == ["zeta", "alpha", "mid"]
        assert [d.key for d in registry.known_capabilities()] == ["zeta", "alpha", "mid"]

    def test_descriptors_include_tools(self, registry: CapabilityRegistry) -> None:
        registry.register(
            "memory",
            Factory(RecordingFactory()),
            [ToolDescriptor(name="save_memory", description="Save")],
        )
        (descriptor,) = registry.known_capabilities()
        assert descriptor.key == "memory"
        assert [t.name for t in descriptor.tools] == ["save_memory"]

    def test_tool_descriptors_from_dicts(self, registry: CapabilityRegistry) -> None:
        registry.register("x", Factory(RecordingFactory()), [{"name": "t", "description": "d"}])
        assert registry.known_capabilities()[0].tools[0] == ToolDescriptor(name="t", description="d")

    def test_last_registration_wins(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("a", Factory(RecordingFactory("first")), [])
        registry.register("b", Factory(RecordingFactory()), [])
        registry.register("a", Factory(RecordingFactory("second")), [ToolDescriptor(name="t")])

        assert registry.known_keys() == ["a", "b"]
        assert len(registry.known_capabilities()) == 2
        assert registry.known_capabilities()[0].tools[0].name == "t"
        assert registry.resolve({"a": CapabilityConfig()}, make_ctx()) == {"a": "second"}

    def test_bare_callable_wrapped(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("plain", lambda ctx, allowed: "plain-instance", [])
        assert registry.resolve({"plain": {}}, make_ctx()) == {"plain": "plain-instance"}

    def test_empty_key_rejected(self, registry: CapabilityRegistry) -> None:
        with pytest.raises(ValueError):
            registry.register("", Factory(RecordingFactory()), [])

    def test_non_callable_source_rejected(self, registry: CapabilityRegistry) -> None:
        with pytest.raises(ValueError):
            registry.register("bad", "not a source", [])  # type: ignore[arg-type]

    def test_contains(self, registry: CapabilityRegistry) -> None:
        registry.register("a", Factory(RecordingFactory()), [])
        assert "a" in registry
        assert registry.has("a")
        assert "b" not in registry


# =============================================================================
# Resolution
# =============================================================================


class TestResolve:
    """resolve() behavior."""

    def test_none_returns_empty(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("a", Factory(RecordingFactory()), [])
        assert registry.resolve(None, make_ctx()) == {}

    def test_empty_returns_empty(self, registry: CapabilityRegistry, make_ctx) -> None:
        assert registry.resolve({}, make_ctx()) == {}

    def test_unknown_capability_raises(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("memory", Factory(RecordingFactory()), [])
        with pytest.raises(UnknownCapabilityError) as exc_info:
            registry.resolve({"unknown": {}}, make_ctx())

        err = exc_info.value
        assert err.message == 'Unknown capability: "unknown"'
        assert err.code == ERROR_CONFIG_UNKNOWN_CAPABILITY
        assert err.context["available"] == ["memory"]
        assert isinstance(err, ConfigurationError)

    def test_unknown_capability_runs_no_factory(self, registry: CapabilityRegistry, make_ctx) -> None:
        factory = RecordingFactory()
        registry.register("known", Factory(factory), [])
        with pytest.raises(UnknownCapabilityError, match='Unknown capability: "missing"'):
            registry.resolve({"known": {}, "missing": {}}, make_ctx())
        assert factory.calls == []

    def test_first_unknown_in_request_order_reported(self, registry: CapabilityRegistry, make_ctx) -> None:
        with pytest.raises(UnknownCapabilityError) as exc_info:
            registry.resolve({"second": {}, "first": {}}, make_ctx())
        assert exc_info.value.capability == "second"

    def test_factory_receives_ctx_and_allow_list(self, registry: CapabilityRegistry, make_ctx) -> None:
        factory = RecordingFactory()
        registry.register("memory", Factory(factory), [])
        ctx = make_ctx()

        registry.resolve({"memory": CapabilityConfig(tools=["list_memories"])}, ctx)

        assert factory.calls == [(ctx, ["list_memories"])]

    def test_factory_without_allow_list_gets_none(self, registry: CapabilityRegistry, make_ctx) -> None:
        factory = RecordingFactory()
        registry.register("memory", Factory(factory), [])
        registry.resolve({"memory": None}, make_ctx())
        assert factory.calls[0][1] is None

    def test_dict_config_accepted(self, registry: CapabilityRegistry, make_ctx) -> None:
        factory = RecordingFactory()
        registry.register("memory", Factory(factory), [])
        registry.resolve({"memory": {"tools": ["a"], "extra": 1}}, make_ctx())
        assert factory.calls[0][1] == ["a"]

    def test_invalid_config_is_configuration_error(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("memory", Factory(RecordingFactory()), [])
        with pytest.raises(ConfigurationError):
            registry.resolve({"memory": {"tools": 5}}, make_ctx())

    def test_factory_none_omitted(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("needs-hook", Factory(lambda ctx, allowed: None), [])
        registry.register("always", Factory(RecordingFactory("ok")), [])
        result = registry.resolve({"needs-hook": {}, "always": {}}, make_ctx())
        assert result == {"always": "ok"}

    def test_factory_depends_on_context(self, registry: CapabilityRegistry, make_ctx) -> None:
        def agents(ctx: ResolverContext, allowed: list[str] | None) -> Any:
            return None if ctx.run_agent_fn is None else "agents-instance"

        registry.register("agents", Factory(agents), [])
        assert registry.resolve({"agents": {}}, make_ctx()) == {}
        with_hook = make_ctx(run_agent_fn=lambda agent_id, message, depth: "reply")
        assert registry.resolve({"agents": {}}, with_hook) == {"agents": "agents-instance"}

    def test_static_descriptor_returned_verbatim(self, registry: CapabilityRegistry, make_ctx) -> None:
        server = SubprocessServer(command="npx", args=("@playwright/mcp@latest",))
        registry.register("browser", StaticDescriptor(server), [])

        first = registry.resolve({"browser": {}}, make_ctx())
        second = registry.resolve({"browser": {"tools": ["ignored"]}}, make_ctx(agent_id="other"))

        assert first["browser"] is server
        assert second["browser"] is server

    def test_result_in_request_order(self, registry: CapabilityRegistry, make_ctx) -> None:
        for key in ("a", "b", "c"):
            registry.register(key, Factory(RecordingFactory(key)), [])
        result = registry.resolve({"c": {}, "a": {}}, make_ctx())
        assert list(result) == ["c", "a"]

    def test_fresh_instances_per_resolve(self, registry: CapabilityRegistry, make_ctx) -> None:
        registry.register("obj", Factory(lambda ctx, allowed: object()), [])
        first = registry.resolve({"obj": {}}, make_ctx())
        second = registry.resolve({"obj": {}}, make_ctx())
        assert first["obj"] is not second["obj"]

    def test_independent_registries(self, make_ctx) -> None:
        one = CapabilityRegistry()
        two = CapabilityRegistry()
        one.register("a", Factory(RecordingFactory()), [])
        assert two.known_keys() == []
        with pytest.raises(UnknownCapabilityError):
            two.resolve({"a": {}}, make_ctx())

    def test_factory_errors_propagate(self, registry: CapabilityRegistry, make_ctx) -> None:
        def broken(ctx: ResolverContext, allowed: list[str] | None) -> Any:
            raise RuntimeError("boom")

        registry.register("broken", Factory(broken), [])
        with pytest.raises(RuntimeError, match="boom"):
            registry.resolve({"broken": {}}, make_ctx())
