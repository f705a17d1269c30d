"""
Pytest configuration and fixtures for toolgate tests.

This module provides shared fixtures used across unit, integration,
and security tests.
"""

import logging
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from toolgate.capabilities import ResolverContext
from toolgate.schema import AgentConfig, TrustLevel

CWD = "/home/user/project"
SHARED = "/shared/data"


@pytest.fixture(autouse=True)
def reset_toolgate_logger() -> Generator[None, None, None]:
    """Undo configure_logging() so caplog keeps seeing toolgate records."""
    yield
    logger = logging.getLogger("toolgate")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def agent() -> AgentConfig:
    """A controlled agent that may delegate to 'helper'."""
    return AgentConfig(
        id="test-agent",
        name="Test",
        trust=TrustLevel.CONTROLLED,
        allowed_agents=["helper"],
    )


@pytest.fixture
def make_ctx(agent: AgentConfig, temp_dir: Path):
    """Factory for ResolverContext with overrides."""

    def _make(**overrides) -> ResolverContext:
        values = {
            "agent_id": agent.id,
            "agent_dir": str(temp_dir / "agents" / agent.id),
            "workspace_dir": str(temp_dir / "workspace"),
            "thread_id": "thread-1",
            "agent": agent,
        }
        values.update(overrides)
        return ResolverContext(**values)

    return _make


@pytest.fixture
def sample_agent_yaml() -> str:
    """Return a simple agent YAML for testing."""
    return """
id: writer
name: Writer
trust: controlled
directories:
  - /shared/data
capabilities:
  memory:
    tools: [list_memories]
  browser: {}
"""
