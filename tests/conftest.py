"""Pytest configuration and shared fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add the project root and src directory to Python path so tests can import properly
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from dialogue_manager.core.dispatcher import ToolDispatcher  # noqa: E402
from dialogue_manager.core.orchestrator import DialogueSession  # noqa: E402
from dialogue_manager.core.registry import create_default_registry  # noqa: E402
from dialogue_manager.core.responses import ResponseRenderer  # noqa: E402
from dialogue_manager.services.memory import ConversationMemory  # noqa: E402
from tests.fixtures import create_workout  # noqa: E402


@pytest.fixture
def workout():
    return create_workout()


@pytest.fixture
def memory():
    return ConversationMemory(max_turns=10)


@pytest.fixture
def session():
    """A session with the shipped tools and deterministic phrasing."""
    return DialogueSession(
        session_id="test-session",
        memory=ConversationMemory(),
        dispatcher=ToolDispatcher(create_default_registry(), timeout_seconds=5),
        renderer=ResponseRenderer(random.Random(0)),
    )
