"""Core components of the dialogue manager."""

from .clarification import ModificationPlanner
from .dispatcher import ToolDispatcher
from .manager import DialogueManager
from .orchestrator import DialogueSession, TurnState
from .registry import ToolRegistry, create_default_registry
from .resolver import IntentResolver
from .responses import ResponseRenderer

__all__ = [
    "DialogueManager",
    "DialogueSession",
    "IntentResolver",
    "ModificationPlanner",
    "ResponseRenderer",
    "ToolDispatcher",
    "ToolRegistry",
    "TurnState",
    "create_default_registry",
]
