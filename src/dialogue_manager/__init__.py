"""Dialogue manager - turns user utterances into intents, clarifications and tool calls"""

__version__ = "1.0.0"

from .core.manager import DialogueManager
from .core.orchestrator import DialogueSession

__all__ = ["DialogueManager", "DialogueSession"]
