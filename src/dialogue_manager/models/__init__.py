"""Data models for the dialogue manager."""

from .base import ToolMetadata, ToolResult
from .intent import Intent, IntentName
from .memory import (
    ActionKind,
    ActionRecord,
    ClarificationContext,
    ClarificationOption,
    ConversationTurn,
    WorkingMemory,
    Workout,
    WorkoutExercise,
)

__all__ = [
    "ToolMetadata",
    "ToolResult",
    "Intent",
    "IntentName",
    "ActionKind",
    "ActionRecord",
    "ClarificationContext",
    "ClarificationOption",
    "ConversationTurn",
    "WorkingMemory",
    "Workout",
    "WorkoutExercise",
]
