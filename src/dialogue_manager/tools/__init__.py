"""Tools for the dialogue manager."""

from .base import BaseTool
from .exercise_info import ExerciseInfoTool
from .workout_modifier import ModificationType, WorkoutModifierTool

__all__ = [
    "BaseTool",
    "ExerciseInfoTool",
    "ModificationType",
    "WorkoutModifierTool",
]
