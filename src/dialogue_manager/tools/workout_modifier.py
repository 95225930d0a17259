"""Workout modification tool: scales sets and/or reps of the current workout."""

import logging
from enum import Enum
from typing import Any, Dict, Mapping

from ..models.base import ToolMetadata, ToolResult
from ..models.memory import Workout, WorkoutExercise
from .base import BaseTool

logger = logging.getLogger(__name__)


class ModificationType(str, Enum):
    DOUBLE_SETS = "DOUBLE_SETS"
    DOUBLE_REPS = "DOUBLE_REPS"
    DOUBLE_BOTH = "DOUBLE_BOTH"


_FACTORS = {
    ModificationType.DOUBLE_SETS: (2, 1),
    ModificationType.DOUBLE_REPS: (1, 2),
    ModificationType.DOUBLE_BOTH: (2, 2),
}


class WorkoutModifierTool(BaseTool):
    """Applies a modification plan to the workout held in working memory."""

    def _get_metadata(self) -> ToolMetadata:
        return ToolMetadata(
            name="workout_modifier",
            description="Modifies the current workout based on a plan (e.g. doubles sets/reps).",
            tags=["workout", "modification"],
        )

    def _get_input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "modification_type": {
                    "type": "string",
                    "enum": [t.value for t in ModificationType],
                    "description": "Which numeric fields to scale",
                },
                "target_workout_id": {
                    "type": "string",
                    "description": "Id of the workout the plan was made for",
                },
            },
            "required": ["modification_type", "target_workout_id"],
        }

    async def execute(self, params: Dict[str, Any], snapshot: Mapping[str, Any]) -> ToolResult:
        current = snapshot["working_memory"]["current_task"]
        if not current:
            return ToolResult(success=False, error="No current workout in memory to modify.")

        target_id = params["target_workout_id"]
        if current["id"] != target_id:
            return ToolResult(
                success=False,
                error=(
                    f"Modification plan target ID ('{target_id}') does not match "
                    f"current workout ID ('{current['id']}')."
                ),
            )

        try:
            modification = ModificationType(params["modification_type"])
        except ValueError:
            return ToolResult(
                success=False,
                error=f"Unknown modification type: {params['modification_type']}",
            )

        sets_factor, reps_factor = _FACTORS[modification]
        workout = Workout.from_dict(current)
        workout.exercises = [
            WorkoutExercise(
                exercise_id=exercise.exercise_id,
                sets=exercise.sets * sets_factor,
                reps=exercise.reps * reps_factor,
                name=exercise.name,
            )
            for exercise in workout.exercises
        ]
        logger.debug(f"Applied {modification.value} to workout {workout.id}")

        return ToolResult(
            success=True,
            message=f"Workout modified successfully: {modification.value}",
            updated_task=workout,
        )
