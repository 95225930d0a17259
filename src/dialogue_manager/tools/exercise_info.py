"""Exercise information lookup tool."""

from typing import Any, Dict, Mapping

from ..data.exercises import ExerciseDetails, find_exercise
from ..models.base import ToolMetadata, ToolResult
from .base import BaseTool


class ExerciseInfoTool(BaseTool):
    """Provides information about a specific exercise from the catalogue."""

    def _get_metadata(self) -> ToolMetadata:
        return ToolMetadata(
            name="exercise_info",
            description="Provides information about a specific exercise from the database.",
            tags=["exercise", "lookup"],
        )

    def _get_input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "exercise_name": {
                    "type": "string",
                    "description": "Display name or id of the exercise",
                },
            },
            "required": ["exercise_name"],
        }

    async def execute(self, params: Dict[str, Any], snapshot: Mapping[str, Any]) -> ToolResult:
        exercise_name = params.get("exercise_name")
        if not exercise_name:
            return ToolResult(success=False, error="No exercise name provided.")

        details = find_exercise(exercise_name)
        if not details:
            return ToolResult(
                success=False,
                error=f'Sorry, I don\'t have information on an exercise called "{exercise_name}".',
            )

        return ToolResult(success=True, message=format_exercise(details))


def format_exercise(details: ExerciseDetails) -> str:
    """Render exercise details as a chat message."""
    lines = [
        f"Here's information on {details.name}:",
        f"Description: {details.description}",
        f"Target Muscles: {', '.join(details.target_muscles)}",
    ]
    if details.instructions:
        lines.append("Instructions:")
        lines.extend(f"  {i}. {step}" for i, step in enumerate(details.instructions, 1))
    if details.common_mistakes:
        lines.append("Common Mistakes:")
        lines.extend(f"  - {mistake}" for mistake in details.common_mistakes)
    if details.video_url:
        lines.append(f"You can watch a video here: {details.video_url}")
    return "\n".join(lines)
