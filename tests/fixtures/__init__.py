"""Test fixtures for the dialogue manager tests."""

import asyncio
from typing import Any, Dict, Mapping, Optional
from unittest.mock import Mock

from dialogue_manager.models.base import ToolMetadata, ToolResult
from dialogue_manager.models.memory import Workout, WorkoutExercise
from dialogue_manager.tools.base import BaseTool


def create_workout(workout_id: str = "workout1", sets: int = 3, reps: int = 10) -> Workout:
    """A one-exercise workout."""
    return Workout(
        id=workout_id,
        exercises=[WorkoutExercise(exercise_id="bench_press", sets=sets, reps=reps, name="Bench Press")],
    )


def create_mock_model_manager(reply: str = "Test response"):
    """Create a mock free-form reply provider."""
    mock_manager = Mock()
    mock_manager.primary.name = "test-primary-model"
    mock_manager.fallback.name = "test-fallback-model"
    mock_manager.generate_content = Mock(return_value=(reply, "test-primary-model"))
    mock_manager.generate_reply = Mock(return_value=reply)
    mock_manager.get_stats = Mock(
        return_value={
            "total_calls": 10,
            "primary": {"model": "test-primary-model", "calls": 9, "failures": 0},
            "fallback": {"model": "test-fallback-model", "calls": 1, "failures": 0},
        }
    )
    return mock_manager


class MockTool(BaseTool):
    """Configurable tool that records the calls it receives."""

    def __init__(
        self,
        name: str = "mock_tool",
        result: Optional[ToolResult] = None,
        error: Optional[Exception] = None,
        delay: float = 0,
        required: Optional[list] = None,
    ):
        self._name = name
        self.result = result if result is not None else ToolResult(success=True, message="done")
        self.error = error
        self.delay = delay
        self.required = required or []
        self.calls = []
        super().__init__()

    def _get_metadata(self) -> ToolMetadata:
        return ToolMetadata(name=self._name, description=f"Test tool {self._name}", tags=["test"])

    def _get_input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {key: {"type": "string"} for key in self.required},
            "required": list(self.required),
        }

    async def execute(self, params: Dict[str, Any], snapshot: Mapping[str, Any]) -> ToolResult:
        self.calls.append((params, snapshot))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result
