"""Built-in reference data."""

from .exercises import EXERCISES, ExerciseDetails, find_exercise

__all__ = ["EXERCISES", "ExerciseDetails", "find_exercise"]
