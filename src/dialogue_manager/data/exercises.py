"""Built-in exercise catalogue used by the exercise information tool."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ExerciseDetails:
    """Reference information about one exercise."""

    id: str
    name: str
    description: str
    target_muscles: List[str]
    instructions: List[str] = field(default_factory=list)
    video_url: Optional[str] = None
    common_mistakes: List[str] = field(default_factory=list)


EXERCISES: List[ExerciseDetails] = [
    ExerciseDetails(
        id="bench_press",
        name="Bench Press",
        description="A compound exercise that targets the chest, shoulders, and triceps.",
        target_muscles=["chest", "triceps", "shoulders"],
        instructions=[
            "Lie flat on a bench with your feet flat on the floor.",
            "Grip the barbell with hands slightly wider than shoulder-width apart.",
            "Lower the bar to your mid-chest.",
            "Push the bar back up until your arms are fully extended.",
        ],
        video_url="https://www.youtube.com/watch?v=example_bench_press",
        common_mistakes=["Arching the back too much.", "Bouncing the bar off the chest."],
    ),
    ExerciseDetails(
        id="squat",
        name="Squat",
        description=(
            "A compound exercise that primarily targets the thighs "
            "(quadriceps, hamstrings) and glutes."
        ),
        target_muscles=["quadriceps", "hamstrings", "glutes", "core"],
        instructions=[
            "Stand with your feet shoulder-width apart.",
            "Lower your hips as if sitting back in a chair, keeping your chest up and back straight.",
            "Go as low as comfortable, ideally until your thighs are parallel to the floor.",
            "Push back up to the starting position.",
        ],
        video_url="https://www.youtube.com/watch?v=example_squat",
    ),
    ExerciseDetails(
        id="deadlift",
        name="Deadlift",
        description=(
            "A compound exercise that works multiple muscle groups including "
            "the back, legs, and core."
        ),
        target_muscles=["lower back", "glutes", "hamstrings", "quadriceps", "traps", "forearms"],
        instructions=[
            "Stand with mid-foot under the barbell.",
            "Bend over and grip the bar with a shoulder-width grip.",
            "Bend your knees until your shins touch the bar.",
            "Lift your chest up and straighten your lower back.",
            "Take a big breath, hold it, and stand up with the weight.",
        ],
        video_url="https://www.youtube.com/watch?v=example_deadlift",
    ),
    ExerciseDetails(
        id="pull_up",
        name="Pull Up",
        description="An upper-body compound pulling exercise.",
        target_muscles=["latissimus dorsi", "biceps", "middle back", "shoulders"],
        instructions=[
            "Grab the pull-up bar with an overhand grip, slightly wider than shoulder-width.",
            "Hang with your arms fully extended.",
            "Pull your body up until your chin is over the bar.",
            "Lower your body back to the starting position in a controlled manner.",
        ],
    ),
]


def find_exercise(name: str) -> Optional[ExerciseDetails]:
    """Find an exercise by display name or id, case-insensitively."""
    if not name:
        return None
    wanted = name.lower().strip()
    for exercise in EXERCISES:
        if exercise.name.lower() == wanted or exercise.id == wanted:
            return exercise
    return None
