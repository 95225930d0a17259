"""Intent models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class IntentName(str, Enum):
    """Built-in intent names.

    Intent names are plain strings on :class:`Intent`, so resolvers may add
    names of their own; these members compare equal to their string values.
    """

    GREETING = "GREETING"
    FAREWELL = "FAREWELL"
    THANKS = "THANKS"
    HELP = "HELP"
    GET_EXERCISE_INFO = "GET_EXERCISE_INFO"
    CREATE_WORKOUT = "CREATE_WORKOUT"
    DOUBLE_WORKOUT = "DOUBLE_WORKOUT"
    CANNOT_DOUBLE_NO_WORKOUT = "CANNOT_DOUBLE_NO_WORKOUT"
    USER_PROVIDED_CLARIFICATION = "USER_PROVIDED_CLARIFICATION"
    CLARIFICATION_MISMATCH = "CLARIFICATION_MISMATCH"
    UNKNOWN_INTENT = "UNKNOWN_INTENT"


CONVERSATIONAL_INTENTS = frozenset(
    name.value
    for name in (IntentName.GREETING, IntentName.FAREWELL, IntentName.THANKS, IntentName.HELP)
)


@dataclass
class Intent:
    """The classified purpose of one utterance."""

    name: str
    confidence: float
    slots: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.name, IntentName):
            self.name = self.name.value
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "confidence": self.confidence, "slots": dict(self.slots)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intent":
        return cls(
            name=data["name"],
            confidence=float(data.get("confidence", 0.0)),
            slots=dict(data.get("slots") or {}),
        )
