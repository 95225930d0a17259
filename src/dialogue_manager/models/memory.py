"""Memory-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .intent import Intent


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now()
    return datetime.fromisoformat(value)


@dataclass
class WorkoutExercise:
    """One exercise line inside a workout."""

    exercise_id: str
    sets: int
    reps: int
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise_id": self.exercise_id,
            "sets": self.sets,
            "reps": self.reps,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutExercise":
        return cls(
            exercise_id=data["exercise_id"],
            sets=int(data["sets"]),
            reps=int(data["reps"]),
            name=data.get("name"),
        )


@dataclass
class Workout:
    """The task a user is currently editing."""

    id: str
    exercises: List[WorkoutExercise] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "exercises": [e.to_dict() for e in self.exercises]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workout":
        if "id" not in data:
            raise ValueError("Workout data requires an 'id'")
        return cls(
            id=str(data["id"]),
            exercises=[WorkoutExercise.from_dict(e) for e in data.get("exercises", [])],
        )


@dataclass
class ClarificationOption:
    """One answer the user may give to a clarification question."""

    label: str
    value: str
    synonyms: List[str] = field(default_factory=list)

    def match_terms(self) -> List[str]:
        """Lowercased terms this option answers to: value, label, then synonyms."""
        return [self.value.lower(), self.label.lower()] + [s.lower() for s in self.synonyms]

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value, "synonyms": list(self.synonyms)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClarificationOption":
        return cls(
            label=data["label"],
            value=data["value"],
            synonyms=list(data.get("synonyms") or []),
        )


@dataclass
class ClarificationContext:
    """An open question the system asked and is waiting on."""

    original_intent_name: str
    question_text: str
    options: List[ClarificationOption] = field(default_factory=list)
    related_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_intent_name": self.original_intent_name,
            "question_text": self.question_text,
            "options": [o.to_dict() for o in self.options],
            "related_data": dict(self.related_data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClarificationContext":
        return cls(
            original_intent_name=data["original_intent_name"],
            question_text=data["question_text"],
            options=[ClarificationOption.from_dict(o) for o in data.get("options", [])],
            related_data=dict(data.get("related_data") or {}),
        )


class ActionKind(str, Enum):
    """How a dispatched tool call ended."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    EXCEPTION = "EXCEPTION"


@dataclass
class ActionRecord:
    """The dispatcher's record of the last tool call."""

    kind: ActionKind
    tool_name: str
    params: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "tool_name": self.tool_name,
            "params": dict(self.params),
            "message": self.message,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionRecord":
        return cls(
            kind=ActionKind(data["kind"]),
            tool_name=data["tool_name"],
            params=dict(data.get("params") or {}),
            message=data.get("message"),
            error=data.get("error"),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )


@dataclass
class ConversationTurn:
    """Represents a single turn in a conversation."""

    user_input: str
    agent_response: str
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_input": self.user_input,
            "agent_response": self.agent_response,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationTurn":
        return cls(
            user_input=data["user_input"],
            agent_response=data["agent_response"],
            timestamp=_parse_timestamp(data.get("timestamp")),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class WorkingMemory:
    """Task-relevant state for the current point in the conversation."""

    current_task: Optional[Workout] = None
    last_action: Optional[ActionRecord] = None
    resolved_intent: Optional[Intent] = None
    pending_clarification: Optional[ClarificationContext] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_task": self.current_task.to_dict() if self.current_task else None,
            "last_action": self.last_action.to_dict() if self.last_action else None,
            "resolved_intent": self.resolved_intent.to_dict() if self.resolved_intent else None,
            "pending_clarification": (
                self.pending_clarification.to_dict() if self.pending_clarification else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkingMemory":
        task = data.get("current_task")
        action = data.get("last_action")
        intent = data.get("resolved_intent")
        pending = data.get("pending_clarification")
        return cls(
            current_task=Workout.from_dict(task) if task else None,
            last_action=ActionRecord.from_dict(action) if action else None,
            resolved_intent=Intent.from_dict(intent) if intent else None,
            pending_clarification=ClarificationContext.from_dict(pending) if pending else None,
        )
