"""Session memory: working memory plus a bounded episodic turn history."""

import copy
import logging
from collections import deque
from dataclasses import fields
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..models.memory import ConversationTurn, WorkingMemory

logger = logging.getLogger(__name__)


class ConversationMemory:
    """Memory owned by exactly one conversation.

    Working memory holds the facts relevant to the current point of the
    conversation. Episodic memory is the append-only turn history, capped at
    ``max_turns`` with the oldest turns dropped first; ``total_turns`` keeps
    counting every turn ever appended.
    """

    def __init__(self, max_turns: int = 50):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self.working = WorkingMemory()
        self.turns: deque[ConversationTurn] = deque(maxlen=max_turns)
        self.total_turns = 0
        self.created_at = datetime.now()

    def add_turn(
        self, user_input: str, agent_response: str, metadata: Optional[Dict] = None
    ) -> ConversationTurn:
        """Append a turn to episodic memory."""
        turn = ConversationTurn(
            user_input=user_input,
            agent_response=agent_response,
            metadata=metadata or {},
        )
        self.turns.append(turn)
        self.total_turns += 1
        return turn

    def get_turns(self, limit: Optional[int] = None) -> List[ConversationTurn]:
        """Get recent conversation turns, oldest first."""
        if limit:
            return list(self.turns)[-limit:]
        return list(self.turns)

    def update_working(self, **updates: Any) -> None:
        """Replace working-memory fields by name."""
        valid = {f.name for f in fields(WorkingMemory)}
        unknown = set(updates) - valid
        if unknown:
            raise ValueError(f"Unknown working memory fields: {sorted(unknown)}")
        for name, value in updates.items():
            setattr(self.working, name, value)

    def clear_pending_clarification(self) -> None:
        if self.working.pending_clarification is not None:
            logger.debug(
                "Clearing pending clarification for "
                f"{self.working.pending_clarification.original_intent_name}"
            )
        self.working.pending_clarification = None

    def snapshot(self) -> Mapping[str, Any]:
        """Return a deep-copied, read-only view of the whole memory."""
        return freeze(copy.deepcopy(self.to_dict()))

    def clear(self) -> None:
        """Clear all memory."""
        self.working = WorkingMemory()
        self.turns.clear()
        self.total_turns = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "working_memory": self.working.to_dict(),
            "episodic_memory": {
                "recent_turns": [t.to_dict() for t in self.turns],
                "total_turns": self.total_turns,
            },
            "max_turns": self.max_turns,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], max_turns: Optional[int] = None) -> "ConversationMemory":
        memory = cls(max_turns=max_turns or data.get("max_turns", 50))
        memory.working = WorkingMemory.from_dict(data.get("working_memory") or {})
        episodic = data.get("episodic_memory") or {}
        for turn in episodic.get("recent_turns", []):
            memory.turns.append(ConversationTurn.from_dict(turn))
        memory.total_turns = max(int(episodic.get("total_turns", 0)), len(memory.turns))
        if data.get("created_at"):
            memory.created_at = datetime.fromisoformat(data["created_at"])
        return memory

    def get_stats(self) -> Dict[str, Any]:
        """Get memory usage statistics."""
        pending = self.working.pending_clarification
        return {
            "turns_count": len(self.turns),
            "total_turns": self.total_turns,
            "max_turns": self.max_turns,
            "has_current_task": self.working.current_task is not None,
            "pending_clarification": pending.original_intent_name if pending else None,
            "created_at": self.created_at.isoformat(),
        }


def freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value
