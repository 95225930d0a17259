"""Session stores that load and save conversation memory by session id."""

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .memory import ConversationMemory

logger = logging.getLogger(__name__)

_SAFE_SESSION_ID = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


class SessionStore(ABC):
    """Persistence collaborator for session memory."""

    @abstractmethod
    def load(self, session_id: str) -> Optional[ConversationMemory]:
        """Return the stored memory for a session, or None if there is none."""

    @abstractmethod
    def save(self, session_id: str, memory: ConversationMemory) -> None:
        """Persist the memory of a session."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """Forget a session."""

    def get_stats(self) -> Dict[str, Any]:
        return {"type": type(self).__name__}


class InMemorySessionStore(SessionStore):
    """LRU store of serialized session memory with a TTL."""

    def __init__(self, max_sessions: int = 100, ttl_seconds: int = 3600):
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.sessions: OrderedDict[str, Dict[str, Any]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def load(self, session_id: str) -> Optional[ConversationMemory]:
        if session_id not in self.sessions:
            self.misses += 1
            return None

        entry = self.sessions[session_id]

        if time.time() - entry["timestamp"] > self.ttl_seconds:
            del self.sessions[session_id]
            self.misses += 1
            return None

        # Most recently used goes last
        self.sessions.move_to_end(session_id)
        self.hits += 1
        return ConversationMemory.from_dict(entry["value"])

    def save(self, session_id: str, memory: ConversationMemory) -> None:
        if session_id in self.sessions:
            self.sessions.move_to_end(session_id)
        elif len(self.sessions) >= self.max_sessions:
            evicted, _ = self.sessions.popitem(last=False)
            logger.info(f"Evicted session {evicted} from in-memory store")

        self.sessions[session_id] = {"value": memory.to_dict(), "timestamp": time.time()}

    def delete(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)

    def clear(self) -> None:
        self.sessions.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self.hits + self.misses
        return {
            "type": type(self).__name__,
            "size": len(self.sessions),
            "max_sessions": self.max_sessions,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total_requests if total_requests > 0 else 0,
            "ttl_seconds": self.ttl_seconds,
        }


class FileSessionStore(SessionStore):
    """One JSON document per session under a directory."""

    def __init__(self, storage_dir: Union[str, Path]):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        if not _SAFE_SESSION_ID.match(session_id):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self.storage_dir / f"{session_id}.json"

    def load(self, session_id: str) -> Optional[ConversationMemory]:
        path = self._path(session_id)
        if not path.exists():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        return ConversationMemory.from_dict(data)

    def save(self, session_id: str, memory: ConversationMemory) -> None:
        path = self._path(session_id)
        # Readers never see a partially written document
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(memory.to_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        if path.exists():
            path.unlink()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "storage_dir": str(self.storage_dir),
            "size": len(list(self.storage_dir.glob("*.json"))),
        }
