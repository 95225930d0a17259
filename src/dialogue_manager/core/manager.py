"""Session layer: routes turns to per-session orchestrators."""

import asyncio
import logging
import random
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from ..services.memory import ConversationMemory
from ..services.sessions import InMemorySessionStore, SessionStore
from .clarification import ModificationPlanner
from .dispatcher import ToolDispatcher
from .orchestrator import DialogueSession
from .registry import ToolRegistry, create_default_registry
from .resolver import IntentResolver
from .responses import ResponseRenderer

logger = logging.getLogger(__name__)


class DialogueManager:
    """Multiplexes ``process_turn(session_id, utterance)`` over many sessions.

    Sessions share the stateless collaborators (resolver, planner, renderer,
    dispatcher) but never memory. Memory is loaded from the session store the
    first time a session is seen and saved after every turn. Turns of one
    session are serialized by a per-session lock.
    """

    def __init__(
        self,
        tool_registry: Optional[ToolRegistry] = None,
        session_store: Optional[SessionStore] = None,
        max_turns: int = 50,
        tool_timeout: Optional[float] = 30.0,
        reply_generator: Optional[Any] = None,
        rng: Optional[random.Random] = None,
        max_active_sessions: int = 100,
    ):
        self.tool_registry = tool_registry or create_default_registry()
        self.session_store = session_store or InMemorySessionStore()
        self.max_turns = max_turns
        self.max_active_sessions = max_active_sessions
        self.reply_generator = reply_generator

        self.dispatcher = ToolDispatcher(self.tool_registry, timeout_seconds=tool_timeout)
        self.resolver = IntentResolver()
        self.planner = ModificationPlanner()
        self.renderer = ResponseRenderer(rng)

        self.sessions: OrderedDict[str, DialogueSession] = OrderedDict()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self.turns_processed = 0

    def get_session(self, session_id: str) -> DialogueSession:
        """Return the live session for ``session_id``, loading or creating it."""
        session = self.sessions.get(session_id)
        if session:
            self.sessions.move_to_end(session_id)
            return session

        session = DialogueSession(
            session_id=session_id,
            memory=self._load_memory(session_id),
            dispatcher=self.dispatcher,
            resolver=self.resolver,
            planner=self.planner,
            renderer=self.renderer,
            reply_generator=self.reply_generator,
        )
        self.sessions[session_id] = session
        self._evict_idle_sessions()
        return session

    @asynccontextmanager
    async def _session_lock(self, session_id: str):
        """Hold the session's lock; it is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]

    async def process_turn(self, session_id: str, utterance: str) -> str:
        return (await self.run_turn(session_id, utterance))["response"]

    async def run_turn(self, session_id: str, utterance: str) -> Dict[str, Any]:
        """Like ``process_turn`` but also report the resolved intent and resting state."""
        async with self._session_lock(session_id):
            session = self.get_session(session_id)
            response = await session.process_turn(utterance)
            self.turns_processed += 1
            self._save_memory(session_id, session.memory)
            intent = session.memory.working.resolved_intent
            return {
                "response": response,
                "intent": intent.name if intent else None,
                "state": session.state.value,
            }

    async def end_session(self, session_id: str) -> bool:
        """Save a session's memory and drop it from the live set."""
        async with self._session_lock(session_id):
            session = self.sessions.pop(session_id, None)
            if session:
                self._save_memory(session_id, session.memory)
                logger.info(f"Ended session {session_id}")
        return session is not None

    def _load_memory(self, session_id: str) -> ConversationMemory:
        try:
            memory = self.session_store.load(session_id)
        except Exception as e:
            logger.warning(f"Could not load session {session_id}, starting fresh: {e}")
            memory = None

        if memory is None:
            logger.info(f"Created session {session_id}")
            return ConversationMemory(max_turns=self.max_turns)
        logger.info(f"Loaded session {session_id} ({memory.total_turns} turns)")
        return memory

    def _save_memory(self, session_id: str, memory: ConversationMemory) -> None:
        try:
            self.session_store.save(session_id, memory)
        except Exception as e:
            logger.error(f"Could not save session {session_id}: {e}", exc_info=True)

    def _evict_idle_sessions(self) -> None:
        for session_id in list(self.sessions):
            if len(self.sessions) <= self.max_active_sessions:
                break
            # Held or awaited sessions stay live
            if self._lock_users.get(session_id):
                continue
            self._save_memory(session_id, self.sessions.pop(session_id).memory)
            logger.debug(f"Evicted idle session {session_id}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "active_sessions": len(self.sessions),
            "turns_processed": self.turns_processed,
            "registered_tools": self.tool_registry.list_tools(),
            "tool_executions": self.dispatcher.get_execution_stats(),
            "session_store": self.session_store.get_stats(),
        }
