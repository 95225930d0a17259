"""Service components for the dialogue manager."""

from .memory import ConversationMemory
from .sessions import FileSessionStore, InMemorySessionStore, SessionStore

__all__ = ["ConversationMemory", "SessionStore", "InMemorySessionStore", "FileSessionStore"]
