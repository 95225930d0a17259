"""
Dialogue server: exposes the dialogue manager over JSON-RPC on stdio.
"""

import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import IO, Any, Dict, Optional

from dotenv import load_dotenv

from . import __version__
from .core.manager import DialogueManager
from .core.registry import create_default_registry
from .json_rpc import ERROR_INVALID_PARAMS, JsonRpcError, JsonRpcServer
from .services.sessions import FileSessionStore, InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

SERVER_NAME = "dialogue-manager"


def load_env_file() -> None:
    """Load the first .env found next to the entry script, its parent, or the cwd."""
    main_dir = os.path.dirname(os.path.abspath(sys.argv[0]))
    env_locations = [
        os.path.join(main_dir, ".env"),
        os.path.join(os.path.dirname(main_dir), ".env"),
        os.path.join(os.getcwd(), ".env"),
    ]

    for env_path in env_locations:
        if os.path.exists(env_path):
            logger.info(f"Loading .env from {env_path}")
            load_dotenv(env_path)
            return

    logger.debug("No .env file found in expected locations")


def env_int(name: str, default: int) -> int:
    """Read a positive integer setting, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring {name}={value}: must be positive, using {default}")
        return default
    return value


def create_session_store() -> SessionStore:
    session_dir = os.getenv("DIALOGUE_SESSION_DIR")
    if session_dir:
        logger.info(f"Persisting sessions to {session_dir}")
        return FileSessionStore(os.path.expanduser(session_dir))
    return InMemorySessionStore(
        max_sessions=env_int("DIALOGUE_MAX_SESSIONS", 100),
        ttl_seconds=env_int("DIALOGUE_SESSION_TTL", 3600),
    )


class DialogueServer:
    """JSON-RPC front end wiring configuration, the dialogue manager and the transport."""

    def __init__(
        self,
        manager: Optional[DialogueManager] = None,
        input_stream: Optional[IO[str]] = None,
        output_stream: Optional[IO[str]] = None,
    ):
        load_env_file()

        if manager is None:
            manager = DialogueManager(
                tool_registry=create_default_registry(),
                session_store=create_session_store(),
                max_turns=env_int("DIALOGUE_MAX_TURNS", 50),
                tool_timeout=env_int("DIALOGUE_TOOL_TIMEOUT", 30000) / 1000,
                reply_generator=self._initialize_reply_generator(),
            )
        self.manager = manager

        # One loop for the server's lifetime so per-session locks stay valid
        self.loop = asyncio.new_event_loop()

        self.server = JsonRpcServer(SERVER_NAME, input_stream, output_stream)
        self._setup_handlers()

    def _initialize_reply_generator(self):
        """Create the Gemini reply provider when an API key is configured."""
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            logger.info("No GEMINI_API_KEY set; free-form replies disabled")
            return None

        try:
            from .models.manager import DualModelManager

            logger.info(f"Initializing DualModelManager with API key (length: {len(api_key)})")
            return DualModelManager(api_key)
        except Exception as e:
            logger.error(f"Failed to initialize model manager: {e}", exc_info=True)
            return None

    def _setup_handlers(self):
        self.server.register_handler("initialize", self.handle_initialize)
        self.server.register_handler("tools/list", self.handle_tools_list)
        self.server.register_handler("dialogue/turn", self.handle_turn)
        self.server.register_handler("dialogue/end", self.handle_end)
        self.server.register_handler("dialogue/stats", self.handle_stats)

    def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "protocolVersion": "2024-11-05",
            "serverInfo": {
                "name": SERVER_NAME,
                "version": __version__,
                "freeFormReplies": self.manager.reply_generator is not None,
            },
            "capabilities": {"tools": {}, "dialogue": {}},
        }

    def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.manager.tool_registry.get_tool_definitions()}

    def handle_turn(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Run one dialogue turn: ``{session_id, utterance}``."""
        session_id = _require_string(params, "session_id")
        utterance = params.get("utterance")
        if not isinstance(utterance, str):
            raise JsonRpcError(ERROR_INVALID_PARAMS, "utterance must be a string")

        logger.info(f"Turn for session {session_id}")
        result = self.loop.run_until_complete(self.manager.run_turn(session_id, utterance))
        return {"session_id": session_id, **result}

    def handle_end(self, params: Dict[str, Any]) -> Dict[str, Any]:
        session_id = _require_string(params, "session_id")
        ended = self.loop.run_until_complete(self.manager.end_session(session_id))
        return {"session_id": session_id, "ended": ended}

    def handle_stats(self, params: Dict[str, Any]) -> Dict[str, Any]:
        stats = self.manager.get_stats()
        generator = self.manager.reply_generator
        if generator is not None and hasattr(generator, "get_stats"):
            stats["reply_generator"] = generator.get_stats()
        return stats

    def run(self):
        """Run the dialogue server until stdin closes."""
        logger.info(f"Starting dialogue server v{__version__}")
        try:
            self.server.run()
        finally:
            self.loop.close()


def _require_string(params: Dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise JsonRpcError(ERROR_INVALID_PARAMS, f"{key} must be a non-empty string")
    return value


def main():
    """Main entry point."""
    load_env_file()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = os.getenv("DIALOGUE_LOG_FILE")
    if log_file:
        log_file = os.path.expanduser(log_file)
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file,
                mode="a",
                encoding="utf-8",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
        )

    log_level = os.getenv("DIALOGUE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    try:
        server = DialogueServer()
        server.run()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
