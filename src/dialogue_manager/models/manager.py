"""Free-form replies from Gemini, trying a primary model and then a fallback."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import google.generativeai as genai

from .memory import ConversationTurn

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_MODEL = "gemini-2.0-flash-exp"
DEFAULT_FALLBACK_MODEL = "gemini-1.5-pro"
FALLBACK_TIMEOUT_FACTOR = 1.5

REPLY_SYSTEM_PROMPT = (
    "You are a friendly fitness assistant inside a workout app. "
    "Answer briefly and conversationally. If the request is about workouts, "
    "you can suggest creating a workout, doubling the current one, or "
    "looking up an exercise."
)


@dataclass
class ModelSlot:
    """One model in the failover chain and its call counters."""

    role: str
    name: str
    timeout: float
    model: Optional[Any] = None
    calls: int = 0
    failures: int = 0


class DualModelManager:
    """Reply provider for utterances no rule could handle.

    Models are tried in order (primary, then fallback with a longer timeout);
    the first answer wins. Model names and the timeout in milliseconds come
    from ``GEMINI_MODEL_PRIMARY``, ``GEMINI_MODEL_FALLBACK`` and
    ``GEMINI_MODEL_TIMEOUT``.
    """

    def __init__(self, api_key: str):
        genai.configure(api_key=api_key)

        timeout = float(os.getenv("GEMINI_MODEL_TIMEOUT", "10000")) / 1000
        self.slots: List[ModelSlot] = [
            ModelSlot(
                "primary", os.getenv("GEMINI_MODEL_PRIMARY", DEFAULT_PRIMARY_MODEL), timeout
            ),
            ModelSlot(
                "fallback",
                os.getenv("GEMINI_MODEL_FALLBACK", DEFAULT_FALLBACK_MODEL),
                timeout * FALLBACK_TIMEOUT_FACTOR,
            ),
        ]
        for slot in self.slots:
            slot.model = self._load_model(slot)

    @property
    def primary(self) -> ModelSlot:
        return self.slots[0]

    @property
    def fallback(self) -> ModelSlot:
        return self.slots[1]

    @staticmethod
    def _load_model(slot: ModelSlot):
        try:
            model = genai.GenerativeModel(slot.name)
            logger.info(f"{slot.role.capitalize()} model initialized: {slot.name}")
            return model
        except Exception as e:
            logger.error(f"Failed to initialize {slot.role} model {slot.name}: {e}")
            return None

    def _generate(self, slot: ModelSlot, prompt: str) -> str:
        """Ask one model, giving up after its timeout."""
        from google.generativeai.types import RequestOptions

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(
            slot.model.generate_content, prompt, request_options=RequestOptions(timeout=slot.timeout)
        )
        try:
            return future.result(timeout=slot.timeout).text
        except FutureTimeoutError:
            future.cancel()
            raise TimeoutError(f"{slot.name} generation timed out after {slot.timeout}s")
        finally:
            executor.shutdown(wait=False)

    def generate_content(self, prompt: str) -> Tuple[str, str]:
        """Return ``(text, model_name)`` from the first model that answers.

        Raises RuntimeError when every model failed or none could be loaded.
        """
        last_error: Optional[Exception] = None
        for slot in self.slots:
            if slot.model is None:
                continue
            slot.calls += 1
            try:
                text = self._generate(slot, prompt)
            except Exception as e:
                slot.failures += 1
                last_error = e
                logger.warning(
                    f"{slot.role.capitalize()} model {slot.name} failed: {type(e).__name__}: {e}"
                )
                continue
            logger.debug(f"{slot.name} responded")
            return text, slot.name

        if last_error is None:
            raise RuntimeError("No models available for content generation")
        raise RuntimeError(
            f"All models failed. Last error: {type(last_error).__name__}: {last_error}"
        )

    def generate_reply(
        self, utterance: str, recent_turns: Optional[Iterable[ConversationTurn]] = None
    ) -> str:
        prompt = format_reply_prompt(utterance, recent_turns or [])
        text, model_name = self.generate_content(prompt)
        logger.debug(f"Free-form reply generated by {model_name}")
        return text.strip()

    def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {"total_calls": sum(slot.calls for slot in self.slots)}
        for slot in self.slots:
            stats[slot.role] = {
                "model": slot.name,
                "available": slot.model is not None,
                "calls": slot.calls,
                "failures": slot.failures,
                "success_rate": (slot.calls - slot.failures) / slot.calls if slot.calls else 0,
                "timeout_seconds": slot.timeout,
            }
        return stats


def format_reply_prompt(utterance: str, recent_turns: Iterable[ConversationTurn]) -> str:
    """System prompt, then the recent exchange, then the new utterance."""
    parts = [f"System: {REPLY_SYSTEM_PROMPT}"]
    for turn in recent_turns:
        parts.append(f"User: {turn.user_input}")
        parts.append(f"Assistant: {turn.agent_response}")
    parts.append(f"User: {utterance}")
    parts.append("Assistant:")
    return "\n\n".join(parts)
