"""Per-session turn orchestration."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from ..models.base import ToolResult
from ..models.intent import CONVERSATIONAL_INTENTS, Intent, IntentName
from ..models.memory import ClarificationContext, Workout
from ..services.memory import ConversationMemory
from .clarification import ModificationPlanner
from .dispatcher import ToolDispatcher
from .registry import create_default_registry
from .resolver import IntentResolver
from .responses import MISMATCH_PREFIX, ResponseRenderer

logger = logging.getLogger(__name__)

WORKOUT_MODIFIER_TOOL = "workout_modifier"
EXERCISE_INFO_TOOL = "exercise_info"

STALE_CLARIFICATION_MESSAGE = (
    "I seem to have lost the context for your clarification. Could you try again?"
)
UNREADABLE_CHOICE_MESSAGE = (
    "I couldn't understand your choice for the clarification. Please try again."
)
CONFUSED_MESSAGE = "Sorry, I'm a bit confused. Could you rephrase or start over?"
EXERCISE_FOLLOW_UP_MESSAGE = "Which exercise are you interested in?"
INTERNAL_ERROR_MESSAGE = "Sorry, something went wrong while handling that. Please try again."


class TurnState(str, Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    CLARIFICATION_PENDING = "CLARIFICATION_PENDING"
    RESPONDING = "RESPONDING"


@dataclass
class TurnOutcome:
    """What a branch produced for the renderer."""

    clarification: Optional[ClarificationContext] = None
    tool_result: Optional[ToolResult] = None
    error_message: Optional[str] = None
    question_prefix: str = ""
    reply: Optional[str] = None


class DialogueSession:
    """The control loop for one conversation.

    ``process_turn`` resolves the utterance, runs the branch for the resolved
    intent, renders the reply and appends exactly one turn to episodic memory.
    Callers must not run two turns of the same session concurrently.
    """

    def __init__(
        self,
        session_id: str = "default",
        memory: Optional[ConversationMemory] = None,
        dispatcher: Optional[ToolDispatcher] = None,
        resolver: Optional[IntentResolver] = None,
        planner: Optional[ModificationPlanner] = None,
        renderer: Optional[ResponseRenderer] = None,
        reply_generator: Optional[Any] = None,
    ):
        self.session_id = session_id
        self.memory = memory or ConversationMemory()
        self.dispatcher = dispatcher or ToolDispatcher(create_default_registry())
        self.resolver = resolver or IntentResolver()
        self.planner = planner or ModificationPlanner()
        self.renderer = renderer or ResponseRenderer()
        # Anything with generate_reply(utterance, recent_turns) -> str
        self.reply_generator = reply_generator
        self.state = self._resting_state()

        self._handlers: Dict[str, Callable[[Intent, TurnOutcome], Awaitable[None]]] = {
            IntentName.USER_PROVIDED_CLARIFICATION.value: self._handle_clarification_answer,
            IntentName.DOUBLE_WORKOUT.value: self._handle_modification_request,
            IntentName.CANNOT_DOUBLE_NO_WORKOUT.value: self._handle_nothing_to_modify,
            IntentName.GET_EXERCISE_INFO.value: self._handle_exercise_info,
            IntentName.CREATE_WORKOUT.value: self._handle_conversational,
            IntentName.CLARIFICATION_MISMATCH.value: self._handle_mismatch,
            IntentName.UNKNOWN_INTENT.value: self._handle_unknown,
        }
        for name in CONVERSATIONAL_INTENTS:
            self._handlers[name] = self._handle_conversational

    def set_current_task(self, workout: Optional[Workout]) -> None:
        """Make ``workout`` the task the user is editing."""
        self.memory.update_working(current_task=workout)
        self.state = self._resting_state()

    async def process_turn(self, utterance: str) -> str:
        """Handle one user message and return the reply."""
        self.state = TurnState.RESOLVING
        intent = self.resolver.resolve(utterance, self.memory.working)
        self.memory.update_working(resolved_intent=intent)
        logger.debug(
            f"Session {self.session_id}: resolved {intent.name} "
            f"(confidence {intent.confidence}) slots={intent.slots}"
        )

        outcome = TurnOutcome()
        handler = self._handlers.get(intent.name, self._handle_unknown)
        try:
            await handler(intent, outcome)
        except Exception as e:
            logger.error(
                f"Session {self.session_id}: handling {intent.name} failed: {e}", exc_info=True
            )
            self.memory.clear_pending_clarification()
            outcome = TurnOutcome(error_message=INTERNAL_ERROR_MESSAGE)

        self.state = TurnState.RESPONDING
        response = outcome.reply or self.renderer.render(
            intent,
            clarification=outcome.clarification,
            tool_result=outcome.tool_result,
            error_message=outcome.error_message,
            pending=self.memory.working.pending_clarification,
            question_prefix=outcome.question_prefix,
        )

        self.memory.add_turn(
            utterance,
            response,
            metadata={"intent": intent.name, "confidence": intent.confidence},
        )
        self.state = self._resting_state()
        return response

    def _resting_state(self) -> TurnState:
        if self.memory.working.pending_clarification:
            return TurnState.CLARIFICATION_PENDING
        return TurnState.IDLE

    def _drop_unrelated_pending(self, intent: Intent) -> None:
        """Abandon an open question that belongs to a different intent."""
        pending = self.memory.working.pending_clarification
        if pending and pending.original_intent_name != intent.name:
            logger.info(
                f"Session {self.session_id}: {intent.name} abandons pending "
                f"{pending.original_intent_name} clarification"
            )
            self.memory.clear_pending_clarification()

    async def _handle_clarification_answer(self, intent: Intent, outcome: TurnOutcome) -> None:
        choice = intent.slots.get("choice")
        original_intent_name = intent.slots.get("original_intent_name")
        related_data = intent.slots.get("related_data") or {}
        task = self.memory.working.current_task

        if not choice:
            outcome.error_message = UNREADABLE_CHOICE_MESSAGE
        elif (
            original_intent_name == IntentName.DOUBLE_WORKOUT
            and related_data.get("workout_id")
            and task is not None
            and task.id == related_data["workout_id"]
        ):
            outcome.tool_result = await self.dispatcher.invoke(
                WORKOUT_MODIFIER_TOOL,
                {"modification_type": choice, "target_workout_id": task.id},
                self.memory,
            )
        else:
            logger.warning(
                f"Session {self.session_id}: stale clarification for "
                f"{original_intent_name} ({related_data})"
            )
            outcome.error_message = STALE_CLARIFICATION_MESSAGE

        self.memory.clear_pending_clarification()

    async def _handle_modification_request(self, intent: Intent, outcome: TurnOutcome) -> None:
        task = self.memory.working.current_task
        pending = self.memory.working.pending_clarification
        if pending and (
            pending.original_intent_name != intent.name
            or pending.related_data.get("workout_id") != (task.id if task else None)
        ):
            self.memory.clear_pending_clarification()

        guidance = self.planner.prepare_modification(intent, task)
        if guidance.clarification:
            self.memory.update_working(pending_clarification=guidance.clarification)
            outcome.clarification = guidance.clarification
        else:
            self.memory.clear_pending_clarification()
            outcome.error_message = guidance.error

    async def _handle_nothing_to_modify(self, intent: Intent, outcome: TurnOutcome) -> None:
        self.memory.clear_pending_clarification()

    async def _handle_conversational(self, intent: Intent, outcome: TurnOutcome) -> None:
        self._drop_unrelated_pending(intent)

    async def _handle_exercise_info(self, intent: Intent, outcome: TurnOutcome) -> None:
        self._drop_unrelated_pending(intent)
        exercise_name = intent.slots.get("exercise_name")
        if exercise_name:
            outcome.tool_result = await self.dispatcher.invoke(
                EXERCISE_INFO_TOOL, {"exercise_name": exercise_name}, self.memory
            )
        else:
            outcome.error_message = EXERCISE_FOLLOW_UP_MESSAGE

    async def _handle_mismatch(self, intent: Intent, outcome: TurnOutcome) -> None:
        pending = self.memory.working.pending_clarification
        if pending:
            outcome.clarification = pending
            outcome.question_prefix = MISMATCH_PREFIX
        else:
            outcome.error_message = CONFUSED_MESSAGE

    async def _handle_unknown(self, intent: Intent, outcome: TurnOutcome) -> None:
        # With an open question the renderer re-asks it
        if self.memory.working.pending_clarification or not self.reply_generator:
            return
        utterance = intent.slots.get("original_input", "")
        try:
            outcome.reply = await asyncio.to_thread(
                self.reply_generator.generate_reply, utterance, self.memory.get_turns(limit=5)
            )
        except Exception as e:
            logger.warning(f"Session {self.session_id}: free-form reply failed: {e}")
