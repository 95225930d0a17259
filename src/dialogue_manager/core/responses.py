"""Turning the outcome of a turn into the message sent back to the user."""

import random
from typing import Callable, Dict, List, Optional

from ..models.base import ToolResult
from ..models.intent import Intent, IntentName
from ..models.memory import ClarificationContext, ClarificationOption

GREETING_REPLIES = [
    "Hello! How can I assist with your fitness goals today?",
    "Hi there! What are we working on?",
    "Hey! Ready to get started?",
]
FAREWELL_REPLIES = [
    "Goodbye! Keep up the great work!",
    "See you next time. Stay consistent!",
    "Alright, take care!",
]
THANKS_REPLIES = [
    "You're welcome!",
    "Happy to help!",
    "Anytime! Let me know if there's anything else.",
]
HELP_REPLY = (
    "I can help you with things like creating workout plans, modifying your current workout "
    "(like doubling sets or reps), and providing information about exercises. "
    "What would you like to do?"
)
CANNOT_DOUBLE_REPLY = (
    "It looks like there's no active workout to double. Please start or select a workout first."
)
DOUBLE_PENDING_REPLY = "I need a bit more information to double the workout."
GENERIC_FALLBACK_REPLY = (
    "Sorry, I'm not quite sure how to help with that. You can ask me to create a workout, "
    "tell you about an exercise, or modify your current workout."
)
NO_INTENT_REPLY = "I'm not sure how to respond to that."
TOOL_SUCCESS_REPLY = "Action completed successfully."
TOOL_FAILURE_REPLY = "Sorry, I couldn't complete that action."
MISMATCH_PREFIX = "Sorry, I didn't catch that. "
UNKNOWN_WITH_PENDING_PREFIX = "I'm not sure about that. Regarding my previous question: "


def format_options(options: List[ClarificationOption]) -> str:
    return "\n".join(f"{index}. {option.label}" for index, option in enumerate(options, 1))


def format_clarification(question: str, options: List[ClarificationOption]) -> str:
    """Question text followed by the enumerated options, one per line."""
    if not options:
        return question
    return f"{question}\n{format_options(options)}"


def describe_workout_request(slots: Dict) -> str:
    message = "Okay, I can help you create a workout"
    if slots.get("muscle_group"):
        message += f" for {slots['muscle_group']}"
    if slots.get("duration"):
        message += f" for about {slots['duration']} minutes"
    level = slots.get("experience_level")
    if level:
        article = "an" if level[0].lower() in "aeiou" else "a"
        message += f" at {article} {level} level"
    return message + "."


class ResponseRenderer:
    """Picks the reply for a turn.

    Priority: an error message, then a clarification question with its
    options, then the tool result, then a per-intent template.
    Conversational intents vary their phrasing through ``rng``.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._templates: Dict[str, Callable[[Intent, Optional[ClarificationContext]], str]] = {
            IntentName.GREETING.value: lambda i, p: self.rng.choice(GREETING_REPLIES),
            IntentName.FAREWELL.value: lambda i, p: self.rng.choice(FAREWELL_REPLIES),
            IntentName.THANKS.value: lambda i, p: self.rng.choice(THANKS_REPLIES),
            IntentName.HELP.value: lambda i, p: HELP_REPLY,
            IntentName.CANNOT_DOUBLE_NO_WORKOUT.value: lambda i, p: CANNOT_DOUBLE_REPLY,
            IntentName.DOUBLE_WORKOUT.value: lambda i, p: DOUBLE_PENDING_REPLY,
            IntentName.CREATE_WORKOUT.value: lambda i, p: describe_workout_request(i.slots),
            IntentName.GET_EXERCISE_INFO.value: self._exercise_info_reply,
        }

    def render(
        self,
        intent: Optional[Intent],
        clarification: Optional[ClarificationContext] = None,
        tool_result: Optional[ToolResult] = None,
        error_message: Optional[str] = None,
        pending: Optional[ClarificationContext] = None,
        question_prefix: str = "",
    ) -> str:
        if error_message:
            return error_message

        if clarification:
            return format_clarification(
                question_prefix + clarification.question_text, clarification.options
            )

        if tool_result:
            if tool_result.success:
                return tool_result.message or TOOL_SUCCESS_REPLY
            return tool_result.error or TOOL_FAILURE_REPLY

        if intent is None:
            return NO_INTENT_REPLY

        template = self._templates.get(intent.name)
        if template:
            return template(intent, pending)
        return self.fallback(pending)

    def fallback(self, pending: Optional[ClarificationContext] = None) -> str:
        """Reply for input nothing could handle, re-asking any open question."""
        if pending:
            return format_clarification(
                UNKNOWN_WITH_PENDING_PREFIX + pending.question_text, pending.options
            )
        return GENERIC_FALLBACK_REPLY

    @staticmethod
    def _exercise_info_reply(intent: Intent, pending: Optional[ClarificationContext]) -> str:
        exercise_name = intent.slots.get("exercise_name")
        if exercise_name:
            return f'Okay, I\'ll look up information for "{exercise_name}".'
        return "Which exercise are you interested in?"
