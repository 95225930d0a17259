"""Staged, rule-based intent resolution."""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.intent import Intent, IntentName
from ..models.memory import WorkingMemory
from .clarification import match_option

logger = logging.getLogger(__name__)

GREETING_KEYWORDS = ["hi", "hello", "hey", "good morning", "good afternoon", "good evening"]
FAREWELL_KEYWORDS = [
    "bye", "goodbye", "see you", "later", "farewell", "im off", "that is all", "thats all",
]
THANKS_KEYWORDS = ["thanks", "thank you", "thx", "appreciate it", "sounds good"]
HELP_KEYWORDS = ["help", "what can you do", "assist me", "assistance", "support"]
CREATE_WORKOUT_KEYWORDS = [
    "create", "generate", "give me", "make me", "build me", "workout", "routine", "plan",
    "program",
]

EXERCISE_INFO_PATTERNS = [
    re.compile(r"how to (?:do )?(?:a |an )?([\w\s]+)(?:\?)?", re.IGNORECASE),
    re.compile(r"what is (?:a |an )?([\w\s]+)(?:\?)?", re.IGNORECASE),
    re.compile(r"tell me about ([\w\s]+)(?:\?)?", re.IGNORECASE),
    re.compile(r"info on ([\w\s]+)(?:\?)?", re.IGNORECASE),
]

# Ordered: the first group with a matching term wins
MUSCLE_GROUPS: List[Tuple[str, List[str]]] = [
    ("chest", ["chest", "pecs"]),
    ("legs", ["legs", "quads", "hamstrings", "glutes"]),
    ("back", ["back", "lats"]),
    ("shoulders", ["shoulders", "delts"]),
    ("arms", ["arms", "biceps", "triceps"]),
    ("full body", ["full body", "whole body", "total body"]),
    ("upper body", ["upper body"]),
    ("lower body", ["lower body"]),
    ("core", ["core", "abs"]),
]

EXPERIENCE_LEVELS: List[Tuple[str, List[str]]] = [
    ("beginner", ["beginner", "newbie", "easy", "starting out"]),
    ("intermediate", ["intermediate", "mid-level", "moderate"]),
    ("advanced", ["advanced", "expert", "hard", "intense"]),
]

DURATION_PATTERN = re.compile(r"(\d+)\s*(minute|min|hr|hour)", re.IGNORECASE)

MODIFY_PHRASE = "double it"

Matcher = Callable[[str, WorkingMemory], Optional[Intent]]


def _match_greeting(text: str, memory: WorkingMemory) -> Optional[Intent]:
    if any(text.startswith(keyword) for keyword in GREETING_KEYWORDS):
        return Intent(IntentName.GREETING, 0.9)
    return None


def _keyword_matcher(name: IntentName, keywords: List[str]) -> Matcher:
    def match(text: str, memory: WorkingMemory) -> Optional[Intent]:
        if any(keyword in text for keyword in keywords):
            return Intent(name, 0.9)
        return None

    match.__name__ = f"_match_{name.value.lower()}"
    return match


def _match_exercise_info(text: str, memory: WorkingMemory) -> Optional[Intent]:
    for pattern in EXERCISE_INFO_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            exercise_name = match.group(1).strip().rstrip("?").strip()
            return Intent(
                IntentName.GET_EXERCISE_INFO, 0.85, slots={"exercise_name": exercise_name}
            )
    return None


def extract_workout_slots(text: str) -> Dict[str, Any]:
    """Pull target muscle group, duration in minutes and experience level."""
    slots: Dict[str, Any] = {}

    for group, terms in MUSCLE_GROUPS:
        if any(term in text for term in terms):
            slots["muscle_group"] = group
            break

    duration = DURATION_PATTERN.search(text)
    if duration:
        minutes = int(duration.group(1))
        if duration.group(2).lower().startswith("h"):
            minutes *= 60
        slots["duration"] = minutes

    for level, terms in EXPERIENCE_LEVELS:
        if any(term in text for term in terms):
            slots["experience_level"] = level
            break

    return slots


def _match_create_workout(text: str, memory: WorkingMemory) -> Optional[Intent]:
    if not any(keyword in text for keyword in CREATE_WORKOUT_KEYWORDS):
        return None
    slots = extract_workout_slots(text)
    return Intent(IntentName.CREATE_WORKOUT, 0.85 if slots else 0.8, slots=slots)


def _match_modify_phrase(text: str, memory: WorkingMemory) -> Optional[Intent]:
    if text != MODIFY_PHRASE:
        return None
    if memory.current_task:
        return Intent(IntentName.DOUBLE_WORKOUT, 1.0)
    return Intent(IntentName.CANNOT_DOUBLE_NO_WORKOUT, 1.0)


PRIMARY_MATCHERS: List[Matcher] = [
    _match_greeting,
    _keyword_matcher(IntentName.FAREWELL, FAREWELL_KEYWORDS),
    _keyword_matcher(IntentName.THANKS, THANKS_KEYWORDS),
    _keyword_matcher(IntentName.HELP, HELP_KEYWORDS),
    _match_exercise_info,
    _match_create_workout,
    _match_modify_phrase,
]


class IntentResolver:
    """Turns an utterance plus working memory into exactly one Intent.

    Stages run in order and the first one to commit wins:

    1. If a clarification is pending, an utterance naming one of its options
       (by value, label, synonym or 1-based number) answers it.
    2. Primary matchers, tried in order; the first to fire wins.
    3. Reconciliation: a pending clarification with no primary match is a
       mismatch; otherwise, with nothing matched, the intent is unknown.

    Resolution is deterministic and does not touch memory.
    """

    def __init__(self, matchers: Optional[List[Matcher]] = None):
        self.matchers = list(matchers) if matchers is not None else list(PRIMARY_MATCHERS)

    def resolve(self, utterance: str, memory: WorkingMemory) -> Intent:
        text = utterance.lower().strip()
        pending = memory.pending_clarification

        if pending and pending.options:
            option = match_option(pending, text)
            if option:
                return Intent(
                    IntentName.USER_PROVIDED_CLARIFICATION,
                    0.95,
                    slots={
                        "choice": option.value,
                        "original_intent_name": pending.original_intent_name,
                        "related_data": dict(pending.related_data),
                    },
                )

        intent = self._match_primary(text, memory)

        if intent:
            if pending:
                logger.debug(
                    f"{intent.name} supersedes pending {pending.original_intent_name} clarification"
                )
            return intent

        if pending:
            return Intent(
                IntentName.CLARIFICATION_MISMATCH,
                0.7,
                slots={"original_input": utterance, "pending_question": pending.question_text},
            )

        return Intent(IntentName.UNKNOWN_INTENT, 0.5, slots={"original_input": utterance})

    def _match_primary(self, text: str, memory: WorkingMemory) -> Optional[Intent]:
        for matcher in self.matchers:
            intent = matcher(text, memory)
            if intent:
                return intent
        return None
