"""Clarification protocol: asking the user to pick how to modify a workout,
and matching their next utterance against the options offered."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from ..models.intent import Intent, IntentName
from ..models.memory import ClarificationContext, ClarificationOption, Workout
from ..tools.workout_modifier import ModificationType

logger = logging.getLogger(__name__)

DOUBLE_QUESTION = "How would you like me to double your workout? You can:"

# (label, value) in the order they are offered
DOUBLE_OPTIONS = [
    ("Double the sets", ModificationType.DOUBLE_SETS.value),
    ("Double the reps", ModificationType.DOUBLE_REPS.value),
    ("Double both sets and reps", ModificationType.DOUBLE_BOTH.value),
]

_ARTICLES = {"the", "a", "an"}
_ORDINAL = re.compile(r"^(\d+)\.?$")


@dataclass
class ModificationGuidance:
    """Either a question to ask the user or an error explaining why not."""

    clarification: Optional[ClarificationContext] = None
    error: Optional[str] = None


def generate_synonyms(label: str) -> List[str]:
    """Derive short answers from an option label.

    "Double the sets" gives ["double sets", "sets", "set"]; the key word is the
    first word after the verb once articles are removed.
    """
    words = [w for w in label.lower().split() if w not in _ARTICLES]
    if len(words) < 2:
        return []
    verb, key = words[0], words[1]
    synonyms = [f"{verb} {key}", key]
    if key.endswith("s") and len(key) > 1:
        synonyms.append(key[:-1])
    return synonyms


class ModificationPlanner:
    """Rule-based planner for modification requests.

    It never chooses for the user: a valid request always yields the same
    question with the same options, and the answer arrives on the next turn.
    """

    def prepare_modification(
        self, intent: Intent, current_task: Optional[Workout]
    ) -> ModificationGuidance:
        if intent.name != IntentName.DOUBLE_WORKOUT:
            return ModificationGuidance(error="Intent not recognized for modification.")

        if not current_task or not current_task.exercises:
            return ModificationGuidance(
                error="There's no current workout to double or it's empty."
            )

        options = [
            ClarificationOption(label=label, value=value, synonyms=generate_synonyms(label))
            for label, value in DOUBLE_OPTIONS
        ]
        return ModificationGuidance(
            clarification=ClarificationContext(
                original_intent_name=intent.name,
                question_text=DOUBLE_QUESTION,
                options=options,
                related_data={"workout_id": current_task.id},
            )
        )


def match_option(
    context: ClarificationContext, utterance: str
) -> Optional[ClarificationOption]:
    """Find the option an utterance answers, if any.

    An utterance equal to any option's term wins outright, so typing an
    option's label back always picks that option. Otherwise options are
    tried in order: the utterance contains a term or is a prefix of one, or
    it is the 1-based position written as digits with an optional period.
    """
    normalized = utterance.lower().strip()
    if not normalized:
        return None

    for option in context.options:
        if normalized in option.match_terms():
            return option

    ordinal = _ORDINAL.match(normalized)
    for index, option in enumerate(context.options, 1):
        for term in option.match_terms():
            if term in normalized or term.startswith(normalized):
                return option
        if ordinal and ordinal.group(1) == str(index):
            return option
    return None
