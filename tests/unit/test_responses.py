"""Unit tests for response rendering."""

import random

import pytest

from dialogue_manager.core.responses import (
    CANNOT_DOUBLE_REPLY,
    GENERIC_FALLBACK_REPLY,
    GREETING_REPLIES,
    HELP_REPLY,
    NO_INTENT_REPLY,
    TOOL_FAILURE_REPLY,
    TOOL_SUCCESS_REPLY,
    ResponseRenderer,
    describe_workout_request,
    format_clarification,
)
from dialogue_manager.models.base import ToolResult
from dialogue_manager.models.intent import Intent, IntentName
from dialogue_manager.models.memory import ClarificationContext, ClarificationOption


@pytest.fixture
def renderer():
    return ResponseRenderer(random.Random(7))


@pytest.fixture
def question():
    return ClarificationContext(
        original_intent_name="DOUBLE_WORKOUT",
        question_text="How would you like me to double your workout? You can:",
        options=[
            ClarificationOption("Double the sets", "DOUBLE_SETS"),
            ClarificationOption("Double the reps", "DOUBLE_REPS"),
        ],
    )


class TestResponseRenderer:
    def test_error_wins(self, renderer, question):
        reply = renderer.render(
            Intent(IntentName.HELP, 0.9),
            clarification=question,
            tool_result=ToolResult(message="done"),
            error_message="Something broke.",
        )
        assert reply == "Something broke."

    def test_clarification_lists_options(self, renderer, question):
        reply = renderer.render(Intent(IntentName.DOUBLE_WORKOUT, 1.0), clarification=question)
        assert reply == (
            "How would you like me to double your workout? You can:\n"
            "1. Double the sets\n"
            "2. Double the reps"
        )

    def test_clarification_prefix(self, renderer, question):
        reply = renderer.render(
            Intent(IntentName.CLARIFICATION_MISMATCH, 0.7),
            clarification=question,
            question_prefix="Sorry, I didn't catch that. ",
        )
        assert reply.startswith("Sorry, I didn't catch that. How would you like")

    def test_tool_results(self, renderer):
        intent = Intent(IntentName.USER_PROVIDED_CLARIFICATION, 0.95)
        assert renderer.render(intent, tool_result=ToolResult(message="Done!")) == "Done!"
        assert renderer.render(intent, tool_result=ToolResult()) == TOOL_SUCCESS_REPLY
        assert renderer.render(intent, tool_result=ToolResult(success=False, error="No.")) == "No."
        assert renderer.render(intent, tool_result=ToolResult(success=False)) == TOOL_FAILURE_REPLY

    def test_templates(self, renderer):
        assert renderer.render(Intent(IntentName.GREETING, 0.9)) in GREETING_REPLIES
        assert renderer.render(Intent(IntentName.HELP, 0.9)) == HELP_REPLY
        assert renderer.render(Intent(IntentName.CANNOT_DOUBLE_NO_WORKOUT, 1.0)) == CANNOT_DOUBLE_REPLY

    def test_phrasing_follows_rng(self, question):
        first = ResponseRenderer(random.Random(3))
        second = ResponseRenderer(random.Random(3))
        intent = Intent(IntentName.FAREWELL, 0.9)
        assert [first.render(intent) for _ in range(5)] == [second.render(intent) for _ in range(5)]

    def test_no_intent(self, renderer):
        assert renderer.render(None) == NO_INTENT_REPLY

    def test_unknown_intent_fallback(self, renderer, question):
        intent = Intent(IntentName.UNKNOWN_INTENT, 0.5)
        assert renderer.render(intent) == GENERIC_FALLBACK_REPLY
        reply = renderer.render(intent, pending=question)
        assert reply.startswith(
            "I'm not sure about that. Regarding my previous question: How would you like"
        )
        assert reply.endswith("2. Double the reps")


@pytest.mark.parametrize(
    "slots,expected",
    [
        ({}, "Okay, I can help you create a workout."),
        ({"muscle_group": "legs"}, "Okay, I can help you create a workout for legs."),
        (
            {"muscle_group": "chest", "duration": 45, "experience_level": "intermediate"},
            "Okay, I can help you create a workout for chest for about 45 minutes "
            "at an intermediate level.",
        ),
        ({"experience_level": "beginner"}, "Okay, I can help you create a workout at a beginner level."),
    ],
)
def test_describe_workout_request(slots, expected):
    assert describe_workout_request(slots) == expected


def test_format_clarification_without_options():
    assert format_clarification("Why?", []) == "Why?"
