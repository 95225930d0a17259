"""Integration tests for the multi-session DialogueManager."""

import asyncio
import random
from unittest.mock import Mock, patch

import pytest

from dialogue_manager.core.manager import DialogueManager
from dialogue_manager.core.registry import ToolRegistry
from dialogue_manager.models.base import ToolResult
from dialogue_manager.services.sessions import FileSessionStore, InMemorySessionStore
from tests.fixtures import MockTool, create_workout


@pytest.fixture
def manager():
    return DialogueManager(rng=random.Random(0))


class TestDialogueManager:
    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, manager):
        manager.get_session("alice").set_current_task(create_workout("alice-workout"))

        await manager.process_turn("alice", "double it")
        response = await manager.process_turn("bob", "double it")

        assert "no active workout" in response
        assert manager.get_session("alice").memory.working.pending_clarification is not None
        assert manager.get_session("bob").memory.working.pending_clarification is None

        response = await manager.process_turn("alice", "sets")
        assert "Workout modified successfully: DOUBLE_SETS" in response

    @pytest.mark.asyncio
    async def test_memory_saved_after_every_turn(self):
        store = InMemorySessionStore()
        manager = DialogueManager(session_store=store)

        await manager.process_turn("s1", "hi")
        await manager.process_turn("s1", "help")

        assert store.load("s1").total_turns == 2

    @pytest.mark.asyncio
    async def test_conversation_resumes_from_file_store(self, tmp_path):
        first = DialogueManager(session_store=FileSessionStore(tmp_path))
        first.get_session("s1").set_current_task(create_workout())
        question = await first.process_turn("s1", "double it")
        assert question.startswith("How would you like")

        second = DialogueManager(session_store=FileSessionStore(tmp_path))
        response = await second.process_turn("s1", "3")

        assert "Workout modified successfully: DOUBLE_BOTH" in response
        exercise = second.get_session("s1").memory.working.current_task.exercises[0]
        assert (exercise.sets, exercise.reps) == (6, 20)
        assert second.get_session("s1").memory.total_turns == 2

    @pytest.mark.asyncio
    async def test_load_failure_starts_fresh(self):
        store = Mock(spec=InMemorySessionStore)
        store.load.side_effect = ValueError("corrupt")
        manager = DialogueManager(session_store=store, max_turns=7)

        with patch("dialogue_manager.core.manager.logger") as mock_logger:
            response = await manager.process_turn("s1", "hi")
            mock_logger.warning.assert_called_once()

        assert response
        assert manager.get_session("s1").memory.max_turns == 7

    @pytest.mark.asyncio
    async def test_save_failure_still_answers(self):
        store = Mock(spec=InMemorySessionStore)
        store.load.return_value = None
        store.save.side_effect = OSError("disk full")
        manager = DialogueManager(session_store=store)

        response = await manager.process_turn("s1", "help me")

        assert "I can help you" in response
        assert manager.get_session("s1").memory.total_turns == 1

    @pytest.mark.asyncio
    async def test_turns_of_one_session_never_interleave(self):
        in_flight = []
        overlaps = []

        class SlowTool(MockTool):
            async def execute(self, params, snapshot):
                if in_flight:
                    overlaps.append(params)
                in_flight.append(params)
                await asyncio.sleep(0.01)
                in_flight.pop()
                return ToolResult(success=True, message="looked up")

        registry = ToolRegistry([SlowTool("exercise_info", required=["exercise_name"])])
        manager = DialogueManager(tool_registry=registry)

        responses = await asyncio.gather(
            *(manager.process_turn("s1", f"info on move{i}") for i in range(5))
        )

        assert responses == ["looked up"] * 5
        assert overlaps == []
        assert manager.get_session("s1").memory.total_turns == 5

    @pytest.mark.asyncio
    async def test_end_session_with_queued_turns_keeps_turns_serialized(self):
        in_flight = []
        overlaps = []

        class SlowTool(MockTool):
            async def execute(self, params, snapshot):
                if in_flight:
                    overlaps.append(params["exercise_name"])
                in_flight.append(params)
                await asyncio.sleep(0.1)
                in_flight.pop()
                return ToolResult(success=True, message="looked up")

        registry = ToolRegistry([SlowTool("exercise_info", required=["exercise_name"])])
        manager = DialogueManager(tool_registry=registry)

        first = asyncio.ensure_future(manager.process_turn("s1", "info on movea"))
        await asyncio.sleep(0)
        ended = asyncio.ensure_future(manager.end_session("s1"))
        second = asyncio.ensure_future(manager.process_turn("s1", "info on moveb"))
        # arrives while the second turn is still inside the tool
        await asyncio.sleep(0.15)
        third = await manager.process_turn("s1", "info on movec")

        assert await asyncio.gather(first, ended, second) == ["looked up", True, "looked up"]
        assert third == "looked up"
        assert overlaps == []
        assert manager.get_session("s1").memory.total_turns == 3
        assert manager._locks == {}

    @pytest.mark.asyncio
    async def test_session_with_queued_turn_is_not_evicted(self):
        manager = DialogueManager(max_active_sessions=1)
        await manager.process_turn("s1", "hi")
        session = manager.get_session("s1")

        async with manager._session_lock("s1"):
            waiting = asyncio.ensure_future(manager.process_turn("s1", "thanks"))
            await asyncio.sleep(0)
        # lock released, queued turn not resumed yet
        manager.get_session("s2")

        assert manager.sessions["s1"] is session
        await waiting
        assert session.memory.total_turns == 2
        assert manager._locks == {}

    @pytest.mark.asyncio
    async def test_end_session(self):
        store = InMemorySessionStore()
        manager = DialogueManager(session_store=store)
        await manager.process_turn("s1", "hi")

        assert await manager.end_session("s1") is True
        assert "s1" not in manager.sessions
        assert store.load("s1").total_turns == 1
        assert await manager.end_session("s1") is False

    @pytest.mark.asyncio
    async def test_idle_sessions_are_evicted_and_reloaded(self):
        store = InMemorySessionStore()
        manager = DialogueManager(session_store=store, max_active_sessions=2)

        await manager.process_turn("a", "hi")
        await manager.process_turn("b", "hi")
        await manager.process_turn("c", "hi")

        assert list(manager.sessions) == ["b", "c"]

        await manager.process_turn("a", "thanks")
        assert manager.get_session("a").memory.total_turns == 2

    @pytest.mark.asyncio
    async def test_get_stats(self, manager):
        await manager.process_turn("s1", "what is squat")

        stats = manager.get_stats()

        assert stats["active_sessions"] == 1
        assert stats["turns_processed"] == 1
        assert stats["registered_tools"] == ["workout_modifier", "exercise_info"]
        assert stats["tool_executions"]["total_executions"] == 1
        assert stats["session_store"]["type"] == "InMemorySessionStore"
