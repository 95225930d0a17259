"""Unit tests for the tool registry."""

from unittest.mock import patch

from dialogue_manager.core.registry import ToolRegistry, create_default_registry
from tests.fixtures import MockTool


class TestToolRegistry:
    """Test suite for ToolRegistry."""

    def test_init(self):
        registry = ToolRegistry()
        assert len(registry) == 0
        assert registry.list_tools() == []

    def test_register_and_lookup(self):
        registry = ToolRegistry()
        tool = MockTool("mock_tool")

        assert registry.register(tool) is True
        assert registry.get_tool("mock_tool") is tool
        assert "mock_tool" in registry
        assert registry.get_tool("MOCK_TOOL") is None

    def test_register_duplicate_tool(self):
        registry = ToolRegistry([MockTool("mock_tool")])

        with patch("dialogue_manager.core.registry.logger") as mock_logger:
            assert registry.register(MockTool("mock_tool")) is False
            mock_logger.warning.assert_called_once()

        assert len(registry) == 1

    def test_unregister(self):
        tool = MockTool("mock_tool")
        registry = ToolRegistry([tool])

        assert registry.unregister("mock_tool") is tool
        assert registry.unregister("mock_tool") is None
        assert len(registry) == 0

    def test_get_all_tools_is_a_copy(self):
        registry = ToolRegistry([MockTool("a")])
        tools = registry.get_all_tools()
        tools.clear()
        assert len(registry) == 1

    def test_get_tool_definitions(self):
        registry = ToolRegistry([MockTool("a", required=["q"]), MockTool("b")])

        definitions = registry.get_tool_definitions()

        assert [d["name"] for d in definitions] == ["a", "b"]
        assert definitions[0]["inputSchema"]["required"] == ["q"]

    def test_get_tool_definitions_skips_broken_tools(self):
        broken = MockTool("broken")
        registry = ToolRegistry([broken, MockTool("fine")])

        with patch.object(broken, "get_definition", side_effect=Exception("bad schema")):
            definitions = registry.get_tool_definitions()

        assert [d["name"] for d in definitions] == ["fine"]


def test_default_registry():
    registry = create_default_registry()
    assert registry.list_tools() == ["workout_modifier", "exercise_info"]
