"""Tool registry: explicit name to tool mapping."""

import logging
from typing import Dict, Iterable, List, Optional

from ..tools.base import BaseTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of the tools a dialogue manager may dispatch to.

    Registration is explicit; tools are looked up by their exact name.
    """

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None):
        self._tools: Dict[str, BaseTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: BaseTool) -> bool:
        """Register a tool instance. Returns False if the name is already taken."""
        tool_name = tool.metadata.name

        if tool_name in self._tools:
            logger.warning(f"Tool {tool_name} already registered, skipping")
            return False

        self._tools[tool_name] = tool
        logger.info(f"Registered tool: {tool_name}")
        return True

    def unregister(self, name: str) -> Optional[BaseTool]:
        """Remove a tool by name."""
        return self._tools.pop(name, None)

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """Get a tool instance by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def get_all_tools(self) -> Dict[str, BaseTool]:
        """Get all registered tools."""
        return self._tools.copy()

    def get_tool_definitions(self) -> List[Dict]:
        """Get definitions for all registered tools."""
        definitions = []
        for tool in self._tools.values():
            try:
                definitions.append(tool.get_definition())
            except Exception as e:
                logger.error(f"Failed to get definition for {tool.metadata.name}: {e}")
        return definitions

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def create_default_registry() -> ToolRegistry:
    """Registry holding the tools shipped with the package."""
    from ..tools import ExerciseInfoTool, WorkoutModifierTool

    return ToolRegistry([WorkoutModifierTool(), ExerciseInfoTool()])
