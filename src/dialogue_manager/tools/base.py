"""Base class for all cognitive tools."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from ..models.base import ToolMetadata, ToolResult


class BaseTool(ABC):
    """Abstract base class for all tools.

    A tool receives its parameters and a read-only snapshot of the session
    memory, and reports what happened through a :class:`ToolResult`. It never
    mutates memory itself: a changed workout is handed back as
    ``updated_task`` and the dispatcher commits it.
    """

    def __init__(self):
        self.metadata = self._get_metadata()
        self._validate_metadata()

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @abstractmethod
    def _get_metadata(self) -> ToolMetadata:
        """Return metadata for this tool."""
        pass

    @abstractmethod
    async def execute(self, params: Dict[str, Any], snapshot: Mapping[str, Any]) -> ToolResult:
        """Execute the tool logic. Can be async for I/O operations."""
        pass

    @abstractmethod
    def _get_input_schema(self) -> Dict[str, Any]:
        """Return the JSON schema for tool inputs."""
        pass

    def _validate_metadata(self):
        """Validate that metadata is properly configured."""
        if not self.metadata.name:
            raise ValueError("Tool must have a name")
        if not self.metadata.description:
            raise ValueError("Tool must have a description")

    def missing_params(self, params: Dict[str, Any]) -> List[str]:
        """Names of required schema properties absent from ``params``."""
        required = self._get_input_schema().get("required", [])
        return [key for key in required if params.get(key) in (None, "")]

    def get_definition(self) -> Dict[str, Any]:
        """Get the tool definition advertised to clients."""
        return {
            "name": self.metadata.name,
            "description": self.metadata.description,
            "version": self.metadata.version,
            "inputSchema": self._get_input_schema(),
        }
