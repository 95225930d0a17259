"""Base models for tools and their results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .memory import Workout


@dataclass
class ToolMetadata:
    """Metadata for a tool."""

    name: str
    description: str
    version: str = "1.0.0"
    author: str = "dialogue-manager"
    tags: List[str] = field(default_factory=list)


@dataclass
class ToolResult:
    """Outcome of a single tool execution."""

    success: bool = True
    message: Optional[str] = None
    updated_task: Optional[Workout] = None
    error: Optional[str] = None
    tool_name: Optional[str] = None
    execution_time_ms: Optional[float] = None
    timestamp: datetime = field(default_factory=datetime.now)
