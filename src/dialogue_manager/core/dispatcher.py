"""Tool dispatcher: runs tools against a read-only memory snapshot and
commits their results."""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Dict, Optional

from ..models.base import ToolResult
from ..models.memory import ActionKind, ActionRecord
from ..services.memory import ConversationMemory
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Executes registered tools on behalf of a session.

    Every call writes exactly one ActionRecord to ``working.last_action``.
    Unknown tools, missing parameters, reported failures, timeouts and raised
    exceptions all come back as ``ToolResult(success=False)``; nothing raised
    by a tool escapes ``invoke``.
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        timeout_seconds: Optional[float] = 30.0,
        max_history: int = 100,
    ):
        self.tool_registry = tool_registry
        self.timeout_seconds = timeout_seconds
        self.execution_history: deque[ToolResult] = deque(maxlen=max_history)

    async def invoke(
        self, tool_name: str, params: Dict[str, Any], memory: ConversationMemory
    ) -> ToolResult:
        """Execute a single tool and fold its result into memory."""
        tool = self.tool_registry.get_tool(tool_name)
        if not tool:
            error = f"Tool '{tool_name}' not found."
            logger.warning(error)
            self._record(memory, ActionKind.FAILURE, tool_name, params, error=error)
            return self._remember(ToolResult(success=False, error=error, tool_name=tool_name))

        missing = tool.missing_params(params)
        if missing:
            error = f"Missing required parameters for '{tool_name}': {', '.join(missing)}"
            logger.warning(error)
            self._record(memory, ActionKind.FAILURE, tool_name, params, error=error)
            return self._remember(ToolResult(success=False, error=error, tool_name=tool_name))

        snapshot = memory.snapshot()
        start_time = time.time()

        try:
            logger.info(f"Executing tool: {tool_name}")
            result = await asyncio.wait_for(
                tool.execute(dict(params), snapshot), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            error = f"Tool '{tool_name}' timed out after {self.timeout_seconds}s."
            logger.warning(error)
            self._record(memory, ActionKind.FAILURE, tool_name, params, error=error)
            return self._remember(
                ToolResult(
                    success=False,
                    error=error,
                    tool_name=tool_name,
                    execution_time_ms=(time.time() - start_time) * 1000,
                )
            )
        except Exception as e:
            logger.error(f"Tool {tool_name} raised: {e}", exc_info=True)
            self._record(memory, ActionKind.EXCEPTION, tool_name, params, error=str(e))
            return self._remember(
                ToolResult(
                    success=False,
                    error=f"Exception executing tool '{tool_name}': {e}",
                    tool_name=tool_name,
                    execution_time_ms=(time.time() - start_time) * 1000,
                )
            )

        if not isinstance(result, ToolResult):
            error = f"Tool '{tool_name}' returned {type(result).__name__} instead of a ToolResult."
            logger.error(error)
            self._record(memory, ActionKind.EXCEPTION, tool_name, params, error=error)
            return self._remember(ToolResult(success=False, error=error, tool_name=tool_name))

        result.tool_name = tool_name
        result.execution_time_ms = (time.time() - start_time) * 1000

        if not result.success:
            logger.info(f"Tool {tool_name} reported failure: {result.error}")
            self._record(memory, ActionKind.FAILURE, tool_name, params, error=result.error)
        elif result.updated_task is not None:
            memory.update_working(current_task=result.updated_task)
            self._record(memory, ActionKind.SUCCESS, tool_name, params, message=result.message)
        else:
            self._record(
                memory,
                ActionKind.SUCCESS,
                tool_name,
                params,
                message=result.message or "Tool executed successfully without workout update.",
            )

        return self._remember(result)

    def _record(
        self,
        memory: ConversationMemory,
        kind: ActionKind,
        tool_name: str,
        params: Dict[str, Any],
        message: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        memory.update_working(
            last_action=ActionRecord(
                kind=kind, tool_name=tool_name, params=dict(params), message=message, error=error
            )
        )

    def _remember(self, result: ToolResult) -> ToolResult:
        self.execution_history.append(result)
        return result

    def get_execution_stats(self) -> Dict[str, Any]:
        """Get statistics about tool executions."""
        total = len(self.execution_history)
        successful = sum(1 for output in self.execution_history if output.success)
        failed = total - successful

        avg_time = 0
        if total > 0:
            times = [o.execution_time_ms for o in self.execution_history if o.execution_time_ms]
            avg_time = sum(times) / len(times) if times else 0

        return {
            "total_executions": total,
            "successful": successful,
            "failed": failed,
            "success_rate": successful / total if total > 0 else 0,
            "average_execution_time_ms": avg_time,
        }
