"""
Name + arguments -> validated tool call -> text.

Hosts (MCP stdio server, HTTP API) only talk to the dispatcher, which never
lets an exception escape: unknown tools, invalid arguments and unexpected
failures all come back as text.
"""
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from langchain_core.tools import StructuredTool
import logging

from services.covenant_session import CovenantSession
from utils.covenant_tools import create_covenant_langchain_tools

logger = logging.getLogger(__name__)


class ToolDispatcher:
    def __init__(self, tools: List[StructuredTool]):
        self._tools: Dict[str, StructuredTool] = {tool.name: tool for tool in tools}

    @classmethod
    def from_session(cls, session: CovenantSession) -> "ToolDispatcher":
        return cls(create_covenant_langchain_tools(session))

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        """Name, description and JSON input schema of every tool."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.args_schema.model_json_schema(),
            }
            for tool in self._tools.values()
        ]

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return f"Unknown tool: {name}"

        try:
            result = await tool.ainvoke(arguments or {})
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {name}: {e}")
            return f"Invalid arguments for {name}. Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error running {name}: {e}", exc_info=True)
            return f"Failed to run {name}. Error: {e}"

        return str(result)
