"""
Base class for tool bridges.

A bridge executes one named tool call against an external tool service and
returns the decoded structured payload.
"""

from abc import ABC, abstractmethod
from typing import Any


class ToolBridge(ABC):
    """
    Abstract base class for tool bridges.

    Implementations own their connection handling. A bridge does not retry;
    failures propagate to the caller as ToolError subclasses.
    """

    @abstractmethod
    async def call(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """
        Call a tool with the given arguments.

        Args:
            tool_name: Name of the tool as registered on the tool service
            arguments: Tool-specific arguments

        Returns:
            The tool's decoded structured payload

        Raises:
            ToolUnreachable: The tool service could not be reached
            ToolProtocolError: The service or the tool reported an error
            ToolMalformedResponse: The reply carried no decodable payload
        """
        pass
