"""
Tool Integration Layer.

Provides the bridge to the MCP price server that the model can call
through the ``get_el_price`` tool.
"""

from elpris_chat.llm.models import (
    ToolError,
    ToolMalformedResponse,
    ToolProtocolError,
    ToolUnreachable,
)
from elpris_chat.tools.base import ToolBridge
from elpris_chat.tools.mcp_bridge import McpToolBridge
from elpris_chat.tools.price import GET_EL_PRICE, GET_EL_PRICE_DECLARATION, PRICE_AREAS

__all__ = [
    "GET_EL_PRICE",
    "GET_EL_PRICE_DECLARATION",
    "McpToolBridge",
    "PRICE_AREAS",
    "ToolBridge",
    "ToolError",
    "ToolMalformedResponse",
    "ToolProtocolError",
    "ToolUnreachable",
]
