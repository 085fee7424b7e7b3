"""
MCP tool bridge over streamable HTTP.

Every call opens its own MCP session against the price server, issues a
single ``tools/call`` and closes the session again, whether the call
succeeded or not. The reply's first content block must be text holding a
JSON document; that document is the tool's payload.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client
from mcp.shared.exceptions import McpError

from elpris_chat.config.logging import get_logger
from elpris_chat.llm.models import (
    ToolError,
    ToolMalformedResponse,
    ToolProtocolError,
    ToolUnreachable,
)
from elpris_chat.tools.base import ToolBridge

logger = get_logger(__name__)


_KNOWN_FAILURES = (ToolError, McpError, httpx.HTTPStatusError, httpx.TransportError, OSError)


def _flatten(error: BaseException) -> list[BaseException]:
    if isinstance(error, BaseExceptionGroup):
        return [leaf for inner in error.exceptions for leaf in _flatten(inner)]
    return [error]


def _leaf_error(error: BaseException) -> BaseException:
    # anyio task groups inside the MCP transport wrap failures in exception groups
    leaves = _flatten(error)
    for kind in _KNOWN_FAILURES:
        for leaf in leaves:
            if isinstance(leaf, kind):
                return leaf
    return leaves[0] if leaves else error


def _first_text(result: Any) -> str | None:
    content = getattr(result, "content", None) or []
    if not content:
        return None
    return getattr(content[0], "text", None)


def decode_payload(tool_name: str, result: Any) -> Any:
    """Decode the JSON payload from a CallToolResult's first text block."""
    text = _first_text(result)
    if not text:
        raise ToolMalformedResponse(
            f"Unexpected MCP reply from {tool_name!r} (missing content[0].text)"
        )
    try:
        return json.loads(text)
    except ValueError as e:
        raise ToolMalformedResponse(
            f"MCP reply from {tool_name!r} is not valid JSON: {e}", cause=e
        )


class McpToolBridge(ToolBridge):
    """
    Tool bridge speaking MCP to a streamable HTTP endpoint.

    Args:
        url: MCP endpoint, e.g. ``http://localhost:3000/mcp``
    """

    def __init__(self, url: str):
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    def _classify(self, tool_name: str, error: BaseException) -> ToolError:
        leaf = _leaf_error(error)
        if isinstance(leaf, ToolError):
            return leaf
        if isinstance(leaf, McpError):
            return ToolProtocolError(f"MCP error from {tool_name!r}: {leaf}", cause=leaf)
        if isinstance(leaf, httpx.HTTPStatusError):
            return ToolProtocolError(
                f"MCP server at {self._url} answered {leaf.response.status_code}", cause=leaf
            )
        if isinstance(leaf, (httpx.TransportError, OSError)):
            return ToolUnreachable(f"MCP server at {self._url} unreachable: {leaf}", cause=leaf)
        return ToolProtocolError(f"MCP call to {tool_name!r} failed: {leaf}", cause=leaf)

    async def _call_tool(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        try:
            async with streamablehttp_client(self._url) as (read_stream, write_stream, _):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    return await session.call_tool(tool_name, arguments)
        except Exception as e:
            raise self._classify(tool_name, e) from e

    async def call(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """Run one tool call on a fresh MCP session and return its decoded payload."""
        logger.info(f"Calling MCP tool {tool_name!r} with {arguments}")
        result = await self._call_tool(tool_name, arguments)

        if getattr(result, "isError", False):
            raise ToolProtocolError(
                f"Tool {tool_name!r} reported an error: {_first_text(result) or 'no details'}"
            )

        payload = decode_payload(tool_name, result)
        logger.debug(f"MCP tool {tool_name!r} returned {type(payload).__name__}")
        return payload
