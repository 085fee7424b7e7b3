"""
Conversation orchestrator: one user turn, at most two model rounds.

Data flow:
    POST /chat {message}
            ↓
    ChatOrchestrator.handle_turn(message)
            ↓
    round 1: [user]  → ResilientModelInvoker (primary, then fallback model)
            ↓
    tool calls?  no  → reply with round-1 text
            ↓ yes
    McpToolBridge.call(...) for each recognized call, gathered
            ↓
    round 2: [user, model (round-1 turn verbatim), tool (all results)]
            ↓
    reply with round-2 text

Design decisions:
- Each turn is a fresh, stateless conversation. Nothing outlives the request.
- Only ``get_el_price`` is executed. Calls to other names are skipped and
  logged; round 2 still runs.
- A third round is never attempted, even when round 2 asks for tools again.
- Tool failures abort the turn. Unlike a model-failure fallback there is no
  partially tool-augmented answer: the caller gets a reply or one error.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

from elpris_chat.config.logging import get_logger
from elpris_chat.config.settings import Settings
from elpris_chat.llm.invoker import ResilientModelInvoker
from elpris_chat.llm.models import (
    ChatFailure,
    ChatReply,
    ConversationTurn,
    ModelInvocationOutcome,
    ToolCallRequest,
    ToolCallResult,
    ToolError,
    UpstreamError,
)
from elpris_chat.llm.retry import with_fallback
from elpris_chat.tools.base import ToolBridge
from elpris_chat.tools.mcp_bridge import McpToolBridge
from elpris_chat.tools.price import GET_EL_PRICE

logger = get_logger(__name__)

UPSTREAM_FAILURE_STATUS = 503
TOOL_FAILURE_STATUS = 502
INTERNAL_FAILURE_STATUS = 500


class ChatOrchestrator:
    """
    Drives the tool-augmented conversation for a single user message.

    Args:
        invoker: Model invoker with retry
        tool_bridge: Bridge used to execute recognized tool calls
        primary_model: Model id tried first in every round
        fallback_model: Model id tried once when the primary ultimately fails
        bridge_tool_name: Name of the price tool on the tool service
    """

    def __init__(
        self,
        invoker: ResilientModelInvoker,
        tool_bridge: ToolBridge,
        primary_model: str,
        fallback_model: str | None = None,
        bridge_tool_name: str = "elpris.getPrices",
    ):
        self._invoker = invoker
        self._tool_bridge = tool_bridge
        self._primary_model = primary_model
        self._fallback_model = fallback_model
        self._bridge_tool_name = bridge_tool_name

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatOrchestrator:
        """Wire the orchestrator from configuration. Raises ConfigurationError without a credential."""
        return cls(
            invoker=ResilientModelInvoker(settings.llm),
            tool_bridge=McpToolBridge(settings.tools.mcp_url),
            primary_model=settings.llm.model,
            fallback_model=settings.llm.fallback_model,
            bridge_tool_name=settings.tools.mcp_tool_name,
        )

    async def _invoke_round(self, conversation: Iterable[ConversationTurn]) -> ModelInvocationOutcome:
        turns = tuple(conversation)
        return await with_fallback(
            self._primary_model,
            self._fallback_model,
            lambda model_id: self._invoker.invoke(model_id, turns),
        )

    async def _execute(self, call: ToolCallRequest) -> ToolCallResult:
        payload = await self._tool_bridge.call(self._bridge_tool_name, call.arguments)
        return ToolCallResult(name=call.name, response=payload, id=call.id)

    async def _execute_tool_calls(self, calls: Iterable[ToolCallRequest]) -> list[ToolCallResult]:
        """Execute every recognized call concurrently; all complete before this returns."""
        selected: list[ToolCallRequest] = []
        for call in calls:
            if call.name == GET_EL_PRICE:
                selected.append(call)
            else:
                logger.warning(f"Skipping call to unrecognized tool {call.name!r}")

        results = await asyncio.gather(*(self._execute(call) for call in selected))
        return list(results)

    async def _run_turn(self, user_message: str) -> str:
        user_turn = ConversationTurn.user_text(user_message)

        # --- Round 1 ---
        first = await self._invoke_round([user_turn])
        if not first.tool_calls:
            logger.info(f"Answered without tools ({first.model})")
            return first.text

        logger.info(f"Round 1 requested {len(first.tool_calls)} tool call(s)")
        results = await self._execute_tool_calls(first.tool_calls)

        # --- Round 2 ---
        tool_turn = ConversationTurn(role="tool", parts=tuple(r.to_part() for r in results))
        second = await self._invoke_round([user_turn, first.raw_model_turn, tool_turn])
        if second.tool_calls:
            logger.info("Round 2 requested more tools; answering with its text only")
        return second.text

    async def handle_turn(self, user_message: str) -> ChatReply:
        """
        Answer one user message.

        Returns:
            ChatReply with the model's final text

        Raises:
            ChatFailure: Any unrecovered model or tool error, with its HTTP status
        """
        try:
            reply = await self._run_turn(user_message)
        except UpstreamError as e:
            logger.error(f"Model invocation failed: {e}")
            raise ChatFailure(str(e), status_code=UPSTREAM_FAILURE_STATUS, cause=e) from e
        except ToolError as e:
            logger.error(f"Tool call failed: {e}")
            raise ChatFailure(str(e), status_code=TOOL_FAILURE_STATUS, cause=e) from e
        except Exception as e:
            logger.exception(f"Unexpected error handling chat turn: {e}")
            raise ChatFailure(str(e) or type(e).__name__, status_code=INTERNAL_FAILURE_STATUS, cause=e) from e

        return ChatReply(reply=reply)
