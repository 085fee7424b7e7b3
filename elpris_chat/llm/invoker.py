"""
Resilient model invoker.

Wraps a single LiteLLM completion call with the retry policy from
``elpris_chat.llm.retry``. Conversations are kept in the Gemini-style
turn/part model and translated to chat-completion messages at the wire:

    user turn   → {"role": "user", "content": text}
    model turn  → {"role": "assistant", "content": text | None, "tool_calls": [...]}
    tool turn   → one {"role": "tool", "tool_call_id": ..., "content": json} per part

Completion choices come back as model-role candidates. Tool calls without a
provider id get a positional id (``call_<n>``) so their responses can be
correlated even when one round calls the same tool twice. Calls that no
tool message answers (skipped by the orchestrator) never reach the wire.

Failure classification: rate limiting and overload (HTTP 429/503, or those
codes, "overloaded" or "rate limit" in the message) are transient and
retried. Everything else is fatal and surfaces on the first attempt.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Iterable

from litellm import acompletion
from litellm.exceptions import RateLimitError, ServiceUnavailableError

from elpris_chat.config.logging import get_logger
from elpris_chat.config.settings import LLMSettings
from elpris_chat.llm.models import (
    ConfigurationError,
    ContentPart,
    ConversationTurn,
    FunctionCall,
    ModelInvocationOutcome,
    ModelResponse,
    UpstreamFatal,
    UpstreamTransient,
)
from elpris_chat.llm.parser import parse_response
from elpris_chat.llm.retry import RetryPolicy, Sleep, with_retry
from elpris_chat.tools.price import GET_EL_PRICE_DECLARATION

logger = get_logger(__name__)

_TRANSIENT_STATUS_CODES = frozenset({429, 503})
_TRANSIENT_MARKERS = (
    "429",
    "503",
    "overloaded",
    "rate limit",
    "too many requests",
    "resource_exhausted",
    "unavailable",
)


def is_retriable_error(error: BaseException) -> bool:
    """True if a raw provider error signals overload or rate limiting."""
    if isinstance(error, (RateLimitError, ServiceUnavailableError)):
        return True
    if getattr(error, "status_code", None) in _TRANSIENT_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


def _decode_arguments(raw: Any) -> dict[str, Any]:
    if not raw:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise UpstreamFatal(f"Model returned undecodable tool arguments: {raw!r}", cause=e)
    if not isinstance(decoded, dict):
        raise UpstreamFatal(f"Model returned non-object tool arguments: {raw!r}")
    return decoded


def _answered_ids(turn: ConversationTurn | None) -> set[str]:
    if turn is None or turn.role != "tool":
        return set()
    responses = [part.function_response for part in turn.parts if part.function_response]
    return {result.id or f"call_{index}" for index, result in enumerate(responses)}


def to_messages(system_instruction: str, conversation: Iterable[ConversationTurn]) -> list[dict[str, Any]]:
    """
    Translate a conversation into chat-completion messages.

    An assistant tool call is only sent when the following tool turn answers
    its id; calls the orchestrator skipped are left out of the wire message.
    """
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_instruction}]
    turns = list(conversation)

    for position, turn in enumerate(turns):
        if not turn.parts:
            # An empty turn is never sent; e.g. a tool turn where every call was skipped
            logger.debug(f"Dropping empty {turn.role} turn")
            continue

        texts = [part.text for part in turn.parts if part.text is not None]

        if turn.role == "user":
            messages.append({"role": "user", "content": "\n".join(texts)})

        elif turn.role == "model":
            following = turns[position + 1] if position + 1 < len(turns) else None
            answered = _answered_ids(following)
            calls = [part.function_call for part in turn.parts if part.function_call]
            tool_calls: list[dict[str, Any]] = []
            for index, call in enumerate(calls):
                call_id = call.id or f"call_{index}"
                if call_id not in answered:
                    continue
                tool_calls.append({
                    "id": call_id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.arguments, ensure_ascii=False),
                    },
                })
            if len(tool_calls) < len(calls):
                logger.debug(f"Leaving {len(calls) - len(tool_calls)} unanswered tool call(s) out of the request")

            if not texts and not tool_calls:
                continue

            message: dict[str, Any] = {
                "role": "assistant",
                "content": "\n".join(texts) if texts else None,
            }
            if tool_calls:
                message["tool_calls"] = tool_calls
            messages.append(message)

        else:
            responses = [part.function_response for part in turn.parts if part.function_response]
            for index, result in enumerate(responses):
                messages.append({
                    "role": "tool",
                    "tool_call_id": result.id or f"call_{index}",
                    "name": result.name,
                    "content": json.dumps(result.response, ensure_ascii=False, default=str),
                })

    return messages


def to_model_response(completion: Any) -> ModelResponse:
    """Translate a LiteLLM completion into model-role candidates."""
    candidates: list[ConversationTurn] = []

    for choice in completion.choices or []:
        message = choice.message
        parts: list[ContentPart] = []

        if message.content:
            parts.append(ContentPart.from_text(message.content))

        for index, tool_call in enumerate(message.tool_calls or []):
            parts.append(
                ContentPart.from_function_call(
                    FunctionCall(
                        name=tool_call.function.name,
                        arguments=_decode_arguments(tool_call.function.arguments),
                        id=tool_call.id or f"call_{index}",
                    )
                )
            )

        candidates.append(ConversationTurn(role="model", parts=tuple(parts)))

    return ModelResponse(candidates=tuple(candidates), model=completion.model or "")


class ResilientModelInvoker:
    """
    Calls the model with bounded exponential-backoff retry.

    The provider credential comes from ``settings`` and lives as long as the
    invoker; there is no process-wide client.

    Args:
        settings: LLM configuration (credential, sampling, system instruction, backoff)
        tools: Tool declarations offered to the model (default: the price tool)
        sleep: Awaitable used between retries; injectable for tests
    """

    def __init__(
        self,
        settings: LLMSettings,
        tools: list[dict[str, Any]] | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if not settings.api_key:
            raise ConfigurationError("API key not configured. Set LLM_API_KEY in your environment.")
        self._settings = settings
        self._tools = tools if tools is not None else [GET_EL_PRICE_DECLARATION]
        self._policy = RetryPolicy.from_milliseconds(settings.backoff_ms)
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def generate(self, model_id: str, conversation: Iterable[ConversationTurn]) -> ModelResponse:
        """Single attempt. Raises UpstreamTransient or UpstreamFatal on failure."""
        call_kwargs: dict[str, Any] = {
            "model": model_id,
            "messages": to_messages(self._settings.system_instruction, conversation),
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
            "api_key": self._settings.api_key,
        }
        if self._tools:
            call_kwargs["tools"] = self._tools

        try:
            completion = await acompletion(**call_kwargs)
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            if is_retriable_error(e):
                raise UpstreamTransient(
                    f"LLM API overloaded: {e}", cause=e, status_code=status_code
                ) from e
            raise UpstreamFatal(
                f"LLM API call failed: {e}", cause=e, status_code=status_code
            ) from e

        return to_model_response(completion)

    async def invoke(
        self,
        model_id: str,
        conversation: Iterable[ConversationTurn],
    ) -> ModelInvocationOutcome:
        """
        Generate against ``model_id``, retrying transient failures.

        Raises:
            ExhaustedRetries: Every attempt failed transiently
            UpstreamFatal: A non-retriable failure on any attempt
        """
        turns = tuple(conversation)
        logger.debug(f"Invoking {model_id} with {len(turns)} turn(s)")

        response = await with_retry(
            self._policy,
            lambda: self.generate(model_id, turns),
            sleep=self._sleep,
        )
        return parse_response(response)
