"""
LLM Orchestration Layer.

Drives a language model through at most two rounds per user message:
answer directly, or request the price tool and answer from its result.

    ChatOrchestrator.handle_turn(message)
            ↓
    ResilientModelInvoker (retry + model fallback)  ←→  McpToolBridge
            ↓
    ChatReply  →  HTTP layer

Every turn is stateless; conversation history is never kept between requests.
"""

from elpris_chat.llm.models import (
    ChatFailure,
    ChatReply,
    ConfigurationError,
    ContentPart,
    ConversationTurn,
    ExhaustedRetries,
    ModelInvocationOutcome,
    ToolCallRequest,
    ToolCallResult,
    UpstreamError,
    UpstreamFatal,
    UpstreamTransient,
)
from elpris_chat.llm.orchestrator import ChatOrchestrator
from elpris_chat.llm.invoker import ResilientModelInvoker
from elpris_chat.llm.retry import RetryPolicy, with_fallback, with_retry

__all__ = [
    "ChatFailure",
    "ChatOrchestrator",
    "ChatReply",
    "ConfigurationError",
    "ContentPart",
    "ConversationTurn",
    "ExhaustedRetries",
    "ModelInvocationOutcome",
    "ResilientModelInvoker",
    "RetryPolicy",
    "ToolCallRequest",
    "ToolCallResult",
    "UpstreamError",
    "UpstreamFatal",
    "UpstreamTransient",
    "with_fallback",
    "with_retry",
]
