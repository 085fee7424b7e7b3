"""
Response parsing: tool calls and reply text out of a ModelResponse.

Tool calls are collected from every candidate in order. Text comes from the
first candidate that has any, joined by newlines. A response with no text at
all yields NO_RESPONSE_TEXT so callers can tell "the model answered with
nothing" apart from a missing response.
"""

from __future__ import annotations

from elpris_chat.llm.models import (
    ConversationTurn,
    ModelInvocationOutcome,
    ModelResponse,
    ToolCallRequest,
)

NO_RESPONSE_TEXT = "(inget svar)"


def extract_tool_calls(response: ModelResponse) -> list[ToolCallRequest]:
    calls: list[ToolCallRequest] = []
    for candidate in response.candidates:
        for part in candidate.parts:
            call = part.function_call
            if call is None or not call.name:
                continue
            calls.append(
                ToolCallRequest(
                    name=call.name,
                    arguments=dict(call.arguments or {}),
                    id=call.id,
                )
            )
    return calls


def _text_parts(candidate: ConversationTurn) -> list[str]:
    return [part.text for part in candidate.parts if part.text]


def extract_text_parts(response: ModelResponse) -> list[str]:
    """Text parts of the first candidate that has any."""
    for candidate in response.candidates:
        parts = _text_parts(candidate)
        if parts:
            return parts
    return []


def extract_text(response: ModelResponse) -> str:
    parts = extract_text_parts(response)
    if not parts:
        return NO_RESPONSE_TEXT
    return "\n".join(parts)


def parse_response(response: ModelResponse) -> ModelInvocationOutcome:
    """Build the round outcome, keeping the first candidate as the raw model turn."""
    text_parts = extract_text_parts(response)
    return ModelInvocationOutcome(
        text="\n".join(text_parts) if text_parts else NO_RESPONSE_TEXT,
        text_parts=tuple(text_parts),
        tool_calls=tuple(extract_tool_calls(response)),
        raw_model_turn=response.candidates[0] if response.candidates else None,
        model=response.model,
    )
