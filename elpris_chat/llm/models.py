"""
Data models and errors for the chat orchestration layer.

A conversation is an ordered sequence of ConversationTurn values, each made
of ContentPart values. A part carries exactly one of: text, a function call
requested by the model, or a function response produced by a tool. The
shapes mirror the Gemini content model so a model turn can be sent back to
the model unchanged in a later round.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal["user", "model", "tool"]


# ---------------------------------------------------------------------------
# Conversation content
# ---------------------------------------------------------------------------

class FunctionCall(BaseModel):
    """A tool call requested by the model. ``id`` is optional; some providers omit it."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class FunctionResponse(BaseModel):
    """A tool's structured result, correlated to its call by ``id`` when present."""

    model_config = ConfigDict(frozen=True)

    name: str
    response: Any = None
    id: str | None = None


class ContentPart(BaseModel):
    """Smallest unit of a turn. Exactly one of the three fields is populated."""

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> ContentPart:
        populated = sum(
            value is not None
            for value in (self.text, self.function_call, self.function_response)
        )
        if populated != 1:
            raise ValueError(
                f"ContentPart must have exactly one populated variant, got {populated}"
            )
        return self

    @classmethod
    def from_text(cls, text: str) -> ContentPart:
        return cls(text=text)

    @classmethod
    def from_function_call(cls, call: FunctionCall) -> ContentPart:
        return cls(function_call=call)

    @classmethod
    def from_function_response(cls, response: FunctionResponse) -> ContentPart:
        return cls(function_response=response)


class ConversationTurn(BaseModel):
    """One turn of a conversation: a role and its ordered parts."""

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: tuple[ContentPart, ...] = ()

    @classmethod
    def user_text(cls, text: str) -> ConversationTurn:
        return cls(role="user", parts=(ContentPart.from_text(text),))


class ModelResponse(BaseModel):
    """
    Raw result of one model call.

    Each candidate is a model-role turn holding the parts of one completion
    choice, in the order the provider returned them.
    """

    model_config = ConfigDict(frozen=True)

    candidates: tuple[ConversationTurn, ...] = ()
    model: str = ""


# ---------------------------------------------------------------------------
# Tool calls and invocation outcome
# ---------------------------------------------------------------------------

class ToolCallRequest(BaseModel):
    """A tool call extracted from a model response."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class ToolCallResult(BaseModel):
    """The structured payload a tool returned for one ToolCallRequest."""

    model_config = ConfigDict(frozen=True)

    name: str
    response: Any = None
    id: str | None = None

    def to_part(self) -> ContentPart:
        return ContentPart.from_function_response(
            FunctionResponse(name=self.name, response=self.response, id=self.id)
        )


class ModelInvocationOutcome(BaseModel):
    """
    Parsed result of one round.

    ``raw_model_turn`` is the first candidate exactly as the model produced it;
    a second round re-sends it so the model sees its own tool calls.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    text_parts: tuple[str, ...] = ()
    tool_calls: tuple[ToolCallRequest, ...] = ()
    raw_model_turn: ConversationTurn | None = None
    model: str = ""


class ChatReply(BaseModel):
    """Final answer for one user turn."""

    reply: str


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ElprisError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(ElprisError):
    """Required configuration is missing. Fatal to the process, not per request."""


class UpstreamError(ElprisError):
    """A model invocation failed."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class UpstreamTransient(UpstreamError):
    """Model provider signalled overload or rate limiting. Worth retrying."""


class UpstreamFatal(UpstreamError):
    """Any other model provider failure. Never retried."""


class ExhaustedRetries(UpstreamError):
    """Every attempt of a retry policy failed with a transient error."""

    def __init__(self, last_error: BaseException, attempts: int):
        status_code = getattr(last_error, "status_code", None)
        super().__init__(str(last_error), cause=last_error, status_code=status_code)
        self.attempts = attempts


class ToolError(ElprisError):
    """A tool call failed."""


class ToolUnreachable(ToolError):
    """The tool-execution service could not be reached."""


class ToolProtocolError(ToolError):
    """The tool-execution service answered with a protocol-level error."""


class ToolMalformedResponse(ToolError):
    """The tool reply did not carry a decodable structured payload."""


class ChatFailure(ElprisError):
    """A user turn failed. Carries the HTTP status the boundary should answer with."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
