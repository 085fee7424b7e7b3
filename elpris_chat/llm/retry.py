"""
Retry and fallback combinators for model invocation.

Two stages, composed once per round by the orchestrator:

    with_fallback(primary, secondary,
        lambda model: with_retry(policy, lambda: generate(model, ...)))

``with_retry`` retries transient failures with a fixed backoff schedule;
``with_fallback`` repeats the whole retried invocation once against a second
model when the first one ultimately fails.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, TypeVar

from elpris_chat.config.logging import get_logger
from elpris_chat.llm.models import ExhaustedRetries, UpstreamError, UpstreamTransient

logger = get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff delays in seconds. One attempt more than there are delays."""

    delays: tuple[float, ...] = (0.5, 1.0, 2.0, 4.0)

    @classmethod
    def from_milliseconds(cls, delays_ms: Sequence[int]) -> RetryPolicy:
        return cls(delays=tuple(ms / 1000 for ms in delays_ms))

    @property
    def attempts(self) -> int:
        return len(self.delays) + 1


def is_transient(error: BaseException) -> bool:
    return isinstance(error, UpstreamTransient)


async def with_retry(
    policy: RetryPolicy,
    fn: Callable[[], Awaitable[T]],
    *,
    is_retriable: Callable[[BaseException], bool] = is_transient,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Call ``fn`` until it succeeds or the policy runs out of attempts.

    Non-retriable errors propagate immediately. After the last retriable
    failure an ExhaustedRetries wrapping that failure is raised.

    Args:
        policy: Backoff schedule
        fn: Zero-argument coroutine factory; called once per attempt
        is_retriable: Classifier for caught exceptions
        sleep: Awaitable sleep, injectable for tests
    """
    attempt = 0

    while True:
        try:
            return await fn()
        except Exception as e:
            if not is_retriable(e):
                raise
            if attempt >= len(policy.delays):
                raise ExhaustedRetries(e, attempts=policy.attempts) from e
            delay = policy.delays[attempt]
            logger.warning(
                f"Transient failure on attempt {attempt + 1}/{policy.attempts}, "
                f"retrying in {delay:.1f}s: {e}"
            )

        await sleep(delay)
        attempt += 1


async def with_fallback(
    primary: str,
    secondary: str | None,
    fn: Callable[[str], Awaitable[T]],
) -> T:
    """
    Run ``fn(primary)``; on an upstream failure run ``fn(secondary)`` once.

    A failure of the secondary is final. When no distinct secondary model
    is configured the primary failure propagates unchanged.
    """
    try:
        return await fn(primary)
    except UpstreamError as e:
        if not secondary or secondary == primary:
            raise
        logger.warning(f"Model {primary!r} failed ({e}); falling back to {secondary!r}")
        return await fn(secondary)
