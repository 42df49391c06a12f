"""Retry an operation with backoff until its result is acceptable or time runs out."""

from __future__ import annotations

import asyncio
import inspect
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from .backoff import as_wait_source, exponential

T = TypeVar("T")

DEFAULT_INITIAL_WAIT_MS = 4000
DEFAULT_MAX_WAIT_MS = 60000
DEFAULT_MIN_WAIT_MS = 4000


class Clock(Protocol):
    """Source of the current time and of timed waits, both in milliseconds."""

    def now(self) -> float: ...

    async def sleep(self, ms: float) -> None: ...


class SystemClock:
    def now(self) -> float:
        return time.monotonic() * 1000

    async def sleep(self, ms: float) -> None:
        await asyncio.sleep(ms / 1000)


def default_should_retry(result: Any) -> bool:
    """Retry while the result is falsy."""
    return not result


def default_wait_ms() -> Any:
    return exponential(2, DEFAULT_INITIAL_WAIT_MS, DEFAULT_MAX_WAIT_MS)


@dataclass
class RetryOptions:
    """Options for :func:`retry_async`.

    ``wait_ms`` is a number of milliseconds to wait between attempts or an
    iterable of them; ``None`` starts a fresh default exponential backoff for
    each call. ``max_total_ms`` bounds the time spent waiting; the
    last wait is shortened so it does not overshoot. Once less than
    ``min_wait_ms`` remains, the last result is returned without waiting.
    """

    wait_ms: Any = None
    max_total_ms: float = math.inf
    min_wait_ms: float = DEFAULT_MIN_WAIT_MS
    should_retry: Callable[[Any], bool] = default_should_retry
    clock: Clock = field(default_factory=SystemClock)
    on_wait: Callable[[float], None] | None = None


def _coerce_options(options: RetryOptions | Mapping[str, Any] | None) -> RetryOptions:
    if options is None:
        return RetryOptions()
    if isinstance(options, RetryOptions):
        return options
    if isinstance(options, Mapping):
        return RetryOptions(**options)
    msg = f"options must be RetryOptions or a mapping, got {type(options).__name__}"
    raise TypeError(msg)


async def retry_async(
    operation: Callable[..., Any],
    options: RetryOptions | Mapping[str, Any] | None = None,
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Call ``operation(*args, **kwargs)`` until ``should_retry`` rejects its result.

    Exceptions raised by the operation propagate immediately and are never
    retried. When the deadline or the wait source runs out, the result of the
    last attempt is returned even if ``should_retry`` would accept it.
    """
    if not callable(operation):
        msg = "operation must be callable"
        raise TypeError(msg)
    opts = _coerce_options(options)
    waits = as_wait_source(default_wait_ms() if opts.wait_ms is None else opts.wait_ms)
    clock = opts.clock

    deadline = clock.now() + opts.max_total_ms if math.isfinite(opts.max_total_ms) else math.inf

    try:
        while True:
            result = operation(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            if not opts.should_retry(result):
                return result

            remaining = deadline - clock.now()
            if remaining <= 0 or remaining < opts.min_wait_ms:
                return result

            try:
                wait = next(waits)
            except StopIteration:
                return result

            delay = min(wait, remaining)
            if opts.on_wait is not None:
                opts.on_wait(delay)
            await clock.sleep(delay)
    finally:
        waits.close()
