"""Wait-duration sources for retry backoff.

A wait source is an iterator of durations (in milliseconds) which may be
finite or infinite. Consumers that stop before a source is exhausted call
``close()`` so the source can release anything it holds.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from numbers import Real
from typing import Any


def _check_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        msg = f"{name} must be a number, got {type(value).__name__}"
        raise TypeError(msg)
    return float(value)


def _nan_min(a: float, b: float) -> float:
    # Unlike min(), NaN in either position wins.
    if math.isnan(a) or math.isnan(b):
        return math.nan
    return min(a, b)


def _check_count(count: Any) -> float:
    count = _check_number("count", count)
    if math.isnan(count) or count < 0 or (math.isfinite(count) and count != int(count)):
        msg = f"count must be a non-negative integer or infinity, got {count}"
        raise ValueError(msg)
    return count


class WaitSource(Iterator[float], ABC):
    """Iterator of wait durations with explicit, idempotent ``close()``."""

    def __init__(self, count: float = math.inf) -> None:
        self._remaining = count
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __next__(self) -> float:
        if self._closed or self._remaining <= 0:
            raise StopIteration
        self._remaining -= 1
        return self._next_value()

    @abstractmethod
    def _next_value(self) -> Any:
        """Produce the next duration; only called while values remain."""

    def close(self) -> None:
        self._closed = True


class ExponentialWait(WaitSource):
    """Yields ``initial``, then each previous value times ``factor``, capped at ``max_value``."""

    def __init__(
        self,
        factor: float,
        initial: float = 1,
        max_value: float = math.inf,
        count: float = math.inf,
    ) -> None:
        self.factor = _check_number("factor", factor)
        self.initial = _check_number("initial", initial)
        self.max_value = _check_number("max_value", max_value)
        super().__init__(_check_count(count))
        self._value = _nan_min(self.initial, self.max_value)

    def _next_value(self) -> float:
        value = self._value
        self._value = _nan_min(value * self.factor, self.max_value)
        return value


class ConstantWait(WaitSource):
    """Yields the same value ``count`` times."""

    def __init__(self, value: Any, count: float = math.inf) -> None:
        self.value = value
        super().__init__(_check_count(count))

    def _next_value(self) -> Any:
        return self.value


class IterableWait(WaitSource):
    """Adapts an arbitrary iterable of durations to a :class:`WaitSource`."""

    def __init__(self, iterable: Iterable[float]) -> None:
        super().__init__()
        self._iterator = iter(iterable)

    def _next_value(self) -> float:
        try:
            return next(self._iterator)
        except StopIteration:
            self._closed = True
            raise

    def close(self) -> None:
        if not self._closed:
            close = getattr(self._iterator, "close", None)
            if close is not None:
                close()
        super().close()


def exponential(
    factor: float,
    initial: float = 1,
    max_value: float = math.inf,
    count: float = math.inf,
) -> ExponentialWait:
    return ExponentialWait(factor, initial, max_value, count)


def constant(value: Any, count: float = math.inf) -> ConstantWait:
    return ConstantWait(value, count)


def as_wait_source(wait: Any) -> WaitSource:
    """Coerce a number, wait source, or iterable of numbers into a wait source."""
    if isinstance(wait, WaitSource):
        return wait
    if isinstance(wait, Real) and not isinstance(wait, bool):
        return constant(float(wait))
    if isinstance(wait, Iterable) and not isinstance(wait, (str, bytes)):
        return IterableWait(wait)
    msg = f"wait_ms must be a number or iterable, got {type(wait).__name__}"
    raise TypeError(msg)
