"""Bounded execution for third-party parsers that may hang on bad input."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .service_errors import ExtractionTimeoutError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_CALL_EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=4, thread_name_prefix="extract")


@dataclass(frozen=True)
class TimeoutPolicy:
    """Wall-clock budget for a single parser call."""

    name: str
    timeout_seconds: float | None

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds < 0:
            raise ValueError("timeout_seconds may not be negative")


class BoundedRunner(Generic[T]):
    """Run an operation on a worker thread and stop waiting after a timeout.

    The worker cannot be killed; a timed-out call keeps its thread until the
    parser returns, but the caller is released immediately.
    """

    def __init__(
        self,
        policy: TimeoutPolicy,
        *,
        executor: concurrent.futures.Executor | None = None,
    ) -> None:
        self._policy = policy
        self._executor = executor or _CALL_EXECUTOR

    @property
    def policy(self) -> TimeoutPolicy:
        return self._policy

    def run(self, operation: Callable[[], T]) -> T:
        timeout = self._policy.timeout_seconds
        if timeout is None or timeout <= 0:
            return operation()

        future = self._executor.submit(operation)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            LOGGER.warning(
                "extraction.timeout",
                extra={"extra_payload": {"operation": self._policy.name, "timeout_seconds": timeout}},
            )
            raise ExtractionTimeoutError(
                f"{self._policy.name} exceeded {timeout:g}s.",
                details={"timeout_seconds": timeout},
            ) from exc


__all__ = ["BoundedRunner", "TimeoutPolicy"]
