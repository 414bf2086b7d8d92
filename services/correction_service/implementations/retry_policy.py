"""Retry policy for backends that report a transient warm-up state."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from grammarfix_service_libs.logging_utils import create_service_logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from services.correction_service.exceptions import ModelWarmingUp

logger = create_service_logger("correction_service.retry_policy")

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-backoff retry of ModelWarmingUp, driven by tenacity.

    `sleep` is injectable so tests can observe the backoff without waiting.
    """

    max_attempts: int = 2
    backoff_ms: int = 15000
    sleep: SleepFn = field(default=asyncio.sleep, compare=False)

    async def run(self, operation: Callable[[], Awaitable[T]], operation_name: str) -> T:
        """Run `operation`, retrying while it raises ModelWarmingUp.

        Raises:
            ModelWarmingUp: If the last attempt still reports warm-up
            Exception: Any other error from `operation`, unchanged and unretried
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_fixed(self.backoff_ms / 1000),
            retry=retry_if_exception_type(ModelWarmingUp),
            sleep=self.sleep,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.warning(
                        f"Retrying {operation_name} after warm-up wait "
                        f"(attempt {attempt_number}/{self.max_attempts})"
                    )
                return await operation()

        # Unreachable with reraise=True
        raise RuntimeError(f"Retry logic failed for {operation_name}")
