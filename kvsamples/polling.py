from __future__ import annotations

"""Eventual-consistency polling for Key Vault mutations.

Key Vault is eventually consistent: right after a delete, recover or purge
request returns, a read of the resource may still report "not found". The
helpers here run the mutating operation once and then poll a read until it
stops reporting not-found, with a bounded number of attempts.

Only the not-found condition is retried. Any other probe error (403, 500,
network failure, ...) is raised straight away as ``ProbeFailed``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .config import PollConfig, ProbeOutcome
from .errors import Cancelled, OperationFailed, ProbeFailed, RetryBudgetExceeded, TransientNotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[Any]]
PollProbe = Callable[[], Awaitable[T]]
Classifier = Callable[[BaseException], ProbeOutcome]
Sleeper = Callable[[float], Awaitable[Any]]

DEFAULT_MAX_ATTEMPTS = PollConfig.max_attempts
DEFAULT_RETRY_DELAY = PollConfig.retry_delay


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status


def default_classifier(exc: BaseException) -> ProbeOutcome:
    """Treat TransientNotFound and anything carrying a 404 status as not-found."""
    if isinstance(exc, TransientNotFound):
        return ProbeOutcome.NOT_FOUND
    if _status_code(exc) == 404:
        return ProbeOutcome.NOT_FOUND
    return ProbeOutcome.OTHER


async def _wait(delay: float, cancel_event: Optional[asyncio.Event], sleep: Sleeper) -> bool:
    """Sleep for ``delay`` seconds. Returns False if cancelled during the wait."""
    if cancel_event is None:
        await sleep(delay)
        return True

    sleeper = asyncio.ensure_future(sleep(delay))
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleeper, waiter):
            if not task.done():
                task.cancel()
        await asyncio.gather(sleeper, waiter, return_exceptions=True)
    return not cancel_event.is_set()


async def poll_while_not_found(
    probe: PollProbe[T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    *,
    classify: Classifier = default_classifier,
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Sleeper = asyncio.sleep,
) -> T:
    """Call ``probe`` until it succeeds, retrying only not-found failures.

    The remaining budget is checked before every attempt, so a budget of 0
    raises RetryBudgetExceeded without calling the probe. ``retry_delay`` is
    slept between attempts only.
    """
    remaining = max_attempts
    attempts = 0
    last_error: Optional[BaseException] = None

    while remaining > 0:
        if cancel_event is not None and cancel_event.is_set():
            raise Cancelled(attempts)

        attempts += 1
        try:
            return await probe()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if classify(exc) is not ProbeOutcome.NOT_FOUND:
                logger.warning(f"Probe failed on attempt {attempts} with non-retriable error: {exc!r}")
                raise ProbeFailed(exc, attempts) from exc
            last_error = exc

        remaining -= 1
        if remaining == 0:
            break

        logger.debug(f"Resource not found yet (attempt {attempts}/{max_attempts}), retrying in {retry_delay}s")
        if not await _wait(retry_delay, cancel_event, sleep):
            raise Cancelled(attempts)

    logger.warning(f"Resource did not converge after {attempts} probe attempt(s)")
    raise RetryBudgetExceeded(attempts, last_error) from last_error


async def perform_op_and_wait_for_completion(
    operation: Operation,
    probe: PollProbe[T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    *,
    classify: Classifier = default_classifier,
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Sleeper = asyncio.sleep,
) -> T:
    """Run ``operation`` exactly once, then poll ``probe`` until it converges."""
    try:
        await operation()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        raise OperationFailed(exc) from exc

    return await poll_while_not_found(
        probe,
        max_attempts,
        retry_delay,
        classify=classify,
        cancel_event=cancel_event,
        sleep=sleep,
    )


@dataclass
class Poller:
    """Binds a PollConfig, classifier and cancel event for reuse.

    Budgets live in the call, not on the instance, so one Poller can be
    shared by any number of concurrent tasks.
    """

    config: PollConfig = field(default_factory=PollConfig)
    classify: Classifier = default_classifier
    cancel_event: Optional[asyncio.Event] = None
    sleep: Sleeper = asyncio.sleep

    async def run(self, operation: Operation, probe: PollProbe[T]) -> T:
        return await perform_op_and_wait_for_completion(
            operation,
            probe,
            self.config.max_attempts,
            self.config.retry_delay,
            classify=self.classify,
            cancel_event=self.cancel_event,
            sleep=self.sleep,
        )

    async def poll(self, probe: PollProbe[T]) -> T:
        return await poll_while_not_found(
            probe,
            self.config.max_attempts,
            self.config.retry_delay,
            classify=self.classify,
            cancel_event=self.cancel_event,
            sleep=self.sleep,
        )

    def cancel(self) -> None:
        if self.cancel_event is not None:
            self.cancel_event.set()
