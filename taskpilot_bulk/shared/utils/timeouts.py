"""
Per-call timeouts for blocking work.

Each external call of a job (download, parse, query, upload, URL signing)
runs in a short-lived helper thread so the caller can stop waiting after a
deadline. Python cannot kill a thread, so a timed-out call keeps running in
the background until it returns; callers that can stop early pass a
cancel_event and check it.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional, TypeVar

from taskpilot_bulk.domain.shared.exceptions import StepTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_timeout(
    func: Callable[[], T],
    timeout: Optional[float],
    step: str,
    cancel_event: Optional[threading.Event] = None,
) -> T:
    """
    Run func() and return its result, or raise if it takes too long.

    Exceptions raised by func propagate unchanged.

    Args:
        func: Zero-argument callable (use a lambda/partial for arguments)
        timeout: Seconds to wait; None or <= 0 runs func inline without a bound
        step: Step name used in logs and in the timeout error
        cancel_event: Set when the deadline passes so func can stop cooperatively

    Raises:
        StepTimeoutError: If func did not finish within timeout

    Examples:
        >>> call_with_timeout(lambda: storage.download(name), 30, "download")
    """
    if timeout is None or timeout <= 0:
        return func()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"step-{step}")
    try:
        future = executor.submit(func)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            if cancel_event is not None:
                cancel_event.set()
            future.cancel()
            logger.warning(f"Step '{step}' exceeded {timeout}s, abandoning it")
            raise StepTimeoutError(step=step, timeout_seconds=timeout) from None
    finally:
        executor.shutdown(wait=False)
