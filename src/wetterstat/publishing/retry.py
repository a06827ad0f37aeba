"""Failure classification and the bounded retry loop for publishing."""

import time
from collections.abc import Callable
from typing import TypeVar

import httpx
import structlog

log = structlog.get_logger()

T = TypeVar("T")

RETRY_INTERVAL_SECONDS = 30 * 60
MAX_ATTEMPTS = 48  # 24 hours at the default interval

# Non-2xx statuses that are worth another attempt
RETRIABLE_STATUS_CODES = frozenset({408, 425, 429})


class PublishError(Exception):
    """A post could not be delivered."""

    def __init__(self, message: str, retriable: bool = True) -> None:
        super().__init__(message)
        self.retriable = retriable


def check_response(response: httpx.Response, action: str) -> None:
    """Raise PublishError unless the response has a 2xx status."""
    if response.is_success:
        return
    status = response.status_code
    retriable = status >= 500 or status in RETRIABLE_STATUS_CODES
    raise PublishError(
        f"{action} HTTP {status} - Antwort: {response.text}", retriable=retriable
    )


def publish_with_retry(
    action: Callable[[], T],
    label: str,
    interval: float = RETRY_INTERVAL_SECONDS,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> T | None:
    """Call ``action`` until it succeeds, a fatal error occurs or attempts run out.

    Network errors and retriable PublishErrors are retried every ``interval``
    seconds. Returns the action's result, or ``None`` when giving up.
    """
    for attempt in range(1, max_attempts + 1):
        log.info("publish_attempt", target=label, attempt=attempt, max_attempts=max_attempts)
        try:
            return action()
        except PublishError as e:
            if not e.retriable:
                log.error("publish_failed_fatal", target=label, error=str(e))
                return None
            error = str(e)
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {e}"

        if attempt == max_attempts:
            log.error(
                "publish_gave_up", target=label, attempts=max_attempts, error=error
            )
            return None
        log.warning(
            "publish_retry_scheduled",
            target=label,
            attempt=attempt,
            max_attempts=max_attempts,
            retry_in_seconds=interval,
            error=error,
        )
        sleep(interval)
    return None
