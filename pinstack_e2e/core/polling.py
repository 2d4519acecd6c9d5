# polling.py
# Description: Bounded retry-with-backoff polling for eventually-consistent side effects
#
# Imports
import time
from datetime import timedelta
from typing import Any, Callable, List, Optional, TypeVar, Union
#
# 3rd-party imports
from loguru import logger
#
# Local imports
from pinstack_e2e.core.config import Settings
from pinstack_e2e.core.exceptions import GatewayError, PollTimeoutError
from pinstack_e2e.core.Gateway.notifications import NotificationClient
from pinstack_e2e.core.Gateway.schemas import Notification

T = TypeVar("T")

# One feed page large enough to hold every notification a scenario produces
FEED_PAGE_SIZE = 100

Seconds = Union[float, timedelta]


def _seconds(value: Seconds) -> float:
    return value.total_seconds() if isinstance(value, timedelta) else float(value)


def wait_until(
    check: Callable[[], T],
    predicate: Callable[[T], bool],
    *,
    timeout: Seconds,
    interval: Seconds,
    backoff: float = 2.0,
    max_interval: Optional[Seconds] = None,
    description: str = "",
    log: Any = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Poll ``check`` until ``predicate`` accepts its result.

    Args:
        check: Function that queries the current state
        predicate: Returns True once the expected state is observed
        timeout: Wallclock budget for the whole poll
        interval: Delay before the second attempt; grows by ``backoff``
        max_interval: Upper bound for the delay between attempts
        description: What is being waited for, used in logs and the failure
        sleep, clock: Injected for deterministic tests

    Returns:
        The first result accepted by ``predicate``

    Raises:
        PollTimeoutError: the budget ran out before the state was observed
        GatewayError: ``check`` failed with a non-transient error
    """
    log = log or logger
    budget = _seconds(timeout)
    delay = _seconds(interval)
    cap = _seconds(max_interval) if max_interval is not None else None
    start = clock()
    attempts = 0
    last_value: Any = None

    while True:
        attempts += 1
        try:
            value = check()
        except GatewayError as e:
            if not e.is_transient:
                raise
            log.debug(f"Transient error while waiting for {description or 'condition'}: {e}")
            last_value = e
        else:
            last_value = value
            if predicate(value):
                log.debug(f"{description or 'Condition'} met after {attempts} attempts")
                return value

        elapsed = clock() - start
        remaining = budget - elapsed
        if remaining <= 0:
            raise PollTimeoutError(description, attempts, elapsed, last_value)
        sleep(min(delay, remaining))
        delay = delay * backoff
        if cap is not None:
            delay = min(delay, cap)


def wait_for_notifications(
    notifications: NotificationClient,
    user_id: int,
    token: str,
    notification_type: str,
    settings: Settings,
    *,
    count: int = 1,
    log: Any = None,
    page_size: int = FEED_PAGE_SIZE,
) -> List[Notification]:
    """Wait until at least ``count`` notifications of ``notification_type`` are in the user's feed.

    Returns:
        Every notification of that type on the first feed page, in feed order
    """

    def _feed():
        return notifications.get_feed(user_id, token, page=1, limit=page_size)

    def _enough(feed) -> bool:
        return sum(1 for n in feed.notifications if n.type == notification_type) >= count

    feed = wait_until(
        _feed,
        _enough,
        timeout=settings.test.eventual_timeout,
        interval=settings.outbox.poll_interval,
        max_interval=timedelta(seconds=1),
        description=f"{count} {notification_type} notification(s) for user {user_id}",
        log=log,
    )
    return [n for n in feed.notifications if n.type == notification_type]


def wait_for_notification(
    notifications: NotificationClient,
    user_id: int,
    token: str,
    notification_type: str,
    settings: Settings,
    *,
    log: Any = None,
    page_size: int = FEED_PAGE_SIZE,
) -> Notification:
    """Wait until a notification of ``notification_type`` shows up in the user's feed."""
    found = wait_for_notifications(
        notifications, user_id, token, notification_type, settings, log=log, page_size=page_size,
    )
    return found[0]
