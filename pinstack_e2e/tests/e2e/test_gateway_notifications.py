"""
test_gateway_notifications.py
Description: Sending, reading and removing notifications, unread counts and the
paged per-user feed.
"""

import pytest

from pinstack_e2e.core.exceptions import ErrorKind, GatewayError
from pinstack_e2e.core.Fixtures.generators import NOTIFICATION_TYPES
from pinstack_e2e.core.Gateway.schemas import SendNotificationRequest

from .helpers import raises_kind, run_parallel

pytestmark = pytest.mark.e2e

MISSING_NOTIFICATION_ID = 999_999_999
MISSING_USER_ID = 999_999_999
INVALID_TOKEN = "invalid_token"
PAGED_NOTIFICATIONS = 15
PAGE_LIMIT = 10


@pytest.fixture
def pair(tc):
    """A sender and a recipient, both tracked."""
    return tc.register_user(), tc.register_user()


@pytest.mark.critical
def test_send_every_type_in_parallel(tc, pair, pool):
    """One sub-case per notification type, all sharing this test's context."""
    sender, recipient = pair

    def send(notification_type):
        def subcase():
            resp = tc.send_notification(sender, recipient, notification_type)
            assert resp.notification_id
            stored = tc.notifications.get_notification(resp.notification_id, recipient.access_token)
            assert (stored.user_id, stored.type) == (recipient.id, notification_type)
        return subcase

    run_parallel(pool, *(send(t) for t in NOTIFICATION_TYPES))

    assert tc.notifications.get_feed(recipient.id, recipient.access_token).total == len(NOTIFICATION_TYPES)


def test_send_errors(tc, pair):
    sender, recipient = pair
    req = tc.data.send_notification_request(recipient.id)

    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.send_notification(req, token=None)
    with raises_kind(ErrorKind.INVALID_TOKEN):
        tc.notifications.send_notification(req, token=INVALID_TOKEN)
    with raises_kind(ErrorKind.USER_NOT_FOUND):
        tc.notifications.send_notification(
            tc.data.send_notification_request(MISSING_USER_ID), token=sender.access_token
        )


@pytest.mark.parametrize(
    "req",
    [
        SendNotificationRequest(user_id=0, type="like"),
        SendNotificationRequest(user_id=-1, type="like"),
        SendNotificationRequest(user_id=1, type=""),
        SendNotificationRequest(user_id=1, type="not_a_type"),
    ],
    ids=["zero-user", "negative-user", "empty-type", "unknown-type"],
)
def test_send_validation(tc, req):
    sender = tc.register_user()

    with raises_kind(ErrorKind.VALIDATION_FAILED, ErrorKind.USER_NOT_FOUND):
        tc.notifications.send_notification(req, token=sender.access_token)


def test_self_notification_is_allowed_or_forbidden(tc):
    user = tc.register_user()
    before = len(tc)

    try:
        resp = tc.send_notification(user, user)
    except GatewayError as e:
        assert e.kind is ErrorKind.FORBIDDEN, repr(e)
        # Rejected sends leave nothing to clean up
        assert len(tc) == before
    else:
        assert resp.notification_id
        assert len(tc) == before + 1


@pytest.mark.critical
def test_get_notification_access(tc, pair):
    sender, recipient = pair
    outsider = tc.register_user()
    sent = tc.send_notification(sender, recipient)

    notification = tc.notifications.get_notification(sent.notification_id, recipient.access_token)
    assert (notification.id, notification.user_id) == (sent.notification_id, recipient.id)
    assert notification.type in NOTIFICATION_TYPES
    assert not notification.is_read

    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.get_notification(sent.notification_id, token=None)
    with raises_kind(ErrorKind.NOTIFICATION_ACCESS_DENIED):
        tc.notifications.get_notification(sent.notification_id, outsider.access_token)
    with raises_kind(ErrorKind.NOTIFICATION_NOT_FOUND):
        tc.notifications.get_notification(MISSING_NOTIFICATION_ID, recipient.access_token)


def test_read_notification(tc, pair):
    sender, recipient = pair
    sent = tc.send_notification(sender, recipient)

    assert tc.notifications.get_unread_count(recipient.id, recipient.access_token).count == 1
    tc.notifications.read_notification(sent.notification_id, recipient.access_token)

    assert tc.notifications.get_notification(sent.notification_id, recipient.access_token).is_read
    assert tc.notifications.get_unread_count(recipient.id, recipient.access_token).count == 0


def test_read_notification_errors(tc, pair):
    sender, recipient = pair
    sent = tc.send_notification(sender, recipient)

    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.read_notification(sent.notification_id, token=None)
    with raises_kind(ErrorKind.NOTIFICATION_ACCESS_DENIED):
        tc.notifications.read_notification(sent.notification_id, sender.access_token)
    with raises_kind(ErrorKind.NOTIFICATION_NOT_FOUND):
        tc.notifications.read_notification(MISSING_NOTIFICATION_ID, recipient.access_token)


@pytest.mark.critical
def test_read_all_then_unread_count_is_zero(tc, pair):
    sender, recipient = pair
    for _ in range(3):
        tc.send_notification(sender, recipient)
    assert tc.notifications.get_unread_count(recipient.id, recipient.access_token).count == 3

    tc.notifications.read_all(recipient.id, recipient.access_token)

    assert tc.notifications.get_unread_count(recipient.id, recipient.access_token).count == 0
    feed = tc.notifications.get_feed(recipient.id, recipient.access_token)
    assert all(n.is_read for n in feed.notifications)


def test_read_all_errors(tc, pair):
    _, recipient = pair

    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.read_all(recipient.id, token=None)
    with raises_kind(ErrorKind.INVALID_TOKEN):
        tc.notifications.read_all(recipient.id, token=INVALID_TOKEN)


def test_read_all_twice_succeeds(tc, pair):
    sender, recipient = pair
    tc.send_notification(sender, recipient)

    assert tc.notifications.read_all(recipient.id, recipient.access_token).success
    assert tc.notifications.read_all(recipient.id, recipient.access_token).success


def test_remove_notification(tc, pair):
    sender, recipient = pair
    sent = tc.send_notification(sender, recipient)

    with raises_kind(ErrorKind.NOTIFICATION_ACCESS_DENIED):
        tc.notifications.remove_notification(sent.notification_id, sender.access_token)
    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.remove_notification(sent.notification_id, token=None)
    with raises_kind(ErrorKind.INVALID_TOKEN):
        tc.notifications.remove_notification(sent.notification_id, token=INVALID_TOKEN)

    tc.notifications.remove_notification(sent.notification_id, recipient.access_token)
    tc.untrack_notification(sent.notification_id)

    with raises_kind(ErrorKind.NOTIFICATION_NOT_FOUND):
        tc.notifications.get_notification(sent.notification_id, recipient.access_token)
    with raises_kind(ErrorKind.NOTIFICATION_NOT_FOUND):
        tc.notifications.remove_notification(sent.notification_id, recipient.access_token)


def test_empty_feed(tc):
    user = tc.register_user()

    feed = tc.notifications.get_feed(user.id, user.access_token, page=1, limit=PAGE_LIMIT)

    assert feed.notifications == []
    assert (feed.total, feed.page, feed.limit, feed.total_pages) == (0, 1, PAGE_LIMIT, 0)


@pytest.mark.slow
def test_feed_paging(tc, pair, pool):
    sender, recipient = pair
    sent = run_parallel(pool, *[lambda: tc.send_notification(sender, recipient)] * PAGED_NOTIFICATIONS)
    sent_ids = {s.notification_id for s in sent}

    first = tc.notifications.get_feed(recipient.id, recipient.access_token, page=1, limit=PAGE_LIMIT)
    second = tc.notifications.get_feed(recipient.id, recipient.access_token, page=2, limit=PAGE_LIMIT)

    assert (len(first.notifications), first.total, first.total_pages) == (PAGE_LIMIT, PAGED_NOTIFICATIONS, 2)
    assert (len(second.notifications), second.page) == (PAGED_NOTIFICATIONS - PAGE_LIMIT, 2)
    assert {n.id for n in first.notifications + second.notifications} == sent_ids
    assert all(n.user_id == recipient.id for n in first.notifications + second.notifications)


def test_feed_errors(tc, pair):
    _, recipient = pair

    with raises_kind(ErrorKind.UNAUTHENTICATED):
        tc.notifications.get_feed(recipient.id, token=None)
    with raises_kind(ErrorKind.INVALID_TOKEN):
        tc.notifications.get_feed(recipient.id, token=INVALID_TOKEN)
