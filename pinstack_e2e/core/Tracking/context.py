# context.py
# Description: Per-scenario tracker of remote entities and their cleanup
#
"""
Test Context
------------

One ``TestContext`` per scenario. It owns a gateway client, the domain clients
built on it, and a lock-guarded registry of everything the scenario created.
Records are added only after the creating call succeeded and carry the token
that can undo them. ``cleanup()`` drains the registry through the
``CleanupExecutor`` (notifications, relations, posts, users) and never raises.

Sub-cases that share a context may run on worker threads: tracking is safe
from any thread, and requests take their token as an argument, so threads
never share a credential.

    with TestContext(settings, log) as tc:
        alice = tc.register_user()
        post = tc.create_post(alice)
        ...
    # tracked entities deleted here
"""

import threading
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from pinstack_e2e.core.config import Settings
from pinstack_e2e.core.exceptions import GatewayError
from pinstack_e2e.core.Fixtures.generators import DataGenerator, get_generator
from pinstack_e2e.core.Gateway.auth import AuthClient
from pinstack_e2e.core.Gateway.notifications import NotificationClient
from pinstack_e2e.core.Gateway.posts import PostClient
from pinstack_e2e.core.Gateway.relations import RelationClient
from pinstack_e2e.core.Gateway.schemas import (
    CreatePostRequest,
    CreatePostResponse,
    MessageResponse,
    Notification,
    RegisterRequest,
    SendNotificationResponse,
)
from pinstack_e2e.core.Gateway.users import UserClient
from pinstack_e2e.core.http_client import GatewayClient
from pinstack_e2e.core.polling import FEED_PAGE_SIZE, wait_for_notifications
from pinstack_e2e.core.Tracking.cleanup import (
    CleanupBackend,
    CleanupExecutor,
    CleanupReport,
    GatewayCleanupBackend,
    RegistrySnapshot,
)
from pinstack_e2e.core.Tracking.records import (
    NotificationCleanupInfo,
    PostCleanupInfo,
    RelationCleanupInfo,
    ResourceKind,
    UserCleanupInfo,
)

# Feed page size used to approximate "every notification of the user"
DISCOVERY_PAGE_SIZE = FEED_PAGE_SIZE


@dataclass(frozen=True)
class RegisteredUser:
    """A user registered by a scenario, with the credentials to act as them."""

    id: int
    username: str
    email: str
    password: str
    access_token: str
    refresh_token: str


class TestContext:
    """Resource tracker for one scenario and its sub-cases."""

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        settings: Settings,
        log: Any = None,
        *,
        gateway: Optional[GatewayClient] = None,
        backend: Optional[CleanupBackend] = None,
        generator: Optional[DataGenerator] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings
        self.log = log or logger
        self._owns_gateway = gateway is None
        self.gateway = gateway or GatewayClient.from_settings(settings, self.log, transport=transport)
        self.data = generator or get_generator()

        self.auth = AuthClient(self.gateway)
        self.users = UserClient(self.gateway)
        self.posts = PostClient(self.gateway)
        self.relations = RelationClient(self.gateway)
        self.notifications = NotificationClient(self.gateway)
        self.backend = backend or GatewayCleanupBackend(self.notifications, self.relations, self.posts, self.users)

        self._lock = threading.Lock()
        self._users: List[UserCleanupInfo] = []
        self._posts: List[PostCleanupInfo] = []
        self._notifications: List[NotificationCleanupInfo] = []
        self._relations: List[RelationCleanupInfo] = []

    # ----- Tracking -----

    def track_user(self, user_id: int, username: str, token: str) -> None:
        with self._lock:
            self._users.append(UserCleanupInfo(user_id, username, token))
        self.log.debug(f"Tracking user {user_id} ({username}) for cleanup")

    def track_post(self, post_id: int, author_id: int, token: str) -> None:
        with self._lock:
            self._posts.append(PostCleanupInfo(post_id, author_id, token))
        self.log.debug(f"Tracking post {post_id} for cleanup")

    def track_notification(self, notification_id: int, user_id: int, recipient_token: str) -> None:
        with self._lock:
            self._notifications.append(NotificationCleanupInfo(notification_id, user_id, recipient_token))
        self.log.debug(f"Tracking notification {notification_id} for cleanup")

    def track_relation(self, follower_id: int, followee_id: int, follower_token: str) -> None:
        with self._lock:
            self._relations.append(RelationCleanupInfo(follower_id, followee_id, follower_token))
        self.log.debug(f"Tracking relation {follower_id} -> {followee_id} for cleanup")

    def untrack_user(self, user_id: int) -> None:
        """Forget a user the scenario already deleted itself."""
        with self._lock:
            self._users = [u for u in self._users if u.id != user_id]

    def untrack_post(self, post_id: int) -> None:
        with self._lock:
            self._posts = [p for p in self._posts if p.id != post_id]

    def untrack_notification(self, notification_id: int) -> None:
        with self._lock:
            self._notifications = [n for n in self._notifications if n.id != notification_id]

    def untrack_relation(self, follower_id: int, followee_id: int) -> None:
        with self._lock:
            self._relations = [
                r for r in self._relations
                if (r.follower_id, r.followee_id) != (follower_id, followee_id)
            ]

    def discover_and_track_notifications(
        self,
        user_id: int,
        token: str,
        page_size: int = DISCOVERY_PAGE_SIZE,
    ) -> int:
        """Track notifications in the user's feed that are not tracked yet.

        Catches side-effect notifications (such as ``follow_created``) whose ids
        no creating call returned. Listing errors and unreadable feeds are logged
        and swallowed.

        Returns:
            Number of newly tracked notifications
        """
        try:
            feed = self.notifications.get_feed(user_id, token, page=1, limit=page_size)
        except (GatewayError, ValidationError) as e:
            self.log.warning(f"Failed to list notifications of user {user_id} for cleanup: {e}")
            return 0

        added = 0
        with self._lock:
            known = {n.id for n in self._notifications}
            for notification in feed.notifications:
                if notification.id in known:
                    continue
                self._notifications.append(NotificationCleanupInfo(notification.id, user_id, token))
                known.add(notification.id)
                added += 1
        self.log.debug(f"Discovered {added} new notifications of user {user_id}")
        return added

    def await_notifications(
        self,
        user: RegisteredUser,
        notification_type: str,
        count: int = 1,
    ) -> List[Notification]:
        """Wait for side-effect notifications to reach the user's feed, then track them.

        Raises:
            PollTimeoutError: fewer than ``count`` arrived within ``test.eventual_timeout``
        """
        found = wait_for_notifications(
            self.notifications,
            user.id,
            user.access_token,
            notification_type,
            self.settings,
            count=count,
            log=self.log,
            page_size=DISCOVERY_PAGE_SIZE,
        )
        self.discover_and_track_notifications(user.id, user.access_token)
        return found

    # ----- Inspection -----

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                notifications=list(self._notifications),
                relations=list(self._relations),
                posts=list(self._posts),
                users=list(self._users),
            )

    def tracked(self, kind: ResourceKind) -> List[Any]:
        return list(self.snapshot().records(kind))

    def __len__(self) -> int:
        with self._lock:
            return len(self._users) + len(self._posts) + len(self._notifications) + len(self._relations)

    # ----- Act and track -----

    def register_user(self, req: Optional[RegisterRequest] = None) -> RegisteredUser:
        """Register a user, resolve its id and track it."""
        req = req or self.data.register_request()
        tokens = self.auth.register(req)
        user = self.users.get_user_by_username(req.username, token=tokens.access_token)
        self.track_user(user.id, user.username, tokens.access_token)
        return RegisteredUser(
            id=user.id,
            username=user.username,
            email=req.email,
            password=req.password,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    def create_post(self, author: RegisteredUser, req: Optional[CreatePostRequest] = None) -> CreatePostResponse:
        post = self.posts.create_post(req or self.data.create_post_request(), author.access_token)
        self.track_post(post.id, author.id, author.access_token)
        return post

    def follow(self, follower: RegisteredUser, followee: RegisteredUser) -> MessageResponse:
        resp = self.relations.follow(followee.id, follower.access_token)
        self.track_relation(follower.id, followee.id, follower.access_token)
        return resp

    def send_notification(
        self,
        sender: RegisteredUser,
        recipient: RegisteredUser,
        notification_type: Optional[str] = None,
    ) -> SendNotificationResponse:
        req = self.data.send_notification_request(recipient.id, notification_type)
        resp = self.notifications.send_notification(req, sender.access_token)
        self.track_notification(resp.notification_id, recipient.id, recipient.access_token)
        return resp

    # ----- Teardown -----

    def cleanup(self) -> CleanupReport:
        """Delete everything tracked so far and empty the registry. Never raises."""
        with self._lock:
            snapshot = RegistrySnapshot(
                notifications=self._notifications,
                relations=self._relations,
                posts=self._posts,
                users=self._users,
            )
            self._notifications, self._relations, self._posts, self._users = [], [], [], []

        if not snapshot:
            return CleanupReport()
        if not self.settings.test.cleanup:
            self.log.info(f"Cleanup disabled; leaving {len(snapshot)} tracked entities in place")
            return CleanupReport()
        return CleanupExecutor(self.backend, self.log).run(snapshot)

    def close(self) -> None:
        if self._owns_gateway:
            self.gateway.close()

    def __enter__(self) -> "TestContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.cleanup()
        finally:
            self.close()
