# cleanup.py
# Description: Ordered, best-effort teardown of entities tracked by a TestContext
#
# Imports
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Sequence, Tuple
#
# 3rd-party imports
from loguru import logger
#
# Local imports
from pinstack_e2e.core.Tracking.records import (
    CLEANUP_ORDER,
    NotificationCleanupInfo,
    PostCleanupInfo,
    RelationCleanupInfo,
    ResourceKind,
    UserCleanupInfo,
)

#######################################################################################################################
#
# Backend

class CleanupBackend(Protocol):
    """Deletion calls the executor needs; each acts with the owning credential."""

    def remove_notification(self, notification_id: int, token: str) -> Any: ...

    def unfollow(self, followee_id: int, token: str) -> Any: ...

    def delete_post(self, post_id: int, token: str) -> Any: ...

    def delete_user(self, user_id: int, token: str) -> Any: ...


class GatewayCleanupBackend:
    """CleanupBackend over the gateway domain clients."""

    def __init__(self, notifications, relations, posts, users):
        self.notifications = notifications
        self.relations = relations
        self.posts = posts
        self.users = users

    def remove_notification(self, notification_id: int, token: str) -> Any:
        return self.notifications.remove_notification(notification_id, token)

    def unfollow(self, followee_id: int, token: str) -> Any:
        return self.relations.unfollow(followee_id, token)

    def delete_post(self, post_id: int, token: str) -> Any:
        return self.posts.delete_post(post_id, token)

    def delete_user(self, user_id: int, token: str) -> Any:
        return self.users.delete_user(user_id, token)


#######################################################################################################################
#
# Snapshot and report

@dataclass
class RegistrySnapshot:
    """Point-in-time copy of a tracker's records, in insertion order per kind."""

    notifications: List[NotificationCleanupInfo] = field(default_factory=list)
    relations: List[RelationCleanupInfo] = field(default_factory=list)
    posts: List[PostCleanupInfo] = field(default_factory=list)
    users: List[UserCleanupInfo] = field(default_factory=list)

    def records(self, kind: ResourceKind) -> Sequence[Any]:
        return {
            ResourceKind.NOTIFICATION: self.notifications,
            ResourceKind.RELATION: self.relations,
            ResourceKind.POST: self.posts,
            ResourceKind.USER: self.users,
        }[kind]

    def __len__(self) -> int:
        return len(self.notifications) + len(self.relations) + len(self.posts) + len(self.users)


@dataclass
class CleanupReport:
    attempted: Dict[ResourceKind, int] = field(default_factory=lambda: {k: 0 for k in CLEANUP_ORDER})
    succeeded: Dict[ResourceKind, int] = field(default_factory=lambda: {k: 0 for k in CLEANUP_ORDER})
    failures: List[Tuple[ResourceKind, str, str]] = field(default_factory=list)

    @property
    def total_attempted(self) -> int:
        return sum(self.attempted.values())

    @property
    def total_succeeded(self) -> int:
        return sum(self.succeeded.values())

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        return ", ".join(
            f"{kind.value}s {self.succeeded[kind]}/{self.attempted[kind]}" for kind in CLEANUP_ORDER
        )


#######################################################################################################################
#
# Executor

class CleanupExecutor:
    """Delete every record of a snapshot, dependents first, never raising."""

    def __init__(self, backend: CleanupBackend, log: Any = None):
        self.backend = backend
        self.log = log or logger

    def _deleter(self, kind: ResourceKind) -> Callable[[Any], Any]:
        if kind is ResourceKind.NOTIFICATION:
            return lambda r: self.backend.remove_notification(r.id, r.recipient_token)
        if kind is ResourceKind.RELATION:
            return lambda r: self.backend.unfollow(r.followee_id, r.follower_token)
        if kind is ResourceKind.POST:
            return lambda r: self.backend.delete_post(r.id, r.access_token)
        return lambda r: self.backend.delete_user(r.id, r.access_token)

    def run(self, snapshot: RegistrySnapshot) -> CleanupReport:
        report = CleanupReport()
        self.log.info(
            f"Starting cleanup: {len(snapshot.notifications)} notifications, "
            f"{len(snapshot.relations)} relations, {len(snapshot.posts)} posts, "
            f"{len(snapshot.users)} users"
        )

        for kind in CLEANUP_ORDER:
            delete = self._deleter(kind)
            for record in snapshot.records(kind):
                report.attempted[kind] += 1
                try:
                    delete(record)
                except Exception as e:
                    # Best-effort: counted and logged, never raised
                    self.log.warning(f"Failed to delete {record.describe()} during cleanup: {e!r}")
                    report.failures.append((kind, record.describe(), repr(e)))
                else:
                    report.succeeded[kind] += 1
                    self.log.debug(f"Deleted {record.describe()}")

        level = "INFO" if report.ok else "WARNING"
        self.log.log(level, f"Cleanup completed: {report.summary()}")
        return report

#
# End of cleanup.py
#######################################################################################################################
