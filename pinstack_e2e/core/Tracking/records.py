# records.py
# Description: Cleanup records for remote entities created during a scenario
#
# Imports
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

#######################################################################################################################


class ResourceKind(str, Enum):
    NOTIFICATION = "notification"
    RELATION = "relation"
    POST = "post"
    USER = "user"


# Dependents first: notifications and relations reference two users, posts one.
CLEANUP_ORDER: Tuple[ResourceKind, ...] = (
    ResourceKind.NOTIFICATION,
    ResourceKind.RELATION,
    ResourceKind.POST,
    ResourceKind.USER,
)


@dataclass(frozen=True)
class UserCleanupInfo:
    id: int
    username: str
    access_token: str

    def describe(self) -> str:
        return f"user {self.id} ({self.username})"


@dataclass(frozen=True)
class PostCleanupInfo:
    id: int
    author_id: int
    access_token: str

    def describe(self) -> str:
        return f"post {self.id} of user {self.author_id}"


@dataclass(frozen=True)
class NotificationCleanupInfo:
    id: int
    user_id: int
    recipient_token: str

    def describe(self) -> str:
        return f"notification {self.id} of user {self.user_id}"


@dataclass(frozen=True)
class RelationCleanupInfo:
    follower_id: int
    followee_id: int
    follower_token: str

    def describe(self) -> str:
        return f"relation {self.follower_id} -> {self.followee_id}"
