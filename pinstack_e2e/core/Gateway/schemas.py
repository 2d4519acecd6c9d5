# schemas.py
# Description: Request and response models for the Pinstack gateway JSON API
#
# Imports
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, TypeVar
#
# 3rd-party imports
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

#######################################################################################################################
#
# Base

T = TypeVar("T")


def _null_as_empty(value: Any) -> Any:
    return [] if value is None else value


# The gateway encodes an empty slice as null
JsonList = Annotated[List[T], BeforeValidator(_null_as_empty)]


class GatewayModel(BaseModel):
    """Gateway payloads; unknown fields are tolerated so new server fields do not break tests."""

    model_config = ConfigDict(extra="ignore")

    def to_json(self) -> Dict[str, Any]:
        """Body for a request: JSON-compatible, optional fields left out when unset."""
        return self.model_dump(mode="json", exclude_none=True)


class MessageResponse(GatewayModel):
    message: str = ""


class StatusResponse(GatewayModel):
    success: bool = False
    message: str = ""


#######################################################################################################################
#
# Auth

class RegisterRequest(GatewayModel):
    username: str
    email: str
    password: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class LoginRequest(GatewayModel):
    # Username or email
    login: str
    password: str


class RefreshTokenRequest(GatewayModel):
    refresh_token: str


class LogoutRequest(GatewayModel):
    refresh_token: str


class UpdatePasswordRequest(GatewayModel):
    old_password: str
    new_password: str


class TokenPair(GatewayModel):
    access_token: str = ""
    refresh_token: str = ""


#######################################################################################################################
#
# Users

class User(GatewayModel):
    id: int
    username: str
    email: str = ""
    full_name: str = ""
    bio: str = ""
    avatar_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateUserRequest(RegisterRequest):
    pass


class UpdateUserRequest(GatewayModel):
    id: int
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None


class UpdateAvatarRequest(GatewayModel):
    avatar_url: str


class SearchUsersResponse(GatewayModel):
    users: JsonList[User] = Field(default_factory=list)
    total: int = 0


#######################################################################################################################
#
# Posts

class MediaItemInput(GatewayModel):
    type: str
    url: str
    position: Optional[int] = None


class PostMedia(GatewayModel):
    id: int
    type: str
    url: str
    position: int = 0


class Tag(GatewayModel):
    id: int
    name: str


class PostAuthor(GatewayModel):
    id: int
    username: str = ""
    full_name: str = ""
    avatar_url: str = ""


class Post(GatewayModel):
    id: int
    title: str
    content: str = ""
    author: Optional[PostAuthor] = None
    media: JsonList[PostMedia] = Field(default_factory=list)
    tags: JsonList[Tag] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreatePostRequest(GatewayModel):
    title: str
    content: Optional[str] = None
    media_items: Optional[List[MediaItemInput]] = None
    tags: Optional[List[str]] = None


class UpdatePostRequest(GatewayModel):
    title: Optional[str] = None
    content: Optional[str] = None
    media_items: Optional[List[MediaItemInput]] = None
    tags: Optional[List[str]] = None


class CreatePostResponse(GatewayModel):
    """Post creation answers with the author flattened into the post."""

    id: int
    title: str
    content: str = ""
    author_id: int
    author_username: str = ""
    author_full_name: str = ""
    author_email: str = ""
    author_bio: str = ""
    author_avatar_url: str = ""
    media: JsonList[PostMedia] = Field(default_factory=list)
    tags: JsonList[Tag] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListPostsResponse(GatewayModel):
    posts: JsonList[Post] = Field(default_factory=list)
    total: int = 0


#######################################################################################################################
#
# Relations

class FollowRequest(GatewayModel):
    followee_id: int


class RelationUser(GatewayModel):
    id: int
    username: str = ""
    full_name: str = ""
    avatar_url: str = ""


class FollowersResponse(GatewayModel):
    followers: JsonList[RelationUser] = Field(default_factory=list)
    total: int = 0
    page: int = 0
    limit: int = 0


class FolloweesResponse(GatewayModel):
    followees: JsonList[RelationUser] = Field(default_factory=list)
    total: int = 0
    page: int = 0
    limit: int = 0


#######################################################################################################################
#
# Notifications

class Notification(GatewayModel):
    id: int
    user_id: int
    type: str
    payload: Any = None
    is_read: bool = False
    created_at: Optional[datetime] = None


class SendNotificationRequest(GatewayModel):
    user_id: int
    type: str
    payload: Optional[Dict[str, Any]] = None


class SendNotificationResponse(GatewayModel):
    notification_id: int
    message: str = ""


class UnreadCountResponse(GatewayModel):
    count: int = 0


class NotificationFeed(GatewayModel):
    notifications: JsonList[Notification] = Field(default_factory=list)
    page: int = 0
    limit: int = 0
    total: int = 0
    total_pages: int = 0


#######################################################################################################################
#
# User journey

class UserJourney(BaseModel):
    """Pre-generated inputs for one end-to-end user walk-through."""

    registration: RegisterRequest
    posts: List[CreatePostRequest]
    notifications: List[SendNotificationRequest]
    other_users: List[RegisterRequest]

#
# End of schemas.py
#######################################################################################################################
