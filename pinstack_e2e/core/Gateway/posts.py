# posts.py
# Description: Gateway client for posts
#
# Imports
from datetime import datetime, timezone
from typing import Dict, Optional, Union
#
# Local imports
from pinstack_e2e.core.Gateway.schemas import (
    CreatePostRequest,
    CreatePostResponse,
    ListPostsResponse,
    Post,
    UpdatePostRequest,
)
from pinstack_e2e.core.http_client import GatewayClient

#######################################################################################################################


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")


class PostClient:
    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway
        self.log = gateway.log

    def create_post(self, req: CreatePostRequest, token: Optional[str]) -> CreatePostResponse:
        data = self.gateway.post("/v1/posts", req.to_json(), token=token)
        post = CreatePostResponse.model_validate(data)
        self.log.debug(f"Created post {post.id} by author {post.author_id}")
        return post

    def get_post(self, post_id: int, token: Optional[str] = None) -> Post:
        return Post.model_validate(self.gateway.get(f"/v1/posts/{post_id}", token=token))

    def update_post(self, post_id: int, req: UpdatePostRequest, token: Optional[str]) -> Post:
        data = self.gateway.put(f"/v1/posts/{post_id}", req.to_json(), token=token)
        return Post.model_validate(data)

    def delete_post(self, post_id: int, token: Optional[str]) -> None:
        self.gateway.delete(f"/v1/posts/{post_id}", token=token)
        self.log.debug(f"Deleted post {post_id}")

    def list_posts(
        self,
        author_id: int = 0,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 0,
        token: Optional[str] = None,
    ) -> ListPostsResponse:
        """List posts; zero or ``None`` filters are left out of the query."""
        params: Dict[str, Union[str, int]] = {}
        if author_id > 0:
            params["author_id"] = author_id
        if created_after is not None:
            params["created_after"] = _rfc3339(created_after)
        if created_before is not None:
            params["created_before"] = _rfc3339(created_before)
        if offset > 0:
            params["offset"] = offset
        if limit > 0:
            params["limit"] = limit
        data = self.gateway.get("/v1/posts/list", token=token, params=params)
        return ListPostsResponse.model_validate(data or {})
