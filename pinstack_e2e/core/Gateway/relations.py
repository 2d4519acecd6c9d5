# relations.py
# Description: Gateway client for the follow graph
#
# Imports
from typing import Optional
#
# Local imports
from pinstack_e2e.core.Gateway.schemas import (
    FolloweesResponse,
    FollowersResponse,
    FollowRequest,
    MessageResponse,
)
from pinstack_e2e.core.http_client import GatewayClient

#######################################################################################################################


class RelationClient:
    """Follow and unfollow act on behalf of the token holder."""

    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway
        self.log = gateway.log

    def follow(self, followee_id: int, token: Optional[str]) -> MessageResponse:
        data = self.gateway.post("/v1/relation/follow", FollowRequest(followee_id=followee_id).to_json(), token=token)
        self.log.debug(f"Followed user {followee_id}")
        return MessageResponse.model_validate(data or {})

    def unfollow(self, followee_id: int, token: Optional[str]) -> MessageResponse:
        data = self.gateway.post("/v1/relation/unfollow", FollowRequest(followee_id=followee_id).to_json(), token=token)
        self.log.debug(f"Unfollowed user {followee_id}")
        return MessageResponse.model_validate(data or {})

    def get_followers(self, user_id: int, page: int = 1, limit: int = 10, token: Optional[str] = None) -> FollowersResponse:
        data = self.gateway.get(f"/v1/relation/{user_id}/followers", token=token, params={"page": page, "limit": limit})
        return FollowersResponse.model_validate(data or {})

    def get_followees(self, user_id: int, page: int = 1, limit: int = 10, token: Optional[str] = None) -> FolloweesResponse:
        data = self.gateway.get(f"/v1/relation/{user_id}/followees", token=token, params={"page": page, "limit": limit})
        return FolloweesResponse.model_validate(data or {})
