# users.py
# Description: Gateway client for user profiles
#
# Imports
from typing import Dict, Optional, Union
from urllib.parse import quote
#
# Local imports
from pinstack_e2e.core.Gateway.schemas import (
    CreateUserRequest,
    SearchUsersResponse,
    UpdateAvatarRequest,
    UpdateUserRequest,
    User,
)
from pinstack_e2e.core.http_client import GatewayClient

#######################################################################################################################


class UserClient:
    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway
        self.log = gateway.log

    def create_user(self, req: CreateUserRequest, token: Optional[str] = None) -> User:
        data = self.gateway.post("/v1/users", req.to_json(), token=token)
        user = User.model_validate(data)
        self.log.debug(f"Created user {user.id} ({user.username})")
        return user

    def get_user(self, user_id: int, token: Optional[str] = None) -> User:
        return User.model_validate(self.gateway.get(f"/v1/users/{user_id}", token=token))

    def get_user_by_username(self, username: str, token: Optional[str] = None) -> User:
        path = f"/v1/users/username/{quote(username, safe='')}"
        return User.model_validate(self.gateway.get(path, token=token))

    def get_user_by_email(self, email: str, token: Optional[str] = None) -> User:
        path = f"/v1/users/email/{quote(email, safe='')}"
        return User.model_validate(self.gateway.get(path, token=token))

    def update_user(self, req: UpdateUserRequest, token: Optional[str]) -> User:
        data = self.gateway.put(f"/v1/users/{req.id}", req.to_json(), token=token)
        return User.model_validate(data)

    def update_avatar(self, user_id: int, req: UpdateAvatarRequest, token: Optional[str]) -> None:
        self.gateway.put(f"/v1/users/{user_id}/avatar", req.to_json(), token=token)

    def delete_user(self, user_id: int, token: Optional[str]) -> None:
        self.gateway.delete(f"/v1/users/{user_id}", token=token)
        self.log.debug(f"Deleted user {user_id}")

    def search_users(
        self,
        query: str,
        page: int = 0,
        limit: int = 0,
        token: Optional[str] = None,
    ) -> SearchUsersResponse:
        params: Dict[str, Union[str, int]] = {"query": query}
        if page > 0:
            params["page"] = page
        if limit > 0:
            params["limit"] = limit
        data = self.gateway.get("/v1/users/search", token=token, params=params)
        return SearchUsersResponse.model_validate(data or {})
