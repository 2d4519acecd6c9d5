# auth.py
# Description: Gateway client for registration, login and token management
#
# Imports
from typing import Optional
#
# Local imports
from pinstack_e2e.core.Gateway.schemas import (
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPair,
    UpdatePasswordRequest,
)
from pinstack_e2e.core.http_client import GatewayClient

#######################################################################################################################


class AuthClient:
    """Auth endpoints. Only logout and password updates need a bearer token."""

    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway
        self.log = gateway.log

    def register(self, req: RegisterRequest) -> TokenPair:
        self.log.debug(f"Registering user {req.username}")
        data = self.gateway.post("/v1/auth/register", req.to_json())
        return TokenPair.model_validate(data or {})

    def login(self, req: LoginRequest) -> TokenPair:
        self.log.debug(f"Logging in as {req.login}")
        data = self.gateway.post("/v1/auth/login", req.to_json())
        return TokenPair.model_validate(data or {})

    def refresh(self, req: RefreshTokenRequest) -> TokenPair:
        data = self.gateway.post("/v1/auth/refresh", req.to_json())
        return TokenPair.model_validate(data or {})

    def logout(self, req: LogoutRequest, token: Optional[str] = None) -> None:
        self.gateway.post("/v1/auth/logout", req.to_json(), token=token)

    def update_password(self, req: UpdatePasswordRequest, token: Optional[str]) -> MessageResponse:
        data = self.gateway.post("/v1/auth/update-password", req.to_json(), token=token)
        return MessageResponse.model_validate(data or {})
