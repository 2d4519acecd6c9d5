# notifications.py
# Description: Gateway client for notifications and the per-user feed
#
# Imports
from typing import Dict, Optional
#
# Local imports
from pinstack_e2e.core.Gateway.schemas import (
    Notification,
    NotificationFeed,
    SendNotificationRequest,
    SendNotificationResponse,
    StatusResponse,
    UnreadCountResponse,
)
from pinstack_e2e.core.http_client import GatewayClient

#######################################################################################################################


class NotificationClient:
    """Notification endpoints. A notification is only visible to its recipient."""

    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway
        self.log = gateway.log

    def get_notification(self, notification_id: int, token: Optional[str]) -> Notification:
        return Notification.model_validate(self.gateway.get(f"/v1/notification/{notification_id}", token=token))

    def send_notification(self, req: SendNotificationRequest, token: Optional[str]) -> SendNotificationResponse:
        data = self.gateway.post("/v1/notification/send", req.to_json(), token=token)
        resp = SendNotificationResponse.model_validate(data)
        self.log.debug(f"Sent {req.type} notification {resp.notification_id} to user {req.user_id}")
        return resp

    def read_notification(self, notification_id: int, token: Optional[str]) -> StatusResponse:
        data = self.gateway.put(f"/v1/notification/{notification_id}/read", token=token)
        return StatusResponse.model_validate(data or {})

    def remove_notification(self, notification_id: int, token: Optional[str]) -> StatusResponse:
        data = self.gateway.delete(f"/v1/notification/{notification_id}", token=token)
        return StatusResponse.model_validate(data or {})

    def read_all(self, user_id: int, token: Optional[str]) -> StatusResponse:
        data = self.gateway.put(f"/v1/notification/read-all/{user_id}", token=token)
        return StatusResponse.model_validate(data or {})

    def get_unread_count(self, user_id: int, token: Optional[str]) -> UnreadCountResponse:
        data = self.gateway.get(f"/v1/notification/unread-count/{user_id}", token=token)
        return UnreadCountResponse.model_validate(data or {})

    def get_feed(self, user_id: int, token: Optional[str], page: int = 1, limit: int = 10) -> NotificationFeed:
        params: Dict[str, int] = {}
        if page > 0:
            params["page"] = page
        if limit > 0:
            params["limit"] = limit
        data = self.gateway.get(f"/v1/notification/feed/{user_id}", token=token, params=params)
        return NotificationFeed.model_validate(data or {})
