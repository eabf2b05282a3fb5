"""Slack provider handler."""

from typing import Dict, Any
import logging

from integration_hub.integrations.base import BaseProviderHandler, ActionHandlerError
from integration_hub.integrations.registry import ProviderRegistry
from integration_hub.models import Integration, WebhookEvent


logger = logging.getLogger(__name__)


@ProviderRegistry.register("slack")
class SlackHandler(BaseProviderHandler):
    """Posts messages through a Slack incoming webhook."""

    actions = {
        "send-notification": "send_notification",
        "channel-post": "channel_post",
        "direct-message": "direct_message",
    }

    def _message(self, data: Dict[str, Any]) -> Dict[str, Any]:
        text = data.get("text") or data.get("message")
        if not text:
            raise ActionHandlerError("Slack messages require text")

        message: Dict[str, Any] = {"text": text}
        if data.get("blocks"):
            message["blocks"] = data["blocks"]
        return message

    async def _post(self, message: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        webhook_url = integration.config.get("webhookUrl")
        if not webhook_url:
            raise ActionHandlerError("Slack webhook URL is not configured")

        response = await self.make_api_request("POST", webhook_url, json=message)
        return {"success": True, "status_code": response.status_code}

    async def send_notification(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        return await self._post(self._message(data), integration)

    async def channel_post(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        message = self._message(data)
        channel = data.get("channel") or integration.config.get("channel")
        if channel:
            message["channel"] = channel
        return await self._post(message, integration)

    async def direct_message(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        user = data.get("user")
        if not user:
            raise ActionHandlerError("Direct messages require a user")

        message = self._message(data)
        message["channel"] = f"@{user}"
        return await self._post(message, integration)

    async def test_connection(self, integration: Integration) -> bool:
        """Probe the incoming webhook URL; anything short of a server error is alive."""
        webhook_url = integration.config.get("webhookUrl")
        if not webhook_url or self.http_client is None:
            return False

        response = await self.http_client.head(webhook_url)
        return response.status_code < 500

    async def handle_webhook(self, event: WebhookEvent, integration: Integration) -> None:
        """Handle Slack Events API deliveries."""
        if event.event == "url_verification":
            logger.info(f"Slack URL verification received for {integration.id}")
            return

        payload = event.data if isinstance(event.data, dict) else {}
        inner = payload.get("event") if isinstance(payload.get("event"), dict) else {}
        logger.info(
            f"Processing Slack {event.event} event",
            extra={"team_id": payload.get("team_id"), "slack_event": inner.get("type")},
        )
