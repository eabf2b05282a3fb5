"""Zapier provider handler."""

from typing import Dict, Any
import logging

from integration_hub.integrations.base import BaseProviderHandler, ActionHandlerError
from integration_hub.integrations.registry import ProviderRegistry
from integration_hub.models import Integration


logger = logging.getLogger(__name__)


@ProviderRegistry.register("zapier")
class ZapierHandler(BaseProviderHandler):
    """Fires Zapier catch hooks."""

    actions = {
        "trigger": "trigger",
        "automation": "trigger",
        "triggers": "trigger",
        "actions": "trigger",
    }

    async def trigger(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        webhook_url = integration.config.get("webhookUrl")
        if not webhook_url:
            raise ActionHandlerError("Zapier hook URL is not configured")

        response = await self.make_api_request("POST", webhook_url, json=data)

        try:
            body = response.json()
        except ValueError:
            body = None

        return {"success": True, "status_code": response.status_code, "response": body}
