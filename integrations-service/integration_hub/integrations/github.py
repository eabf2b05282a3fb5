"""GitHub provider handler."""

from typing import Dict, Any
import logging

from integration_hub.integrations.base import BaseProviderHandler, ActionHandlerError
from integration_hub.integrations.registry import ProviderRegistry
from integration_hub.models import Integration, WebhookEvent


logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.github.com"


@ProviderRegistry.register("github")
class GitHubHandler(BaseProviderHandler):
    """Creates issues and comments through the GitHub REST API."""

    actions = {
        "create-issue": "create_issue",
        "comment": "create_comment",
    }

    def _headers(self, integration: Integration) -> Dict[str, str]:
        token = integration.config.get("accessToken")
        if not token:
            raise ActionHandlerError("GitHub access token is not configured")
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    def _repository(self, data: Dict[str, Any], integration: Integration) -> str:
        repository = data.get("repository") or integration.config.get("repository")
        if not repository or "/" not in repository:
            raise ActionHandlerError("GitHub repository must be given as owner/name")
        return repository

    async def create_issue(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        title = data.get("title")
        if not title:
            raise ActionHandlerError("GitHub issues require a title")

        repository = self._repository(data, integration)
        payload = {"title": title, "body": data.get("body", "")}
        if data.get("labels"):
            payload["labels"] = data["labels"]

        response = await self.make_api_request(
            "POST",
            f"{API_BASE_URL}/repos/{repository}/issues",
            headers=self._headers(integration),
            json=payload,
        )
        issue = response.json()
        return {"success": True, "number": issue.get("number"), "url": issue.get("html_url")}

    async def create_comment(self, data: Dict[str, Any], integration: Integration) -> Dict[str, Any]:
        number = data.get("number")
        if number is None or not data.get("body"):
            raise ActionHandlerError("GitHub comments require an issue number and body")

        repository = self._repository(data, integration)
        response = await self.make_api_request(
            "POST",
            f"{API_BASE_URL}/repos/{repository}/issues/{number}/comments",
            headers=self._headers(integration),
            json={"body": data["body"]},
        )
        comment = response.json()
        return {"success": True, "id": comment.get("id"), "url": comment.get("html_url")}

    async def test_connection(self, integration: Integration) -> bool:
        if not integration.config.get("accessToken") or self.http_client is None:
            return integration.is_connected

        response = await self.http_client.get(
            f"{API_BASE_URL}/user",
            headers=self._headers(integration),
        )
        return response.status_code == 200

    async def handle_webhook(self, event: WebhookEvent, integration: Integration) -> None:
        """Handle GitHub deliveries."""
        payload = event.data if isinstance(event.data, dict) else {}
        repository = payload.get("repository") or {}

        if "zen" in payload:
            logger.info(f"GitHub ping received for {integration.id}")
            return

        logger.info(
            f"Processing GitHub {event.event} event",
            extra={"repository": repository.get("full_name")},
        )
