"""Base provider handler class and error types."""

from abc import ABC
from typing import Optional, Dict, Any, Awaitable, Callable
import logging
import httpx

from integration_hub.models import Integration, WebhookEvent


logger = logging.getLogger(__name__)


class IntegrationError(Exception):
    """Base integration error."""
    pass


class IntegrationNotFound(IntegrationError):
    """No integration registered under the given id."""

    def __init__(self, integration_id: str):
        super().__init__(f"Integration {integration_id} not found")
        self.integration_id = integration_id


class IntegrationNotConnectedError(IntegrationError):
    """Operation requires a connected integration."""

    def __init__(self, integration_id: str):
        super().__init__(f"Integration {integration_id} not connected")
        self.integration_id = integration_id


class ConfigValidationError(IntegrationError):
    """A required connection setting is missing or malformed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class WebhookVerificationError(IntegrationError):
    """Webhook authenticity could not be established."""
    reason = "verification failed"


class StaleTimestampError(WebhookVerificationError):
    """Webhook timestamp is missing, malformed or outside the replay window."""
    reason = "stale timestamp"


class SignatureMismatchError(WebhookVerificationError):
    """Webhook signature is missing or does not match."""
    reason = "invalid signature"


class ActionHandlerError(IntegrationError):
    """A provider action failed."""
    pass


class WebhookProcessingError(IntegrationError):
    """Provider post-processing of a webhook failed."""
    pass


ActionMethod = Callable[[Dict[str, Any], Integration], Awaitable[Any]]


class BaseProviderHandler(ABC):
    """Base class for provider handlers.

    Subclasses expose outbound actions by mapping action names to coroutine
    methods in ``actions``. The same instance handles the liveness probe and
    post-processing of inbound webhooks for its provider.
    """

    provider_id: str = ""
    actions: Dict[str, str] = {}

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client

    def resolve_action(self, action: str) -> ActionMethod:
        method_name = self.actions.get(action)
        if method_name is None:
            raise ActionHandlerError(
                f"Action {action} is not supported by {self.provider_id}"
            )
        return getattr(self, method_name)

    async def trigger_action(
        self,
        action: str,
        data: Dict[str, Any],
        integration: Integration,
    ) -> Any:
        """Run an outbound action against the provider."""
        method = self.resolve_action(action)
        return await method(data, integration)

    async def test_connection(self, integration: Integration) -> bool:
        """Test if the integration connection is valid."""
        return integration.is_connected

    async def handle_webhook(self, event: WebhookEvent, integration: Integration) -> None:
        """Handle an authenticated incoming webhook."""
        logger.debug(f"No webhook processing for {event.source}:{event.event}")

    async def make_api_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Make an API request, translating transport failures."""
        if self.http_client is None:
            raise ActionHandlerError(f"No HTTP client configured for {self.provider_id}")

        try:
            response = await self.http_client.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json,
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise ActionHandlerError(
                f"{self.provider_id} API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"API request to {self.provider_id} failed: {e}")
            raise ActionHandlerError(f"API request failed: {str(e)}") from e


class AcknowledgingHandler(BaseProviderHandler):
    """Handler for providers whose API calls are not modeled.

    Any action is accepted and acknowledged with an echo of the request.
    """

    async def trigger_action(
        self,
        action: str,
        data: Dict[str, Any],
        integration: Integration,
    ) -> Any:
        logger.info(f"Acknowledged {action} for {integration.id}")
        return {"success": True, "action": action, "data": data}
