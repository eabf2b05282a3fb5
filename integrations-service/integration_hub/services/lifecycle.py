"""Connection lifecycle management."""

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import logging

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from integration_hub.integrations.base import BaseProviderHandler, ConfigValidationError
from integration_hub.models import (
    Integration,
    IntegrationEvent,
    IntegrationEventType,
    IntegrationStatus,
    IntegrationType,
)
from integration_hub.models.integration import utcnow
from integration_hub.services.event_bus import EventBus
from integration_hub.services.locks import IntegrationLocks
from integration_hub.services.registry import IntegrationRegistry


logger = logging.getLogger(__name__)

_http_url = TypeAdapter(AnyHttpUrl)


# Required config fields per integration type, with the message used when missing
REQUIRED_CONFIG: Dict[IntegrationType, Tuple[Tuple[str, str], ...]] = {
    IntegrationType.WEBHOOK: (("webhookUrl", "Webhook URL is required"),),
    IntegrationType.API_KEY: (("apiKey", "API Key is required"),),
    IntegrationType.OAUTH: (
        ("clientId", "OAuth client credentials are required"),
        ("clientSecret", "OAuth client credentials are required"),
    ),
    IntegrationType.SAML: (
        ("entityId", "SAML configuration is incomplete"),
        ("ssoUrl", "SAML configuration is incomplete"),
    ),
}


def validate_config(integration_type: IntegrationType, config: Mapping[str, Any]) -> None:
    """Raise ``ConfigValidationError`` if ``config`` lacks a field the type requires."""
    for field, message in REQUIRED_CONFIG[integration_type]:
        if not config.get(field):
            raise ConfigValidationError(field, message)

    if integration_type == IntegrationType.WEBHOOK:
        try:
            _http_url.validate_python(config["webhookUrl"])
        except ValidationError:
            raise ConfigValidationError("webhookUrl", "Webhook URL is not a valid URL")


class ConnectionLifecycleManager:
    """Moves integrations between lifecycle states and announces each move."""

    def __init__(
        self,
        registry: IntegrationRegistry,
        event_bus: EventBus,
        handlers: Mapping[str, BaseProviderHandler],
        locks: Optional[IntegrationLocks] = None,
        probe_timeout: float = 10.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.event_bus = event_bus
        self.handlers = handlers
        self.locks = locks or IntegrationLocks()
        self.probe_timeout = probe_timeout
        self.clock = clock

    def _publish(self, event_type: IntegrationEventType, integration_id: str, **kwargs) -> None:
        self.event_bus.publish(
            IntegrationEvent(
                type=event_type,
                integration_id=integration_id,
                timestamp=self.clock(),
                **kwargs,
            )
        )

    async def connect(self, integration_id: str, config: Dict[str, Any]) -> bool:
        """Validate ``config`` and mark the integration connected.

        ``config`` is merged into the stored configuration. On validation
        failure the integration moves to ``error`` and the error is re-raised.
        """
        integration = self.registry.require(integration_id)

        async with self.locks.get(integration_id):
            try:
                validate_config(integration.type, config)
            except ConfigValidationError as e:
                integration.status = IntegrationStatus.ERROR
                integration.error_message = str(e)
                integration.updated_at = self.clock()
                logger.warning(f"Connection to {integration_id} rejected: {e}")
                self._publish(IntegrationEventType.ERROR, integration_id, error=str(e))
                raise

            integration.config = {**integration.config, **config}
            integration.status = IntegrationStatus.CONNECTED
            integration.error_message = None
            integration.updated_at = self.clock()

            logger.info(f"Connected integration {integration_id}")
            self._publish(
                IntegrationEventType.CONNECTION_ESTABLISHED,
                integration_id,
                data={"config_keys": sorted(config.keys())},
            )
            return True

    async def disconnect(self, integration_id: str) -> None:
        """Mark the integration disconnected and drop its configuration."""
        integration = self.registry.require(integration_id)

        async with self.locks.get(integration_id):
            integration.status = IntegrationStatus.DISCONNECTED
            integration.config = {}
            integration.error_message = None
            integration.updated_at = self.clock()

            logger.info(f"Disconnected integration {integration_id}")
            self._publish(IntegrationEventType.CONNECTION_LOST, integration_id)

    async def test_connection(self, integration_id: str) -> bool:
        """Probe the provider. Never raises; failures are published and return False."""
        integration = self.registry.get(integration_id)
        if integration is None:
            self._publish(
                IntegrationEventType.ERROR,
                integration_id,
                error=f"Integration {integration_id} not found",
            )
            return False

        if not integration.is_connected:
            self._publish(
                IntegrationEventType.ERROR,
                integration_id,
                error=f"Integration {integration_id} not connected",
            )
            return False

        handler = self.handlers.get(integration_id)
        try:
            if handler is None:
                is_alive = True
            else:
                is_alive = await asyncio.wait_for(
                    handler.test_connection(integration),
                    timeout=self.probe_timeout,
                )
        except asyncio.TimeoutError:
            logger.error(f"Connection test timed out for integration {integration_id}")
            self._mark_error(integration, "Connection test timed out")
            return False
        except Exception as e:
            logger.error(f"Connection test failed for integration {integration_id}: {e}")
            self._mark_error(integration, f"Connection test failed: {e}")
            return False

        if not is_alive:
            self._publish(IntegrationEventType.ERROR, integration_id, error="Connection test failed")
            return False

        return True

    def _mark_error(self, integration: Integration, message: str) -> None:
        integration.status = IntegrationStatus.ERROR
        integration.error_message = message
        integration.updated_at = self.clock()
        self._publish(IntegrationEventType.ERROR, integration.id, error=message)
