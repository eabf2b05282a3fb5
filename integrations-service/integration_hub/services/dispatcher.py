"""Outbound action dispatch."""

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional
import logging

from integration_hub.integrations.base import (
    ActionHandlerError,
    BaseProviderHandler,
    IntegrationNotConnectedError,
)
from integration_hub.models import IntegrationEvent, IntegrationEventType
from integration_hub.models.integration import utcnow
from integration_hub.services.event_bus import EventBus
from integration_hub.services.locks import IntegrationLocks
from integration_hub.services.registry import IntegrationRegistry


logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Routes actions to provider handlers, keyed by integration id."""

    def __init__(
        self,
        registry: IntegrationRegistry,
        event_bus: EventBus,
        handlers: MutableMapping[str, BaseProviderHandler],
        locks: Optional[IntegrationLocks] = None,
        action_timeout: float = 30.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.event_bus = event_bus
        self.handlers = handlers
        self.locks = locks or IntegrationLocks()
        self.action_timeout = action_timeout
        self.clock = clock

    def register_handler(self, integration_id: str, handler: BaseProviderHandler) -> None:
        """Install or replace the handler for an integration."""
        self.handlers[integration_id] = handler
        logger.info(f"Registered action handler for {integration_id}")

    async def trigger_action(
        self,
        integration_id: str,
        action: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Run ``action`` on a connected integration and return the handler's result.

        Raises ``IntegrationNotConnectedError`` without publishing anything if
        the integration is not connected. Handler failures are published as
        ``error`` events and re-raised as ``ActionHandlerError``.
        """
        integration = self.registry.require(integration_id)
        data = dict(data or {})

        async with self.locks.get(integration_id):
            if not integration.is_connected:
                raise IntegrationNotConnectedError(integration_id)

            try:
                handler = self.handlers.get(integration_id)
                if handler is None:
                    raise ActionHandlerError(f"No action handler for {integration_id}")

                result = await asyncio.wait_for(
                    handler.trigger_action(action, data, integration),
                    timeout=self.action_timeout,
                )
            except asyncio.TimeoutError as e:
                message = f"Action {action} timed out after {self.action_timeout}s"
                logger.error(f"{message} on {integration_id}")
                self._publish_error(integration_id, message)
                raise ActionHandlerError(message) from e
            except Exception as e:
                logger.error(f"Action {action} failed on {integration_id}: {e}")
                self._publish_error(integration_id, str(e) or "Action failed")
                if isinstance(e, ActionHandlerError):
                    raise
                raise ActionHandlerError(str(e) or "Action failed") from e

        logger.info(f"Action {action} completed on {integration_id}")
        self.event_bus.publish(
            IntegrationEvent(
                type=IntegrationEventType.DATA_SYNC,
                integration_id=integration_id,
                data={"action": action, "result": result},
                timestamp=self.clock(),
            )
        )
        return result

    def _publish_error(self, integration_id: str, message: str) -> None:
        self.event_bus.publish(
            IntegrationEvent(
                type=IntegrationEventType.ERROR,
                integration_id=integration_id,
                error=message,
                timestamp=self.clock(),
            )
        )
