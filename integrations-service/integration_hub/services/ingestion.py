"""Webhook ingestion pipeline."""

import asyncio
import json
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, List, Mapping, Optional, Union
import logging

from integration_hub.integrations.base import BaseProviderHandler, WebhookProcessingError
from integration_hub.models import (
    IntegrationEvent,
    IntegrationEventType,
    WebhookEvent,
    WebhookResult,
)
from integration_hub.models.integration import utcnow
from integration_hub.services.authenticator import WebhookAuthenticator
from integration_hub.services.event_bus import EventBus
from integration_hub.services.registry import IntegrationRegistry


logger = logging.getLogger(__name__)


class WebhookIngestionPipeline:
    """Authenticates, records and processes inbound webhooks.

    ``ingest`` is the boundary between HTTP handling and provider code: it
    always returns a ``WebhookResult`` and never raises.
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        authenticator: WebhookAuthenticator,
        event_bus: EventBus,
        processors: Mapping[str, BaseProviderHandler],
        log_limit: int = 50,
        processing_timeout: float = 30.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.authenticator = authenticator
        self.event_bus = event_bus
        self.processors = processors
        self.processing_timeout = processing_timeout
        self.clock = clock
        self._events: Deque[WebhookEvent] = deque(maxlen=log_limit)

    def get_webhook_events(self, source: Optional[str] = None) -> List[WebhookEvent]:
        events = list(self._events)
        if source is not None:
            events = [event for event in events if event.source == source]
        return events

    async def ingest(
        self,
        integration_id: str,
        event: str,
        data: Any,
        headers: Mapping[str, str],
        raw_body: Union[str, bytes],
    ) -> WebhookResult:
        try:
            return await self._ingest(integration_id, event, data, headers, raw_body)
        except Exception as e:
            logger.exception(f"Webhook ingestion failed for {integration_id}")
            self._publish_error(integration_id, str(e) or "Webhook processing failed")
            return WebhookResult(success=False, error="Webhook processing failed", timestamp=self.clock())

    async def _ingest(
        self,
        integration_id: str,
        event: str,
        data: Any,
        headers: Mapping[str, str],
        raw_body: Union[str, bytes],
    ) -> WebhookResult:
        validation = self.authenticator.authenticate(integration_id, headers, raw_body)
        if not validation.valid:
            logger.warning(f"Webhook validation failed for {integration_id}: {validation.reason}")
            self._publish_error(integration_id, f"Webhook validation failed: {validation.reason}")
            return WebhookResult(success=False, error=validation.reason, timestamp=self.clock())

        webhook_event = WebhookEvent(
            source=integration_id,
            event=event,
            data=data,
            timestamp=self.clock(),
        )
        self._events.append(webhook_event)

        try:
            await self._process(webhook_event)
        except WebhookProcessingError as e:
            logger.error(f"Error processing webhook from {integration_id}: {e}")
            self._publish_error(integration_id, str(e))
            return WebhookResult(
                success=False,
                error=str(e),
                event_id=webhook_event.id,
                timestamp=self.clock(),
            )

        webhook_event.processed = True
        self.event_bus.publish(
            IntegrationEvent(
                type=IntegrationEventType.WEBHOOK_RECEIVED,
                integration_id=integration_id,
                data={"event": event, "webhook_data": data},
                timestamp=self.clock(),
            )
        )

        logger.info(
            f"Successfully processed webhook from {integration_id}",
            extra={"webhook_event": event, "data_size": len(raw_body)},
        )
        return WebhookResult(
            success=True,
            message="Webhook processed successfully",
            event_id=webhook_event.id,
            timestamp=self.clock(),
        )

    async def _process(self, webhook_event: WebhookEvent) -> None:
        processor = self.processors.get(webhook_event.source)
        if processor is None:
            logger.debug(f"No handler for {webhook_event.source} webhook")
            return

        integration = self.registry.require(webhook_event.source)
        try:
            await asyncio.wait_for(
                processor.handle_webhook(webhook_event, integration),
                timeout=self.processing_timeout,
            )
        except asyncio.TimeoutError as e:
            raise WebhookProcessingError(
                f"Webhook processing timed out after {self.processing_timeout}s"
            ) from e
        except Exception as e:
            raise WebhookProcessingError(str(e) or "Webhook processing failed") from e

    async def test_webhook(self, integration_id: str, test_data: Any) -> WebhookResult:
        """Push ``test_data`` through the pipeline as a ``test`` event."""
        result = await self.ingest(
            integration_id,
            "test",
            test_data,
            {},
            json.dumps(test_data, default=str),
        )
        return result.model_copy(update={"test_mode": True})

    def _publish_error(self, integration_id: str, message: str) -> None:
        self.event_bus.publish(
            IntegrationEvent(
                type=IntegrationEventType.ERROR,
                integration_id=integration_id,
                error=message,
                timestamp=self.clock(),
            )
        )
