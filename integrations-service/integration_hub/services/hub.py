"""Integration hub: the service instance tying the components together."""

from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
import logging
import httpx

from integration_hub.core.config import (
    DEFAULT_INTEGRATIONS,
    WEBHOOK_POLICIES,
    Settings,
    get_settings,
)
from integration_hub.integrations.base import BaseProviderHandler
from integration_hub.integrations.registry import ProviderRegistry
from integration_hub.models import (
    Integration,
    IntegrationCategory,
    IntegrationEvent,
    IntegrationStatus,
    WebhookEvent,
    WebhookPolicy,
    WebhookResult,
)
from integration_hub.models.integration import utcnow
from integration_hub.services.authenticator import WebhookAuthenticator
from integration_hub.services.dispatcher import ActionDispatcher
from integration_hub.services.event_bus import EventBus, EventHandler, NullEventBus
from integration_hub.services.ingestion import WebhookIngestionPipeline
from integration_hub.services.lifecycle import ConnectionLifecycleManager
from integration_hub.services.locks import IntegrationLocks
from integration_hub.services.registry import IntegrationRegistry


logger = logging.getLogger(__name__)


class IntegrationHub:
    """Management API over the registry, lifecycle, dispatch and ingestion components.

    Built once at startup and handed to whatever needs it; nothing here is
    module-global.
    """

    def __init__(
        self,
        settings: Settings,
        event_bus: Optional[EventBus] = None,
        handlers: Optional[Dict[str, BaseProviderHandler]] = None,
        policies: Optional[Mapping[str, Union[WebhookPolicy, Dict]]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings
        self.http_client = http_client
        self.clock = clock

        if event_bus is None:
            event_bus = (
                EventBus(history_limit=settings.event_history_limit)
                if settings.event_listeners_enabled
                else NullEventBus()
            )
        self.event_bus = event_bus
        self.registry = IntegrationRegistry()
        self.handlers: Dict[str, BaseProviderHandler] = handlers if handlers is not None else {}

        locks = IntegrationLocks()
        self.lifecycle = ConnectionLifecycleManager(
            self.registry,
            self.event_bus,
            self.handlers,
            locks=locks,
            probe_timeout=settings.probe_timeout_seconds,
            clock=clock,
        )
        self.dispatcher = ActionDispatcher(
            self.registry,
            self.event_bus,
            self.handlers,
            locks=locks,
            action_timeout=settings.action_timeout_seconds,
            clock=clock,
        )
        self.authenticator = WebhookAuthenticator(
            self.registry,
            WEBHOOK_POLICIES if policies is None else policies,
            strict=settings.webhook_strict_signatures,
            clock=clock,
        )
        self.ingestion = WebhookIngestionPipeline(
            self.registry,
            self.authenticator,
            self.event_bus,
            self.handlers,
            log_limit=settings.webhook_event_log_limit,
            processing_timeout=settings.action_timeout_seconds,
            clock=clock,
        )

    # Catalog

    def register_integration(
        self,
        integration: Union[Integration, Dict[str, Any]],
        handler: Optional[BaseProviderHandler] = None,
    ) -> Integration:
        """Add an integration to the catalog in ``disconnected`` state.

        No event is published; ``connection_established`` is reserved for
        successful connects.
        """
        if not isinstance(integration, Integration):
            integration = Integration.model_validate(integration)
        self.registry.register(integration)
        if handler is not None:
            self.dispatcher.register_handler(integration.id, handler)
        return integration

    def list_integrations(
        self,
        category: Optional[Union[IntegrationCategory, str]] = None,
        status: Optional[Union[IntegrationStatus, str]] = None,
    ) -> List[Integration]:
        return self.registry.list(category=category, status=status)

    def get_integration(self, integration_id: str) -> Optional[Integration]:
        return self.registry.get(integration_id)

    def get_connected_integrations(self) -> List[Integration]:
        return self.registry.list(status=IntegrationStatus.CONNECTED)

    def get_integrations_by_category(self, category: Union[IntegrationCategory, str]) -> List[Integration]:
        return self.registry.list(category=category)

    def get_integrations_by_status(self, status: Union[IntegrationStatus, str]) -> List[Integration]:
        return self.registry.list(status=status)

    # Lifecycle

    async def connect(self, integration_id: str, config: Dict[str, Any]) -> bool:
        return await self.lifecycle.connect(integration_id, config)

    async def disconnect(self, integration_id: str) -> None:
        await self.lifecycle.disconnect(integration_id)

    async def test_connection(self, integration_id: str) -> bool:
        return await self.lifecycle.test_connection(integration_id)

    # Actions

    async def trigger_action(
        self,
        integration_id: str,
        action: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return await self.dispatcher.trigger_action(integration_id, action, data)

    # Webhooks

    async def handle_incoming_webhook(
        self,
        integration_id: str,
        event: str,
        data: Any,
        headers: Mapping[str, str],
        raw_body: Union[str, bytes],
    ) -> WebhookResult:
        return await self.ingestion.ingest(integration_id, event, data, headers, raw_body)

    async def test_webhook(self, integration_id: str, test_data: Any) -> WebhookResult:
        return await self.ingestion.test_webhook(integration_id, test_data)

    def get_webhook_events(self, source: Optional[str] = None) -> List[WebhookEvent]:
        return self.ingestion.get_webhook_events(source)

    def generate_webhook_url(self, integration_id: str, base_url: Optional[str] = None) -> str:
        base_url = (base_url or self.settings.webhook_base_url).rstrip("/")
        return f"{base_url}/{integration_id}"

    def register_webhook_policy(self, integration_id: str, policy: Union[WebhookPolicy, Dict]) -> None:
        self.authenticator.register_policy(integration_id, policy)

    def get_webhook_policy(self, integration_id: str) -> Optional[WebhookPolicy]:
        return self.authenticator.policies.get(integration_id)

    # Events

    def subscribe(self, handler: EventHandler) -> None:
        self.event_bus.subscribe(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self.event_bus.unsubscribe(handler)

    def get_event_history(self) -> List[IntegrationEvent]:
        return self.event_bus.history()

    async def aclose(self) -> None:
        """Release the shared HTTP client."""
        if self.http_client is not None:
            await self.http_client.aclose()


def create_hub(
    settings: Optional[Settings] = None,
    catalog: Optional[Iterable[Dict[str, Any]]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    event_bus: Optional[EventBus] = None,
    clock: Callable[[], datetime] = utcnow,
) -> IntegrationHub:
    """Build a hub with the default catalog and one handler per provider."""
    settings = settings or get_settings()
    catalog = list(DEFAULT_INTEGRATIONS if catalog is None else catalog)

    handlers = ProviderRegistry.build_handlers(
        (entry["id"] for entry in catalog),
        http_client=http_client,
    )
    hub = IntegrationHub(
        settings,
        event_bus=event_bus,
        handlers=handlers,
        http_client=http_client,
        clock=clock,
    )
    for entry in catalog:
        hub.register_integration(entry)

    logger.info(f"Integration hub ready with {len(hub.registry)} integrations")
    return hub
