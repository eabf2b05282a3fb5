"""Services module for the integration hub."""

from .event_bus import EventBus, NullEventBus
from .registry import IntegrationRegistry
from .lifecycle import ConnectionLifecycleManager, validate_config
from .authenticator import WebhookAuthenticator
from .dispatcher import ActionDispatcher
from .ingestion import WebhookIngestionPipeline
from .hub import IntegrationHub, create_hub

__all__ = [
    "EventBus",
    "NullEventBus",
    "IntegrationRegistry",
    "ConnectionLifecycleManager",
    "validate_config",
    "WebhookAuthenticator",
    "ActionDispatcher",
    "WebhookIngestionPipeline",
    "IntegrationHub",
    "create_hub",
]
