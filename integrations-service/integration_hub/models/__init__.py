"""Models for the integration hub."""

from .integration import (
    Integration,
    IntegrationCategory,
    IntegrationStatus,
    IntegrationType,
    WebhookPolicy,
)
from .events import (
    AuthenticationResult,
    IntegrationEvent,
    IntegrationEventType,
    WebhookEvent,
    WebhookResult,
)

__all__ = [
    "Integration",
    "IntegrationCategory",
    "IntegrationStatus",
    "IntegrationType",
    "WebhookPolicy",
    "AuthenticationResult",
    "IntegrationEvent",
    "IntegrationEventType",
    "WebhookEvent",
    "WebhookResult",
]
