"""Provider handler implementations."""

from .base import (
    BaseProviderHandler,
    AcknowledgingHandler,
    IntegrationError,
    IntegrationNotFound,
    IntegrationNotConnectedError,
    ConfigValidationError,
    WebhookVerificationError,
    StaleTimestampError,
    SignatureMismatchError,
    ActionHandlerError,
    WebhookProcessingError,
)
from .registry import ProviderRegistry
from .slack import SlackHandler
from .zapier import ZapierHandler
from .github import GitHubHandler

__all__ = [
    "BaseProviderHandler",
    "AcknowledgingHandler",
    "IntegrationError",
    "IntegrationNotFound",
    "IntegrationNotConnectedError",
    "ConfigValidationError",
    "WebhookVerificationError",
    "StaleTimestampError",
    "SignatureMismatchError",
    "ActionHandlerError",
    "WebhookProcessingError",
    "ProviderRegistry",
    "SlackHandler",
    "ZapierHandler",
    "GitHubHandler",
]
