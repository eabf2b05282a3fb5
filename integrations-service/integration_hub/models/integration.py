"""Integration models."""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntegrationType(str, Enum):
    """How an integration authenticates; decides which config fields are required."""
    WEBHOOK = "webhook"
    OAUTH = "oauth"
    API_KEY = "api-key"
    SAML = "saml"


class IntegrationStatus(str, Enum):
    """Integration connection status."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    PENDING = "pending"


class IntegrationCategory(str, Enum):
    """Catalog grouping."""
    PRODUCTIVITY = "productivity"
    COMMUNICATION = "communication"
    STORAGE = "storage"
    AUTOMATION = "automation"
    ANALYTICS = "analytics"


class WebhookPolicy(BaseModel):
    """Webhook verification policy for a provider.

    A missing ``signature_header`` means no signature is checked and a
    missing ``timestamp_header`` means no replay window is enforced.
    ``scheme`` names the signature strategy; when unset the integration
    id is used, falling back to the generic scheme.
    """
    signature_header: Optional[str] = None
    timestamp_header: Optional[str] = None
    max_age_seconds: int = 300
    scheme: Optional[str] = None


class Integration(BaseModel):
    """Integration model."""
    id: str
    name: str
    description: str = ""
    type: IntegrationType
    status: IntegrationStatus = IntegrationStatus.DISCONNECTED
    config: Dict[str, Any] = Field(default_factory=dict)
    capabilities: List[str] = Field(default_factory=list)
    icon: Optional[str] = None
    category: IntegrationCategory

    # Metadata
    error_message: Optional[str] = None
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        populate_by_name = True
        validate_assignment = True

    @property
    def is_connected(self) -> bool:
        return self.status == IntegrationStatus.CONNECTED

    @property
    def webhook_secret(self) -> Optional[str]:
        return self.config.get("webhookSecret") or None
