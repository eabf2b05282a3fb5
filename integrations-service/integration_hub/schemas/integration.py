"""Integration API schemas."""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field

from integration_hub.models import (
    Integration,
    IntegrationCategory,
    IntegrationEvent,
    IntegrationStatus,
    IntegrationType,
    WebhookEvent,
)
from integration_hub.utils.crypto import mask_config


class ConnectRequest(BaseModel):
    """Schema for connecting an integration."""
    config: Dict[str, Any] = Field(default_factory=dict)


class ActionRequest(BaseModel):
    """Schema for triggering an action."""
    data: Dict[str, Any] = Field(default_factory=dict)


class IntegrationResponse(BaseModel):
    """Integration response schema."""
    id: str
    name: str
    description: str
    type: IntegrationType
    status: IntegrationStatus
    category: IntegrationCategory
    capabilities: List[str]
    icon: Optional[str] = None
    config: Dict[str, Any]
    error_message: Optional[str] = None
    updated_at: datetime

    @classmethod
    def from_integration(cls, integration: Integration) -> "IntegrationResponse":
        return cls(
            **integration.model_dump(exclude={"config"}),
            config=mask_config(integration.config),
        )


class IntegrationListResponse(BaseModel):
    """List of integrations response."""
    items: List[IntegrationResponse]
    total: int


class ConnectionTestResponse(BaseModel):
    """Connection test response."""
    is_connected: bool
    tested_at: datetime


class ActionResponse(BaseModel):
    """Action result response."""
    integration_id: str
    action: str
    result: Any = None


class EventHistoryResponse(BaseModel):
    """Event history response."""
    items: List[IntegrationEvent]
    total: int


class WebhookEventListResponse(BaseModel):
    """Webhook event log response."""
    items: List[WebhookEvent]
    total: int


class WebhookUrlResponse(BaseModel):
    """Public webhook URL for an integration."""
    integration_id: str
    webhook_url: str
