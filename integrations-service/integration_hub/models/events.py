"""Event and result models."""

import uuid
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field
from enum import Enum

from .integration import utcnow


class IntegrationEventType(str, Enum):
    """Closed set of events published on the event bus."""
    CONNECTION_ESTABLISHED = "connection_established"
    CONNECTION_LOST = "connection_lost"
    DATA_SYNC = "data_sync"
    WEBHOOK_RECEIVED = "webhook_received"
    ERROR = "error"


class IntegrationEvent(BaseModel):
    """A notification published on the event bus."""
    type: IntegrationEventType
    integration_id: str
    data: Optional[Any] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)

    class Config:
        frozen = True


def generate_webhook_event_id() -> str:
    return f"webhook-{uuid.uuid4().hex}"


class WebhookEvent(BaseModel):
    """One inbound webhook delivery. Only ``processed`` changes after creation."""
    id: str = Field(default_factory=generate_webhook_event_id)
    source: str
    event: str
    timestamp: datetime = Field(default_factory=utcnow)
    data: Any = None
    processed: bool = False


class AuthenticationResult(BaseModel):
    """Outcome of webhook authentication."""
    valid: bool
    reason: Optional[str] = None
    timestamp: Optional[datetime] = None


class WebhookResult(BaseModel):
    """Structured outcome returned by the ingestion pipeline."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    event_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)
    test_mode: bool = False
