"""Integration management API endpoints."""

from fastapi import APIRouter, HTTPException, status, Depends, Query
from typing import Optional
from datetime import datetime, timezone
import logging

from integration_hub.api.dependencies import get_hub
from integration_hub.integrations.base import (
    ActionHandlerError,
    ConfigValidationError,
    IntegrationNotConnectedError,
    IntegrationNotFound,
)
from integration_hub.models import IntegrationCategory, IntegrationStatus
from integration_hub.schemas.integration import (
    ActionRequest,
    ActionResponse,
    ConnectRequest,
    ConnectionTestResponse,
    EventHistoryResponse,
    IntegrationListResponse,
    IntegrationResponse,
    WebhookEventListResponse,
)
from integration_hub.services.hub import IntegrationHub

logger = logging.getLogger(__name__)
router = APIRouter()


def _not_found(e: IntegrationNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/", response_model=IntegrationListResponse)
async def list_integrations(
    category: Optional[IntegrationCategory] = None,
    integration_status: Optional[IntegrationStatus] = Query(None, alias="status"),
    hub: IntegrationHub = Depends(get_hub),
):
    """List integrations."""
    integrations = hub.list_integrations(category=category, status=integration_status)
    return IntegrationListResponse(
        items=[IntegrationResponse.from_integration(i) for i in integrations],
        total=len(integrations),
    )


@router.get("/events", response_model=EventHistoryResponse)
async def get_event_history(
    integration_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    hub: IntegrationHub = Depends(get_hub),
):
    """Most recent integration events, newest last."""
    events = hub.get_event_history()
    if integration_id:
        events = [e for e in events if e.integration_id == integration_id]
    events = events[-limit:]
    return EventHistoryResponse(items=events, total=len(events))


@router.get("/webhook-events", response_model=WebhookEventListResponse)
async def get_webhook_events(
    source: Optional[str] = None,
    hub: IntegrationHub = Depends(get_hub),
):
    """Retained webhook deliveries."""
    events = hub.get_webhook_events(source)
    return WebhookEventListResponse(items=events, total=len(events))


@router.get("/{integration_id}", response_model=IntegrationResponse)
async def get_integration(
    integration_id: str,
    hub: IntegrationHub = Depends(get_hub),
):
    """Get integration details."""
    integration = hub.get_integration(integration_id)

    if not integration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Integration not found"
        )

    return IntegrationResponse.from_integration(integration)


@router.post("/{integration_id}/connect", response_model=IntegrationResponse)
async def connect_integration(
    integration_id: str,
    request: ConnectRequest,
    hub: IntegrationHub = Depends(get_hub),
):
    """Connect an integration with the given configuration."""
    try:
        await hub.connect(integration_id, request.config)
    except IntegrationNotFound as e:
        raise _not_found(e)
    except ConfigValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": e.field, "message": str(e)},
        )

    return IntegrationResponse.from_integration(hub.get_integration(integration_id))


@router.post("/{integration_id}/disconnect", response_model=IntegrationResponse)
async def disconnect_integration(
    integration_id: str,
    hub: IntegrationHub = Depends(get_hub),
):
    """Disconnect an integration and drop its configuration."""
    try:
        await hub.disconnect(integration_id)
    except IntegrationNotFound as e:
        raise _not_found(e)

    return IntegrationResponse.from_integration(hub.get_integration(integration_id))


@router.post("/{integration_id}/test", response_model=ConnectionTestResponse)
async def test_connection(
    integration_id: str,
    hub: IntegrationHub = Depends(get_hub),
):
    """Test integration connection."""
    if hub.get_integration(integration_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Integration not found"
        )

    is_connected = await hub.test_connection(integration_id)
    return ConnectionTestResponse(
        is_connected=is_connected,
        tested_at=datetime.now(timezone.utc),
    )


@router.post("/{integration_id}/actions/{action}", response_model=ActionResponse)
async def trigger_action(
    integration_id: str,
    action: str,
    request: ActionRequest,
    hub: IntegrationHub = Depends(get_hub),
):
    """Trigger a provider action on a connected integration."""
    try:
        result = await hub.trigger_action(integration_id, action, request.data)
    except IntegrationNotFound as e:
        raise _not_found(e)
    except IntegrationNotConnectedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ActionHandlerError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return ActionResponse(integration_id=integration_id, action=action, result=result)
