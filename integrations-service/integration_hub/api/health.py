"""Health check endpoints."""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from integration_hub.api.dependencies import get_hub
from integration_hub.integrations.registry import ProviderRegistry
from integration_hub.services.hub import IntegrationHub

router = APIRouter()


@router.get("/health")
async def health_check(hub: IntegrationHub = Depends(get_hub)):
    """Basic health check."""
    return {
        "status": "healthy",
        "service": hub.settings.service_name,
        "environment": hub.settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check(hub: IntegrationHub = Depends(get_hub)):
    """Detailed health check with integration state."""
    counts = hub.registry.count_by_status()
    return {
        "status": "degraded" if counts["error"] else "healthy",
        "service": hub.settings.service_name,
        "environment": hub.settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "integrations": {"total": len(hub.registry), "by_status": counts},
            "webhook_events": {"retained": len(hub.get_webhook_events())},
            "event_bus": {"subscribers": hub.event_bus.subscriber_count},
            "providers": ProviderRegistry.list_providers(),
        },
    }
