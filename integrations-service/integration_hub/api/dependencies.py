"""API dependencies."""

from fastapi import Request

from integration_hub.services.hub import IntegrationHub


def get_hub(request: Request) -> IntegrationHub:
    """Get the hub instance created at startup."""
    return request.app.state.hub
