"""Webhook handling endpoints."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from datetime import datetime, timezone
from typing import Any
import logging
import json

from integration_hub.api.dependencies import get_hub
from integration_hub.schemas.integration import WebhookUrlResponse
from integration_hub.services.hub import IntegrationHub

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_EVENT = "webhook_received"
PING_EVENT = "webhook_ping"
EVENT_FIELDS = ("event", "type", "action")


def resolve_event_name(data: Any) -> str:
    """First string among ``event``, ``type`` and ``action``; otherwise the default."""
    if isinstance(data, dict):
        for field in EVENT_FIELDS:
            value = data.get(field)
            if isinstance(value, str) and value:
                return value
    return DEFAULT_EVENT


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.post("/{integration_id}")
async def handle_webhook(
    integration_id: str,
    request: Request,
    hub: IntegrationHub = Depends(get_hub),
):
    """Handle incoming webhooks from integrations."""
    try:
        raw_body = await request.body()

        # Non-JSON bodies are forwarded as the raw string
        try:
            data = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = raw_body.decode("utf-8", errors="replace")

        result = await hub.handle_incoming_webhook(
            integration_id,
            resolve_event_name(data),
            data,
            dict(request.headers),
            raw_body,
        )
    except Exception as e:
        logger.error(f"Webhook error for {integration_id}: {e}", exc_info=True)
        return _error_response("Internal server error")

    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
        content=result.model_dump(mode="json", exclude_none=True),
    )


@router.get("/{integration_id}")
async def verify_webhook(
    integration_id: str,
    request: Request,
    hub: IntegrationHub = Depends(get_hub),
):
    """Answer provider verification challenges, or treat the query as a ping payload."""
    challenge = request.query_params.get("challenge")
    if challenge:
        return PlainTextResponse(challenge, status_code=status.HTTP_200_OK)

    try:
        data = dict(request.query_params)
        result = await hub.handle_incoming_webhook(
            integration_id,
            data.get("event") or PING_EVENT,
            data,
            {},
            json.dumps(data),
        )
    except Exception as e:
        logger.error(f"Webhook GET error for {integration_id}: {e}", exc_info=True)
        return _error_response("Internal server error")

    return JSONResponse(content=result.model_dump(mode="json", exclude_none=True))


@router.get("/{integration_id}/url", response_model=WebhookUrlResponse)
async def get_webhook_url(
    integration_id: str,
    hub: IntegrationHub = Depends(get_hub),
):
    """Public URL providers should deliver to."""
    return WebhookUrlResponse(
        integration_id=integration_id,
        webhook_url=hub.generate_webhook_url(integration_id),
    )


@router.post("/{integration_id}/test")
async def test_webhook(
    integration_id: str,
    request: Request,
    hub: IntegrationHub = Depends(get_hub),
):
    """Push a test payload through the ingestion pipeline."""
    raw_body = await request.body()
    try:
        test_data = json.loads(raw_body) if raw_body else {}
    except json.JSONDecodeError:
        test_data = raw_body.decode("utf-8", errors="replace")

    result = await hub.test_webhook(integration_id, test_data)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
        content=result.model_dump(mode="json", exclude_none=True),
    )
