"""Pytest configuration and fixtures for integration hub tests."""

import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from integration_hub.core.config import Settings
from integration_hub.models import IntegrationEvent, IntegrationEventType
from integration_hub.services.hub import IntegrationHub, create_hub


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)

    def epoch(self) -> int:
        return int(self.current.timestamp())


class EventRecorder:
    """Subscriber that keeps every event it receives."""

    def __init__(self):
        self.events: List[IntegrationEvent] = []

    def __call__(self, event: IntegrationEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: IntegrationEventType) -> List[IntegrationEvent]:
        return [e for e in self.events if e.type == event_type]


def sign(body: str, secret: str) -> str:
    """Generic HMAC-SHA256 hex signature."""
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        webhook_strict_signatures=False,
        webhook_event_log_limit=50,
        event_history_limit=200,
        action_timeout_seconds=1.0,
        probe_timeout_seconds=1.0,
        log_format="text",
    )


@pytest.fixture
def clock():
    return ManualClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def hub(settings, clock) -> IntegrationHub:
    """Hub with the default catalog plus a generic ``acme`` webhook integration."""
    hub = create_hub(settings, clock=clock)
    hub.register_integration({
        "id": "acme",
        "name": "Acme",
        "description": "Generic webhook sender",
        "type": "webhook",
        "capabilities": ["notifications"],
        "category": "automation",
    })
    return hub


@pytest.fixture
def recorder(hub) -> EventRecorder:
    recorder = EventRecorder()
    hub.subscribe(recorder)
    return recorder
