"""Tests for webhook authentication."""

import pytest

from integration_hub.models import IntegrationStatus, WebhookPolicy
from integration_hub.services.authenticator import WebhookAuthenticator
from integration_hub.utils.crypto import expected_signature

SECRET = "s3cr3t"
BODY = '{"event":"ping","value":1}'


def _connect(hub, integration_id, secret=SECRET):
    integration = hub.get_integration(integration_id)
    integration.status = IntegrationStatus.CONNECTED
    integration.config = {"webhookUrl": "https://x.test/hook"}
    if secret:
        integration.config = {**integration.config, "webhookSecret": secret}
    return integration


def _signed_headers(hub, clock, integration_id, body, secret=SECRET):
    """Headers a well-behaved provider would send for ``body``."""
    policy = hub.authenticator.policy_for(integration_id)
    headers = {}
    extra = {}
    if policy.timestamp_header:
        headers[policy.timestamp_header] = str(clock.epoch())
        extra["timestamp"] = headers[policy.timestamp_header]
    headers[policy.signature_header] = expected_signature(
        policy.scheme or integration_id, body, secret, extra
    )
    return headers


SIGNED_PROVIDERS = ["slack", "github", "zapier", "acme"]


class TestSignatureVerification:
    """Round-trip and tamper detection for every signed policy."""

    @pytest.mark.parametrize("integration_id", SIGNED_PROVIDERS)
    def test_correct_signature_is_accepted(self, hub, clock, integration_id):
        _connect(hub, integration_id)
        headers = _signed_headers(hub, clock, integration_id, BODY)

        result = hub.authenticator.authenticate(integration_id, headers, BODY)

        assert result.valid is True
        assert result.reason is None

    @pytest.mark.parametrize("integration_id", SIGNED_PROVIDERS)
    def test_single_byte_change_is_rejected(self, hub, clock, integration_id):
        _connect(hub, integration_id)
        headers = _signed_headers(hub, clock, integration_id, BODY)
        tampered = BODY.replace('"value":1', '"value":2')
        assert len(tampered) == len(BODY)

        result = hub.authenticator.authenticate(integration_id, headers, tampered)

        assert result.valid is False
        assert result.reason == "invalid signature"

    @pytest.mark.parametrize("integration_id", SIGNED_PROVIDERS)
    def test_wrong_secret_is_rejected(self, hub, clock, integration_id):
        _connect(hub, integration_id)
        headers = _signed_headers(hub, clock, integration_id, BODY, secret="other")

        result = hub.authenticator.authenticate(integration_id, headers, BODY)

        assert result.valid is False
        assert result.reason == "invalid signature"

    def test_missing_signature_header_is_rejected(self, hub):
        _connect(hub, "github")

        result = hub.authenticator.authenticate("github", {}, BODY)

        assert result.valid is False
        assert result.reason == "invalid signature"

    def test_header_names_are_case_insensitive(self, hub):
        _connect(hub, "github")
        signature = expected_signature("github", BODY, SECRET)

        result = hub.authenticator.authenticate("github", {"X-Hub-Signature-256": signature}, BODY)

        assert result.valid is True

    def test_bytes_body(self, hub):
        _connect(hub, "zapier")
        signature = expected_signature("zapier", BODY, SECRET)

        result = hub.authenticator.authenticate("zapier", {"x-zapier-signature": signature}, BODY.encode())

        assert result.valid is True


class TestConnectionRequirement:
    """Only connected integrations accept webhooks."""

    def test_unknown_integration(self, hub):
        result = hub.authenticator.authenticate("nope", {}, BODY)

        assert result.valid is False
        assert result.reason == "not connected"

    def test_disconnected_integration(self, hub, clock):
        headers = _signed_headers(hub, clock, "github", BODY)

        result = hub.authenticator.authenticate("github", headers, BODY)

        assert result.valid is False
        assert result.reason == "not connected"


class TestReplayWindow:
    """Timestamp freshness checks."""

    def _slack_headers(self, clock, timestamp):
        ts = str(timestamp)
        return {
            "x-slack-request-timestamp": ts,
            "x-slack-signature": expected_signature("slack", BODY, SECRET, {"timestamp": ts}),
        }

    def test_just_inside_window_passes(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch() - 299)

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is True
        assert int(result.timestamp.timestamp()) == clock.epoch() - 299

    def test_just_outside_window_fails(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch() - 301)

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is False
        assert result.reason == "stale timestamp"

    def test_future_timestamp_outside_window_fails(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch() + 301)

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is False
        assert result.reason == "stale timestamp"

    def test_missing_timestamp_fails(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch())
        del headers["x-slack-request-timestamp"]

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is False
        assert result.reason == "stale timestamp"

    def test_malformed_timestamp_fails(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch())
        headers["x-slack-request-timestamp"] = "yesterday"

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is False
        assert result.reason == "stale timestamp"

    def test_oversized_timestamp_fails(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch())
        headers["x-slack-request-timestamp"] = "9" * 400

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.valid is False
        assert result.reason == "stale timestamp"

    @pytest.mark.asyncio
    async def test_oversized_timestamp_through_pipeline(self, hub, clock):
        _connect(hub, "slack")
        headers = self._slack_headers(clock, clock.epoch())
        headers["x-slack-request-timestamp"] = "9" * 400

        result = await hub.handle_incoming_webhook("slack", "message", {}, headers, BODY)

        assert result.success is False
        assert result.error == "stale timestamp"

    def test_timestamp_checked_before_signature(self, hub, clock):
        _connect(hub, "slack")
        headers = {
            "x-slack-request-timestamp": str(clock.epoch() - 1000),
            "x-slack-signature": "v0=garbage",
        }

        result = hub.authenticator.authenticate("slack", headers, BODY)

        assert result.reason == "stale timestamp"

    def test_custom_window(self, hub, clock):
        hub.register_webhook_policy("acme", WebhookPolicy(
            signature_header="x-acme-signature",
            timestamp_header="x-acme-timestamp",
            max_age_seconds=60,
            scheme="generic",
        ))
        _connect(hub, "acme")
        ts = clock.epoch() - 61
        headers = {
            "x-acme-timestamp": str(ts),
            "x-acme-signature": expected_signature("generic", BODY, SECRET),
        }

        assert hub.authenticator.authenticate("acme", headers, BODY).reason == "stale timestamp"

        headers["x-acme-timestamp"] = str(clock.epoch() - 59)
        assert hub.authenticator.authenticate("acme", headers, BODY).valid is True


class TestMissingSecret:
    """Behaviour when a signature is expected but no secret is configured."""

    def test_lenient_mode_accepts(self, hub):
        _connect(hub, "github", secret=None)

        result = hub.authenticator.authenticate("github", {}, BODY)

        assert result.valid is True

    def test_strict_mode_rejects(self, hub, clock):
        _connect(hub, "github", secret=None)
        strict = WebhookAuthenticator(
            hub.registry,
            hub.authenticator.policies,
            strict=True,
            clock=clock,
        )

        result = strict.authenticate("github", {}, BODY)

        assert result.valid is False
        assert result.reason == "missing webhook secret"

    def test_unsigned_policy_accepts_without_secret_in_strict_mode(self, hub, clock):
        hub.register_webhook_policy("acme", {"max_age_seconds": 600})
        _connect(hub, "acme", secret=None)
        strict = WebhookAuthenticator(
            hub.registry,
            hub.authenticator.policies,
            strict=True,
            clock=clock,
        )

        assert strict.authenticate("acme", {}, BODY).valid is True


class TestPolicies:
    """Policy lookup."""

    def test_unknown_integration_uses_generic_policy(self, hub):
        policy = hub.authenticator.policy_for("trello")

        assert policy.signature_header == "x-webhook-signature"
        assert policy.timestamp_header is None
        assert policy.max_age_seconds == 600

    def test_registered_policy_overrides(self, hub):
        hub.register_webhook_policy("trello", {"signature_header": "x-trello-webhook"})

        assert hub.get_webhook_policy("trello").signature_header == "x-trello-webhook"

    def test_custom_strategy(self, hub):
        hub.authenticator.register_strategy("acme", lambda body, secret, extra: f"acme:{secret}")
        _connect(hub, "acme")

        result = hub.authenticator.authenticate("acme", {"x-webhook-signature": f"acme:{SECRET}"}, BODY)

        assert result.valid is True
