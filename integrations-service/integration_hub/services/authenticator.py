"""Webhook authenticity checks."""

from datetime import datetime, timezone
from typing import Callable, Dict, Mapping, Optional, Union
import logging

from integration_hub.integrations.base import (
    SignatureMismatchError,
    StaleTimestampError,
    WebhookVerificationError,
)
from integration_hub.models import AuthenticationResult, Integration, WebhookPolicy
from integration_hub.models.integration import utcnow
from integration_hub.services.registry import IntegrationRegistry
from integration_hub.utils.crypto import (
    SIGNATURE_STRATEGIES,
    SignatureStrategy,
    constant_time_equals,
    expected_signature,
)


logger = logging.getLogger(__name__)

GENERIC_POLICY = "generic"

REASON_NOT_CONNECTED = "not connected"
REASON_MISSING_SECRET = "missing webhook secret"


class WebhookAuthenticator:
    """Checks that an inbound webhook is fresh and correctly signed.

    Policies are looked up by integration id and fall back to the
    ``generic`` policy. When a policy declares a signature header but the
    integration has no ``webhookSecret``, lenient mode accepts the request
    and strict mode rejects it.
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        policies: Mapping[str, Union[WebhookPolicy, Dict]],
        strategies: Optional[Mapping[str, SignatureStrategy]] = None,
        strict: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.policies: Dict[str, WebhookPolicy] = {
            key: WebhookPolicy.model_validate(policy) for key, policy in policies.items()
        }
        self.policies.setdefault(GENERIC_POLICY, WebhookPolicy(max_age_seconds=600))
        self.strategies = dict(SIGNATURE_STRATEGIES if strategies is None else strategies)
        self.strict = strict
        self.clock = clock

    def register_policy(self, integration_id: str, policy: Union[WebhookPolicy, Dict]) -> None:
        self.policies[integration_id] = WebhookPolicy.model_validate(policy)

    def register_strategy(self, scheme: str, strategy: SignatureStrategy) -> None:
        self.strategies[scheme] = strategy

    def policy_for(self, integration_id: str) -> WebhookPolicy:
        return self.policies.get(integration_id) or self.policies[GENERIC_POLICY]

    def authenticate(
        self,
        integration_id: str,
        headers: Mapping[str, str],
        raw_body: Union[str, bytes],
    ) -> AuthenticationResult:
        """Authenticate an inbound request; never raises."""
        integration = self.registry.get(integration_id)
        if integration is None or not integration.is_connected:
            return AuthenticationResult(valid=False, reason=REASON_NOT_CONNECTED)

        policy = self.policy_for(integration_id)
        normalized = {key.lower(): value for key, value in headers.items()}

        try:
            timestamp = self._check_timestamp(policy, normalized)
            self._check_signature(integration, policy, normalized, raw_body)
        except WebhookVerificationError as e:
            logger.warning(f"Rejected webhook for {integration_id}: {e}")
            return AuthenticationResult(valid=False, reason=e.reason)

        if policy.signature_header and not integration.webhook_secret:
            if self.strict:
                logger.warning(f"Rejected unsigned webhook for {integration_id}: no secret configured")
                return AuthenticationResult(valid=False, reason=REASON_MISSING_SECRET)
            logger.warning(f"Accepting webhook for {integration_id} without signature check")

        return AuthenticationResult(valid=True, timestamp=timestamp)

    def _check_timestamp(
        self,
        policy: WebhookPolicy,
        headers: Mapping[str, str],
    ) -> Optional[datetime]:
        if not policy.timestamp_header:
            return None

        raw = headers.get(policy.timestamp_header.lower())
        if not raw:
            raise StaleTimestampError("Missing timestamp header")

        try:
            epoch_seconds = int(raw.strip())
        except ValueError:
            raise StaleTimestampError(f"Malformed timestamp header {raw!r}")

        age = abs(int(self.clock().timestamp()) - epoch_seconds)
        if age > policy.max_age_seconds:
            raise StaleTimestampError(
                f"Webhook timestamp outside the {policy.max_age_seconds}s window"
            )

        return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)

    def _check_signature(
        self,
        integration: Integration,
        policy: WebhookPolicy,
        headers: Mapping[str, str],
        raw_body: Union[str, bytes],
    ) -> None:
        secret = integration.webhook_secret
        if not policy.signature_header or not secret:
            return

        received = headers.get(policy.signature_header.lower())
        if not received:
            raise SignatureMismatchError("Missing signature header")

        extra = {}
        if policy.timestamp_header:
            extra["timestamp"] = headers.get(policy.timestamp_header.lower(), "")

        scheme = policy.scheme or integration.id
        try:
            expected = expected_signature(scheme, raw_body, secret, extra, self.strategies)
        except ValueError as e:
            raise SignatureMismatchError(str(e)) from e

        if not constant_time_equals(received, expected):
            raise SignatureMismatchError("Invalid signature")
