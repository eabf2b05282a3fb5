"""Webhook signing utilities.

Each signature strategy is a pure function computing the signature a
provider would send for a raw request body. Strategies are looked up by
scheme name in ``SIGNATURE_STRATEGIES``; unknown schemes use the generic
HMAC-SHA256 hex digest.

The masking helpers at the bottom decide which config and log fields
are treated as credentials.
"""

import hashlib
import hmac
from typing import Callable, Dict, Mapping, Optional, Union


Body = Union[str, bytes]
SignatureStrategy = Callable[[Body, str, Mapping[str, str]], str]


def _to_bytes(value: Body) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def hmac_sha256_hex(message: Body, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), _to_bytes(message), hashlib.sha256).hexdigest()


def generic_signature(raw_body: Body, secret: str, extra: Mapping[str, str]) -> str:
    return hmac_sha256_hex(raw_body, secret)


def github_signature(raw_body: Body, secret: str, extra: Mapping[str, str]) -> str:
    return "sha256=" + hmac_sha256_hex(raw_body, secret)


def slack_signature(raw_body: Body, secret: str, extra: Mapping[str, str]) -> str:
    """Slack signs ``v0:<timestamp>:<body>``; ``extra`` must carry the timestamp."""
    timestamp = extra.get("timestamp")
    if timestamp is None:
        raise ValueError("Slack signatures require the request timestamp")

    base_string = b"v0:" + timestamp.encode("utf-8") + b":" + _to_bytes(raw_body)
    return "v0=" + hmac_sha256_hex(base_string, secret)


SIGNATURE_STRATEGIES: Dict[str, SignatureStrategy] = {
    "generic": generic_signature,
    "github": github_signature,
    "slack": slack_signature,
    "zapier": generic_signature,
}


def expected_signature(
    scheme: str,
    raw_body: Body,
    secret: str,
    extra: Optional[Mapping[str, str]] = None,
    strategies: Optional[Mapping[str, SignatureStrategy]] = None,
) -> str:
    """Compute the signature ``scheme`` expects for ``raw_body``."""
    strategies = SIGNATURE_STRATEGIES if strategies is None else strategies
    strategy = strategies.get(scheme) or strategies.get("generic", generic_signature)
    return strategy(raw_body, secret, extra or {})


def constant_time_equals(received: str, expected: str) -> bool:
    """Compare two signatures without leaking where they differ."""
    received_bytes = received.encode("utf-8")
    expected_bytes = expected.encode("utf-8")
    if len(received_bytes) != len(expected_bytes):
        return False
    return hmac.compare_digest(received_bytes, expected_bytes)


SENSITIVE_MARKERS = ("secret", "key", "token", "password")
MASK = "********"


def is_sensitive_key(key: str) -> bool:
    """Whether a config or log field name looks like a credential."""
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def mask_config(config: Mapping[str, object]) -> Dict[str, object]:
    """Copy of ``config`` with credential values hidden."""
    return {key: MASK if is_sensitive_key(key) else value for key, value in config.items()}
