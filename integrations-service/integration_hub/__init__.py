"""Integration hub: integration registry, connection lifecycle and webhook processing."""

__version__ = "1.0.0"
