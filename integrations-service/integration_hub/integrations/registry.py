"""Provider registry for handler implementations."""

from typing import Dict, Type, Optional, Iterable
import httpx

from integration_hub.integrations.base import BaseProviderHandler, AcknowledgingHandler


class ProviderRegistry:
    """Registry for provider handler implementations."""

    _handlers: Dict[str, Type[BaseProviderHandler]] = {}

    @classmethod
    def register(cls, provider_id: str):
        """Decorator to register a handler class."""
        def decorator(handler_class: Type[BaseProviderHandler]):
            handler_class.provider_id = provider_id
            cls._handlers[provider_id] = handler_class
            return handler_class
        return decorator

    @classmethod
    def get(cls, provider_id: str) -> Optional[Type[BaseProviderHandler]]:
        """Get handler class by provider id."""
        return cls._handlers.get(provider_id)

    @classmethod
    def list_providers(cls) -> list[str]:
        """List all registered provider ids."""
        return list(cls._handlers.keys())

    @classmethod
    def build_handlers(
        cls,
        provider_ids: Iterable[str],
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> Dict[str, BaseProviderHandler]:
        """Instantiate one handler per provider id.

        Providers without a dedicated class get an ``AcknowledgingHandler``.
        """
        handlers: Dict[str, BaseProviderHandler] = {}
        for provider_id in provider_ids:
            handler_class = cls.get(provider_id)
            if handler_class is None:
                handler = AcknowledgingHandler(http_client)
                handler.provider_id = provider_id
            else:
                handler = handler_class(http_client)
            handlers[provider_id] = handler
        return handlers
