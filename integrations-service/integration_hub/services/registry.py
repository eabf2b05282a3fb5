"""In-memory registry of integration records."""

from typing import Dict, List, Optional, Union
import logging

from integration_hub.models import Integration, IntegrationCategory, IntegrationStatus
from integration_hub.integrations.base import IntegrationNotFound


logger = logging.getLogger(__name__)


class IntegrationRegistry:
    """Holds integration records keyed by id, in registration order."""

    def __init__(self):
        self._integrations: Dict[str, Integration] = {}

    def register(self, integration: Integration) -> Integration:
        """Add an integration to the catalog, replacing any record with the same id."""
        if integration.id in self:
            logger.warning(f"Replacing registered integration {integration.id}")
        self._integrations[integration.id] = integration
        logger.debug(f"Registered integration {integration.id} ({integration.type.value})")
        return integration

    def get(self, integration_id: str) -> Optional[Integration]:
        return self._integrations.get(integration_id)

    def require(self, integration_id: str) -> Integration:
        integration = self._integrations.get(integration_id)
        if integration is None:
            raise IntegrationNotFound(integration_id)
        return integration

    def list(
        self,
        category: Optional[Union[IntegrationCategory, str]] = None,
        status: Optional[Union[IntegrationStatus, str]] = None,
    ) -> List[Integration]:
        """List integrations, optionally filtered by category and status."""
        integrations = list(self._integrations.values())
        if category is not None:
            category = IntegrationCategory(category)
            integrations = [i for i in integrations if i.category == category]
        if status is not None:
            status = IntegrationStatus(status)
            integrations = [i for i in integrations if i.status == status]
        return integrations

    def count_by_status(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in IntegrationStatus}
        for integration in self._integrations.values():
            counts[integration.status.value] += 1
        return counts

    def __contains__(self, integration_id: str) -> bool:
        return integration_id in self._integrations

    def __len__(self) -> int:
        return len(self._integrations)
