from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduling.domain.entities.service_catalog import ServiceCatalogEntry, ServicePrice


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> ServiceCatalogEntry | None:
        """Get catalog entry by id. Inactive entries are still returned."""
        raise NotImplementedError

    @abstractmethod
    def get_service_price(self, service_id: str) -> ServicePrice | None:
        """Current price and duration, or None if the service does not exist."""
        raise NotImplementedError

    @abstractmethod
    def list_services(self, category: str | None = None, active: bool | None = None) -> list[ServiceCatalogEntry]:
        raise NotImplementedError
