from __future__ import annotations

from abc import ABC, abstractmethod

from commute_router.domain.models import StationInformation, StationStatus


class IStationFeed(ABC):
    """Port for the two bike-share feed documents (inventory and status)."""

    @abstractmethod
    async def fetch_information(self) -> tuple[StationInformation, ...]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_status(self) -> tuple[StationStatus, ...]:
        raise NotImplementedError
