from typing import AsyncIterator
from zoneinfo import ZoneInfo

import httpx
from fastapi import Depends

from .config import Settings, get_settings
from .domain.repositories import Repositories
from .infrastructure.backend_client import BackendClient
from .infrastructure.repositories import (
    HttpBlackoutStore,
    HttpBookingStore,
    HttpPackageCatalog,
    HttpTimeslotStore,
    HttpVehicleRegistry,
)


async def get_backend_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[BackendClient]:
    async with httpx.AsyncClient(
        base_url=settings.backend_url,
        timeout=settings.http_timeout_seconds,
        headers={"Content-Type": "application/json"},
    ) as http:
        yield BackendClient(http)


def build_repositories(client: BackendClient) -> Repositories:
    return Repositories(
        catalog=HttpPackageCatalog(client),
        vehicles=HttpVehicleRegistry(client),
        bookings=HttpBookingStore(client),
        timeslots=HttpTimeslotStore(client),
        blackouts=HttpBlackoutStore(client),
    )


async def get_repositories(client: BackendClient = Depends(get_backend_client)) -> Repositories:
    return build_repositories(client)


def get_business_zone(settings: Settings = Depends(get_settings)) -> ZoneInfo:
    return ZoneInfo(settings.business_timezone)
