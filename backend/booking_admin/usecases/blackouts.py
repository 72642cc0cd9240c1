import datetime as dt

from ..domain.repositories import BlackoutStore
from ..models import BlackoutDate, BlackoutScope

# Upper bound on a single range request.
MAX_RANGE_DAYS = 366


async def list_blackouts(store: BlackoutStore) -> list[BlackoutDate]:
    items = await store.list_blackouts()
    return sorted(items, key=lambda b: (b.date, b.package_type.value))


async def add_blackout_range(
    store: BlackoutStore,
    *,
    start: dt.date,
    end: dt.date,
    scope: BlackoutScope,
    description: str | None = None,
) -> list[BlackoutDate]:
    """Create one blackout per day in ``[start, end]``."""
    if start > end:
        raise ValueError("start must not be after end")
    days = (end - start).days + 1
    if days > MAX_RANGE_DAYS:
        raise ValueError(f"range must not exceed {MAX_RANGE_DAYS} days")
    created = []
    for offset in range(days):
        created.append(
            await store.create(
                date=start + dt.timedelta(days=offset),
                package_type=scope.value,
                description=description,
            )
        )
    return created


async def remove_blackout(store: BlackoutStore, *, blackout_id: str) -> None:
    await store.delete(blackout_id)
