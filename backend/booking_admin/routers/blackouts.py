from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_repositories
from ..domain.repositories import Repositories
from ..schemas import BlackoutCreate, BlackoutRead
from ..usecases import blackouts as blackout_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/blackout-dates", tags=["blackout-dates"])


@router.get("", response_model=List[BlackoutRead])
async def list_blackouts(repos: Repositories = Depends(get_repositories)) -> list[BlackoutRead]:
    items = await blackout_usecase.list_blackouts(repos.blackouts)
    return [BlackoutRead.from_blackout(b) for b in items]


@router.post("", response_model=List[BlackoutRead], status_code=status.HTTP_201_CREATED)
async def add_blackouts(
    payload: BlackoutCreate,
    repos: Repositories = Depends(get_repositories),
) -> list[BlackoutRead]:
    try:
        created = await blackout_usecase.add_blackout_range(
            repos.blackouts,
            start=payload.start,
            end=payload.end or payload.start,
            scope=payload.package_type,
            description=payload.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        for blackout in created:
            emit_audit_log(
                action="blackout.created",
                package_type=blackout.package_type,
                date=blackout.date,
                extra={"blackout_id": blackout.id},
            )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return [BlackoutRead.from_blackout(b) for b in created]


@router.delete("/{blackout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_blackout(
    blackout_id: str = Path(..., min_length=1),
    repos: Repositories = Depends(get_repositories),
) -> None:
    await blackout_usecase.remove_blackout(repos.blackouts, blackout_id=blackout_id)
    try:
        emit_audit_log(action="blackout.removed", extra={"blackout_id": blackout_id})
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
