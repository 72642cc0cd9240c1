from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..deps import get_repositories
from ..domain.repositories import Repositories
from ..models import PackageType, Tour, Transfer, Vehicle

router = APIRouter(tags=["catalog"])


@router.get("/packages", response_model=List[Union[Tour, Transfer]])
async def list_packages(
    package_type: Optional[PackageType] = Query(default=None, alias="type"),
    repos: Repositories = Depends(get_repositories),
) -> list[Union[Tour, Transfer]]:
    return await repos.catalog.list_packages(package_type)


@router.get("/packages/{package_id}", response_model=Union[Tour, Transfer])
async def get_package(
    package_id: str = Path(..., min_length=1),
    package_type: Optional[PackageType] = Query(default=None, alias="type"),
    repos: Repositories = Depends(get_repositories),
) -> Union[Tour, Transfer]:
    package = await repos.catalog.get_package(package_id, package_type)
    if package is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="package not found")
    return package


@router.get("/vehicles", response_model=List[Vehicle])
async def list_vehicles(repos: Repositories = Depends(get_repositories)) -> list[Vehicle]:
    return await repos.vehicles.list_vehicles()
