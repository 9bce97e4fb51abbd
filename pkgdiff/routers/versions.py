"""Version listing API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from pkgdiff.models.registry import VersionsResponse
from pkgdiff.services.errors import PackageDiffError
from pkgdiff.services.package_diff import PackageDiffService, get_package_diff_service
from pkgdiff.services.registries import PACKAGE_TYPES

router = APIRouter()


@router.get("", response_model=VersionsResponse)
async def list_versions(
    type: str | None = None,
    name: str | None = None,
    service: PackageDiffService = Depends(get_package_diff_service),
) -> VersionsResponse:
    """List published versions of a package, newest first"""
    if not type or not name:
        raise HTTPException(status_code=400, detail="Missing type or name parameter")
    if type not in PACKAGE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid type parameter")

    try:
        versions = await service.list_versions(type, name)
    except PackageDiffError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return VersionsResponse(versions=versions)
