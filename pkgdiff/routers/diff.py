"""Diff API endpoints"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from pkgdiff.models.diff import DiffResult
from pkgdiff.models.registry import ErrorDetail
from pkgdiff.services.errors import (
    ArchiveTooLarge,
    DecompressionTooLarge,
    FetchFailed,
    MalformedArchive,
    PackageDiffError,
    PackageNotFound,
    VersionNotFound,
)
from pkgdiff.services.package_diff import PackageDiffService, get_package_diff_service
from pkgdiff.services.versions import parse_version_range

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = {
    PackageNotFound: 404,
    VersionNotFound: 404,
    ArchiveTooLarge: 413,
    DecompressionTooLarge: 413,
    MalformedArchive: 422,
    FetchFailed: 502,
}


def parse_npm_path(path: str) -> tuple[str, str, str] | None:
    """Split ``name/from...to`` or ``@scope/name/from...to``"""
    parts = path.split("/")

    if parts[0].startswith("@"):
        if len(parts) < 3:
            return None
        package_name = f"{parts[0]}/{parts[1]}"
        version_part = "/".join(parts[2:])
    else:
        if len(parts) < 2:
            return None
        package_name = parts[0]
        version_part = "/".join(parts[1:])

    parsed = parse_version_range(version_part)
    if not parsed:
        return None
    return package_name, parsed[0], parsed[1]


def error_to_http(error: PackageDiffError) -> HTTPException:
    """Translate a typed failure into a structured HTTP error"""
    status_code = ERROR_STATUS.get(type(error), 500)
    detail = ErrorDetail(**error.to_dict())
    return HTTPException(status_code=status_code, detail=detail.model_dump(exclude_none=True))


async def _run_diff(
    service: PackageDiffService,
    package_type: str,
    name: str,
    from_version: str,
    to_version: str,
) -> DiffResult:
    try:
        return await service.diff(package_type, name, from_version, to_version)
    except PackageDiffError as e:
        logger.warning("Diff of %s %s...%s failed: %s", name, from_version, to_version, e.message)
        raise error_to_http(e)


@router.get("/npm/{path:path}", response_model=DiffResult)
async def diff_npm_package(
    path: str,
    service: PackageDiffService = Depends(get_package_diff_service),
) -> DiffResult:
    """Diff two versions of an npm package"""
    parsed = parse_npm_path(path)
    if not parsed:
        raise HTTPException(
            status_code=400,
            detail="Invalid URL format. Expected: /npm/package/version1...version2",
        )
    package_name, from_version, to_version = parsed
    return await _run_diff(service, "npm", package_name, from_version, to_version)


@router.get("/wp/{slug}/{versions:path}", response_model=DiffResult)
async def diff_wordpress_plugin(
    slug: str,
    versions: str,
    service: PackageDiffService = Depends(get_package_diff_service),
) -> DiffResult:
    """Diff two versions of a WordPress.org plugin"""
    parsed = parse_version_range(versions)
    if not parsed:
        raise HTTPException(
            status_code=400,
            detail="Invalid URL format. Expected: /wp/plugin-slug/version1...version2",
        )
    from_version, to_version = parsed
    return await _run_diff(service, "wp", slug, from_version, to_version)
