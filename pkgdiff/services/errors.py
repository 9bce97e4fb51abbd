"""
Error taxonomy for package extraction and diffing

Every error carries a machine-readable ``kind`` and a human message so the API
layer can render a specific failure instead of a generic one.
"""

from __future__ import annotations

from typing import Any


class PackageDiffError(Exception):
    """Base class for all typed failures"""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "message": self.message}


class ArchiveTooLarge(PackageDiffError):
    """Raw archive exceeds the configured ceiling (checked before decompression)"""

    kind = "archive_too_large"

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Package too large ({_megabytes(size)}MB). "
            f"Maximum supported size is {_megabytes(limit)}MB."
        )


class DecompressionTooLarge(PackageDiffError):
    """Inflating the archive would exceed memory bounds"""

    kind = "decompression_too_large"

    def __init__(self, limit: int, detail: str | None = None):
        self.limit = limit
        message = f"Package contents exceed extraction limits ({_megabytes(limit)}MB)"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FetchFailed(PackageDiffError):
    """Upstream archive or metadata could not be retrieved"""

    kind = "fetch_error"

    def __init__(self, url: str, status: int | None = None, reason: str | None = None):
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Failed to fetch {url}: HTTP {status}"
            if reason:
                message = f"{message} {reason}"
        else:
            message = f"Failed to fetch {url}: {reason or 'network error'}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        return data


class PackageNotFound(PackageDiffError):
    """Registry has no package with this name"""

    kind = "package_not_found"

    def __init__(self, name: str, package_type: str):
        self.name = name
        self.package_type = package_type
        where = "npm" if package_type == "npm" else "WordPress.org"
        super().__init__(f'Package "{name}" not found on {where}')


class VersionNotFound(PackageDiffError):
    """One or more requested versions do not exist"""

    kind = "invalid_version"

    def __init__(self, name: str, invalid_versions: list[str], available_versions: list[str]):
        self.name = name
        self.invalid_versions = invalid_versions
        self.available_versions = available_versions
        plural = "s" if len(invalid_versions) > 1 else ""
        super().__init__(f"Invalid version{plural}: {', '.join(invalid_versions)}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["available_versions"] = self.available_versions
        return data


class MalformedArchive(PackageDiffError):
    """Container structure is corrupt beyond tolerance"""

    kind = "malformed_archive"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed archive: {reason}")


def _megabytes(size: int) -> int:
    return round(size / 1024 / 1024)
