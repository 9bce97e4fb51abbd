"""Registry capability shared by every package ecosystem"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pkgdiff.models.archive import ArchiveFormat
from pkgdiff.services.cache import TTLCache

METADATA_TTL = 300  # 5 minutes


class Registry(ABC):
    """Resolve package names and versions to downloadable archives"""

    package_type: str
    archive_format: ArchiveFormat

    def __init__(
        self,
        timeout_seconds: float = 30,
        cache: TTLCache | None = None,
        metadata_ttl: float = METADATA_TTL,
    ):
        self.timeout_seconds = timeout_seconds
        self.cache = cache if cache is not None else TTLCache()
        self.metadata_ttl = metadata_ttl

    @abstractmethod
    async def list_versions(self, name: str) -> list[str]:
        """All published versions, newest first"""

    @abstractmethod
    async def resolve_download_url(self, name: str, version: str) -> str:
        """Archive URL for one version; raises VersionNotFound"""

    @abstractmethod
    async def is_valid_version(self, name: str, version: str) -> bool:
        """Whether ``version`` exists for ``name``"""
