"""
Archive Extractor - Turn package archives into filtered in-memory file trees

Tar headers are walked by hand so that the offset arithmetic stays aligned even
across entries we skip or cannot parse. Zip archives go through ``zipfile`` and
are filtered on central-directory metadata before any entry is inflated.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib

from pkgdiff.models.archive import ArchiveFormat, ExtractionLimits, FileEntry, FileTree
from pkgdiff.services.content_filter import classify_path, is_binary_content
from pkgdiff.services.errors import ArchiveTooLarge, DecompressionTooLarge, MalformedArchive

logger = logging.getLogger(__name__)

BLOCK_SIZE = 512
INFLATE_CHUNK = 64 * 1024

_NPM_ROOT = re.compile(r"^package/")
_ROOT_COMPONENT = re.compile(r"^[^/]+/")
_OCTAL = re.compile(r"^[0-7]+")


class ArchiveExtractor:
    """Extract package archives under a set of resource caps"""

    def __init__(self, limits: ExtractionLimits | None = None):
        self.limits = limits or ExtractionLimits()

    def extract(self, data: bytes, archive_format: ArchiveFormat | str) -> FileTree:
        """Extract raw archive bytes into a FileTree"""
        if len(data) > self.limits.max_archive_size:
            raise ArchiveTooLarge(len(data), self.limits.max_archive_size)

        archive_format = ArchiveFormat(archive_format)
        if archive_format is ArchiveFormat.TAR_GZIP:
            return self.extract_tar(self._gunzip(data))
        return self.extract_zip(data)

    # ========== gzip ==========

    def _gunzip(self, data: bytes) -> bytes:
        """Inflate a (possibly multi-member) gzip stream in bounded chunks"""
        if not data:
            raise MalformedArchive("empty gzip stream")

        limit = self.limits.max_decompressed_size
        output = bytearray()
        pending = data

        while pending:
            decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
            try:
                chunk = decompressor.decompress(pending, INFLATE_CHUNK)
                while True:
                    output += chunk
                    if len(output) > limit:
                        raise DecompressionTooLarge(limit, "gzip stream")
                    if decompressor.eof or not decompressor.unconsumed_tail:
                        break
                    chunk = decompressor.decompress(decompressor.unconsumed_tail, INFLATE_CHUNK)
                if not decompressor.eof:
                    output += decompressor.flush()
            except zlib.error as e:
                raise MalformedArchive(f"invalid gzip data: {e}") from e

            if len(output) > limit:
                raise DecompressionTooLarge(limit, "gzip stream")
            if not decompressor.eof:
                raise MalformedArchive("truncated gzip stream")

            # Concatenated members continue after the first one; padding ends the stream
            pending = decompressor.unused_data
            if not pending.startswith(b"\x1f\x8b"):
                break

        return bytes(output)

    # ========== tar ==========

    def extract_tar(self, data: bytes) -> FileTree:
        """Walk 512-byte USTAR headers of an uncompressed tar stream"""
        tree = FileTree()
        offset = 0

        while offset + BLOCK_SIZE <= len(data):
            header = data[offset : offset + BLOCK_SIZE]
            if not any(header):
                break

            if len(tree.files) >= self.limits.max_files:
                tree.truncated = True
                logger.warning("File limit of %d reached, stopping tar extraction", self.limits.max_files)
                break

            name = _read_string(header[0:100])
            prefix = _read_string(header[345:500])
            if prefix:
                name = f"{prefix}/{name}"
            name = _ROOT_COMPONENT.sub("", _NPM_ROOT.sub("", name), count=1)

            size = _read_octal(header[124:136])
            type_flag = header[156]

            offset += BLOCK_SIZE

            if type_flag in (0, ord("0")):
                if size > self.limits.max_file_size:
                    logger.debug("Skipping %s: %d bytes over per-file limit", name, size)
                elif offset + size > len(data):
                    logger.warning("Entry %r runs past the end of the archive, stopping", name)
                    break
                else:
                    self._accept(tree, name, data[offset : offset + size], size)

            offset += -(-size // BLOCK_SIZE) * BLOCK_SIZE

        return tree

    # ========== zip ==========

    def extract_zip(self, data: bytes) -> FileTree:
        """Read a zip via its central directory, inflating only wanted entries"""
        tree = FileTree()
        limit = self.limits.max_decompressed_size
        inflated = 0

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
            raise MalformedArchive(f"invalid zip central directory: {e}") from e

        with archive:
            for info in archive.infolist():
                if len(tree.files) >= self.limits.max_files:
                    tree.truncated = True
                    logger.warning("File limit of %d reached, stopping zip extraction", self.limits.max_files)
                    break

                path = _ROOT_COMPONENT.sub("", info.filename, count=1)
                if not path or path.endswith("/") or info.is_dir():
                    continue

                if info.file_size > self.limits.max_file_size:
                    logger.debug("Skipping %s: declared size %d over limit", path, info.file_size)
                    continue

                if not classify_path(path).include:
                    continue

                content = self._read_zip_entry(archive, info)
                if content is None:
                    continue

                inflated += len(content)
                if inflated > limit:
                    raise DecompressionTooLarge(limit, "zip entries")

                self._accept(tree, path, content, len(content))

        return tree

    def _read_zip_entry(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes | None:
        """Inflate one entry; zipfile stops at the declared size, already checked against the cap.

        Data longer than declared fails the CRC check and the entry is skipped.
        """
        try:
            with archive.open(info) as stream:
                return stream.read()
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError, zlib.error, EOFError) as e:
            logger.warning("Skipping unreadable zip entry %s: %s", info.filename, e)
            return None

    # ========== shared ==========

    def _accept(self, tree: FileTree, path: str, content: bytes, size: int) -> None:
        """Filter and store one regular file; later duplicates replace earlier ones"""
        if not path or path.endswith("/"):
            return
        if size > self.limits.max_file_size:
            logger.debug("Skipping %s: %d bytes over per-file limit", path, size)
            return

        result = classify_path(path)
        if not result.include:
            return

        is_binary = result.is_binary or is_binary_content(content)
        tree.files[path] = FileEntry(
            path=path,
            content=None if is_binary else content.decode("utf-8", errors="replace"),
            is_binary=is_binary,
            is_minified=result.is_minified,
            size=size,
        )


def _read_string(field: bytes) -> str:
    """Decode a NUL-terminated header field"""
    return field.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _read_octal(field: bytes) -> int:
    """Parse an octal ASCII size field, 0 when unparseable"""
    match = _OCTAL.match(field.decode("ascii", errors="replace").strip(" \0"))
    return int(match.group(0), 8) if match else 0


def extract_archive(
    data: bytes,
    archive_format: ArchiveFormat | str,
    limits: ExtractionLimits | None = None,
) -> FileTree:
    """Extract with a fresh extractor"""
    return ArchiveExtractor(limits).extract(data, archive_format)
