"""Archive and file-tree builders shared by the test modules."""

import io
import struct
import tarfile
import zipfile

from pkgdiff.models.archive import FileEntry, FileTree


def _as_bytes(data):
    return data.encode("utf-8") if isinstance(data, str) else data


def build_tgz(entries, fmt=tarfile.USTAR_FORMAT):
    """Build a gzipped tar from (name, data) pairs; data None adds a directory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz", format=fmt) as tar:
        for name, data in entries:
            info = tarfile.TarInfo(name)
            if data is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                payload = _as_bytes(data)
                info.size = len(payload)
                tar.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


def build_zip(entries, compression=zipfile.ZIP_DEFLATED):
    """Build a zip from (name, data) pairs; data None adds a directory entry."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as archive:
        for name, data in entries:
            if data is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, _as_bytes(data))
    return buf.getvalue()


def patch_zip_declared_size(data, filename, declared_size):
    """Rewrite the uncompressed size of one central-directory record."""
    patched = bytearray(data)
    target = filename.encode("utf-8")
    offset = patched.find(b"PK\x01\x02")
    while offset != -1:
        name_length = struct.unpack_from("<H", patched, offset + 28)[0]
        name = bytes(patched[offset + 46 : offset + 46 + name_length])
        if name == target:
            struct.pack_into("<I", patched, offset + 24, declared_size)
            return bytes(patched)
        offset = patched.find(b"PK\x01\x02", offset + 4)
    raise AssertionError(f"{filename} not found in central directory")


def make_tree(files):
    """FileTree from {path: text | bytes}; bytes entries are stored as binary."""
    tree = FileTree()
    for path, content in files.items():
        if isinstance(content, bytes):
            tree.files[path] = FileEntry(path=path, content=None, is_binary=True, size=len(content))
        else:
            tree.files[path] = FileEntry(path=path, content=content, size=len(content.encode("utf-8")))
    return tree


