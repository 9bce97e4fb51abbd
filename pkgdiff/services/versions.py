"""Version string helpers"""

from __future__ import annotations

import re
from functools import cmp_to_key

_RANGE = re.compile(r"^(.+?)\.\.\.(.+)$")
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


def _numeric_parts(version: str) -> list[int]:
    parts = []
    for part in version.split("."):
        match = _LEADING_INT.match(part)
        parts.append(int(match.group(0)) if match else 0)
    return parts


def compare_versions(a: str, b: str) -> int:
    """Compare dot-separated versions numerically (non-numeric parts count as 0)"""
    parts_a = _numeric_parts(a)
    parts_b = _numeric_parts(b)
    for i in range(max(len(parts_a), len(parts_b))):
        num_a = parts_a[i] if i < len(parts_a) else 0
        num_b = parts_b[i] if i < len(parts_b) else 0
        if num_a != num_b:
            return num_a - num_b
    return 0


def sort_versions(versions) -> list[str]:
    """Newest first"""
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=True)


def parse_version_range(version_part: str) -> tuple[str, str] | None:
    """Split ``from...to`` into its two versions"""
    match = _RANGE.match(version_part)
    if not match:
        return None
    return match.group(1), match.group(2)

