"""Library version reporting."""

from __future__ import annotations

import re
from dataclasses import dataclass

PACKAGE_VERSION = "0.30"
# Library interface version as (current, revision, age).
SO_VERSION = (11, 0, 4)

_INT = re.compile(r"\s*([+-]?\d+)")
_WORD = re.compile(r"\s*(\S+)")


@dataclass(frozen=True)
class VersionInfo:
    """Release version and library interface version numbers."""

    version: str
    major: int
    minor: int
    extra: str
    lt_major: int
    lt_minor: int
    lt_bug: int


def _split_version(text: str) -> tuple[int, int, str]:
    first = _INT.match(text)
    if first is None or not text.startswith(".", first.end()):
        return 0, 0, ""
    second = _INT.match(text, first.end() + 1)
    if second is None:
        return 0, 0, ""
    rest = _WORD.match(text, second.end())
    extra = rest.group(1) if rest else ""
    return int(first.group(1)), int(second.group(1)), extra


def version_info(
    version_string: str = PACKAGE_VERSION,
    so_version: tuple[int, int, int] = SO_VERSION,
) -> VersionInfo:
    """Break a version string and interface triple into their numbers.

    ``so_version`` is (current, revision, age); the interface major number
    is current minus age.
    """
    current, revision, age = so_version
    major, minor, extra = _split_version(version_string)
    return VersionInfo(
        version=version_string,
        major=major,
        minor=minor,
        extra=extra,
        lt_major=current - age,
        lt_minor=age,
        lt_bug=revision,
    )