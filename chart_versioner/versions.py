"""Version parsing and bumping utilities.

Chart versions are read from hand-edited Chart.yaml files, so parsing is
lenient: missing or non-numeric components count as zero.
"""

from __future__ import annotations

import re

import semver

from .models import BumpLevel

_LEADING_DIGITS = re.compile(r"\d+")


def _component(part: str) -> int:
    m = _LEADING_DIGITS.match(part.strip())
    return int(m.group()) if m else 0


def parse_version(version_str: str | None) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete or sloppy versions:
    - "1" → 1.0.0
    - "1.2" → 1.2.0
    - "1.2.3-rc.1" → 1.2.3 (leading digits of each component)
    - "v1.2.3" → 0.2.3 (non-numeric components are 0)
    - None or "" → 0.0.0

    Only the first 3 components are used (major.minor.patch).
    """
    parts = (version_str or "0.0.0").split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    major, minor, patch = (_component(p) for p in parts[:3])
    return semver.Version(major, minor, patch)


def bump_version(version_str: str | None, level: BumpLevel) -> str:
    """Increment a version by the given level and return it as a string.

    Examples:
        ("2.2.3", MAJOR) → "3.0.0"
        ("2.2.3", MINOR) → "2.3.0"
        ("2.2.3", PATCH) → "2.2.4"
    """
    version = parse_version(version_str)
    if level == BumpLevel.MAJOR:
        return str(version.bump_major())
    if level == BumpLevel.MINOR:
        return str(version.bump_minor())
    return str(version.bump_patch())
