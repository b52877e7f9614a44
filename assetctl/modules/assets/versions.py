"""Tolerant version parsing on top of ``packaging.version``.

Version strings come from cluster specs written by hand, so the parser
accepts the usual sloppiness: a leading ``v``, surrounding whitespace,
a missing minor or patch part and leading zeros (``19.03.13``). Build
metadata after ``+`` is ignored. The parsed value is only used for
ordering; table lookups always use the exact original string.
"""

import re
from typing import Optional

from packaging import version as packaging_version
from packaging.version import Version

_SUFFIX_RE = re.compile(r'^[0-9.]+(?P<suffix>.*)$')


def _clean(value: str) -> str:
    text = value.strip()
    if text[:1] in ('v', 'V'):
        text = text[1:]
    core, sep, build = text.partition('+')
    if sep and not build:
        raise ValueError(f"invalid version: {value!r}")
    return core


def parse_tolerant(value: str) -> Version:
    """Parse a version string leniently.

    Raises:
        ValueError: If the string is not a recognisable version
    """
    if not isinstance(value, str):
        raise ValueError(f"version must be a string, got {type(value).__name__}")
    try:
        parsed = packaging_version.parse(_clean(value))
    except packaging_version.InvalidVersion as e:
        raise ValueError(f"invalid version: {value!r}") from e
    # major.minor.patch at most; epochs and local labels are not release versions
    if len(parsed.release) > 3 or parsed.epoch or parsed.local:
        raise ValueError(f"invalid version: {value!r}")
    return parsed


def semver_text(value: str, parsed: Optional[Version] = None) -> str:
    """Normalised ``major.minor.patch`` plus the pre-release suffix as written.

    ``v1.22.0-beta.1`` becomes ``1.22.0-beta.1`` and ``1.21`` becomes
    ``1.21.0``, which is how release URLs spell them.
    """
    if parsed is None:
        parsed = parse_tolerant(value)
    text = f"{parsed.major}.{parsed.minor}.{parsed.micro}"
    match = _SUFFIX_RE.match(_clean(value))
    if match and match.group('suffix'):
        text += match.group('suffix')
    return text


__all__ = ['Version', 'parse_tolerant', 'semver_text']
