"""Value types exchanged between the resolver and the node fetcher."""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from urllib.parse import urlparse

from .architectures import Architecture, parse_architecture

SHA256_RE = re.compile(r'^[0-9a-f]{64}$')


def normalize_sha256(value: str) -> str:
    """Lowercase and validate a hex SHA-256 digest.

    Raises:
        ValueError: If the value is not 64 hex characters
    """
    digest = (value or '').strip().lower()
    if not SHA256_RE.match(digest):
        raise ValueError(f"invalid sha256 digest: {value!r}")
    return digest


@dataclass(frozen=True)
class AssetDescriptor:
    """A verifiable downloadable artifact: one digest, one or more mirrors.

    All URLs are expected to serve byte-identical content and are tried
    strictly in order.
    """
    sha256: str
    urls: Tuple[str, ...]

    def __post_init__(self):
        urls = tuple(u.strip() for u in self.urls if u and u.strip())
        if not urls:
            raise ValueError("asset descriptor requires at least one url")
        for url in urls:
            if ',' in url:
                raise ValueError(f"url cannot be serialized into an asset line: {url!r}")
        object.__setattr__(self, 'urls', urls)
        object.__setattr__(self, 'sha256', normalize_sha256(self.sha256))

    @classmethod
    def create(cls, sha256: str, urls: Iterable[str]) -> 'AssetDescriptor':
        return cls(sha256=sha256, urls=tuple(urls))

    @property
    def url(self) -> str:
        """The primary URL."""
        return self.urls[0]

    @property
    def file_name(self) -> str:
        """Local file name: the last path segment of the primary URL."""
        name = urlparse(self.urls[0]).path.rstrip('/').rsplit('/', 1)[-1]
        if not name:
            raise ValueError(f"cannot derive a file name from {self.urls[0]!r}")
        return name

    def with_urls(self, urls: Iterable[str]) -> 'AssetDescriptor':
        return AssetDescriptor.create(self.sha256, urls)

    def to_line(self) -> str:
        """Serialize as ``<sha256>@<url>[,<url>...]``."""
        return f"{self.sha256}@{','.join(self.urls)}"

    @classmethod
    def from_line(cls, line: str) -> 'AssetDescriptor':
        """Parse the single-line ``<sha256>@<url>[,<url>...]`` form."""
        digest, sep, urls = (line or '').strip().partition('@')
        if not sep:
            raise ValueError(f"asset line is missing '@': {line!r}")
        return cls.create(digest, urls.split(','))


@dataclass(frozen=True)
class OverridePackage:
    """Operator supplied URL/hash pairs that bypass computed resolution."""
    url_amd64: Optional[str] = None
    hash_amd64: Optional[str] = None
    url_arm64: Optional[str] = None
    hash_arm64: Optional[str] = None

    def for_architecture(self, arch: Architecture) -> Optional[Tuple[str, str]]:
        """Return ``(url, hash)`` when both are set for ``arch``, else None."""
        arch = parse_architecture(arch)
        if arch == Architecture.AMD64:
            url, digest = self.url_amd64, self.hash_amd64
        else:
            url, digest = self.url_arm64, self.hash_arm64
        if url and digest:
            return url, digest
        return None
