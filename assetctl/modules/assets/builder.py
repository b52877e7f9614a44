"""Control-side asset building on top of the pure resolver.

The builder adds what needs configuration or the network:

- rewriting asset URLs onto an operator file repository (air-gapped
  clusters), while remembering the canonical source for copying;
- discovering hashes for components that publish a ``.sha256`` file
  next to the artifact, when the catalog has no pinned hash;
- memoising results per {component, arch, version, overrides}.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urlparse

import requests

from assetctl.config import Config

from .architectures import Architecture, parse_architecture
from .catalog import Catalog, ComponentSpec, get_catalog
from .errors import UnknownAssetForVersion
from .models import AssetDescriptor, OverridePackage, normalize_sha256
from .resolver import Resolution, component_urls, parse_component_version, resolve_detailed

logger = logging.getLogger("assetctl.builder")

SOURCE_REMOTE_HASH = 'remote-hash'


@dataclass(frozen=True)
class FileAsset:
    """An asset that must be copied into the file repository."""
    canonical_url: str
    download_url: str
    sha256: str


class AssetBuilder:
    """Builds asset descriptors for a cluster."""

    def __init__(self, catalog: Optional[Catalog] = None, file_repository: Optional[str] = None,
                 remote_hashes: Optional[bool] = None, session: Optional[requests.Session] = None,
                 timeout: Optional[int] = None):
        self.catalog = catalog if catalog is not None else get_catalog()
        repository = file_repository if file_repository is not None else Config.FILE_REPOSITORY
        self.file_repository = repository.rstrip('/') if repository else None
        self.remote_hashes = Config.REMOTE_HASHES if remote_hashes is None else remote_hashes
        self.session = session
        self.timeout = timeout or Config.API_TIMEOUT
        self.file_assets: List[FileAsset] = []
        self._cache: Dict[Tuple, Resolution] = {}

    def build(self, component: str, arch: Union[str, Architecture], version: str,
              overrides: Optional[OverridePackage] = None) -> AssetDescriptor:
        """Resolve a component and apply repository rewriting."""
        return self.build_detailed(component, arch, version, overrides).descriptor

    def build_detailed(self, component: str, arch: Union[str, Architecture], version: str,
                       overrides: Optional[OverridePackage] = None) -> Resolution:
        spec = self.catalog.component(component)
        arch = parse_architecture(arch, component=spec.name)
        key = (spec.name, arch, version, overrides)
        if key in self._cache:
            return self._cache[key]

        try:
            resolution = resolve_detailed(spec, arch, version, overrides, self.catalog)
        except UnknownAssetForVersion:
            if not (self.remote_hashes and spec.hash_url_suffix):
                raise
            resolution = self._discover_hash(spec, arch, version)

        resolution = self._remap(resolution)
        self._cache[key] = resolution
        return resolution

    def _discover_hash(self, spec: ComponentSpec, arch: Architecture, version: str) -> Resolution:
        parsed = parse_component_version(spec, arch, version)
        urls = component_urls(spec, arch, version, parsed)
        hash_url = urls[0] + spec.hash_url_suffix
        logger.info(f"🔍 Fetching hash for {spec.name} {version} ({arch}) from {hash_url}")
        try:
            getter = self.session.get if self.session is not None else requests.get
            response = getter(hash_url, timeout=self.timeout)
            response.raise_for_status()
            fields = response.text.split()
            digest = normalize_sha256(fields[0] if fields else '')
        except requests.RequestException as e:
            raise UnknownAssetForVersion(spec.name, arch.value, version,
                                         detail=f"hash lookup at {hash_url} failed: {e}") from e
        except ValueError as e:
            raise UnknownAssetForVersion(spec.name, arch.value, version,
                                         detail=f"hash file at {hash_url} is invalid: {e}") from e
        descriptor = AssetDescriptor.create(digest, urls)
        return Resolution(descriptor, spec.name, arch, version, SOURCE_REMOTE_HASH, spec.name, version)

    def remap_url(self, url: str) -> str:
        """Move a URL onto the file repository, keeping its path."""
        if not self.file_repository:
            return url
        if url.startswith(self.file_repository + '/'):
            return url
        path = urlparse(url).path.lstrip('/')
        return f"{self.file_repository}/{path}"

    def _remap(self, resolution: Resolution) -> Resolution:
        descriptor = resolution.descriptor
        if not self.file_repository:
            return resolution
        canonical = descriptor.url
        mirrored = self.remap_url(canonical)
        asset = FileAsset(canonical, mirrored, descriptor.sha256)
        if asset not in self.file_assets:
            self.file_assets.append(asset)
        logger.debug(f"Remapped {canonical} -> {mirrored}")
        return Resolution(
            descriptor.with_urls([mirrored]),
            resolution.component,
            resolution.architecture,
            resolution.version,
            resolution.source,
            resolution.resolved_component,
            resolution.resolved_version,
        )


__all__ = ['AssetBuilder', 'FileAsset', 'SOURCE_REMOTE_HASH']
