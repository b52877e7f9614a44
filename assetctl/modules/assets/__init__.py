"""Asset resolution: version tables, resolver and descriptors.

- architectures: supported CPU architectures
- versions: tolerant semantic version parsing
- models: AssetDescriptor and OverridePackage value types
- catalog: immutable per-component version tables
- resolver: pure {component, arch, version} resolution
- builder: repository rewriting and remote hash discovery
"""

from .architectures import Architecture, parse_architecture
from .builder import AssetBuilder, FileAsset
from .catalog import Catalog, ComponentSpec, FallbackSpec, get_catalog, load_catalog, set_catalog
from .errors import (
    AssetError,
    CatalogError,
    InvalidOverride,
    InvalidVersion,
    ResolutionError,
    UnknownArchitecture,
    UnknownAssetForVersion,
    UnknownComponent,
    UnsupportedLegacyVersion,
)
from .models import AssetDescriptor, OverridePackage
from .resolver import Resolution, resolve, resolve_detailed
from .versions import Version, parse_tolerant, semver_text

__all__ = [
    'Architecture',
    'parse_architecture',
    'AssetBuilder',
    'FileAsset',
    'Catalog',
    'ComponentSpec',
    'FallbackSpec',
    'get_catalog',
    'load_catalog',
    'set_catalog',
    'AssetError',
    'CatalogError',
    'InvalidOverride',
    'InvalidVersion',
    'ResolutionError',
    'UnknownArchitecture',
    'UnknownAssetForVersion',
    'UnknownComponent',
    'UnsupportedLegacyVersion',
    'AssetDescriptor',
    'OverridePackage',
    'Resolution',
    'resolve',
    'resolve_detailed',
    'Version',
    'parse_tolerant',
    'semver_text',
]
