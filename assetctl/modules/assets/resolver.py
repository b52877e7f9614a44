"""Version resolver: {component, arch, version} -> AssetDescriptor.

Resolution order, for every component and architecture:

1. a complete operator override for the architecture wins outright;
2. the component's native hash table (exact version string);
3. the component's fallback mapping to a bundler component;
4. the fallback mapping entry for the component's default fallback
   version, for components that opt in to one. The default only stands
   in for a known release (a native entry on some architecture) or on an
   architecture the fallback lists explicitly.

Steps 3 and 4 resolve the bundler natively only. A bundler's own
fallback is never followed.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .architectures import Architecture, parse_architecture
from .catalog import Catalog, ComponentSpec, get_catalog
from .errors import (
    CatalogError,
    InvalidOverride,
    InvalidVersion,
    UnknownAssetForVersion,
    UnsupportedLegacyVersion,
)
from .models import AssetDescriptor, OverridePackage
from .versions import Version, parse_tolerant, semver_text

logger = logging.getLogger("assetctl.resolver")

SOURCE_OVERRIDE = 'override'
SOURCE_NATIVE = 'native'
SOURCE_FALLBACK = 'fallback'
SOURCE_DEFAULT_FALLBACK = 'default-fallback'


@dataclass(frozen=True)
class Resolution:
    """A resolved descriptor plus where it came from."""
    descriptor: AssetDescriptor
    component: str
    architecture: Architecture
    version: str
    source: str
    resolved_component: str
    resolved_version: str


def parse_component_version(spec: ComponentSpec, arch: Architecture, version: str) -> Version:
    """Parse a requested version and enforce the component's minimum.

    Raises:
        InvalidVersion: If the version string cannot be parsed
        UnsupportedLegacyVersion: If it is below the component's minimum
    """
    if not version or not str(version).strip():
        raise InvalidVersion(spec.name, arch.value, version, detail="version is required")
    try:
        parsed = parse_tolerant(version)
    except ValueError as e:
        raise InvalidVersion(spec.name, arch.value, version, detail=str(e)) from e
    if parsed < spec.minimum_version:
        raise UnsupportedLegacyVersion(
            spec.name, arch.value, version,
            detail=f"minimum supported version is {spec.minimum_version}",
        )
    return parsed


def component_urls(spec: ComponentSpec, arch: Architecture, version: str,
                   parsed: Optional[Version] = None) -> List[str]:
    """Render the primary URL (current or legacy template) and mirrors."""
    if parsed is None:
        parsed = parse_tolerant(version)
    use_legacy = spec.template_threshold is not None and parsed < spec.template_threshold
    primary = spec.legacy_url_template if use_legacy else spec.url_template

    values = {
        'version': version,
        'semver': semver_text(version, parsed),
        'arch': spec.arch_token(arch),
    }
    try:
        return [template.format(**values) for template in (primary,) + spec.mirrors]
    except (KeyError, IndexError) as e:
        raise CatalogError(f"{spec.name}: bad url template placeholder {e}") from e


def resolve_native(spec: ComponentSpec, arch: Architecture, version: str) -> Optional[AssetDescriptor]:
    """Resolve from the component's own tables, or None on a table miss."""
    parsed = parse_component_version(spec, arch, version)
    digest = spec.native_hash(arch, version)
    if digest is None:
        return None
    return AssetDescriptor.create(digest, component_urls(spec, arch, version, parsed))


def _resolve_override(spec: ComponentSpec, arch: Architecture, version: str,
                      overrides: Optional[OverridePackage]) -> Optional[Resolution]:
    if overrides is None:
        return None
    package = overrides.for_architecture(arch)
    if package is None:
        return None
    url, digest = package
    try:
        descriptor = AssetDescriptor.create(digest, [url])
    except ValueError as e:
        raise InvalidOverride(spec.name, arch.value, version, detail=str(e)) from e
    logger.debug(f"Using override package for {spec.name} ({arch}): {url}")
    return Resolution(descriptor, spec.name, arch, version, SOURCE_OVERRIDE, spec.name, version)


def _resolve_fallback(catalog: Catalog, spec: ComponentSpec, arch: Architecture, version: str) -> Resolution:
    fallback = spec.fallback
    if fallback is None or not fallback.applies_to(arch):
        raise UnknownAssetForVersion(spec.name, arch.value, version)

    source = SOURCE_FALLBACK
    bundler_version = fallback.versions.get(version)
    if bundler_version is None:
        if fallback.default_version is None:
            raise UnknownAssetForVersion(
                spec.name, arch.value, version,
                detail=f"no native build and no {fallback.bundler} mapping",
            )
        known_release = any(spec.native_hash(a, version) for a in Architecture)
        if not (known_release or fallback.architectures):
            raise UnknownAssetForVersion(
                spec.name, arch.value, version,
                detail=f"{version!r} is not a known {spec.name} release and has no {fallback.bundler} mapping",
            )
        source = SOURCE_DEFAULT_FALLBACK
        bundler_version = fallback.versions.get(fallback.default_version)
        logger.warning(
            f"⚠️  No {fallback.bundler} mapping for {spec.name} {version} ({arch}), "
            f"substituting default fallback version {fallback.default_version}"
        )
        if bundler_version is None:
            raise UnknownAssetForVersion(
                spec.name, arch.value, version,
                detail=f"default fallback version {fallback.default_version} has no {fallback.bundler} mapping",
            )

    bundler = catalog.component(fallback.bundler)
    descriptor = resolve_native(bundler, arch, bundler_version)
    if descriptor is None:
        raise UnknownAssetForVersion(
            spec.name, arch.value, version,
            detail=f"no {bundler.name} {bundler_version} build for {arch}",
        )
    logger.info(f"Resolved {spec.name} {version} ({arch}) via {bundler.name} {bundler_version}")
    return Resolution(descriptor, spec.name, arch, version, source, bundler.name, bundler_version)


def resolve_detailed(component: Union[str, ComponentSpec], arch: Union[str, Architecture], version: str,
                     overrides: Optional[OverridePackage] = None,
                     catalog: Optional[Catalog] = None) -> Resolution:
    """Resolve a component and report which path produced the descriptor."""
    catalog = catalog if catalog is not None else get_catalog()
    spec = component if isinstance(component, ComponentSpec) else catalog.component(component)
    arch = parse_architecture(arch, component=spec.name)

    resolution = _resolve_override(spec, arch, version, overrides)
    if resolution is not None:
        return resolution

    descriptor = resolve_native(spec, arch, version)
    if descriptor is not None:
        return Resolution(descriptor, spec.name, arch, version, SOURCE_NATIVE, spec.name, version)

    return _resolve_fallback(catalog, spec, arch, version)


def resolve(component: Union[str, ComponentSpec], arch: Union[str, Architecture], version: str,
            overrides: Optional[OverridePackage] = None,
            catalog: Optional[Catalog] = None) -> AssetDescriptor:
    """Resolve a component version for an architecture into an AssetDescriptor.

    Args:
        component: Component name (or spec) from the catalog
        arch: Target architecture
        version: Requested version, exactly as written in the cluster spec
        overrides: Optional operator supplied URL/hash pairs
        catalog: Catalog to resolve against (default: process-wide catalog)

    Raises:
        ResolutionError: InvalidVersion, UnsupportedLegacyVersion,
            UnknownAssetForVersion, UnknownArchitecture or UnknownComponent
    """
    return resolve_detailed(component, arch, version, overrides, catalog).descriptor
