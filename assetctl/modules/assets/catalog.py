"""Component catalog: immutable version tables loaded from YAML.

The packaged ``data/catalog.yaml`` is loaded once per process. An operator
catalog file can extend it; the two are deep-merged before validation so
new versions or whole new components are a data change only.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple, Union

from jsonschema import ValidationError, validate

from assetctl.utils.files import merge_dicts, read_yaml_file

from .architectures import Architecture, parse_architecture
from .errors import CatalogError, UnknownComponent
from .models import normalize_sha256
from .versions import Version, parse_tolerant

logger = logging.getLogger("assetctl.catalog")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "data" / "catalog.yaml"

_VERSION_TABLE = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

CATALOG_SCHEMA = {
    "type": "object",
    "properties": {
        "components": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "description": {"type": "string"},
                    "minimum_version": {"type": "string"},
                    "template_threshold": {"type": "string"},
                    "url_template": {"type": "string"},
                    "legacy_url_template": {"type": "string"},
                    "arch_aliases": {
                        "type": "object",
                        "additionalProperties": {"type": "string"},
                    },
                    "mirrors": {"type": "array", "items": {"type": "string"}},
                    "hash_url_suffix": {"type": "string"},
                    "hashes": {
                        "type": "object",
                        "additionalProperties": _VERSION_TABLE,
                    },
                    "fallback": {
                        "type": "object",
                        "properties": {
                            "bundler": {"type": "string"},
                            "default_version": {"type": "string"},
                            "architectures": {"type": "array", "items": {"type": "string"}},
                            "versions": _VERSION_TABLE,
                        },
                        "required": ["bundler"],
                        "additionalProperties": False,
                    },
                },
                "required": ["minimum_version", "url_template"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["components"],
}


@dataclass(frozen=True)
class FallbackSpec:
    """Where to find a build for architectures with no native artifact.

    ``default_version`` is a compatibility shim: when set, versions missing
    from ``versions`` resolve as if ``default_version`` had been requested.
    Components opt in explicitly. ``architectures`` limits the fallback to
    the listed architectures (None means all).
    """
    bundler: str
    default_version: Optional[str]
    versions: Mapping[str, str]
    architectures: Optional[FrozenSet[Architecture]] = None

    def applies_to(self, arch: Architecture) -> bool:
        return self.architectures is None or arch in self.architectures


@dataclass(frozen=True)
class ComponentSpec:
    """Static description of one downloadable component."""
    name: str
    description: str
    minimum_version: Version
    template_threshold: Optional[Version]
    url_template: str
    legacy_url_template: Optional[str]
    arch_aliases: Mapping[Architecture, str]
    mirrors: Tuple[str, ...]
    hash_url_suffix: Optional[str]
    hashes: Mapping[Architecture, Mapping[str, str]]
    fallback: Optional[FallbackSpec] = None

    def native_hash(self, arch: Architecture, version: str) -> Optional[str]:
        """Exact-string lookup in the per-architecture hash table."""
        return self.hashes.get(arch, {}).get(version)

    def arch_token(self, arch: Architecture) -> str:
        return self.arch_aliases.get(arch, arch.value)

    def versions(self, arch: Optional[Architecture] = None) -> Tuple[str, ...]:
        """Versions with a native build, sorted by semantic version."""
        arches = [arch] if arch is not None else list(Architecture)
        found = {v for a in arches for v in self.hashes.get(a, {})}
        return tuple(sorted(found, key=parse_tolerant))


class Catalog(Mapping):
    """Read-only mapping of component name to ComponentSpec."""

    def __init__(self, components: Mapping[str, ComponentSpec]):
        self._components = MappingProxyType(dict(components))

    def __getitem__(self, name: str) -> ComponentSpec:
        return self._components[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def component(self, name: str) -> ComponentSpec:
        """Return a component by name.

        Raises:
            UnknownComponent: If the catalog has no such component
        """
        try:
            return self._components[name]
        except KeyError:
            raise UnknownComponent(name, detail=f"known components: {', '.join(sorted(self))}") from None


def _parse_version_field(component: str, field: str, value: str) -> Version:
    try:
        return parse_tolerant(value)
    except ValueError as e:
        raise CatalogError(f"{component}: invalid {field}: {e}") from e


def _build_component(name: str, raw: Dict[str, Any]) -> ComponentSpec:
    hashes = {}
    for arch_name, table in (raw.get("hashes") or {}).items():
        arch = parse_architecture(arch_name, component=name)
        try:
            frozen = {str(v): normalize_sha256(h) for v, h in table.items()}
        except ValueError as e:
            raise CatalogError(f"{name}/{arch}: {e}") from e
        hashes[arch] = MappingProxyType(frozen)

    fallback = None
    if raw.get("fallback"):
        fb = raw["fallback"]
        arches = fb.get("architectures")
        fallback = FallbackSpec(
            bundler=fb["bundler"],
            default_version=fb.get("default_version"),
            versions=MappingProxyType(dict(fb.get("versions") or {})),
            architectures=frozenset(parse_architecture(a, component=name) for a in arches) if arches else None,
        )

    threshold = raw.get("template_threshold")
    if threshold and not raw.get("legacy_url_template"):
        raise CatalogError(f"{name}: template_threshold requires legacy_url_template")

    return ComponentSpec(
        name=name,
        description=raw.get("description", ""),
        minimum_version=_parse_version_field(name, "minimum_version", raw["minimum_version"]),
        template_threshold=_parse_version_field(name, "template_threshold", threshold) if threshold else None,
        url_template=raw["url_template"],
        legacy_url_template=raw.get("legacy_url_template"),
        arch_aliases=MappingProxyType({
            parse_architecture(a, component=name): token
            for a, token in (raw.get("arch_aliases") or {}).items()
        }),
        mirrors=tuple(raw.get("mirrors") or ()),
        hash_url_suffix=raw.get("hash_url_suffix"),
        hashes=MappingProxyType(hashes),
        fallback=fallback,
    )


def build_catalog(data: Dict[str, Any]) -> Catalog:
    """Validate raw catalog data and freeze it.

    Raises:
        CatalogError: If the data does not match the catalog schema
    """
    try:
        validate(instance=data, schema=CATALOG_SCHEMA)
    except ValidationError as ve:
        raise CatalogError(f"catalog validation error: {ve.message}") from ve

    components = {name: _build_component(name, raw) for name, raw in data["components"].items()}

    for spec in components.values():
        if spec.fallback and spec.fallback.bundler not in components:
            raise CatalogError(f"{spec.name}: unknown fallback bundler {spec.fallback.bundler!r}")

    return Catalog(components)


def load_catalog(extra_path: Optional[Union[str, Path]] = None,
                 base_path: Union[str, Path] = DEFAULT_CATALOG_PATH) -> Catalog:
    """Load the packaged catalog, optionally extended by an operator file."""
    data = read_yaml_file(str(base_path))
    if extra_path:
        logger.info(f"Extending component catalog with {extra_path}")
        data = merge_dicts(data, read_yaml_file(str(Path(extra_path).expanduser())))
    catalog = build_catalog(data)
    logger.debug(f"Loaded catalog with components: {', '.join(sorted(catalog))}")
    return catalog


# Process-wide catalog instance and the operator file it was extended with
_catalog: Optional[Catalog] = None
_catalog_extra: Optional[str] = None


def get_catalog(extra_path: Optional[Union[str, Path]] = None) -> Catalog:
    """Get or create the process-wide catalog.

    Without ``extra_path`` the cached catalog is returned, loading it on
    first use with Config.CATALOG_PATH. Passing an ``extra_path`` other
    than the one the cached catalog was built from reloads it.
    """
    global _catalog, _catalog_extra
    if extra_path is not None:
        extra = str(Path(extra_path).expanduser())
        if _catalog is None or extra != _catalog_extra:
            _catalog = load_catalog(extra)
            _catalog_extra = extra
        return _catalog

    if _catalog is None:
        from assetctl.config import Config
        _catalog_extra = Config.CATALOG_PATH or None
        _catalog = load_catalog(_catalog_extra)
    return _catalog


def set_catalog(catalog: Optional[Catalog]) -> None:
    """Replace (or reset with None) the process-wide catalog."""
    global _catalog, _catalog_extra
    _catalog = catalog
    _catalog_extra = None
