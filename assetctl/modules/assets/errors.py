"""Errors raised while resolving component assets."""

from typing import Optional


class AssetError(Exception):
    """Base class for all asset supply-chain errors."""


class CatalogError(AssetError):
    """The component catalog data is malformed."""


class ResolutionError(AssetError):
    """A component could not be resolved into an asset descriptor.

    Carries the exact combination that failed so callers can report it.
    """

    reason = "unable to resolve asset"

    def __init__(self, component: str, architecture: Optional[str] = None,
                 version: Optional[str] = None, detail: Optional[str] = None):
        self.component = component
        self.architecture = architecture
        self.version = version
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"component={self.component}"]
        if self.architecture is not None:
            parts.append(f"arch={self.architecture}")
        if self.version is not None:
            parts.append(f"version={self.version!r}")
        message = f"{self.reason} ({', '.join(parts)})"
        if self.detail:
            message = f"{message}: {self.detail}"
        return message


class InvalidVersion(ResolutionError):
    reason = "unable to parse version string"


class UnsupportedLegacyVersion(ResolutionError):
    reason = "unsupported legacy version"


class UnknownAssetForVersion(ResolutionError):
    reason = "unknown url and hash for version"


class UnknownArchitecture(ResolutionError):
    reason = "unknown architecture"


class UnknownComponent(ResolutionError):
    reason = "unknown component"


class InvalidOverride(ResolutionError):
    reason = "invalid override package"
