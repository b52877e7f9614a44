"""CPU architectures that nodes can be provisioned with."""

from enum import Enum
from typing import Optional, Union

from .errors import UnknownArchitecture


class Architecture(str, Enum):
    """Supported node CPU architectures."""
    AMD64 = 'amd64'
    ARM64 = 'arm64'

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    'amd64': Architecture.AMD64,
    'x86_64': Architecture.AMD64,
    'arm64': Architecture.ARM64,
    'aarch64': Architecture.ARM64,
}


def parse_architecture(value: Union[str, Architecture], component: Optional[str] = None) -> Architecture:
    """Map an architecture name (or machine alias) onto the closed enum.

    Raises:
        UnknownArchitecture: for anything outside the supported set
    """
    if isinstance(value, Architecture):
        return value
    arch = _ALIASES.get(str(value).strip().lower())
    if arch is None:
        raise UnknownArchitecture(component or "*", architecture=str(value))
    return arch
