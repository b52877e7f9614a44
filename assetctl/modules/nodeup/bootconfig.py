"""Per-node boot configuration.

Written by cluster compilation to ``<install_dir>/conf/boot.yaml`` and read
by the fetcher at first boot. Each artifact entry carries the file name,
the expected SHA-256 and the ordered mirror list. Artifacts may also be
given in the single-line ``<sha256>@<url>[,<url>...]`` form.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from assetctl.config import Config
from assetctl.modules.assets.architectures import Architecture, parse_architecture
from assetctl.modules.assets.models import AssetDescriptor, normalize_sha256
from assetctl.utils.files import read_yaml_file, write_yaml_file

logger = logging.getLogger("assetctl.bootconfig")

CONF_DIR = "conf"
BIN_DIR = "bin"
BOOT_CONFIG_FILE = "boot.yaml"


class BootArtifact(BaseModel):
    """One binary the node must have before later boot stages run."""
    file_name: str = Field(description="File name under <install_dir>/bin")
    sha256: str = Field(description="Expected lowercase hex SHA-256")
    urls: List[str] = Field(min_length=1, description="Mirrors, tried in order")
    executable: bool = Field(default=True, description="Mark the file 0755 once verified")

    @field_validator('file_name')
    @classmethod
    def plain_file_name(cls, v: str) -> str:
        if not v or '/' in v or v in ('.', '..'):
            raise ValueError(f"invalid file name: {v!r}")
        return v

    @field_validator('sha256')
    @classmethod
    def valid_sha256(cls, v: str) -> str:
        return normalize_sha256(v)

    @field_validator('urls', mode='before')
    @classmethod
    def split_urls(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [u for u in v.split(',') if u.strip()]
        return v

    @property
    def descriptor(self) -> AssetDescriptor:
        return AssetDescriptor.create(self.sha256, self.urls)

    @classmethod
    def from_descriptor(cls, descriptor: AssetDescriptor, file_name: Optional[str] = None,
                        executable: bool = True) -> 'BootArtifact':
        return cls(
            file_name=file_name or descriptor.file_name,
            sha256=descriptor.sha256,
            urls=list(descriptor.urls),
            executable=executable,
        )

    @classmethod
    def from_line(cls, line: str) -> 'BootArtifact':
        return cls.from_descriptor(AssetDescriptor.from_line(line))

    def to_line(self) -> str:
        return self.descriptor.to_line()


class BootConfig(BaseModel):
    """Everything a node needs to fetch its binaries."""
    cluster_name: str
    instance_group: str
    architecture: Architecture
    install_dir: str = Field(default_factory=lambda: Config.INSTALL_DIR)
    artifacts: List[BootArtifact] = Field(default_factory=list)

    @field_validator('architecture', mode='before')
    @classmethod
    def known_architecture(cls, v: Any) -> Architecture:
        return parse_architecture(v)

    @field_validator('artifacts', mode='before')
    @classmethod
    def accept_lines(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [BootArtifact.from_line(item) if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode='after')
    def unique_file_names(self) -> 'BootConfig':
        seen = set()
        for artifact in self.artifacts:
            if artifact.file_name in seen:
                raise ValueError(f"duplicate artifact file name: {artifact.file_name}")
            seen.add(artifact.file_name)
        return self

    @property
    def bin_dir(self) -> Path:
        return Path(self.install_dir) / BIN_DIR

    @property
    def conf_path(self) -> Path:
        return Path(self.install_dir) / CONF_DIR / BOOT_CONFIG_FILE

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'BootConfig':
        """Load a boot configuration from YAML."""
        path = Path(path).expanduser()
        data = read_yaml_file(str(path))
        config = cls(**data)
        logger.debug(f"Loaded boot config for {config.instance_group} with {len(config.artifacts)} artifacts")
        return config

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Save the configuration, by default to <install_dir>/conf/boot.yaml."""
        path = Path(path).expanduser() if path else self.conf_path
        write_yaml_file(str(path), self.to_dict())
        return path
