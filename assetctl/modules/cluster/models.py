"""Cluster spec model, limited to what asset resolution consumes."""
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from assetctl.modules.assets.architectures import Architecture, parse_architecture
from assetctl.modules.assets.models import OverridePackage
from assetctl.utils.files import read_yaml_file


def _require_string_version(v: Any) -> Any:
    # YAML reads an unquoted 1.20 as the float 1.2
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        raise ValueError(f"version {v!r} must be a quoted string in YAML, e.g. \"1.20\"")
    return v


class ContainerRuntime(str, Enum):
    CONTAINERD = 'containerd'
    DOCKER = 'docker'


class NodeRole(str, Enum):
    MASTER = 'master'
    NODE = 'node'


class PackagesConfig(BaseModel):
    """Operator supplied package URLs and hashes per architecture."""
    url_amd64: Optional[str] = Field(default=None, alias='urlAmd64')
    hash_amd64: Optional[str] = Field(default=None, alias='hashAmd64')
    url_arm64: Optional[str] = Field(default=None, alias='urlArm64')
    hash_arm64: Optional[str] = Field(default=None, alias='hashArm64')

    model_config = {'populate_by_name': True}

    def to_override(self) -> OverridePackage:
        return OverridePackage(self.url_amd64, self.hash_amd64, self.url_arm64, self.hash_arm64)


class ComponentConfig(BaseModel):
    """Version and optional package override for one component."""
    version: Optional[str] = None
    packages: Optional[PackagesConfig] = None

    @field_validator('version', mode='before')
    @classmethod
    def version_is_quoted(cls, v: Any) -> Any:
        return _require_string_version(v)

    @property
    def overrides(self) -> Optional[OverridePackage]:
        return self.packages.to_override() if self.packages else None


class AssetsConfig(BaseModel):
    file_repository: Optional[str] = Field(default=None, alias='fileRepository')

    model_config = {'populate_by_name': True}


class InstanceGroup(BaseModel):
    name: str
    role: NodeRole = NodeRole.NODE
    architecture: Architecture = Architecture.AMD64

    @field_validator('architecture', mode='before')
    @classmethod
    def known_architecture(cls, v: Any) -> Architecture:
        return parse_architecture(v)


class ClusterSpec(BaseModel):
    """The parts of a cluster definition that select node binaries."""
    name: str
    kubernetes_version: str = Field(alias='kubernetesVersion')
    container_runtime: ContainerRuntime = Field(default=ContainerRuntime.CONTAINERD, alias='containerRuntime')
    containerd: ComponentConfig = Field(default_factory=ComponentConfig)
    docker: ComponentConfig = Field(default_factory=ComponentConfig)
    cni: ComponentConfig = Field(default_factory=ComponentConfig)
    nodeup: ComponentConfig = Field(default_factory=ComponentConfig)
    assets: AssetsConfig = Field(default_factory=AssetsConfig)
    instance_groups: List[InstanceGroup] = Field(default_factory=list, alias='instanceGroups')

    model_config = {'populate_by_name': True, 'extra': 'ignore'}

    @field_validator('kubernetes_version', mode='before')
    @classmethod
    def kubernetes_version_is_quoted(cls, v: Any) -> Any:
        return _require_string_version(v)

    @model_validator(mode='after')
    def unique_instance_groups(self) -> 'ClusterSpec':
        names = [ig.name for ig in self.instance_groups]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate instance groups: {', '.join(duplicates)}")
        return self

    @property
    def runtime_config(self) -> ComponentConfig:
        return self.containerd if self.container_runtime == ContainerRuntime.CONTAINERD else self.docker

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ClusterSpec':
        """Load a cluster spec from YAML (bare or under a top-level ``spec``)."""
        data = read_yaml_file(str(Path(path).expanduser()))
        if 'spec' in data and isinstance(data['spec'], dict):
            spec = dict(data['spec'])
            spec.setdefault('name', (data.get('metadata') or {}).get('name'))
            data = spec
        return cls(**data)
