"""Cluster spec compilation into per-instance-group boot configurations."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from assetctl.modules.assets.builder import AssetBuilder
from assetctl.modules.assets.errors import AssetError, ResolutionError
from assetctl.modules.assets.models import OverridePackage
from assetctl.modules.nodeup.bootconfig import BOOT_CONFIG_FILE, BootArtifact, BootConfig

from .models import ClusterSpec, InstanceGroup

logger = logging.getLogger("assetctl.compile")

# (component, version, overrides)
Requirement = Tuple[str, str, Optional[OverridePackage]]


class CompilationError(AssetError):
    """Cluster compilation failed for an instance group."""

    def __init__(self, instance_group: str, cause: Exception):
        self.instance_group = instance_group
        self.cause = cause
        super().__init__(f"instance group {instance_group}: {cause}")


def required_components(spec: ClusterSpec) -> List[Requirement]:
    """Components every node of the cluster downloads at boot, in fetch order."""
    runtime = spec.container_runtime.value
    runtime_config = spec.runtime_config
    if not runtime_config.version and runtime_config.overrides is None:
        raise ResolutionError(runtime, detail=f"unable to find {runtime} version")

    requirements: List[Requirement] = [
        (runtime, runtime_config.version or '', runtime_config.overrides),
        ('kubelet', spec.kubernetes_version, None),
        ('kubectl', spec.kubernetes_version, None),
    ]
    if spec.cni.version or spec.cni.overrides:
        requirements.append(('cni', spec.cni.version or '', spec.cni.overrides))
    if spec.nodeup.version or spec.nodeup.overrides:
        requirements.append(('nodeup', spec.nodeup.version or '', spec.nodeup.overrides))
    return requirements


def compile_instance_group(spec: ClusterSpec, group: InstanceGroup, builder: AssetBuilder) -> BootConfig:
    """Resolve every required component for one instance group."""
    try:
        artifacts = []
        for component, version, overrides in required_components(spec):
            descriptor = builder.build(component, group.architecture, version, overrides)
            artifacts.append(BootArtifact.from_descriptor(descriptor))
        return BootConfig(
            cluster_name=spec.name,
            instance_group=group.name,
            architecture=group.architecture,
            artifacts=artifacts,
        )
    except (AssetError, ValueError) as e:
        raise CompilationError(group.name, e) from e


def compile_cluster(spec: ClusterSpec, builder: Optional[AssetBuilder] = None) -> Dict[str, BootConfig]:
    """Compile boot configurations for every instance group.

    Raises:
        CompilationError: naming the instance group and the exact
            component/arch/version that could not be resolved
    """
    if builder is None:
        builder = AssetBuilder(file_repository=spec.assets.file_repository)
    if not spec.instance_groups:
        logger.warning(f"⚠️  Cluster {spec.name} has no instance groups")

    configs = {}
    for group in spec.instance_groups:
        logger.info(f"🔧 Resolving assets for {group.name} ({group.architecture})")
        configs[group.name] = compile_instance_group(spec, group, builder)
    return configs


def write_boot_configs(configs: Dict[str, BootConfig], out_dir: Union[str, Path]) -> List[Path]:
    """Write each boot configuration to <out_dir>/<instance group>/boot.yaml."""
    out_dir = Path(out_dir)
    paths = []
    for name, config in configs.items():
        paths.append(config.save(out_dir / name / BOOT_CONFIG_FILE))
    return paths
