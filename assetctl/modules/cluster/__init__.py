"""Cluster spec model and compilation into node boot configurations."""

from .compile import CompilationError, compile_cluster, compile_instance_group, required_components, write_boot_configs
from .models import ClusterSpec, ComponentConfig, ContainerRuntime, InstanceGroup, NodeRole, PackagesConfig

__all__ = [
    'CompilationError',
    'compile_cluster',
    'compile_instance_group',
    'required_components',
    'write_boot_configs',
    'ClusterSpec',
    'ComponentConfig',
    'ContainerRuntime',
    'InstanceGroup',
    'NodeRole',
    'PackagesConfig',
]
