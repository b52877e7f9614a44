"""Shared fixtures for the assetctl tests."""
import hashlib

import pytest

from assetctl.modules.assets.catalog import DEFAULT_CATALOG_PATH, build_catalog, load_catalog, set_catalog
from assetctl.utils.files import merge_dicts, read_yaml_file

KUBELET_121_AMD64 = "8e2f2cc8a0e8c85ad7b4bd3ba1e7a1ba1e0f18e1d5fd3c1f1b5a48b0e21e3a11"
KUBELET_121_ARM64 = "0f06a1e0a7e1a1b7b2e5c1c4b0b9b0d7e3a5bb8c6f9b0ff6f3a1f0a1c2b3d4e5"
KUBECTL_121_AMD64 = "9f74f2fa7ee32ad07e17211725992248470310ca1988214518806b39b1dad9f0"
KUBECTL_121_ARM64 = "a4dd7100f547a40d3e2f83850d0bab75c6ea5eb553f0a80adcf73155bef1fd0d"
CNI_087_AMD64 = "977824932d5667c7a37aa6a3cbba40100a6873e7bd97e83e8be837e3e7afd0a8"
CNI_087_ARM64 = "ae13d7b5c05bd180ea9b5b68f44bdaa7bfb41034a2ef1d68fd8e1259797d642f"

DOCKER_VERSIONS = ("17.09.0", "19.03.13", "19.03.14", "20.10.0", "20.10.6", "20.10.7")


def docker_digest(version: str, arch: str) -> str:
    """Stand-in digest for a docker static tarball pinned by the operator."""
    return hashlib.sha256(f"docker-{version}-{arch}.tgz".encode()).hexdigest()


PINNED_DOCKER = {
    "components": {
        "docker": {"hashes": {
            arch: {v: docker_digest(v, arch) for v in DOCKER_VERSIONS} for arch in ("amd64", "arm64")
        }},
    }
}

PINNED_KUBERNETES = {
    "components": {
        "kubelet": {"hashes": {"amd64": {"1.21.0": KUBELET_121_AMD64}, "arm64": {"1.21.0": KUBELET_121_ARM64}}},
        "kubectl": {"hashes": {"amd64": {"1.21.0": KUBECTL_121_AMD64}, "arm64": {"1.21.0": KUBECTL_121_ARM64}}},
        "cni": {"hashes": {"amd64": {"0.8.7": CNI_087_AMD64}, "arm64": {"0.8.7": CNI_087_ARM64}}},
    }
}


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@pytest.fixture(autouse=True)
def reset_process_catalog():
    """Never leak a process-wide catalog between tests."""
    set_catalog(None)
    yield
    set_catalog(None)


@pytest.fixture(scope="session")
def catalog():
    """The packaged catalog."""
    return load_catalog()


@pytest.fixture(scope="session")
def full_catalog():
    """The packaged catalog plus pinned docker, kubernetes and CNI hashes."""
    data = merge_dicts(read_yaml_file(str(DEFAULT_CATALOG_PATH)), PINNED_KUBERNETES)
    data = merge_dicts(data, PINNED_DOCKER)
    return build_catalog(data)


@pytest.fixture
def cluster_data():
    return {
        "name": "minimal.example.com",
        "kubernetesVersion": "1.21.0",
        "containerRuntime": "containerd",
        "containerd": {"version": "1.4.3"},
        "cni": {"version": "0.8.7"},
        "instanceGroups": [
            {"name": "master-us-test-1a", "role": "master", "architecture": "amd64"},
            {"name": "nodes-arm", "role": "node", "architecture": "arm64"},
        ],
    }
