import pytest
import yaml

from assetctl.modules.assets.builder import AssetBuilder
from assetctl.modules.assets.catalog import load_catalog
from assetctl.modules.assets.errors import ResolutionError
from assetctl.modules.cluster.compile import (
    CompilationError,
    compile_cluster,
    required_components,
    write_boot_configs,
)
from assetctl.modules.cluster.models import ClusterSpec
from assetctl.modules.nodeup.bootconfig import BootConfig

from .conftest import CNI_087_ARM64, KUBELET_121_AMD64, docker_digest, sha256_hex


@pytest.fixture
def builder(full_catalog):
    return AssetBuilder(full_catalog, file_repository="", remote_hashes=False)


def test_required_components(cluster_data):
    spec = ClusterSpec(**cluster_data)
    names = [name for name, _, _ in required_components(spec)]
    assert names == ["containerd", "kubelet", "kubectl", "cni"]


def test_runtime_version_required(cluster_data):
    cluster_data["containerd"] = {}
    with pytest.raises(ResolutionError, match="unable to find containerd version"):
        required_components(ClusterSpec(**cluster_data))


def test_compile_per_architecture(cluster_data, builder):
    configs = compile_cluster(ClusterSpec(**cluster_data), builder)
    assert list(configs) == ["master-us-test-1a", "nodes-arm"]

    master = configs["master-us-test-1a"]
    assert master.architecture.value == "amd64"
    assert [a.file_name for a in master.artifacts] == [
        "cri-containerd-cni-1.4.3-linux-amd64.tar.gz", "kubelet", "kubectl", "cni-plugins-linux-amd64-v0.8.7.tgz",
    ]
    assert master.artifacts[1].sha256 == KUBELET_121_AMD64

    arm = configs["nodes-arm"]
    runtime = arm.artifacts[0]
    assert runtime.file_name == "docker-20.10.0.tgz"
    assert runtime.sha256 == docker_digest("20.10.0", "arm64")
    assert runtime.urls == ["https://download.docker.com/linux/static/stable/aarch64/docker-20.10.0.tgz"]
    assert arm.artifacts[3].sha256 == CNI_087_ARM64


def test_compile_error_names_instance_group(cluster_data, builder):
    cluster_data["kubernetesVersion"] = "1.21.99"
    with pytest.raises(CompilationError) as excinfo:
        compile_cluster(ClusterSpec(**cluster_data), builder)
    assert excinfo.value.instance_group == "master-us-test-1a"
    assert "kubelet" in str(excinfo.value)
    assert "1.21.99" in str(excinfo.value)


def test_override_used_in_compilation(cluster_data, builder):
    digest = "ab" * 32
    cluster_data["containerd"]["packages"] = {
        "urlArm64": "https://mirror.example.com/containerd-arm64.tar.gz",
        "hashArm64": digest,
    }
    configs = compile_cluster(ClusterSpec(**cluster_data), builder)
    assert configs["nodes-arm"].artifacts[0].sha256 == digest
    assert configs["nodes-arm"].artifacts[0].file_name == "containerd-arm64.tar.gz"
    # amd64 override is incomplete, so the catalog still decides
    assert configs["master-us-test-1a"].artifacts[0].file_name.startswith("cri-containerd-cni-1.4.3")


def test_file_repository_rewrite(cluster_data, full_catalog):
    builder = AssetBuilder(full_catalog, file_repository="https://files.example.com/", remote_hashes=False)
    configs = compile_cluster(ClusterSpec(**cluster_data), builder)
    urls = [u for config in configs.values() for a in config.artifacts for u in a.urls]
    assert all(u.startswith("https://files.example.com/") for u in urls)
    assert configs["nodes-arm"].artifacts[0].urls == [
        "https://files.example.com/linux/static/stable/aarch64/docker-20.10.0.tgz",
    ]
    canonical = {asset.canonical_url for asset in builder.file_assets}
    assert "https://download.docker.com/linux/static/stable/aarch64/docker-20.10.0.tgz" in canonical


def test_write_boot_configs(tmp_path, cluster_data, builder):
    configs = compile_cluster(ClusterSpec(**cluster_data), builder)
    paths = write_boot_configs(configs, tmp_path)
    assert paths == [tmp_path / "master-us-test-1a" / "boot.yaml", tmp_path / "nodes-arm" / "boot.yaml"]

    loaded = BootConfig.load(paths[1])
    assert loaded == configs["nodes-arm"]


def test_kops_style_document(tmp_path, cluster_data):
    doc = tmp_path / "cluster.yaml"
    data = dict(cluster_data)
    name = data.pop("name")
    doc.write_text(
        "apiVersion: kops.k8s.io/v1alpha2\n"
        "kind: Cluster\n"
        f"metadata:\n  name: {name}\n"
        "spec:\n"
        "  kubernetesVersion: 1.21.0\n"
        "  containerd:\n    version: 1.4.3\n"
        "  instanceGroups:\n  - name: nodes\n    architecture: arm64\n"
    )
    spec = ClusterSpec.load(doc)
    assert spec.name == "minimal.example.com"
    assert spec.containerd.version == "1.4.3"
    assert spec.instance_groups[0].architecture.value == "arm64"


class ChecksumResponse:
    def __init__(self, text):
        self.text = text

    def raise_for_status(self):
        pass


class ChecksumSession:
    """Serves a .sha256 file for every URL it is asked for."""

    def __init__(self):
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        return ChecksumResponse(f"{sha256_hex(url.encode())}  {url.rsplit('/', 1)[-1]}\n")


def test_packaged_catalog_compiles_with_default_config(cluster_data, catalog):
    cluster_data["instanceGroups"] = cluster_data["instanceGroups"][:1]
    session = ChecksumSession()
    configs = compile_cluster(ClusterSpec(**cluster_data), AssetBuilder(catalog, session=session))

    master = configs["master-us-test-1a"]
    assert [a.file_name for a in master.artifacts] == [
        "cri-containerd-cni-1.4.3-linux-amd64.tar.gz", "kubelet", "kubectl", "cni-plugins-linux-amd64-v0.8.7.tgz",
    ]
    # kubelet, kubectl and cni hashes come from the published .sha256 files
    assert len(session.calls) == 3
    for artifact in master.artifacts[1:]:
        assert artifact.sha256 == sha256_hex(f"{artifact.urls[0]}.sha256".encode())


def test_packaged_catalog_arm64_containerd_needs_docker_pins(cluster_data, catalog):
    with pytest.raises(CompilationError) as excinfo:
        compile_cluster(ClusterSpec(**cluster_data), AssetBuilder(catalog, session=ChecksumSession()))
    assert excinfo.value.instance_group == "nodes-arm"
    assert "no docker 20.10.0 build for arm64" in str(excinfo.value)


def test_operator_catalog_pins_docker(tmp_path, cluster_data):
    extra = tmp_path / "docker-pins.yaml"
    extra.write_text(yaml.safe_dump({"components": {"docker": {"hashes": {
        "arm64": {"20.10.0": docker_digest("20.10.0", "arm64")},
    }}}}))
    builder = AssetBuilder(load_catalog(extra), session=ChecksumSession())
    configs = compile_cluster(ClusterSpec(**cluster_data), builder)
    assert configs["nodes-arm"].artifacts[0].sha256 == docker_digest("20.10.0", "arm64")


@pytest.mark.parametrize("document", [
    "name: c\nkubernetesVersion: 1.20\ncontainerd:\n  version: \"1.4.3\"\n",
    "name: c\nkubernetesVersion: \"1.21.0\"\ncontainerd:\n  version: 1.5\n",
])
def test_unquoted_yaml_version_rejected(tmp_path, document):
    doc = tmp_path / "cluster.yaml"
    doc.write_text(document)
    with pytest.raises(ValueError, match="must be a quoted string"):
        ClusterSpec.load(doc)


def test_quoted_yaml_version_kept(tmp_path):
    doc = tmp_path / "cluster.yaml"
    doc.write_text("name: c\nkubernetesVersion: \"1.20\"\ncontainerd:\n  version: \"1.5\"\n")
    spec = ClusterSpec.load(doc)
    assert spec.kubernetes_version == "1.20"
    assert spec.containerd.version == "1.5"
