import pytest
from typer.testing import CliRunner

from assetctl.cli import app
from assetctl.modules.assets.catalog import set_catalog
from assetctl.modules.nodeup.bootconfig import BootConfig

from .conftest import docker_digest

runner = CliRunner()


@pytest.fixture(autouse=True)
def pinned_catalog(full_catalog):
    set_catalog(full_catalog)


def test_resolve_native():
    result = runner.invoke(app, ["resolve", "containerd", "--version", "1.4.9", "--no-remote-hashes"])
    assert result.exit_code == 0, result.output
    assert "source:    native" in result.output
    assert "9911479f86012d6eab7e0f532da8f807a8b0f555ee09ef89367d8c31243073bb" in result.output


def test_resolve_fallback_line():
    result = runner.invoke(app, ["resolve", "containerd", "-v", "1.4.3", "-a", "arm64", "--line", "--no-remote-hashes"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == (
        docker_digest("20.10.0", "arm64") +
        "@https://download.docker.com/linux/static/stable/aarch64/docker-20.10.0.tgz"
    )


def test_resolve_unsupported_version():
    result = runner.invoke(app, ["resolve", "containerd", "-v", "1.2.0", "--no-remote-hashes"])
    assert result.exit_code == 1
    assert "unsupported legacy version" in result.output


def test_resolve_override_requires_both():
    result = runner.invoke(app, ["resolve", "containerd", "-v", "1.4.3", "--url", "https://example.com/c.tgz"])
    assert result.exit_code == 2


def test_resolve_override():
    digest = "cd" * 32
    result = runner.invoke(app, ["resolve", "containerd", "-v", "9.9.9", "--url", "https://example.com/c.tgz",
                                 "--hash", digest, "--no-remote-hashes"])
    assert result.exit_code == 0, result.output
    assert "source:    override" in result.output


def test_catalog_list():
    result = runner.invoke(app, ["catalog", "list"])
    assert result.exit_code == 0
    assert "containerd" in result.output
    assert "fallback: docker (default 1.4.6)" in result.output


def test_catalog_versions():
    result = runner.invoke(app, ["catalog", "versions", "docker", "--arch", "arm64"])
    assert result.exit_code == 0
    assert "20.10.0" in result.output
    assert "17.03.2" not in result.output


def test_cluster_compile(tmp_path, cluster_data):
    import yaml

    spec_file = tmp_path / "cluster.yaml"
    spec_file.write_text(yaml.safe_dump(cluster_data))
    out = tmp_path / "out"
    result = runner.invoke(app, ["cluster", "compile", str(spec_file), "--out", str(out), "--no-remote-hashes"])
    assert result.exit_code == 0, result.output
    config = BootConfig.load(out / "nodes-arm" / "boot.yaml")
    assert config.artifacts[0].file_name == "docker-20.10.0.tgz"


def test_cluster_compile_failure(tmp_path, cluster_data):
    import yaml

    cluster_data["containerd"]["version"] = "1.2.0"
    spec_file = tmp_path / "cluster.yaml"
    spec_file.write_text(yaml.safe_dump(cluster_data))
    result = runner.invoke(app, ["cluster", "compile", str(spec_file), "--out", str(tmp_path / "out"),
                                 "--no-remote-hashes"])
    assert result.exit_code == 1
    assert "master-us-test-1a" in result.output


def test_cluster_assets_with_repository(tmp_path, cluster_data):
    import yaml

    spec_file = tmp_path / "cluster.yaml"
    spec_file.write_text(yaml.safe_dump(cluster_data))
    result = runner.invoke(app, ["cluster", "assets", str(spec_file), "--file-repository",
                                 "https://files.example.com", "--no-remote-hashes"])
    assert result.exit_code == 0, result.output
    assert "https://files.example.com/linux/static/stable/aarch64/docker-20.10.0.tgz" in result.output
