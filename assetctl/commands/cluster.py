from pathlib import Path
from typing import Optional

import typer
import yaml

from assetctl.modules.assets.builder import AssetBuilder
from assetctl.modules.assets.errors import AssetError
from assetctl.modules.cluster.compile import compile_cluster, write_boot_configs
from assetctl.modules.cluster.models import ClusterSpec

app = typer.Typer(help="Compile cluster specs into node boot configurations.")


def _load_spec(path: Path) -> ClusterSpec:
    try:
        return ClusterSpec.load(path)
    except (OSError, ValueError, yaml.YAMLError, AssetError) as e:
        typer.secho(f"❌ Invalid cluster spec {path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _builder(spec: ClusterSpec, file_repository, remote_hashes) -> AssetBuilder:
    repository = file_repository if file_repository is not None else spec.assets.file_repository
    return AssetBuilder(file_repository=repository, remote_hashes=remote_hashes)


@app.command("compile")
def compile_cmd(
    file: Path = typer.Argument(..., help="Cluster spec YAML"),
    out: Path = typer.Option(Path("build"), "--out", "-o", help="Output directory"),
    file_repository: Optional[str] = typer.Option(None, help="Rewrite asset URLs onto this file repository"),
    remote_hashes: Optional[bool] = typer.Option(None, "--remote-hashes/--no-remote-hashes", help="Look up unpinned hashes from .sha256 files"),
):
    """Resolve every node binary and write one boot config per instance group."""
    spec = _load_spec(file)
    typer.echo(f"🔧 Compiling cluster {spec.name}")
    try:
        builder = _builder(spec, file_repository, remote_hashes)
        configs = compile_cluster(spec, builder)
    except AssetError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    for path in write_boot_configs(configs, out):
        typer.echo(f"✅ Wrote {path}")


@app.command("assets")
def assets_cmd(
    file: Path = typer.Argument(..., help="Cluster spec YAML"),
    file_repository: Optional[str] = typer.Option(None, help="File repository the assets will be served from"),
    remote_hashes: Optional[bool] = typer.Option(None, "--remote-hashes/--no-remote-hashes", help="Look up unpinned hashes from .sha256 files"),
):
    """List the files to copy into the file repository (canonical -> mirror)."""
    spec = _load_spec(file)
    try:
        builder = _builder(spec, file_repository, remote_hashes)
        configs = compile_cluster(spec, builder)
    except AssetError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if builder.file_repository:
        for asset in builder.file_assets:
            typer.echo(f"{asset.sha256}  {asset.canonical_url} -> {asset.download_url}")
        return

    seen = set()
    for config in configs.values():
        for artifact in config.artifacts:
            line = artifact.to_line()
            if line not in seen:
                seen.add(line)
                typer.echo(line)
