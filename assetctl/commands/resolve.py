from typing import Optional

import typer

from assetctl.modules.assets.architectures import Architecture
from assetctl.modules.assets.builder import AssetBuilder
from assetctl.modules.assets.errors import AssetError
from assetctl.modules.assets.models import OverridePackage


def resolve_asset(
    component: str = typer.Argument(..., help="Component name (e.g. containerd, kubelet)"),
    version: str = typer.Option(..., "--version", "-v", help="Requested version"),
    arch: Architecture = typer.Option(Architecture.AMD64, "--arch", "-a", help="Target architecture"),
    url: Optional[str] = typer.Option(None, help="Override package URL for the architecture"),
    sha256: Optional[str] = typer.Option(None, "--hash", help="Override package SHA-256 for the architecture"),
    file_repository: Optional[str] = typer.Option(None, help="Rewrite URLs onto this file repository"),
    remote_hashes: Optional[bool] = typer.Option(None, "--remote-hashes/--no-remote-hashes", help="Look up unpinned hashes from .sha256 files"),
    line: bool = typer.Option(False, "--line", help="Print the single-line <hash>@<urls> form"),
):
    """Resolve a component version into a verifiable asset descriptor."""
    overrides = None
    if url or sha256:
        if not (url and sha256):
            typer.secho("❌ --url and --hash must be given together", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
        if arch == Architecture.AMD64:
            overrides = OverridePackage(url_amd64=url, hash_amd64=sha256)
        else:
            overrides = OverridePackage(url_arm64=url, hash_arm64=sha256)

    try:
        builder = AssetBuilder(file_repository=file_repository, remote_hashes=remote_hashes)
        resolution = builder.build_detailed(component, arch, version, overrides)
    except AssetError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    descriptor = resolution.descriptor
    if line:
        typer.echo(descriptor.to_line())
        return

    typer.echo(f"component: {resolution.component}")
    typer.echo(f"arch:      {resolution.architecture.value}")
    typer.echo(f"version:   {resolution.version}")
    typer.echo(f"source:    {resolution.source}")
    if resolution.resolved_component != resolution.component or resolution.resolved_version != resolution.version:
        typer.echo(f"via:       {resolution.resolved_component} {resolution.resolved_version}")
    typer.echo(f"file:      {descriptor.file_name}")
    typer.echo(f"sha256:    {descriptor.sha256}")
    for u in descriptor.urls:
        typer.echo(f"url:       {u}")
