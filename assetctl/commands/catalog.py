from typing import Optional

import typer

from assetctl.modules.assets.architectures import Architecture
from assetctl.modules.assets.catalog import get_catalog
from assetctl.modules.assets.errors import AssetError

app = typer.Typer(help="Inspect the component catalog.")


@app.command("list")
def list_components():
    """List catalog components and their version floors."""
    try:
        catalog = get_catalog()
    except AssetError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    for name in sorted(catalog):
        spec = catalog[name]
        line = f"{name:<12} min {spec.minimum_version}"
        if spec.fallback:
            line += f"  fallback: {spec.fallback.bundler}"
            if spec.fallback.default_version:
                line += f" (default {spec.fallback.default_version})"
        typer.echo(line)
        if spec.description:
            typer.echo(f"{'':<12} {spec.description}")


@app.command("versions")
def list_versions(
    component: str = typer.Argument(..., help="Component name"),
    arch: Optional[Architecture] = typer.Option(None, "--arch", "-a", help="Only versions with a native build for this architecture"),
):
    """List versions with pinned hashes for a component."""
    try:
        spec = get_catalog().component(component)
    except AssetError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    versions = spec.versions(arch)
    if not versions:
        typer.echo(f"No pinned versions for {component}")
        return
    for version in versions:
        arches = [a.value for a in Architecture if spec.native_hash(a, version)]
        typer.echo(f"{version:<10} {', '.join(arches)}")
