import logging
import sys

import typer

from assetctl.commands import catalog, cluster, resolve
from assetctl.config import Config
from assetctl.logging import setup_logging

app = typer.Typer(help="Resolve, pin and publish the binaries Kubernetes nodes download at boot.")

debug_mode = False

# Add all command groups
app.add_typer(catalog.app, name="catalog")
app.add_typer(cluster.app, name="cluster")
app.command("resolve")(resolve.resolve_asset)


# Global options callback
@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """assetctl - node asset supply chain."""
    global debug_mode
    debug_mode = debug
    setup_logging(debug)
    try:
        Config.validate()
    except ValueError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Debug mode enabled")


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)
