# cli.py
import typer
from dotenv import load_dotenv

from backend.app import build_platform

app = typer.Typer(name="vitrine", help="Vitrine Command-Line Interface")
plugin_app = typer.Typer(name="plugins", help="Inspect installed plugins.")
assets_app = typer.Typer(name="assets", help="Publish and clean plugin assets.")
app.add_typer(plugin_app)
app.add_typer(assets_app)

MEDIA_OPTION = typer.Option(None, "--media", "-m", help="Media directory. Defaults to $VITRINE_MEDIA_DIR or 'media'.")


def _platform(media: str = None):
    load_dotenv()
    container, _, registry = build_platform(media_dir=media)
    return container.resolve("asset_resolver"), registry


def _require_plugin(registry, name: str):
    plugin = registry.plugin(name)
    if plugin is None:
        typer.secho(f"Error: Plugin '{name}' not found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return plugin


@plugin_app.command("list")
def list_plugins(media: str = MEDIA_OPTION):
    """List every installed plugin and its media root."""
    _, registry = _platform(media)
    for plugin in registry.plugins():
        typer.echo(f"{plugin.name:<24} {plugin.version or '-':<10} {plugin.media_root}")


@assets_app.command("list")
def list_assets(
    name: str = typer.Argument(..., help="Plugin name."),
    media: str = MEDIA_OPTION
):
    """List the assets a plugin currently publishes."""
    resolver, registry = _platform(media)
    plugin = _require_plugin(registry, name)

    assets = resolver.assets(plugin)
    if not assets:
        typer.secho(f"Plugin '{name}' publishes no assets.", fg=typer.colors.YELLOW)
        return
    for asset in assets.values():
        typer.echo(f"{asset.url():<60} <- {asset.root()}")


@assets_app.command("publish")
def publish_assets(
    name: str = typer.Argument(..., help="Plugin name."),
    media: str = MEDIA_OPTION
):
    """Clean stale files, then publish all assets of a plugin."""
    resolver, registry = _platform(media)
    _require_plugin(registry, name)

    try:
        published = resolver.publish_all(name)
    except OSError as e:
        typer.secho(f"🔥 Error while publishing assets: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"✅ Published {len(published)} assets of '{name}'.", fg=typer.colors.GREEN)


@assets_app.command("clean")
def clean_assets(
    name: str = typer.Argument(..., help="Plugin name."),
    media: str = MEDIA_OPTION
):
    """Remove published files a plugin no longer declares."""
    resolver, registry = _platform(media)
    _require_plugin(registry, name)

    try:
        removed = resolver.clean(name)
    except OSError as e:
        typer.secho(f"🔥 Error while cleaning assets: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    for entry in removed:
        typer.echo(f"  - Removed: {entry}")
    typer.secho(f"🧹 Removed {len(removed)} stale entries for '{name}'.", fg=typer.colors.BLUE)


if __name__ == "__main__":
    app()
