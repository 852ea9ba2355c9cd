"""Configuration file commands.

Commands:
    - config validate          # Parse config.json and report problems
    - config show              # Print the parsed configuration
    - config init [--force]    # Write an example config.json
"""

import sys
from pathlib import Path
from typing import Optional

import click

from ambientled.exceptions import ConfigurationError
from ambientled.models import Configuration
from ambientled.services import CONFIG_FILENAME
from ambientled.utils import PydanticPersistence


def _config_path(ctx: click.Context) -> Path:
    directory: Optional[Path] = (ctx.obj or {}).get("directory")
    return (directory or Path.cwd()) / CONFIG_FILENAME


def _load_or_exit(path: Path) -> Configuration:
    from ambientled.cli.main import report_error

    try:
        return PydanticPersistence.load_json(path, Configuration)
    except FileNotFoundError:
        click.echo(f"[FAIL] {path} does not exist. Run 'ambientled config init' to create one.", err=True)
        sys.exit(1)
    except ConfigurationError as e:
        click.echo(f"[FAIL] {path}", err=True)
        report_error(e)
        sys.exit(1)


@click.group(name="config")
def config():
    """Inspect and create config.json."""
    pass


@config.command(name="validate")
@click.pass_context
def validate(ctx: click.Context):
    """Check that config.json parses and satisfies every constraint."""
    path = _config_path(ctx)
    configuration = _load_or_exit(path)
    click.echo(f"[OK] {path}: {len(configuration.strips)} strip(s)")


@config.command(name="show")
@click.pass_context
def show(ctx: click.Context):
    """Print the parsed configuration."""
    path = _config_path(ctx)
    configuration = _load_or_exit(path)

    click.echo(f"Configuration: {path}\n")
    click.echo(f"  fps:  {configuration.fps}")
    click.echo(f"  ups:  {configuration.ups}")
    click.echo(f"  lerp: {configuration.lerp}")
    click.echo(f"\nStrips ({len(configuration.strips)}):")
    for i, strip in enumerate(configuration.strips):
        click.echo(
            f"  [{i}] {strip.key}  leds={strip.led_count}  segments={len(strip.segments)}  "
            f"maxBrightness={strip.max_brightness}  "
            f"reduction=({strip.reduction_r}, {strip.reduction_g}, {strip.reduction_b})"
        )


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config.json (a .bak copy is kept)")
@click.pass_context
def init(ctx: click.Context, force: bool):
    """Write an example config.json."""
    path = _config_path(ctx)
    if path.exists() and not force:
        click.echo(f"[FAIL] {path} already exists. Use --force to overwrite.", err=True)
        sys.exit(1)

    PydanticPersistence.save_json(Configuration.example(), path, backup=True)
    click.echo(f"[OK] Wrote example configuration to {path}")
