"""Test command: light every configured strip with a solid color."""

import logging
import time

import click

from ambientled.core import SolidColorSource

logger = logging.getLogger(__name__)


@click.command(name="test")
@click.option(
    "--color",
    "-c",
    nargs=3,
    type=click.IntRange(0, 255),
    default=(255, 255, 255),
    show_default=True,
    help="Color as R G B",
)
@click.option(
    "--seconds",
    "-s",
    type=click.FloatRange(min=0.0, min_open=True),
    default=5.0,
    show_default=True,
    help="How long to show the color",
)
@click.pass_context
def test(ctx: click.Context, color: tuple[int, int, int], seconds: float):
    """
    Show a solid color on every strip in config.json.

    Uses the normal update loop (smoothing, brightness limits and
    reconnects included), then blanks the strips and exits.
    """
    from ambientled.app import AmbientLedApp
    from ambientled.cli.main import report_error
    from ambientled.exceptions import AmbientLedError
    from ambientled.models import Color

    app = AmbientLedApp(
        directory=(ctx.obj or {}).get("directory"),
        source=SolidColorSource(Color.from_rgb(color)),
    )

    try:
        app.start()
        if app.config is None:
            click.echo("[FAIL] No valid config.json found", err=True)
            ctx.exit(1)

        click.echo(f"Showing ({color[0]}, {color[1]}, {color[2]}) on {len(app.config.strips)} strip(s)...")
        time.sleep(seconds)
    except AmbientLedError as e:
        report_error(e)
        ctx.exit(1)
    except KeyboardInterrupt:
        click.echo("\nStopping...")
    finally:
        app.shutdown()

    click.echo("[OK] Done")
