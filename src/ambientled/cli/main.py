"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from ambientled import __version__

from .commands import config, serial_group, test

logger = logging.getLogger(__name__)


def default_log_path() -> Path:
    """Default rotating log file location."""
    return Path.home() / ".ambientled" / "logs" / "ambientled.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode logging to ./ambientled-debug.log
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file in use
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit log level wins when logging to a custom file
    if log_file:
        level = getattr(logging, log_level.upper())

    if debug and not log_file:
        log_path = Path.cwd() / "ambientled-debug.log"
    elif log_file:
        log_path = log_file
    else:
        log_path = default_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Warnings and errors also go to the console; the service runs headless
    console_handler = logging.StreamHandler()
    console_handler.setLevel(min(level, logging.WARNING))
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


def report_error(error: Exception, log_path: Optional[Path] = None) -> None:
    """Print a formatted error (and recovery hint) to stderr."""
    from ambientled.exceptions import format_error_for_display

    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="ambientled")
@click.option(
    '--dir',
    '-d',
    'directory',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory containing config.json (default: current directory)'
)
@click.option(
    '--paused',
    is_flag=True,
    help='Start with output paused'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./ambientled-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    directory: Optional[Path],
    paused: bool,
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    Ambient LED - drive LED strips from config.json.

    Without a subcommand, loads config.json from the working directory (or
    --dir), connects every strip and keeps running until Ctrl+C. Edits to
    config.json are applied live.

    \b
    Examples:
      # Run with ./config.json
      ambientled

      # Run with a config in another directory, verbose
      ambientled --dir ~/.ambientled -v

      # Check a config file
      ambientled config validate

      # List serial devices
      ambientled serial list
    """
    ctx.ensure_object(dict)
    ctx.obj["directory"] = directory

    if ctx.invoked_subcommand is not None:
        return

    from ambientled.app import AmbientLedApp

    log_path = setup_logging(verbose, debug, log_file, log_level)
    logger.info("Starting Ambient LED")

    app = AmbientLedApp(directory=directory)
    if paused:
        app.pause()

    try:
        app.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        click.echo("\nShutting down...", err=True)
    except Exception as e:
        logger.exception("Error running application")
        report_error(e, log_path)
        sys.exit(1)
    finally:
        app.shutdown()


cli.add_command(config)
cli.add_command(serial_group)
cli.add_command(test)

if __name__ == "__main__":
    cli()
