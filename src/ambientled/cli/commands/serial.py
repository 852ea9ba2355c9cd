"""Serial device command implementations."""

import click

from ambientled.transport import list_serial_devices


@click.group(name="serial")
def serial_group():
    """Serial device commands."""
    pass


@serial_group.command(name="list")
def list_serial():
    """List serial devices usable as a strip's "com" value."""
    ports = list_serial_devices()

    click.echo("Serial Devices:\n")
    if not ports:
        click.echo("  No serial devices found.")
        return

    for i, port in enumerate(ports):
        details = [part for part in (port.description, port.manufacturer, port.serial_number) if part]
        suffix = f"  ({', '.join(details)})" if details else ""
        click.echo(f"  [{i}] {port.device}{suffix}")
