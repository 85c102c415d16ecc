"""Settings CLI commands for milpay.

Manages settings.json - data directory, withholding rate, profile path.
"""

from pathlib import Path

import click

from milpay.sdk import (
    FLAT_TAX_RATE,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_settings_path,
    get_data_path,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - data_dir: custom data directory path (LES ledger, drill schedules)
    - flat_tax_rate: withholding rate used by every estimate
    - profile: path to profile.yaml (set via 'profile use')
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective values:")
    click.echo(f"  data_dir: {get_data_path()}" + ("" if "data_dir" in current else " (default)"))
    rate = current.get("flat_tax_rate", FLAT_TAX_RATE)
    click.echo(f"  flat_tax_rate: {rate}" + ("" if "flat_tax_rate" in current else " (default)"))


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom data_dir, revert to default")
def settings_data_dir(path, clear):
    """Set or clear the custom data directory.

    PATH is the directory where milpay stores the LES ledger and drill schedules.

    Examples:
        mil-pay settings data-dir ~/ws/personal-agent/milpay/data
        mil-pay settings data-dir --clear
    """
    if clear:
        current = load_settings()
        if "data_dir" in current:
            del current["data_dir"]
            save_settings(current)
            click.echo("Cleared data_dir setting.")
            click.echo(f"Data directory is now: {get_data_path()} (default)")
        else:
            click.echo("data_dir was not set.")
        return

    if not path:
        current_data_dir = get_setting("data_dir")
        if current_data_dir:
            click.echo(f"Current data_dir: {current_data_dir}")
        else:
            click.echo(f"No custom data_dir set. Using default: {get_data_path()}")
        return

    data_path = Path(path).expanduser().resolve()

    if data_path.exists():
        if not data_path.is_dir():
            raise click.ClickException(f"Path exists but is not a directory: {data_path}")
    else:
        try:
            data_path.mkdir(parents=True, exist_ok=True)
            click.echo(f"Created directory: {data_path}")
        except OSError as e:
            raise click.ClickException(f"Cannot create directory: {data_path}\n{e}")

    test_file = data_path / ".write_test"
    try:
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        raise click.ClickException(f"Directory is not writable: {data_path}\n{e}")

    set_setting("data_dir", str(data_path))
    click.echo(f"Set data_dir: {data_path}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("tax-rate")
@click.argument("rate", type=float, required=False)
@click.option("--clear", is_flag=True, help="Revert to the default 22% rate")
def settings_tax_rate(rate, clear):
    """Set the flat withholding RATE (0-1) used by all estimates.

    Examples:
        mil-pay settings tax-rate 0.12
        mil-pay settings tax-rate --clear
    """
    if clear:
        current = load_settings()
        current.pop("flat_tax_rate", None)
        save_settings(current)
        click.echo(f"flat_tax_rate reset to default ({FLAT_TAX_RATE})")
        return

    if rate is None:
        click.echo(f"flat_tax_rate: {get_setting('flat_tax_rate', FLAT_TAX_RATE)}")
        return

    if not 0 <= rate <= 1:
        raise click.BadParameter(f"Rate must be between 0 and 1, got {rate}", param_hint="RATE")

    set_setting("flat_tax_rate", rate)
    click.echo(f"Set flat_tax_rate: {rate}")
    click.echo(f"Saved to: {get_settings_path()}")
