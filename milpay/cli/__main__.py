"""milpay CLI - Command-line interface for military pay calculators and LES analysis."""

import click

from milpay import __version__

from .calc_commands import at_pay, drill_pay, orders_compare
from .les_commands import les as les_group
from .profile_commands import profile as profile_group
from .reserve_commands import drill as drill_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="mil-pay")
def cli():
    """milpay - Military pay calculators and LES analysis.

    Estimate drill and annual training pay, compare orders against
    civilian income, record LES entries and track drill schedules.

    Configuration is loaded from (in order):

    \b
    1. MILPAY_CONFIG_PATH environment variable
    2. settings.json 'profile' key (if set via CLI)
    3. ~/.config/milpay/profile.yaml (XDG default)

    Run 'mil-pay profile show' to see profile status and readiness.
    """
    pass


cli.add_command(profile_group)
cli.add_command(settings_group)
cli.add_command(drill_pay)
cli.add_command(at_pay)
cli.add_command(orders_compare)
cli.add_command(les_group)
cli.add_command(drill_group)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
