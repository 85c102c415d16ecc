"""Profile CLI commands for milpay.

Manages the service member profile (profile.yaml) - grade, BAH, civilian job.
"""

from pathlib import Path

import click
import yaml

from milpay.sdk import (
    # Settings (for profile use command)
    load_settings,
    set_setting,
    # Profile (user data)
    get_profile_path,
    get_profile_value,
    set_profile_value,
    ProfileNotFoundError,
    # Profile validation
    validate_profile,
    validate_profile_key,
)

_BOOLEAN_VALUES = {
    "true": True, "yes": True, "1": True,
    "false": False, "no": False, "0": False,
}
_STRING_KEYS = {"service_member.pay_grade", "service_member.branch", "service_member.name",
                "civilian_job.employer_name"}
_BOOLEAN_KEYS = {"civilian_job.differential_pay_policy"}


def _validate_profile_file(path: Path):
    """Validate a profile file at the given path.

    Returns:
        Tuple of (profile_dict, validation_result) if valid

    Raises:
        click.ClickException: If file is invalid YAML or fails schema validation
    """
    if path.suffix not in (".yaml", ".yml"):
        raise click.ClickException(f"Profile must be a YAML file: {path}")

    try:
        with open(path, "r") as f:
            profile_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}")

    if not isinstance(profile_data, dict):
        raise click.ClickException(f"Profile must be a YAML dictionary, got {type(profile_data).__name__}")

    if not profile_data:
        raise click.ClickException(f"Profile is empty: {path}")

    validation = validate_profile(profile=profile_data)
    if validation.errors:
        validation.location_path = path
        _display_validation(validation, show_contents=False, raise_on_errors=True)

    return profile_data, validation


def _display_validation(validation, show_contents=True, raise_on_errors=False):
    """Display validation results consistently across commands.

    Returns:
        True if valid (no errors), False if has errors
    """
    has_errors = bool(validation.errors)

    if validation.errors:
        click.echo()
        click.echo("Validation Errors (profile is invalid):")
        for error in validation.errors:
            click.echo(f"  ! {error}")
        click.echo()
        click.echo(f"Profile path: {validation.location_path}")

        if raise_on_errors:
            raise click.ClickException("Profile has validation errors. Fix them before continuing.")

    click.echo()
    click.echo("Feature Readiness:")
    for feature, status in validation.features.items():
        icon = "+" if status["ready"] else "-"
        click.echo(f"  {icon} {feature}: {status['message']}")

    all_missing = []
    for status in validation.features.values():
        all_missing.extend(status["missing"])

    if all_missing:
        click.echo()
        click.echo("Missing configuration:")
        for item in sorted(set(all_missing)):
            click.echo(f"  - {item}")

    if validation.warnings:
        click.echo()
        click.echo("Warnings:")
        for warning in validation.warnings:
            click.echo(f"  - {warning}")

    if show_contents:
        click.echo()
        click.echo("---")
        click.echo(yaml.dump(validation.profile, default_flow_style=False, sort_keys=False))

    return not has_errors


def _parse_value(key: str, value: str):
    """Convert a command-line string to the type the profile key expects."""
    if key in _BOOLEAN_KEYS:
        parsed = _BOOLEAN_VALUES.get(value.lower())
        if parsed is None:
            raise click.ClickException(f"{key} must be true or false, got '{value}'")
        return parsed

    if key in _STRING_KEYS:
        return value

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


# =============================================================================
# PROFILE commands - service member profile (profile.yaml)
# =============================================================================

@click.group()
def profile():
    """Manage your profile configuration (profile.yaml).

    Profile holds the defaults the calculators use:
    - service_member: pay_grade, years_of_service, branch
    - housing: bah_amount
    - civilian_job: annual_salary or hourly_rate + hours_per_week,
      differential_pay_policy
    - reference_data: year of the pay tables
    """
    pass


@profile.command("show")
def profile_show():
    """Show the active profile, its location, and feature readiness."""
    profile_path = get_profile_path(require_exists=False)

    if load_settings().get("profile"):
        location_label = "custom"
    elif profile_path.exists():
        location_label = "central (default)"
    else:
        location_label = "not created"

    click.echo(f"Profile: {profile_path}")
    click.echo(f"Location: {location_label}")

    if not profile_path.exists():
        click.echo()
        click.echo("Profile does not exist yet. Create with:")
        click.echo("  mil-pay profile set service_member.pay_grade E-4")
        return

    try:
        validation = validate_profile()
    except ProfileNotFoundError as e:
        raise click.ClickException(str(e))
    _display_validation(validation, show_contents=True)


@profile.command("get")
@click.argument("key")
def profile_get(key):
    """Get a profile configuration value.

    KEY is a dot-notation path like 'service_member.pay_grade'
    """
    value = get_profile_value(key)
    if value is None:
        raise click.ClickException(f"Key '{key}' not found in profile")

    if isinstance(value, (dict, list)):
        raise click.ClickException(
            f"Key '{key}' is a complex value. Use 'mil-pay profile show' to view."
        )

    click.echo(value)


@profile.command("set")
@click.argument("key")
@click.argument("value")
def profile_set(key, value):
    """Set a profile configuration value.

    KEY is a dot-notation path like 'service_member.pay_grade'
    VALUE is the value to set (string, number or true/false)

    Examples:
        mil-pay profile set service_member.pay_grade E-5
        mil-pay profile set service_member.years_of_service 6
        mil-pay profile set housing.bah_amount 1500
        mil-pay profile set civilian_job.differential_pay_policy true
    """
    is_valid, error_msg = validate_profile_key(key)
    if not is_valid:
        raise click.ClickException(error_msg)

    parsed_value = _parse_value(key, value)
    profile_file = set_profile_value(key, parsed_value)
    click.echo(f"Set {key} = {parsed_value}")
    click.echo(f"Saved to: {profile_file}")

    _display_validation(validate_profile(), show_contents=False)


@profile.command("path")
def profile_path_cmd():
    """Print the path of the active profile.yaml."""
    click.echo(get_profile_path(require_exists=False))


@profile.command("use")
@click.argument("profile_path", type=click.Path(exists=True, dir_okay=False))
def profile_use(profile_path):
    """Set the active profile to an external file.

    PROFILE_PATH is the path to a profile.yaml file, typically in a
    config repo you manage separately. The profile is validated before
    being set as active.

    Examples:
        mil-pay profile use ~/repos/my-config/milpay/profile.yaml
    """
    path = Path(profile_path).expanduser().resolve()

    _, validation = _validate_profile_file(path)

    settings_file = set_setting("profile", str(path))
    click.echo(f"Active profile set to: {path}")
    click.echo(f"Saved to: {settings_file}")

    _display_validation(validation, show_contents=False)
