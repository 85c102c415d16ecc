"""Configuration management for milpay.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - profile: path to profile.yaml (optional, if not colocated)
   - flat_tax_rate: rate used by every withholding estimate (default 0.22)
   - data_dir: override for where the LES ledger and drill schedules live

2. profile.yaml - The service member's personal configuration
   - service_member: pay_grade, years_of_service, branch
   - housing: bah_amount (monthly BAH for the member's duty location)
   - civilian_job: salary/hourly figures and employer differential policy
   - reference_data: year of the pay tables to use

Config directory resolution:
1. MILPAY_CONFIG_PATH environment variable (if set)
2. ~/.config/milpay/ (XDG_CONFIG_HOME fallback)

Profile resolution:
1. settings.json "profile" key (if set via CLI)
2. profile.yaml in same config directory

Data path follows the XDG base directory layout:
- settings.json "data_dir" key, else XDG_DATA_HOME/milpay/ or ~/.local/share/milpay/
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml


APP_NAME = "milpay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"
PAY_TABLES_DIRNAME = "pay-tables"


class ConfigNotFoundError(Exception):
    """Raised when required configuration is missing."""
    pass


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. MILPAY_CONFIG_PATH environment variable
    2. ~/.config/milpay/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("MILPAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Args:
        require_exists: If True, raises ProfileNotFoundError if not found

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = load_settings().get("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Update with: mil-pay profile use /path/to/profile.yaml"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found. Checked:\n"
            f"  1. settings.json 'profile' key (not set)\n"
            f"  2. {profile_path} (not found)\n\n"
            f"Create one with: mil-pay profile set service_member.pay_grade E-4"
        )

    return profile_path


def load_profile(require_exists: bool = True) -> dict:
    """Load the service member profile from profile.yaml.

    Returns:
        Profile dictionary (empty dict if not required and not found)

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save the profile to profile.yaml (default location unless path given)."""
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def get_profile_value(key: str, default: Any = None) -> Any:
    """Get a profile value by dot-notation key.

    Args:
        key: Dot-notation key (e.g., "service_member.pay_grade")
        default: Default value if key not found
    """
    profile = load_profile(require_exists=False)

    value = profile
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default

    return value


def set_profile_value(key: str, value: Any) -> Path:
    """Set a profile value by dot-notation key, creating nested sections."""
    profile = load_profile(require_exists=False)

    parts = key.split(".")
    current = profile

    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value

    return save_profile(profile)


# =============================================================================
# XDG path helpers
# =============================================================================

def get_data_path() -> Path:
    """Get the data directory path (created if it doesn't exist).

    settings.json "data_dir" wins over XDG_DATA_HOME/milpay/.
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom)
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_pay_tables_path(year: str) -> Path:
    """Get the path of the pay-table YAML for a year (may not exist)."""
    return get_config_dir() / PAY_TABLES_DIRNAME / f"{year}.yaml"


# =============================================================================
# Profile validation and feature readiness
# =============================================================================

# Allowed profile keys; leaf values are the expected Python type(s)
PROFILE_SCHEMA = {
    "service_member": {
        "name": str,
        "pay_grade": str,
        "years_of_service": int,
        "branch": str,
    },
    "housing": {
        "bah_amount": (int, float),
    },
    "civilian_job": {
        "employer_name": str,
        "annual_salary": (int, float),
        "hourly_rate": (int, float),
        "hours_per_week": (int, float),
        "differential_pay_policy": bool,
    },
    "reference_data": {
        "year": (int, str),
    },
}


class ProfileValidationResult:
    """Result of profile validation with feature readiness status."""

    def __init__(
        self,
        location_path: Path,
        features: dict,
        profile: dict,
        errors: list = None,
        warnings: list = None,
    ):
        """
        Args:
            location_path: Path to the profile file
            features: Dict of feature_name -> dict with keys:
                      ready (bool), missing (list), message (str)
            profile: The loaded profile dict
            errors: Invalid values (wrong type, unknown keys)
            warnings: Suspicious but allowed values
        """
        self.location_path = location_path
        self.features = features
        self.profile = profile
        self.errors = errors or []
        self.warnings = warnings or []

    @property
    def all_ready(self) -> bool:
        """True if all features are ready."""
        return all(f["ready"] for f in self.features.values())

    def is_ready(self, feature: str) -> bool:
        """Check if a specific feature is ready."""
        return self.features.get(feature, {}).get("ready", False)

    def require_feature(self, feature: str) -> None:
        """Raise ConfigNotFoundError if the profile has errors or the feature is not ready."""
        if self.errors:
            error_str = "\n  ! ".join(self.errors)
            raise ConfigNotFoundError(
                f"Profile has validation errors:\n\n"
                f"  ! {error_str}\n\n"
                f"Profile: {self.location_path}"
            )

        if feature not in self.features:
            raise ConfigNotFoundError(f"Unknown feature: {feature}")

        status = self.features[feature]
        if not status["ready"]:
            missing_str = "\n  - ".join(status["missing"])
            raise ConfigNotFoundError(
                f"Profile not configured for '{feature}'.\n\n"
                f"Missing:\n  - {missing_str}\n\n"
                f"Profile: {self.location_path}\n"
                f"View with: mil-pay profile show"
            )


def validate_profile(profile: Optional[dict] = None) -> ProfileValidationResult:
    """Validate profile structure and check feature readiness.

    Args:
        profile: Optional profile dict (loads from file if not provided)
    """
    location_path = get_profile_path(require_exists=False)
    if profile is None:
        profile = load_profile(require_exists=True)

    errors, warnings = _validate_profile_schema(profile)

    features = {
        "drill_pay": _validate_drill_pay(profile),
        "orders_compare": _validate_orders_compare(profile),
    }

    return ProfileValidationResult(
        location_path=location_path,
        features=features,
        profile=profile,
        errors=errors,
        warnings=warnings,
    )


def _validate_profile_schema(profile: dict) -> tuple[list, list]:
    """Check sections and value types against PROFILE_SCHEMA."""
    errors = []
    warnings = []

    for section, values in profile.items():
        if section not in PROFILE_SCHEMA:
            warnings.append(f"unknown section '{section}' (ignored)")
            continue
        if not isinstance(values, dict):
            errors.append(f"{section}: expected a mapping, got {type(values).__name__}")
            continue
        for key, value in values.items():
            expected = PROFILE_SCHEMA[section].get(key)
            if expected is None:
                warnings.append(f"unknown key '{section}.{key}' (ignored)")
            elif value is not None and not isinstance(value, expected):
                errors.append(f"{section}.{key}: wrong type {type(value).__name__}")

    yos = (profile.get("service_member") or {}).get("years_of_service")
    if isinstance(yos, int) and yos > 40:
        warnings.append(f"service_member.years_of_service={yos} exceeds pay table range (capped at 40)")

    return errors, warnings


def _validate_drill_pay(profile: dict) -> dict:
    """Drill and AT pay need grade and years of service."""
    member = profile.get("service_member") or {}
    missing = []
    if not member.get("pay_grade"):
        missing.append("service_member.pay_grade")
    if member.get("years_of_service") is None:
        missing.append("service_member.years_of_service")

    if missing:
        return {
            "ready": False,
            "missing": missing,
            "message": "Pay calculators require pay grade and years of service",
        }
    return {
        "ready": True,
        "missing": [],
        "message": f"Ready ({member['pay_grade']}, {member['years_of_service']} YOS)",
    }


def _validate_orders_compare(profile: dict) -> dict:
    """Orders comparison needs a civilian salary or hourly rate."""
    job = profile.get("civilian_job") or {}
    if job.get("annual_salary") or (job.get("hourly_rate") and job.get("hours_per_week")):
        return {"ready": True, "missing": [], "message": "Ready"}
    return {
        "ready": False,
        "missing": ["civilian_job.annual_salary (or hourly_rate + hours_per_week)"],
        "message": "Orders comparison requires civilian income",
    }


def validate_profile_key(key: str) -> tuple[bool, str]:
    """Validate that a dot-notation key is allowed by the schema.

    Returns:
        Tuple of (is_valid, error_message)
    """
    parts = key.split(".")
    if len(parts) != 2:
        return False, f"Expected '<section>.<key>', got '{key}'"

    section, name = parts
    if section not in PROFILE_SCHEMA:
        valid = ", ".join(PROFILE_SCHEMA.keys())
        return False, f"Unknown section '{section}'. Valid sections: {valid}"
    if name not in PROFILE_SCHEMA[section]:
        valid = ", ".join(PROFILE_SCHEMA[section].keys())
        return False, f"Unknown key '{name}' under '{section}'. Valid keys: {valid}"

    return True, ""
