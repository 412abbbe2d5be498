"""Configuration loading and saving.

Usage:
    config = load("pre-commit-go.yml")       # raises ConfigError on bad config
    checks = config.enabled_checks(2)         # checks to run at run level 2
    write_config(config, "pre-commit-go.yml") # (re)writes the effective config
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from precommit_go.checks import Check, CustomCheck, default_checks

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "pre-commit-go.yml"
DEFAULT_MAX_DURATION = 120


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is malformed or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    max_duration: float = DEFAULT_MAX_DURATION
    checks: list[Check] = field(default_factory=default_checks)
    custom_checks: list[CustomCheck] = field(default_factory=list)

    def all_checks(self) -> list[Check]:
        """Built-in checks in registry order, then custom checks."""
        return [*self.checks, *self.custom_checks]

    def enabled_checks(self, run_level: int) -> list[Check]:
        """Return the checks enabled at *run_level*."""
        return [c for c in self.all_checks() if c.enabled(run_level)]

    def get(self, name: str) -> Check:
        for check in self.checks:
            if check.name == name:
                return check
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_duration": self.max_duration,
            "checks": {c.name: c.to_dict() for c in self.checks},
            "custom_checks": [c.to_dict() for c in self.custom_checks],
        }


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """Load the configuration, starting from every check's defaults.

    A missing or empty file yields the defaults.

    Raises:
        ConfigError: if the file is malformed or holds invalid values.
    """
    config = Config()
    path = Path(config_path)
    if not path.exists():
        logger.debug("%s not found, using defaults", config_path)
        return config

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    errors = _apply(config, raw)
    if errors:
        raise ConfigError(f"Invalid configuration in '{config_path}':\n" + "\n".join(errors))
    return config


def _apply(config: Config, raw: dict[str, Any]) -> list[str]:
    """Overlay *raw* onto *config*; return the list of problems found."""
    errors: list[str] = []

    unknown = sorted(set(raw) - {"max_duration", "checks", "custom_checks"})
    if unknown:
        errors.append(f"  - unknown top-level key(s): {', '.join(unknown)}")

    if "max_duration" in raw:
        value = raw["max_duration"]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            errors.append("  - 'max_duration' must be a non-negative number of seconds")
        else:
            config.max_duration = value

    checks = raw.get("checks") or {}
    if not isinstance(checks, dict):
        errors.append("  - 'checks' must be a mapping of check name to parameters")
        checks = {}
    for name, params in checks.items():
        try:
            check = config.get(name)
        except KeyError:
            errors.append(f"  - unknown check '{name}'")
            continue
        if params is None:
            continue
        if not isinstance(params, dict):
            errors.append(f"  - parameters of check '{name}' must be a mapping")
            continue
        try:
            check.update(params)
        except (TypeError, ValueError) as exc:
            errors.append(f"  - {exc}")

    customs = raw.get("custom_checks") or []
    if not isinstance(customs, list):
        errors.append("  - 'custom_checks' must be a list")
        customs = []
    names = {c.name for c in config.checks}
    for index, params in enumerate(customs):
        if not isinstance(params, dict):
            errors.append(f"  - custom_checks[{index}] must be a mapping")
            continue
        custom = CustomCheck()
        try:
            custom.update(params)
        except (TypeError, ValueError) as exc:
            errors.append(f"  - custom_checks[{index}]: {exc}")
            continue
        if custom.name in names:
            errors.append(f"  - custom check name '{custom.name}' is already used")
            continue
        names.add(custom.name)
        config.custom_checks.append(custom)

    return errors


# ---------------------------------------------------------------------------
# Writer (used by `writeconfig` command)
# ---------------------------------------------------------------------------

HEADER = """\
# pre-commit-go configuration file to run checks automatically on commit and
# pull requests.
#
# run_level: 0 never runs the check, 1 runs checks that only need the Go
# distribution, 2 adds checks needing third party tools, 3 adds checks that
# may trigger false positives.
# max_duration: seconds; 0 means the global max_duration.

"""


def write_config(config: Config, output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write *config* to *output_path*, replacing any existing file."""
    path = Path(output_path)
    content = yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=None)
    path.unlink(missing_ok=True)
    path.write_text(HEADER + content, encoding="utf-8")
