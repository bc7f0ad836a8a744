"""
Settings file loading.

Example ``schemashift.yaml``::

    connections:
      legacy:
        dialect: oracle
        dsn: "scott/${ORACLE_PASSWORD}@dbhost:1521/ORCLPDB1"
    type_overrides:
      mysql_to_oracle:
        VARCHAR: "VARCHAR2({length} CHAR)"
    output:
      directory: out
      encoding: utf-8
      mysql_no_backslash_escapes: true
    review:
      enabled: true
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from schemashift.errors import ConfigError
from schemashift.models import Dialect
from schemashift.translation.types import direction_key

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "schemashift.yaml"

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def substitute_env(value: str) -> str:
    """Replace ``${VAR}`` references with environment values (unset -> empty)."""
    def lookup(match):
        name = match.group(1)
        if name not in os.environ:
            logger.warning(f"Environment variable {name} is referenced in settings but not set")
            return ""
        return os.environ[name]
    return _ENV_REF.sub(lookup, value)


@dataclass
class ConnectionProfile:
    """A named database connection."""
    name: str
    dialect: Dialect
    dsn: str


@dataclass
class Settings:
    """Loaded settings with defaults applied."""
    connections: Dict[str, ConnectionProfile] = field(default_factory=dict)
    type_overrides: Dict[str, Dict[str, str]] = field(default_factory=dict)
    output_dir: Path = field(default_factory=lambda: Path("."))
    encoding: str = "utf-8"
    mysql_no_backslash_escapes: bool = True
    review_enabled: bool = True

    def __post_init__(self):
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

    def overrides_for(self, source: Dialect, target: Dialect) -> Dict[str, str]:
        """Type override templates of one direction."""
        return dict(self.type_overrides.get(direction_key(source, target), {}))

    def profile(self, name: str) -> ConnectionProfile:
        if name not in self.connections:
            known = ", ".join(sorted(self.connections)) or "none"
            raise ConfigError(f"Unknown connection profile {name!r} (configured: {known})")
        return self.connections[name]


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def parse_settings(data: Optional[Dict[str, Any]]) -> Settings:
    """
    Build Settings from an already parsed YAML document.

    Raises:
        ConfigError: for a structurally invalid document.
    """
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError("Settings file must contain a mapping")

    connections: Dict[str, ConnectionProfile] = {}
    for name, entry in _section(data, "connections").items():
        if not isinstance(entry, dict) or "dialect" not in entry or "dsn" not in entry:
            raise ConfigError(f"Connection profile {name!r} needs 'dialect' and 'dsn'")
        try:
            dialect = Dialect.parse(entry["dialect"])
        except ValueError as e:
            raise ConfigError(f"Connection profile {name!r}: {e}") from e
        connections[str(name)] = ConnectionProfile(
            name=str(name),
            dialect=dialect,
            dsn=substitute_env(str(entry["dsn"])),
        )

    valid_directions = {
        direction_key(Dialect.MYSQL, Dialect.ORACLE),
        direction_key(Dialect.ORACLE, Dialect.MYSQL),
    }
    type_overrides: Dict[str, Dict[str, str]] = {}
    for direction, rules in _section(data, "type_overrides").items():
        if direction not in valid_directions:
            raise ConfigError(
                f"Unknown type_overrides direction {direction!r}; use one of {sorted(valid_directions)}"
            )
        if not isinstance(rules, dict):
            raise ConfigError(f"type_overrides.{direction} must be a mapping")
        type_overrides[direction] = {str(k): str(v) for k, v in rules.items()}

    output = _section(data, "output")
    review = _section(data, "review")

    return Settings(
        connections=connections,
        type_overrides=type_overrides,
        output_dir=Path(substitute_env(str(output.get("directory", ".")))),
        encoding=str(output.get("encoding", "utf-8")),
        mysql_no_backslash_escapes=bool(output.get("mysql_no_backslash_escapes", True)),
        review_enabled=bool(review.get("enabled", True)),
    )


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file.

    Without an explicit path, ``schemashift.yaml`` in the working directory
    is used when it exists; otherwise defaults apply.

    Raises:
        ConfigError: if an explicit file is missing or any file is invalid.
    """
    if path is None:
        path = Path(DEFAULT_SETTINGS_FILE)
        if not path.exists():
            logger.debug("No settings file found, using defaults")
            return Settings()
    path = Path(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}: {e}") from e

    settings = parse_settings(data)
    logger.debug(f"Loaded settings from {path}: {len(settings.connections)} connection profiles")
    return settings
