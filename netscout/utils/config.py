"""
utils/config.py
Scan configuration: dataclass, semantic validation and YAML file loading.

The YAML file is optional. Its ``scan:`` section supplies defaults that
command-line flags override:

    scan:
      ports: "22,80,443"
      workers: 200
      timeout: 500ms
      rate: 1000
      format: json
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from netscout.utils.constants import (
    DEFAULT_FORMAT, DEFAULT_PORTS, DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_RATE_LIMIT, DEFAULT_TIMEOUT_S, DEFAULT_WORKERS,
)
from netscout.utils.validators import (
    parse_duration, validate_format, validate_rate, validate_timeout,
    validate_workers,
)


class ConfigError(ValueError):
    """Raised when the scan configuration is invalid."""


@dataclass
class ScanConfig:
    targets:             List[str] = field(default_factory=list)
    ports:               str = DEFAULT_PORTS
    workers:             int = DEFAULT_WORKERS
    timeout_s:           float = DEFAULT_TIMEOUT_S
    rate_limit:          int = DEFAULT_RATE_LIMIT
    output_file:         Optional[str] = None
    output_format:       str = DEFAULT_FORMAT
    verbose:             bool = False
    progress:            bool = False
    progress_interval_s: float = DEFAULT_PROGRESS_INTERVAL

    # YAML key → dataclass field
    _FILE_KEYS = {
        "targets":           "targets",
        "ports":             "ports",
        "workers":           "workers",
        "timeout":           "timeout_s",
        "rate":              "rate_limit",
        "output":            "output_file",
        "format":            "output_format",
        "verbose":           "verbose",
        "progress":          "progress",
        "progress_interval": "progress_interval_s",
    }

    @property
    def show_progress(self) -> bool:
        """Progress lines are shown on request and always in verbose mode."""
        return self.progress or self.verbose

    def validate(self) -> None:
        """Raise ConfigError describing the first invalid setting."""
        if not self.targets:
            raise ConfigError("at least one target must be specified")
        if not self.ports:
            raise ConfigError("ports must be specified")

        for ok, msg in (
            validate_workers(self.workers),
            validate_timeout(self.timeout_s),
            validate_rate(self.rate_limit),
            validate_format(self.output_format),
        ):
            if not ok:
                raise ConfigError(msg)

        if not self.progress_interval_s > 0:
            raise ConfigError("progress interval must be positive")

    def merged(self, overrides: Mapping[str, Any]) -> "ScanConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f"unknown setting: {key}")
            if value is not None:
                values[key] = value
        return ScanConfig(**values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScanConfig":
        """Build a config from the ``scan:`` section of a config file."""
        values: Dict[str, Any] = {}
        for key, raw in data.items():
            name = cls._FILE_KEYS.get(key)
            if name is None:
                raise ConfigError(f"unknown key in config file: {key!r}")
            try:
                values[name] = _coerce(name, raw)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"bad value for {key!r}: {exc}") from exc
        return cls(**values)


def split_targets(text: str) -> List[str]:
    """Split a comma-separated target list, dropping blanks."""
    return [t.strip() for t in text.split(",") if t.strip()]


def _coerce(name: str, raw: Any) -> Any:
    if raw is None:
        return None if name == "output_file" else _required(name)
    if name == "targets":
        if isinstance(raw, str):
            return split_targets(raw)
        return [str(t).strip() for t in raw if str(t).strip()]
    if name in ("timeout_s", "progress_interval_s"):
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return float(raw)
        return parse_duration(str(raw))
    if name in ("workers", "rate_limit"):
        if isinstance(raw, bool):
            raise TypeError("expected an integer")
        return int(raw)
    if name in ("verbose", "progress"):
        if not isinstance(raw, bool):
            raise TypeError("expected true or false")
        return raw
    return str(raw)


def _required(name: str) -> Any:
    raise ValueError(f"{name} cannot be empty")


def load_config_file(path: str | Path) -> Dict[str, Any]:
    """
    Read the ``scan:`` section of a YAML config file.

    A missing file yields an empty mapping; malformed YAML or a non-mapping
    document raises ConfigError.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")

    section = data.get("scan", {}) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: 'scan' must be a mapping")
    return section


__all__ = ["ScanConfig", "ConfigError", "load_config_file", "split_targets"]
