"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "linch.toml"

DEFAULT_ROWS = 15
DEFAULT_COLUMNS = 3
DEFAULT_PROMPT = "Run"
MAX_ROWS_CAP = 500
MAX_COLUMNS_CAP = 50


@dataclass(slots=True, frozen=True)
class LayoutConfig:
    """Grid dimensions; ``columns`` is the configured maximum."""

    rows: int
    columns: int


@dataclass(slots=True, frozen=True)
class SessionConfig:
    """Interactive session behavior."""

    prompt: str
    literal: bool
    exit_unfocus: bool
    custom: bool


@dataclass(slots=True, frozen=True)
class LauncherConfig:
    """Fully merged launcher configuration."""

    config_dir: Path
    data_dir: Path
    cache_dir: Path | None
    audit_enabled: bool
    layout: LayoutConfig
    session: SessionConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "config_dir": str(self.config_dir),
            "data_dir": str(self.data_dir),
            "cache_dir": str(self.cache_dir) if self.cache_dir is not None else None,
            "audit_enabled": self.audit_enabled,
            "layout": {"rows": self.layout.rows, "columns": self.layout.columns},
            "session": {
                "prompt": self.session.prompt,
                "literal": self.session.literal,
                "exit_unfocus": self.session.exit_unfocus,
                "custom": self.session.custom,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    cache_dir: Path | None = None
    audit_enabled: bool | None = None
    rows: int | None = None
    columns: int | None = None
    prompt: str | None = None
    literal: bool | None = None
    exit_unfocus: bool | None = None


def default_config_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return $XDG_CONFIG_HOME/linch, else ~/.config/linch."""
    env = os.environ if environ is None else environ
    xdg_config = env.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "linch"
    return Path(env.get("HOME") or Path.home()) / ".config" / "linch"


def default_data_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return $XDG_STATE_HOME/linch, else ~/.local/state/linch."""
    env = os.environ if environ is None else environ
    xdg_state = env.get("XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state) / "linch"
    return Path(env.get("HOME") or Path.home()) / ".local" / "state" / "linch"


def default_config(config_dir: Path, data_dir: Path) -> LauncherConfig:
    """Build default config for the given directories."""
    return LauncherConfig(
        config_dir=config_dir,
        data_dir=data_dir,
        cache_dir=None,
        audit_enabled=True,
        layout=LayoutConfig(rows=DEFAULT_ROWS, columns=DEFAULT_COLUMNS),
        session=SessionConfig(
            prompt=DEFAULT_PROMPT,
            literal=False,
            exit_unfocus=False,
            custom=False,
        ),
    )


def load_config_file(config_dir: Path) -> dict[str, object]:
    """Load optional linch.toml from the config directory."""
    config_path = config_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def merge_config(
    base: LauncherConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> LauncherConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    layout_payload = _get_table(file_payload, "layout")
    filter_payload = _get_table(file_payload, "filter")
    session_payload = _get_table(file_payload, "session")
    cache_payload = _get_table(file_payload, "cache")
    audit_payload = _get_table(file_payload, "audit")

    rows = _optional_positive_int_with_cap(
        layout_payload.get("rows"), "layout.rows", base.layout.rows, MAX_ROWS_CAP
    )
    columns = _optional_positive_int_with_cap(
        layout_payload.get("columns"), "layout.columns", base.layout.columns, MAX_COLUMNS_CAP
    )
    literal = _optional_bool(filter_payload.get("literal"), "filter.literal", base.session.literal)
    prompt = _optional_str(session_payload.get("prompt"), "session.prompt", base.session.prompt)
    exit_unfocus = _optional_bool(
        session_payload.get("exit_unfocus"), "session.exit_unfocus", base.session.exit_unfocus
    )
    custom = _optional_bool(session_payload.get("custom"), "session.custom", base.session.custom)

    cache_dir = base.cache_dir
    if "dir" in cache_payload:
        raw_dir = _optional_str(cache_payload["dir"], "cache.dir", "")
        if not raw_dir:
            raise ValueError("Config field 'cache.dir' must be a non-empty string.")
        cache_dir = Path(raw_dir).expanduser()

    audit_enabled = _optional_bool(
        audit_payload.get("enabled"), "audit.enabled", base.audit_enabled
    )

    merged = LauncherConfig(
        config_dir=base.config_dir,
        data_dir=base.data_dir,
        cache_dir=cache_dir,
        audit_enabled=audit_enabled,
        layout=LayoutConfig(rows=rows, columns=columns),
        session=SessionConfig(
            prompt=prompt,
            literal=literal,
            exit_unfocus=exit_unfocus,
            custom=custom,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: LauncherConfig, overrides: CliOverrides) -> LauncherConfig:
    """Apply startup overrides at highest precedence."""
    rows = _optional_positive_int_with_cap(
        overrides.rows, "overrides.rows", config.layout.rows, MAX_ROWS_CAP
    )
    columns = _optional_positive_int_with_cap(
        overrides.columns, "overrides.columns", config.layout.columns, MAX_COLUMNS_CAP
    )
    session = SessionConfig(
        prompt=overrides.prompt if overrides.prompt is not None else config.session.prompt,
        literal=overrides.literal if overrides.literal is not None else config.session.literal,
        exit_unfocus=(
            overrides.exit_unfocus
            if overrides.exit_unfocus is not None
            else config.session.exit_unfocus
        ),
        custom=config.session.custom,
    )
    return LauncherConfig(
        config_dir=config.config_dir,
        data_dir=(overrides.data_dir or config.data_dir).resolve(),
        cache_dir=overrides.cache_dir or config.cache_dir,
        audit_enabled=(
            overrides.audit_enabled
            if overrides.audit_enabled is not None
            else config.audit_enabled
        ),
        layout=LayoutConfig(rows=rows, columns=columns),
        session=session,
    )


def load_effective_config(
    config_dir: Path | None = None,
    overrides: CliOverrides | None = None,
    environ: Mapping[str, str] | None = None,
) -> LauncherConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_config_dir = config_dir if config_dir is not None else default_config_dir(environ)
    base = default_config(resolved_config_dir, default_data_dir(environ))
    payload = load_config_file(resolved_config_dir)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_str(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    return value


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
