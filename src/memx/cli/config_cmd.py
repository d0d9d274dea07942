"""Config subcommands: get, set, list for global mem settings."""

from __future__ import annotations

import re
from typing import Optional

import typer

from memx.cli._shared import FORMAT_OPTION
from memx.utils.config import DEFAULTS, load_global_config, save_global_config
from memx.utils.output import error, info, output, success

config_app = typer.Typer(no_args_is_help=True)

_VALID_KEYS = {
    "default_branch": re.compile(r"^[\w./-]+$"),
    "provider": re.compile(r"^[\w-]+$"),
}


@config_app.command("get")
def config_get(
    key: str = typer.Argument(..., help="Configuration key"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Get a configuration value."""
    if key not in _VALID_KEYS:
        error(f"Unknown key: {key}. Valid keys: {', '.join(sorted(_VALID_KEYS))}")
        raise typer.Exit(1)

    value = load_global_config().get(key)
    if fmt == "json":
        output({"key": key, "value": value}, fmt="json")
    else:
        info(f"{key}: {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Value to set"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Set a configuration value."""
    if key not in _VALID_KEYS:
        error(f"Unknown key: {key}. Valid keys: {', '.join(sorted(_VALID_KEYS))}")
        raise typer.Exit(1)

    if not _VALID_KEYS[key].match(value):
        error(f"Invalid value for {key}: {value}")
        raise typer.Exit(1)

    config = load_global_config()
    config[key] = value
    save_global_config(config)

    if fmt == "json":
        output({"key": key, "value": value}, fmt="json")
    else:
        success(f"{key} = {value}")


@config_app.command("list")
def config_list(
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List all configuration values (defaults included)."""
    config = load_global_config()
    if fmt == "json":
        output(config, fmt="json")
    else:
        for k, v in sorted(config.items()):
            marker = "" if k not in DEFAULTS or v != DEFAULTS[k] else " (default)"
            info(f"{k}: {v}{marker}")
