"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer

from niftyscan.core.config import ConfigManager, NiftyScanConfig
from niftyscan.core.exceptions import ConfigurationError

from .constants import CONFIGURATION_EXIT_CODE


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    config_path: Path | None = None
    log_level: str = "INFO"


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        config_path=data.get("config_path"),
        log_level=str(data.get("log_level", "INFO")),
    )


def load_config(ctx: typer.Context) -> NiftyScanConfig:
    """Load configuration for the current command, exiting on invalid settings."""

    options = get_cli_options(ctx)
    try:
        return ConfigManager(options.config_path).get_config()
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error


def emit_json(payload: Any) -> None:
    """Print a JSON document to stdout."""

    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = {str(key): value for key, value in details.items()}
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


__all__ = ["CLIOptions", "emit_error", "emit_json", "get_cli_options", "load_config"]
