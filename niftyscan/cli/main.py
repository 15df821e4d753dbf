"""Main entry point for the niftyscan command line interface."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from niftyscan.core.exceptions import ConfigurationError
from niftyscan.core.logging import configure_logging

from .constants import CONFIGURATION_EXIT_CODE
from .report import register as register_report_commands
from .utils import emit_error, load_config


def create_app() -> typer.Typer:
    """Create a Typer application instance for niftyscan."""

    app = typer.Typer(add_completion=False, help="niftyscan command line interface")

    @app.callback()
    def main(
        ctx: typer.Context,
        config: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="Path to a TOML configuration file.",
        ),
        log_level: str = typer.Option(
            "INFO",
            "--log-level",
            help="Logging level.",
            show_default=True,
        ),
    ) -> None:
        ctx.ensure_object(dict)
        ctx.obj.update({"config_path": config, "log_level": log_level.upper()})
        configure_logging(level=log_level.upper(), format="console", stream=sys.stderr)

    @app.command("serve")
    def serve(ctx: typer.Context) -> None:
        """Start the HTTP service."""

        from niftyscan.web.main import serve as serve_web

        config = load_config(ctx)
        try:
            serve_web(config)
        except ConfigurationError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error

    register_report_commands(app)
    return app


app = create_app()
