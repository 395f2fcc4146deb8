"""Command line entry point: ``nrepl-mcp``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import anyio
import click
from pydantic import ValidationError

from nrepl_mcp.exceptions import EvaluatorError
from nrepl_mcp.runner import BridgeServer
from nrepl_mcp.settings import BridgeSettings
from nrepl_mcp.utilities.logging import configure_logging, get_logger

logger = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_settings(**overrides: Any) -> BridgeSettings:
    """Settings from the environment, with every non-None CLI option layered on top."""
    return BridgeSettings(**{key: value for key, value in overrides.items() if value is not None})


@click.command()
@click.option("--port", type=int, default=None, help="Port for the MCP HTTP endpoint (0 picks a free port)")
@click.option("--nrepl-host", default=None, help="Host of the nREPL server")
@click.option("--nrepl-port", type=int, default=None, help="Port of the nREPL server (default: read .nrepl-port)")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .nrepl-port; .mcp-port is written here",
)
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None, help="Log level")
def main(
    port: int | None,
    nrepl_host: str | None,
    nrepl_port: int | None,
    project_dir: Path | None,
    log_level: str | None,
) -> int:
    """Expose a running nREPL session to MCP clients over HTTP."""
    try:
        settings = build_settings(
            port=port,
            nrepl_host=nrepl_host,
            nrepl_port=nrepl_port,
            project_dir=project_dir,
            log_level=log_level.upper() if log_level else None,
        )
        configure_logging(settings.log_level)
        server = BridgeServer(settings)
    except (ValidationError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        anyio.run(server.run)
    except EvaluatorError as exc:
        raise click.ClickException(str(exc)) from exc
    except OSError as exc:
        raise click.ClickException(f"Cannot listen on port {settings.port}: {exc}") from exc
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0
