"""Bridge settings.

All settings can be configured via environment variables with the prefix
NREPL_MCP_. For example, NREPL_MCP_PORT=9000 moves the HTTP endpoint.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from nrepl_mcp.session import DEFAULT_NAMESPACE
from nrepl_mcp.utilities.logging import LogLevel

# The bridge only ever listens on loopback: it runs arbitrary code for
# whoever can reach it.
LOOPBACK_HOST = "127.0.0.1"


class BridgeSettings(BaseSettings):
    """Settings for the nREPL MCP bridge."""

    model_config = SettingsConfigDict(
        env_prefix="NREPL_MCP_",
        env_file=".env",
        extra="ignore",
    )

    # HTTP settings
    port: int = Field(default=8787, ge=0, le=65535)
    """Port for the MCP HTTP endpoint. 0 picks a free port."""

    port_file: str = ".mcp-port"
    """File, relative to project_dir, that receives the bound port."""

    project_dir: Path = Path(".")

    # nREPL settings
    nrepl_host: str = LOOPBACK_HOST
    nrepl_port: int | None = Field(default=None, ge=1, le=65535)
    """nREPL port. When unset it is read from nrepl_port_file."""

    nrepl_port_file: str = ".nrepl-port"
    connect_timeout: float = Field(default=5.0, gt=0)

    # Session settings
    default_namespace: str = DEFAULT_NAMESPACE

    log_level: LogLevel = "INFO"

    @property
    def port_file_path(self) -> Path:
        return self.project_dir / self.port_file

    def resolve_nrepl_port(self) -> int:
        """The configured nREPL port, falling back to the port file nREPL writes on startup.

        Raises:
            ValueError: if no port is configured and the port file is missing or unreadable
        """
        if self.nrepl_port is not None:
            return self.nrepl_port
        port_file = self.project_dir / self.nrepl_port_file
        try:
            return int(port_file.read_text().strip())
        except FileNotFoundError as exc:
            raise ValueError(f"No nREPL port configured and {port_file} does not exist; is nREPL running?") from exc
        except ValueError as exc:
            raise ValueError(f"{port_file} does not contain a port number") from exc
