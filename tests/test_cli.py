from pathlib import Path

import pytest
from click.testing import CliRunner

from nrepl_mcp.cli import build_settings, main
from nrepl_mcp.runner import BridgeServer


def test_build_settings_ignores_unset_options(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("NREPL_MCP_PORT", "9100")

    settings = build_settings(port=None, nrepl_port=7888, log_level=None)

    assert settings.port == 9100
    assert settings.nrepl_port == 7888
    assert settings.log_level == "INFO"


def test_options_override_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("NREPL_MCP_PORT", "9100")

    settings = build_settings(port=9200, project_dir=tmp_path, log_level="DEBUG")

    assert settings.port == 9200
    assert settings.project_dir == tmp_path
    assert settings.log_level == "DEBUG"


def test_help():
    result = CliRunner().invoke(main, ["--help"])

    assert result.exit_code == 0
    for option in ("--port", "--nrepl-host", "--nrepl-port", "--project-dir", "--log-level"):
        assert option in result.output


def test_missing_nrepl_port_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("NREPL_MCP_NREPL_PORT", raising=False)

    result = CliRunner().invoke(main, ["--project-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "is nREPL running" in result.output


def test_invalid_port():
    result = CliRunner().invoke(main, ["--port", "70000", "--nrepl-port", "7888"])

    assert result.exit_code == 1
    assert "port" in result.output


def test_port_in_use(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    async def run(self: BridgeServer) -> None:
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(BridgeServer, "run", run)

    result = CliRunner().invoke(main, ["--port", "9100", "--nrepl-port", "7888", "--project-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "Cannot listen on port 9100" in result.output
