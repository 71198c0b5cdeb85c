"""Integration tests for the warden command-line interface."""

import json

import pytest
from click.testing import CliRunner

from warden import __version__
from warden.cli import cli
from warden.core.config import get_settings
from warden.infrastructure.persistence import database


@pytest.fixture
def runner(monkeypatch):
    """CLI runner with quiet logging."""
    monkeypatch.setenv("WARDEN_LOG_LEVEL", "CRITICAL")
    get_settings.cache_clear()
    return CliRunner()


@pytest.fixture
def sqlite_file(tmp_path, monkeypatch):
    """Point the global database manager at a fresh SQLite file."""
    monkeypatch.setenv("WARDEN_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/policy.db")
    monkeypatch.setattr(database, "_db_manager", None)
    get_settings.cache_clear()
    return tmp_path / "policy.db"


def test_version(runner):
    """Test --version prints the package version."""
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_catalog(runner):
    """Test the catalog command prints JSON metadata."""
    result = runner.invoke(cli, ["catalog"])

    assert result.exit_code == 0
    catalog = json.loads(result.output)
    assert {"resources", "operators", "valueTypes", "contextKeys"} <= set(catalog)


def test_info(runner):
    """Test the info command shows the authorization configuration."""
    result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Warden v" in result.output
    assert "SUPER_ADMIN, ADMIN" in result.output


def test_init_db_and_explain(runner, sqlite_file):
    """Test creating the database, seeding it and explaining a decision."""
    result = runner.invoke(cli, ["init-db"])
    assert result.exit_code == 0, result.output
    assert "Seeded 3 system role(s)." in result.output
    assert sqlite_file.exists()

    result = runner.invoke(cli, ["seed-roles"])
    assert result.exit_code == 0
    assert "System roles already present." in result.output

    result = runner.invoke(cli, ["explain", "u1", "goods", "read", "--role", "VIEWER"])
    assert result.exit_code == 0, result.output
    decision = json.loads(result.output)
    assert decision["allowed"] is True
    assert decision["roles"] == ["VIEWER"]

    result = runner.invoke(cli, ["explain", "u1", "goods", "delete", "--role", "VIEWER"])
    assert json.loads(result.output)["reason"] == "permission_denied"


def test_explain_without_roles(runner, sqlite_file):
    """Test a user without roles is explained as a denial."""
    runner.invoke(cli, ["init-db", "--no-seed"])

    result = runner.invoke(cli, ["explain", "nobody", "goods", "read"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["reason"] == "missing_role_context"


def test_explain_malformed_permission(runner, sqlite_file):
    """Test a malformed permission is reported as a CLI error."""
    runner.invoke(cli, ["init-db"])

    result = runner.invoke(cli, ["explain", "u1", "", "read", "--role", "ADMIN"])

    assert result.exit_code == 1
    assert "Invalid permission" in result.output or "must have the form" in result.output


def test_explain_bad_context(runner):
    """Test context values must be key=value pairs."""
    result = runner.invoke(cli, ["explain", "u1", "goods", "read", "--context", "base_id"])

    assert result.exit_code == 2
    assert "Expected key=value" in result.output
