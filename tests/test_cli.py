"""Tests for the CLI interface."""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import click.testing
import pytest

from lockbox.audit import reset_logging
from lockbox.cli import cli
from lockbox.storage import CredentialRecord, PersistenceError, load, save, Vault


@pytest.fixture(autouse=True)
def clean_logging():
    """Reset logging state between tests."""
    yield
    reset_logging()


@pytest.fixture
def cli_runner():
    """Create a CLI test runner."""
    return click.testing.CliRunner()


@pytest.fixture
def invoke(cli_runner, tmp_path):
    """Invoke the CLI against a vault in a temporary directory."""

    def _invoke(args, input=None):
        return cli_runner.invoke(cli, ["--data-dir", str(tmp_path), *args], input=input)

    return _invoke


@pytest.fixture
def github_vault(tmp_path):
    """Create a vault holding one github record."""
    vault = Vault()
    vault.add(CredentialRecord(service="github", username="alice", secret="s3cr3t"))
    save(vault, tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")
    return vault


def test_add_first_run(invoke, tmp_path):
    """Test adding a password creates the vault and salt."""
    result = invoke(
        ["add", "--service", "github", "--username", "alice", "--password", "s3cr3t"],
        input="hunter2\nhunter2\n",
    )
    assert result.exit_code == 0, result.output
    assert "Password added for: github" in result.output
    assert "s3cr3t" not in result.output

    vault = load(tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")
    assert vault.records == [
        CredentialRecord(service="github", username="alice", secret="s3cr3t")
    ]


def test_add_first_run_password_mismatch(invoke, tmp_path):
    """Test that a new master password must be typed twice."""
    result = invoke(
        ["add", "--service", "github", "--password", "s3cr3t"],
        input="hunter2\nhunter3\nhunter2\nhunter2\n",
    )
    assert result.exit_code == 0, result.output
    assert load(tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")


def test_add_updates_existing(invoke, tmp_path, github_vault):
    """Test adding an existing service replaces it."""
    result = invoke(
        ["add", "--service", "github", "--password", "new-secret"],
        input="hunter2\n",
    )
    assert result.exit_code == 0, result.output
    assert "Password updated for: github" in result.output

    vault = load(tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")
    assert [r.secret for r in vault.records] == ["new-secret"]


def test_add_empty_service(invoke):
    """Test that the service name is required to be non-empty."""
    result = invoke(["add", "--service", "  ", "--password", "x"])
    assert result.exit_code != 0
    assert "Service name cannot be empty" in result.output


def test_show(invoke, github_vault):
    """Test showing a stored password."""
    result = invoke(["show", "github"], input="hunter2\n")
    assert result.exit_code == 0, result.output
    assert "Service: github" in result.output
    assert "User: alice" in result.output
    assert "Password: s3cr3t" in result.output


def test_show_missing(invoke, github_vault):
    """Test showing a service that is not stored."""
    result = invoke(["show", "gitlab"], input="hunter2\n")
    assert result.exit_code == 1
    assert "No password stored for: gitlab" in result.output


def test_wrong_password_reprompts(invoke, github_vault):
    """Test that a wrong master password can be retried."""
    result = invoke(["show", "github"], input="wrong\nhunter2\n")
    assert result.exit_code == 0, result.output
    assert "Master password incorrect or vault data corrupted" in result.output
    assert "Password: s3cr3t" in result.output


def test_wrong_password_gives_up(invoke, github_vault):
    """Test that repeated wrong passwords abort without touching the vault."""
    result = invoke(["show", "github"], input="a\nb\nc\n")
    assert result.exit_code == 1
    assert "Giving up after 3 failed password attempts" in result.output
    assert "s3cr3t" not in result.output


def test_missing_salt_is_reported(invoke, tmp_path, github_vault):
    """Test that a vault without its salt is reported, not reinitialized."""
    (tmp_path / "lockbox.salt").unlink()
    result = invoke(["add", "--service", "x", "--password", "y"], input="hunter2\n")
    assert result.exit_code == 1
    assert "salt file" in result.output
    assert not (tmp_path / "lockbox.salt").exists()


def test_list_masks_passwords(invoke, github_vault):
    """Test listing stored passwords."""
    result = invoke(["list"], input="hunter2\n")
    assert result.exit_code == 0, result.output
    assert "github" in result.output
    assert "alice" in result.output
    assert "******" in result.output
    assert "s3cr3t" not in result.output


def test_list_verbose(invoke, github_vault):
    """Test listing stored passwords in clear text."""
    result = invoke(["list", "--verbose"], input="hunter2\n")
    assert result.exit_code == 0, result.output
    assert "s3cr3t" in result.output


def test_list_empty(invoke):
    """Test listing a vault that does not exist yet."""
    result = invoke(["list"], input="hunter2\nhunter2\n")
    assert result.exit_code == 0, result.output
    assert "No passwords stored." in result.output


def test_remove_force(invoke, tmp_path, github_vault):
    """Test removing a password without confirmation."""
    result = invoke(["remove", "github", "--force"], input="hunter2\n")
    assert result.exit_code == 0, result.output
    assert "Password of 'github' removed" in result.output

    vault = load(tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")
    assert vault.records == []


def test_remove_cancelled(invoke, tmp_path, github_vault):
    """Test declining the removal confirmation."""
    result = invoke(["remove", "github"], input="hunter2\nn\n")
    assert result.exit_code == 0, result.output
    assert "Operation cancelled" in result.output

    vault = load(tmp_path / "passwords.enc", tmp_path / "lockbox.salt", "hunter2")
    assert vault == github_vault


def test_remove_missing(invoke, github_vault):
    """Test removing a service that is not stored."""
    result = invoke(["remove", "gitlab", "--force"], input="hunter2\n")
    assert result.exit_code == 1
    assert "No password stored for: gitlab" in result.output


def test_save_error(invoke, github_vault):
    """Test error handling when the vault cannot be written."""
    with patch(
        "lockbox.storage.vault.VaultSession.save",
        side_effect=PersistenceError("Cannot write vault: disk full"),
    ):
        result = invoke(
            ["add", "--service", "gitlab", "--password", "x"], input="hunter2\n"
        )
    assert result.exit_code == 1
    assert "Failed to save vault: Cannot write vault: disk full" in result.output


def test_generate(invoke, tmp_path):
    """Test password generation."""
    result = invoke(["generate", "20", "--no-symbols"])
    assert result.exit_code == 0, result.output
    password = result.output.strip().splitlines()[-1]
    assert len(password) == 20
    assert password.isalnum()
    assert not (tmp_path / "passwords.enc").exists()


def test_generate_rejects_zero_length(invoke):
    """Test that the length must be positive."""
    result = invoke(["generate", "0"])
    assert result.exit_code == 2


def test_custom_paths(cli_runner, tmp_path):
    """Test --vault and --salt relative to --data-dir."""
    result = cli_runner.invoke(
        cli,
        [
            "--data-dir",
            str(tmp_path),
            "--vault",
            "v.enc",
            "--salt",
            "s.salt",
            "add",
            "--service",
            "github",
            "--password",
            "s3cr3t",
        ],
        input="hunter2\nhunter2\n",
    )
    assert result.exit_code == 0, result.output
    assert load(tmp_path / "v.enc", tmp_path / "s.salt", "hunter2").find("github")


def test_log_file_written(invoke, tmp_path, github_vault):
    """Test that operations are audited without leaking secrets."""
    result = invoke(["show", "github"], input="hunter2\n")
    assert result.exit_code == 0, result.output

    log_text = (tmp_path / "logs" / "lockbox.log").read_text()
    assert "credential.read" in log_text
    assert "s3cr3t" not in log_text
    assert "hunter2" not in log_text


def test_version(cli_runner):
    """Test the version option."""
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "lockbox" in result.output


@pytest.mark.skipif(sys.platform == "win32",
                    reason="POSIX permissions not supported on Windows")
def test_fresh_data_dir_is_private(cli_runner, tmp_path):
    """Test a data directory created by the CLI is readable only by the owner."""
    data_dir = tmp_path / "fresh"
    result = cli_runner.invoke(
        cli,
        ["--data-dir", str(data_dir), "add", "--service", "g", "--password", "x"],
        input="hunter2\nhunter2\n",
    )
    assert result.exit_code == 0, result.output
    assert oct(os.stat(data_dir).st_mode).endswith("700")
    assert (data_dir / "logs" / "lockbox.log").exists()
