"""Tests for the ledger-kg command line."""

import pytest
from typer.testing import CliRunner

from ledger_kg.cli import app, console

runner = CliRunner()

E1 = "entity://finance/person/e1"
AGE = "http://ex.org/age"
DOC = "urn:doc:1"
SOURCE = "http://purplefabric.ai/ontology#sourceDocument"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(console, "width", 240)


@pytest.fixture
def local_config(config, tmp_path):
    path = tmp_path / "ledger.toml"
    path.write_text(f'[store]\nbackend = "local"\n\n[local]\npath = "{tmp_path / "store.trig"}"\n')
    return path


def write_facts(tmp_path, age):
    path = tmp_path / f"facts-{age}.nt"
    path.write_text(
        f'<{E1}> <{AGE}> "{age}" .\n'
        f"<{E1}> <{SOURCE}> <{DOC}> .\n"
        "this line is malformed\n"
    )
    return path


def invoke(local_config, *args):
    return runner.invoke(app, ["--config", str(local_config), *args])


class TestIdentityCommand:
    """Test the identity command."""

    def test_identity_with_keys(self, config):
        """Identity keys are applied in the given order."""
        result = runner.invoke(
            app, ["identity", "Acme Corp", "--type", "Organization", "--workspace", "ws-1", "--key", "taxId=123"]
        )
        assert result.exit_code == 0
        assert "entity://ws-1/organization/123" in result.output

    def test_identity_bad_key(self, config):
        """Keys without '=' are rejected."""
        result = runner.invoke(app, ["identity", "Acme", "--type", "Organization", "--key", "taxId"])
        assert result.exit_code != 0


class TestCommitCommands:
    """Test commit, diff, history and log against a local store."""

    def test_commit_then_update(self, local_config, tmp_path):
        """A changed commit is previewed, committed and shows up in the audit trail."""
        first = invoke(
            local_config, "commit", str(write_facts(tmp_path, "30")),
            "--tenant", "acme", "--workspace", "finance", "--source-doc", DOC,
        )
        assert first.exit_code == 0, first.output
        assert "Triples: 2" in first.output

        updated = write_facts(tmp_path, "31")
        preview = invoke(
            local_config, "diff", str(updated),
            "--tenant", "acme", "--workspace", "finance", "--source-doc", DOC,
        )
        assert preview.exit_code == 0, preview.output
        assert "UPDATE" in preview.output

        second = invoke(
            local_config, "commit", str(updated),
            "--tenant", "acme", "--workspace", "finance", "--source-doc", DOC,
        )
        assert second.exit_code == 0, second.output
        assert "Changes recorded: 1" in second.output

        history = invoke(local_config, "history", E1, "--tenant", "acme", "--workspace", "finance")
        assert history.exit_code == 0, history.output
        assert "UPDATE" in history.output

        log = invoke(local_config, "log", "--tenant", "acme", "--workspace", "finance", "--change-type", "update")
        assert log.exit_code == 0, log.output
        assert "1 of 1" in log.output

    def test_empty_file_fails_cleanly(self, local_config, tmp_path):
        """A file with no facts exits with the error name."""
        empty = tmp_path / "empty.nt"
        empty.write_text("# nothing here\n")

        result = invoke(local_config, "commit", str(empty), "--tenant", "acme", "--workspace", "finance")
        assert result.exit_code == 1
        assert "EmptyInputError" in result.output

    def test_log_rejects_unknown_change_type(self, local_config):
        """Only INSERT, UPDATE and DELETE are accepted."""
        result = invoke(local_config, "log", "--tenant", "acme", "--workspace", "finance", "--change-type", "MERGE")
        assert result.exit_code != 0

    def test_invalid_workspace_fails_cleanly(self, local_config, tmp_path):
        """A rejected workspace id exits with a message, not a traceback."""
        result = invoke(
            local_config, "commit", str(write_facts(tmp_path, "30")),
            "--tenant", "acme", "--workspace", "undefined",
        )
        assert result.exit_code == 1
        assert "Invalid input" in result.output
        assert "Traceback" not in result.output

    def test_unknown_config_option_fails_cleanly(self, config, tmp_path):
        """An unknown key in the config file exits with a message."""
        bad = tmp_path / "bad.toml"
        bad.write_text("bogus_option = 1\n")

        result = invoke(bad, "log", "--tenant", "acme", "--workspace", "finance")
        assert result.exit_code == 1
        assert "Unknown configuration option" in result.output
