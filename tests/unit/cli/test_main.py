"""Tests for the command-line entry point."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from codespace_rotator import __version__
from codespace_rotator.cli.main import USAGE_EXIT_CODE, app, get_cli_overrides_from_args
from codespace_rotator.rotation.progress import ProgressRecord, ProgressStore


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """No logging reconfiguration and no discovered config files."""
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    monkeypatch.setattr("codespace_rotator.cli.main.configure_logging", lambda *a, **k: None)
    monkeypatch.setattr(
        "codespace_rotator.config.settings.find_toml_config_file", lambda: None
    )


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


def invoke(*args: str, tokens_file: Path, state_file: Path):
    return runner.invoke(
        app,
        [*args, "--tokens-file", str(tokens_file), "--state-file", str(state_file)],
    )


@pytest.mark.unit
class TestUsage:
    def test_missing_target_is_a_usage_error(self) -> None:
        result = runner.invoke(app, [])

        assert result.exit_code == USAGE_EXIT_CODE
        assert "Usage: codespace-rotator OWNER/REPO" in result.output

    def test_invalid_target_is_a_usage_error(self) -> None:
        result = runner.invoke(app, ["not-a-repo"])

        assert result.exit_code == USAGE_EXIT_CODE
        assert "neither a command" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unreadable_config_exits_with_failure(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["status", "--config", str(tmp_path / "absent.toml")])

        assert result.exit_code == 1
        assert "FATAL" in result.output


@pytest.mark.unit
class TestStatus:
    def test_without_state_file(self, tokens_file: Path, state_file: Path) -> None:
        result = invoke("status", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 0
        assert "No state file found" in result.output
        assert "Tokens available: 3" in result.output
        assert not state_file.exists()

    def test_with_state_file(self, tokens_file: Path, state_file: Path) -> None:
        ProgressStore(state_file).save(ProgressRecord(1, "cs-primary", "cs-secondary"))

        result = invoke("status", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 0
        assert "cs-primary" in result.output
        assert "cs-secondary" in result.output
        assert "3 tokens" in result.output


@pytest.mark.unit
class TestVerify:
    def test_without_state_file(self, tokens_file: Path, state_file: Path) -> None:
        result = invoke("verify", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 1
        assert "No state file found" in result.output

    def test_index_out_of_range(self, tokens_file: Path, state_file: Path) -> None:
        ProgressStore(state_file).save(ProgressRecord(7))

        result = invoke("verify", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 1
        assert "Invalid token index 7" in result.output

    def test_no_sessions_recorded(self, tokens_file: Path, state_file: Path) -> None:
        ProgressStore(state_file).save(ProgressRecord(2))

        result = invoke("verify", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 0
        assert "no sessions recorded yet" in result.output

    def test_probes_both_sessions(self, tokens_file: Path, state_file: Path) -> None:
        ProgressStore(state_file).save(ProgressRecord(1, "cs-primary", "cs-secondary"))
        provisioner = MagicMock()
        provisioner.is_available.side_effect = [True, False]

        with patch(
            "codespace_rotator.cli.commands.status.build_provisioner",
            return_value=provisioner,
        ):
            result = invoke("verify", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 0
        assert "RUNNING & READY" in result.output
        assert "NOT READY or STOPPED" in result.output
        assert [c.args for c in provisioner.is_available.call_args_list] == [
            ("ghp_token1111", "cs-primary"),
            ("ghp_token1111", "cs-secondary"),
        ]
        assert ProgressStore(state_file).load() == ProgressRecord(1, "cs-primary", "cs-secondary")


@pytest.mark.unit
class TestRun:
    def test_repository_starts_rotation(self, tokens_file: Path, state_file: Path) -> None:
        with patch("codespace_rotator.cli.main.run_rotation") as mock_run:
            result = invoke("octocat/node-blueprint", tokens_file=tokens_file, state_file=state_file)

        assert result.exit_code == 0
        settings, repository = mock_run.call_args.args
        assert repository == "octocat/node-blueprint"
        assert settings.paths.tokens_file == tokens_file

    def test_missing_tokens_file_is_fatal(self, tmp_path: Path, state_file: Path) -> None:
        result = invoke(
            "octocat/node-blueprint",
            tokens_file=tmp_path / "absent.json",
            state_file=state_file,
        )

        assert result.exit_code == 1
        assert "FATAL" in result.output
        assert not state_file.exists()


@pytest.mark.unit
def test_cli_overrides_skip_unset_options() -> None:
    overrides = get_cli_overrides_from_args(
        tokens_file=Path("t.json"), state_file=None, log_level="debug", json_logs=None
    )

    assert overrides == {
        "paths": {"tokens_file": Path("t.json")},
        "logging": {"level": "debug"},
    }
