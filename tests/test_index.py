"""
Tests for the command line entry point.
"""

import logging
import sys
from unittest import mock

import pytest

from formula_updater import index
from formula_updater.utils.index import setup_logging

ARGS = [
    "--file", "Formula/slidesk.rb",
    "--owner", "yodamad",
    "--repo", "homebrew-tools",
    "--formula-version", "2.5.0",
    "--token", "ghp_secret123",
    "--field", "sha256",
    "--sha256", "cafef00d",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("FILE", "OWNER", "REPO", "VERSION", "TOKEN", "FIELD", "SHA256", "FIELDS"):
        monkeypatch.delenv(f"INPUT_{name}", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    monkeypatch.setattr(index, "setup_logging", lambda debug=False, secrets=(): None)


@pytest.fixture
def publisher():
    with mock.patch.object(index, "FormulaPublisher") as cls:
        yield cls


def run_main(argv):
    with pytest.raises(SystemExit) as excinfo:
        index.main(argv)
    return excinfo.value.code


def test_successful_run_exits_zero(publisher):
    publisher.return_value.update.return_value = {
        "success": True,
        "pull_request": {"number": 7, "url": "https://github.com/yodamad/homebrew-tools/pull/7"},
        "duration": 1.2,
    }

    assert run_main(ARGS) == 0

    inputs, config = publisher.call_args.args
    assert inputs.version == "2.5.0"
    assert inputs.variant == "single"
    assert config["config"]["base_branch"] == "main"
    publisher.return_value.update.assert_called_once_with(check_only=False)


def test_failed_step_exits_one(publisher):
    publisher.return_value.update.return_value = {"success": False, "step": "push", "error": "denied"}
    assert run_main(ARGS) == 1


def test_invalid_input_exits_two(publisher):
    assert run_main(["--file", "Formula/slidesk.rb"]) == 2
    publisher.assert_not_called()


def test_unexpected_error_exits_one(publisher):
    publisher.return_value.update.side_effect = RuntimeError("boom")
    assert run_main(ARGS) == 1


def test_interrupt_exits_130(publisher):
    publisher.return_value.update.side_effect = KeyboardInterrupt
    assert run_main(ARGS) == 130


def test_check_only_and_overrides(publisher, monkeypatch):
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    publisher.return_value.update.return_value = {"success": True, "duration": 0}

    assert run_main(ARGS + ["--check-only", "--base-branch", "develop"]) == 0

    config = publisher.call_args.args[1]
    assert config["config"]["base_branch"] == "develop"
    assert config["config"]["api_url"] == "https://ghe.example.com/api/v3"
    publisher.return_value.update.assert_called_once_with(check_only=True)


def test_api_url_flag_beats_environment(publisher, monkeypatch):
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    publisher.return_value.update.return_value = {"success": True, "duration": 0}

    run_main(ARGS + ["--api-url", "https://other.example.com/api"])

    assert publisher.call_args.args[1]["config"]["api_url"] == "https://other.example.com/api"


def test_inputs_from_action_environment(publisher, monkeypatch):
    monkeypatch.setenv("INPUT_FILE", "/slidesk.rb")
    monkeypatch.setenv("INPUT_OWNER", "yodamad")
    monkeypatch.setenv("INPUT_REPO", "homebrew-tools")
    monkeypatch.setenv("INPUT_VERSION", "2.5.0")
    monkeypatch.setenv("INPUT_TOKEN", "ghp_secret123")
    monkeypatch.setenv("INPUT_FIELDS", '{"arm": "arm64-aaa"}')
    publisher.return_value.update.return_value = {"success": True, "duration": 0}

    assert run_main([]) == 0

    inputs = publisher.call_args.args[0]
    assert inputs.file == "slidesk.rb"
    assert inputs.variant == "fields"


def test_version_flag(capsys):
    assert run_main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("formula-updater 1.0.0")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_token_is_masked_in_session_banner(publisher, monkeypatch, capsys, restore_root_logger):
    argv = list(ARGS)
    argv[argv.index("ghp_secret123")] = "ghp_SUPERSECRET"
    monkeypatch.setattr(sys, "argv", ["formula-updater"] + argv)
    monkeypatch.setattr(index, "setup_logging", setup_logging)
    publisher.return_value.update.return_value = {"success": True, "pull_request": None, "duration": 0}

    assert run_main(argv) == 0

    out = capsys.readouterr().out
    assert "Command: formula-updater" in out
    assert "--token ***" in out
    assert "ghp_SUPERSECRET" not in out
