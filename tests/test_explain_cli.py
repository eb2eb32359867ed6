# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from unittest.mock import patch

from click.testing import CliRunner

from ankh_lib.explain.cli import explain


def test_explain_single_code():
    result = CliRunner().invoke(explain, ["206"])

    assert result.exit_code == 0
    assert "CTID already in use" in result.output
    assert "Proxmox-layer" in result.output


def test_explain_multiple_codes():
    result = CliRunner().invoke(explain, ["100", "127"])

    assert result.exit_code == 0
    assert "100" in result.output
    assert "127" in result.output
    assert "generic" in result.output


def test_explain_unknown_code_in_range():
    result = CliRunner().invoke(explain, ["299"])

    assert result.exit_code == 0
    assert "Proxmox-layer" in result.output


def test_explain_all():
    result = CliRunner().invoke(explain, ["--all"])

    assert result.exit_code == 0
    assert "EXIT CODES" in result.output
    assert "206" in result.output


def test_explain_without_code():
    with patch("ankh_lib.explain.cli.logger") as mock_logger:
        result = CliRunner().invoke(explain, [])

    assert result.exit_code == 1
    mock_logger.error.assert_called_once()


def test_explain_non_numeric_code():
    result = CliRunner().invoke(explain, ["abc"])

    assert result.exit_code == 2


def test_explain_marks_unlisted_code():
    result = CliRunner().invoke(explain, ["250", "206"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert any(line.startswith("250") and "not a listed exit code" in line for line in lines)
    assert not any(line.startswith("206") and "not a listed exit code" in line for line in lines)
