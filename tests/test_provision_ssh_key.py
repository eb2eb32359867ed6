# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from unittest.mock import patch

import pytest

from ankh_lib.core.error import AnkhProvisionError
from ankh_lib.provision.ssh_key import collect_ssh_key

ED25519 = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIHk0XZ5Ijr2gjLk user@host"
RSA = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQC7 user@host"


def test_configured_key_wins(tmp_path):
    assert collect_ssh_key(ED25519, home=tmp_path) == ED25519


def test_ed25519_preferred_over_rsa(tmp_path):
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir()
    (ssh_dir / "id_rsa.pub").write_text(RSA + "\n")
    (ssh_dir / "id_ed25519.pub").write_text(ED25519 + "\n")

    assert collect_ssh_key(None, home=tmp_path) == ED25519


def test_rsa_used_when_ed25519_is_invalid(tmp_path):
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir()
    (ssh_dir / "id_ed25519.pub").write_text("garbage")
    (ssh_dir / "id_rsa.pub").write_text(RSA)

    with patch("ankh_lib.provision.ssh_key.logger") as mock_logger:
        assert collect_ssh_key(None, home=tmp_path) == RSA

    mock_logger.warning.assert_called_once()


def test_missing_key_non_interactive(tmp_path):
    with (
        patch("ankh_lib.provision.ssh_key.is_interactive", return_value=False),
        pytest.raises(AnkhProvisionError) as exc_info,
    ):
        collect_ssh_key(None, home=tmp_path)

    assert exc_info.value.exit_code == 241


def test_missing_key_prompts(tmp_path):
    with (
        patch("ankh_lib.provision.ssh_key.is_interactive", return_value=True),
        patch("ankh_lib.provision.ssh_key.click.prompt", return_value=ED25519),
    ):
        assert collect_ssh_key(None, home=tmp_path) == ED25519


def test_prompted_invalid_key(tmp_path):
    with (
        patch("ankh_lib.provision.ssh_key.is_interactive", return_value=True),
        patch("ankh_lib.provision.ssh_key.click.prompt", return_value=""),
        pytest.raises(AnkhProvisionError) as exc_info,
    ):
        collect_ssh_key(None, home=tmp_path)

    assert exc_info.value.exit_code == 241
