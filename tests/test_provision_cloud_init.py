# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from unittest.mock import patch

import pytest
import yaml

from ankh_lib.apps.registry import COOLIFY
from ankh_lib.core.error import AnkhProvisionError
from ankh_lib.provision.cloud_init import (
    build_user_data,
    render_user_data,
    snippet_name,
    snippet_volume,
    write_snippet,
)

KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIHk0XZ5Ijr2gjLk user@host"


def test_build_user_data():
    user_data = build_user_data(COOLIFY, "coolify", KEY)

    assert user_data["hostname"] == "coolify"
    assert user_data["users"] == [{"name": "root", "ssh_authorized_keys": [KEY]}]
    assert "qemu-guest-agent" in user_data["packages"]
    assert "ufw" in user_data["packages"]
    assert "ufw allow 8000/tcp comment 'Coolify Dashboard'" in user_data["runcmd"]
    assert user_data["runcmd"][-1] == "systemctl restart ssh"
    assert "PasswordAuthentication no" in user_data["write_files"][0]["content"]
    assert user_data["final_message"].endswith(":8000")


def test_firewall_enabled_before_app_commands():
    runcmd = build_user_data(COOLIFY, "coolify", KEY)["runcmd"]

    assert runcmd.index("ufw --force enable") < runcmd.index(COOLIFY.runcmd[0])


def test_render_user_data_is_cloud_config():
    rendered = render_user_data(build_user_data(COOLIFY, "coolify", KEY))

    assert rendered.startswith("#cloud-config\n")
    assert yaml.safe_load(rendered)["hostname"] == "coolify"


def test_snippet_names():
    assert snippet_name(COOLIFY, 120) == "coolify-120-userdata.yaml"
    assert snippet_volume(COOLIFY, 120) == "local:snippets/coolify-120-userdata.yaml"


def test_write_snippet(tmp_path):
    with patch("ankh_lib.provision.cloud_init.CFG.paths.snippets_dir", tmp_path / "snippets"):
        path = write_snippet(COOLIFY, 120, "#cloud-config\n")

    assert path == tmp_path / "snippets" / "coolify-120-userdata.yaml"
    assert path.read_text() == "#cloud-config\n"


def test_write_snippet_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    with (
        patch("ankh_lib.provision.cloud_init.CFG.paths.snippets_dir", blocker / "snippets"),
        pytest.raises(AnkhProvisionError) as exc_info,
    ):
        write_snippet(COOLIFY, 120, "#cloud-config\n")

    assert exc_info.value.exit_code == 217
