# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import io
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console

from ankh_lib.apps.cli import apps
from ankh_lib.apps.definition import AppDefinition, GuestKind
from ankh_lib.apps.presenter import AppsPresenter
from ankh_lib.apps.registry import APPS, COOLIFY, INBOX_ZERO, get_app
from ankh_lib.core.error import AnkhError, AnkhSchemaError


def test_registry_contains_apps():
    assert APPS == {"inbox-zero": INBOX_ZERO, "coolify": COOLIFY}
    assert INBOX_ZERO.kind == GuestKind.CONTAINER
    assert COOLIFY.kind == GuestKind.VM


@pytest.mark.parametrize("name", ["coolify", "Coolify", " COOLIFY "])
def test_get_app_normalizes(name):
    assert get_app(name) is COOLIFY


def test_get_app_inbox_zero_variants():
    assert get_app("Inbox Zero") is INBOX_ZERO
    assert get_app("inbox_zero") is INBOX_ZERO


def test_get_app_unknown_lists_known():
    with pytest.raises(AnkhError, match="Known applications: coolify, inbox-zero"):
        get_app("nextcloud")


def test_builtins_include_hostname():
    builtins = COOLIFY.builtins()

    assert builtins["var_hostname"] == "coolify"
    assert builtins["var_ram"] == 8192
    assert builtins["var_disk"] == 200


def test_url():
    assert COOLIFY.url("10.0.0.5") == "http://10.0.0.5:8000"
    assert INBOX_ZERO.url("10.0.0.6") == "http://10.0.0.6:3000"


def test_cloud_image_file():
    assert COOLIFY.cloudImageFile() == Path("/var/lib/vz/template/iso/noble-server-cloudimg-amd64.img")
    with pytest.raises(AnkhSchemaError):
        INBOX_ZERO.cloudImageFile()


def test_definition_rejects_unknown_builtin():
    with pytest.raises(AnkhSchemaError, match="unknown settings"):
        AppDefinition("X", "x", GuestKind.CONTAINER, {"var_memory": 1}, install_script="x.sh")


def test_definition_requires_cloud_image_for_vm():
    with pytest.raises(AnkhSchemaError, match="no cloud image"):
        AppDefinition("X", "x", GuestKind.VM)


def test_definition_requires_install_script_for_container():
    with pytest.raises(AnkhSchemaError, match="no install script"):
        AppDefinition("X", "x", GuestKind.CONTAINER)


def test_apps_presenter_lists_apps():
    console = Console(file=io.StringIO(), width=140)
    console.print(AppsPresenter(list(APPS.values())).createAppsPanel(console))
    output = console.file.getvalue()

    assert "inbox-zero" in output
    assert "Coolify" in output
    assert "8192 MiB" in output
    assert "virtual machine" in output


def test_apps_cli_exits_success():
    result = CliRunner().invoke(apps, [])

    assert result.exit_code == 0
    assert "coolify" in result.output
