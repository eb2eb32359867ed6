# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from ankh_lib.core.error import AnkhCommandError, AnkhError, AnkhProvisionError
from ankh_lib.provision.proxmox import GuestListEntry, Proxmox


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


def test_run_returns_stripped_stdout():
    proxmox = Proxmox()

    with patch("ankh_lib.provision.proxmox.subprocess.run", return_value=completed(" 105\n")) as mock_run:
        assert proxmox.run(["pvesh", "get", "/cluster/nextid"]) == "105"

    mock_run.assert_called_once_with(
        ["pvesh", "get", "/cluster/nextid"],
        text=True,
        check=False,
        capture_output=True,
        errors="replace",
    )
    assert proxmox.last_command == ["pvesh", "get", "/cluster/nextid"]


def test_run_nonzero_preserves_exit_code():
    proxmox = Proxmox()

    with (
        patch(
            "ankh_lib.provision.proxmox.subprocess.run",
            return_value=completed(returncode=206, stderr="CT 100 already exists"),
        ),
        pytest.raises(AnkhCommandError) as exc_info,
    ):
        proxmox.pct("create", "100", "template")

    assert exc_info.value.exit_code == 206
    assert exc_info.value.command == ["pct", "create", "100", "template"]
    assert exc_info.value.stderr == "CT 100 already exists"


def test_run_missing_tool_is_127():
    with (
        patch("ankh_lib.provision.proxmox.subprocess.run", side_effect=FileNotFoundError("qm")),
        pytest.raises(AnkhCommandError) as exc_info,
    ):
        Proxmox().qm("list", modifies=False)

    assert exc_info.value.exit_code == 127


@pytest.mark.parametrize("signum,code", [(9, 137), (11, 139), (15, 143)])
def test_run_killed_by_signal_uses_shell_code(signum, code):
    with (
        patch(
            "ankh_lib.provision.proxmox.subprocess.run",
            return_value=completed(returncode=-signum),
        ),
        pytest.raises(AnkhCommandError) as exc_info,
    ):
        Proxmox().qm("importdisk", "120", "image.img", "local-lvm")

    assert exc_info.value.exit_code == code


def test_run_stream_does_not_capture():
    result = subprocess.CompletedProcess([], 0, stdout=None, stderr=None)

    with patch("ankh_lib.provision.proxmox.subprocess.run", return_value=result) as mock_run:
        assert Proxmox().run(["pct", "exec", "100", "--", "true"], stream=True) == ""

    assert mock_run.call_args.kwargs["capture_output"] is False


def test_dry_run_skips_modifying_commands_only():
    proxmox = Proxmox(dry_run=True)

    with (
        patch("ankh_lib.provision.proxmox.subprocess.run", return_value=completed("out")) as mock_run,
        patch("ankh_lib.provision.proxmox.logger") as mock_logger,
    ):
        assert proxmox.qm("start", "100") == ""
        assert proxmox.qm("list", modifies=False) == "out"

    mock_run.assert_called_once()
    mock_logger.info.assert_called_once_with("[dry-run] qm start 100")
    assert proxmox.dry_run


def test_next_id():
    proxmox = Proxmox()
    proxmox.pvesh = MagicMock(return_value="105")

    assert proxmox.nextId() == 105


def test_next_id_invalid_answer():
    proxmox = Proxmox()
    proxmox.pvesh = MagicMock(return_value="no")

    with pytest.raises(AnkhProvisionError) as exc_info:
        proxmox.nextId()

    assert exc_info.value.exit_code == 203


def test_used_ids():
    proxmox = Proxmox()
    proxmox.pvesh = MagicMock(
        return_value=json.dumps([{"vmid": 100, "type": "lxc"}, {"vmid": "101"}, {"id": "x"}])
    )

    assert proxmox.usedIds() == {100, 101}


def test_used_ids_invalid_json():
    proxmox = Proxmox()
    proxmox.pvesh = MagicMock(return_value="{broken")

    with pytest.raises(AnkhError, match="cluster resources") as exc_info:
        proxmox.usedIds()

    assert exc_info.value.exit_code == 1
    assert not isinstance(exc_info.value, AnkhProvisionError)


def test_ensure_id_available_uses_next_id():
    proxmox = Proxmox()
    proxmox.nextId = MagicMock(return_value=110)
    proxmox.usedIds = MagicMock(return_value={100})

    assert proxmox.ensureIdAvailable(None) == 110


def test_ensure_id_available_rejects_low_id():
    proxmox = Proxmox()

    with pytest.raises(AnkhProvisionError) as exc_info:
        proxmox.ensureIdAvailable(99)

    assert exc_info.value.exit_code == 205


def test_ensure_id_available_rejects_used_id():
    proxmox = Proxmox()
    proxmox.usedIds = MagicMock(return_value={100, 150})

    with pytest.raises(AnkhProvisionError) as exc_info:
        proxmox.ensureIdAvailable(150)

    assert exc_info.value.exit_code == 206


QM_LIST = """      VMID NAME                 STATUS     MEM(MB)    BOOTDISK(GB) PID
       120 coolify              running    8192             200.00 4242
       121 test-vm              stopped    2048              32.00 0
"""

PCT_LIST = """VMID       Status     Lock         Name
130        running                 inbox-zero
131        stopped    backup       other
"""


def test_list_vms():
    proxmox = Proxmox()
    proxmox.qm = MagicMock(return_value=QM_LIST.strip())

    assert proxmox.listVms() == [
        GuestListEntry(120, "coolify", "running"),
        GuestListEntry(121, "test-vm", "stopped"),
    ]


def test_list_containers():
    proxmox = Proxmox()
    proxmox.pct = MagicMock(return_value=PCT_LIST.strip())

    assert proxmox.listContainers() == [
        GuestListEntry(130, "inbox-zero", "running"),
        GuestListEntry(131, "other", "stopped"),
    ]


def test_find_guest_by_name():
    proxmox = Proxmox()
    proxmox.qm = MagicMock(return_value=QM_LIST.strip())
    proxmox.pct = MagicMock(return_value=PCT_LIST.strip())

    assert proxmox.findGuestByName("Coolify", vm=True) == 120
    assert proxmox.findGuestByName("inbox", vm=False) == 130
    assert proxmox.findGuestByName("nextcloud", vm=True) is None


def test_is_running():
    proxmox = Proxmox()
    proxmox.pct = MagicMock(return_value="status: running")
    proxmox.qm = MagicMock(return_value="status: stopped")

    assert proxmox.isRunning(130, vm=False)
    assert not proxmox.isRunning(120, vm=True)


def test_set_description_uses_tool_of_guest_kind():
    proxmox = Proxmox()
    proxmox.qm = MagicMock()
    proxmox.pct = MagicMock()

    proxmox.setDescription(120, "Coolify", vm=True)
    proxmox.setDescription(130, "Inbox Zero", vm=False)

    proxmox.qm.assert_called_once_with("set", "120", "--description", "Coolify")
    proxmox.pct.assert_called_once_with("set", "130", "--description", "Inbox Zero")
