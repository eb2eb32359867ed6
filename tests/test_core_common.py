# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from unittest.mock import MagicMock, patch

import pytest
import yaml

from ankh_lib.core.common import (
    get_panel_width,
    load_yaml_dumper,
    normalize,
    yes_or_no_prompt,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("coolify", "coolify"),
        ("  Inbox Zero ", "inbox-zero"),
        ("inbox_zero", "inbox-zero"),
        ("INBOX-ZERO", "inbox-zero"),
    ],
)
def test_normalize(name, expected):
    assert normalize(name) == expected


def test_get_panel_width_bounds():
    console = MagicMock()
    console.size.width = 200

    assert get_panel_width(console, 2, 60, None) == 100
    assert get_panel_width(console, 2, 60, 80) == 80
    assert get_panel_width(console, 10, 60, None) == 60


def test_load_yaml_dumper_dumps():
    dumped = yaml.dump({"packages": ["curl"]}, Dumper=load_yaml_dumper())

    assert "packages:" in dumped
    assert "- curl" in dumped


def test_yes_or_no_prompt_non_interactive_returns_default():
    with (
        patch("ankh_lib.core.common.is_interactive", return_value=False),
        patch("ankh_lib.core.common.readchar.readkey") as mock_readkey,
    ):
        assert yes_or_no_prompt("Continue?") is False
        assert yes_or_no_prompt("Continue?", default=True) is True

    mock_readkey.assert_not_called()


@pytest.mark.parametrize(
    "key,default,expected",
    [("y", False, True), ("n", True, False), ("x", True, True), ("\r", False, False)],
)
def test_yes_or_no_prompt_reads_key(key, default, expected):
    with (
        patch("ankh_lib.core.common.is_interactive", return_value=True),
        patch("ankh_lib.core.common.readchar.readkey", return_value=key),
        patch("ankh_lib.core.common.Live"),
    ):
        assert yes_or_no_prompt("Continue?", default) is expected
