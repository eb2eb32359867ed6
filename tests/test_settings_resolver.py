# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import pytest

from ankh_lib.core.error import AnkhSettingsError
from ankh_lib.settings.defaults import DefaultsStore, Scope
from ankh_lib.settings.resolver import ConfigResolver
from ankh_lib.settings.schema import get_spec
from ankh_lib.settings.value import ResolvedSettings, SettingValue, Tier


@pytest.fixture
def store(tmp_path):
    return DefaultsStore(tmp_path)


def write_global(store, text):
    store.globalFile().path.write_text(text)


def write_app(store, app, text):
    path = store.appFile(app).path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def test_ram_scenario_environment_wins(store):
    write_global(store, "var_ram=4096\n")
    write_app(store, "coolify", "var_ram=2048\n")
    resolver = ConfigResolver(store, "coolify", environ={"var_ram": "8192"})

    value = resolver.resolveSpec(get_spec("var_ram"), 1024)

    assert value == SettingValue("var_ram", 8192, Tier.ENVIRONMENT)


def test_disk_scenario_global_file_wins_over_builtin(store):
    write_global(store, "var_disk=50\n")
    resolver = ConfigResolver(store, "coolify", environ={})

    value = resolver.resolveSpec(get_spec("var_disk"), 10)

    assert value == SettingValue("var_disk", 50, Tier.GLOBAL_DEFAULTS)


def test_app_file_wins_over_global_file(store):
    write_global(store, "var_cpu=2\nvar_ram=4096\n")
    write_app(store, "coolify", "var_cpu=6\n")
    resolver = ConfigResolver(store, "coolify", environ={})

    settings = resolver.resolveAll({"var_cpu": 4, "var_ram": 8192})

    assert settings["var_cpu"] == SettingValue("var_cpu", 6, Tier.APP_DEFAULTS)
    assert settings["var_ram"] == SettingValue("var_ram", 4096, Tier.GLOBAL_DEFAULTS)


def test_absent_everywhere_uses_builtin(store):
    resolver = ConfigResolver(store, "coolify", environ={})

    settings = resolver.resolveAll({"var_ram": 8192})

    assert settings["var_ram"] == SettingValue("var_ram", 8192, Tier.BUILTIN)
    # base default of the catalog when the application does not override it
    assert settings["var_cpu"] == SettingValue("var_cpu", 1, Tier.BUILTIN)
    assert settings["var_gateway"] == SettingValue("var_gateway", None, Tier.BUILTIN)


@pytest.mark.parametrize("key", ["var_cpu", "var_ram", "var_disk", "var_os", "var_storage"])
def test_environment_override_wins_regardless_of_files(store, key):
    write_global(store, f"{key}=111\n")
    write_app(store, "coolify", f"{key}=222\n")
    resolver = ConfigResolver(store, "coolify", environ={key: "333"})

    value = resolver.resolveSpec(get_spec(key))

    assert value.tier == Tier.ENVIRONMENT
    assert str(value.value) == "333"


def test_empty_values_are_treated_as_absent(store):
    write_global(store, "var_ram=4096\n")
    write_app(store, "coolify", "var_ram=\n")
    resolver = ConfigResolver(store, "coolify", environ={"var_ram": "  "})

    value = resolver.resolveSpec(get_spec("var_ram"), 1024)

    assert value == SettingValue("var_ram", 4096, Tier.GLOBAL_DEFAULTS)


def test_alternative_environment_names(store):
    resolver = ConfigResolver(
        store, "coolify", environ={"STORAGE": "local-zfs", "CTID": "150"}
    )

    assert resolver.resolveSpec(get_spec("var_storage")).value == "local-zfs"
    assert resolver.resolveSpec(get_spec("var_id")).value == 150


def test_key_takes_precedence_over_alternative_name(store):
    resolver = ConfigResolver(
        store, None, environ={"var_id": "120", "VMID": "130", "CTID": "140"}
    )

    assert resolver.resolveSpec(get_spec("var_id")).value == 120


def test_resolver_without_app_skips_app_file(store):
    write_app(store, "coolify", "var_cpu=6\n")
    resolver = ConfigResolver(store, None, environ={})

    assert resolver.resolveSpec(get_spec("var_cpu"), 4).tier == Tier.BUILTIN


def test_invalid_value_names_key_and_tier(store):
    write_global(store, "var_cpu=abc\n")
    resolver = ConfigResolver(store, "coolify", environ={})

    with pytest.raises(AnkhSettingsError) as exc_info:
        resolver.resolveSpec(get_spec("var_cpu"), 4)

    message = str(exc_info.value)
    assert "var_cpu" in message
    assert "global defaults" in message
    assert str(store.globalFile().path) in message


def test_invalid_environment_value(store):
    resolver = ConfigResolver(store, "coolify", environ={"var_ip": "999.1.1.1"})

    with pytest.raises(AnkhSettingsError, match=r"\$var_ip"):
        resolver.resolveSpec(get_spec("var_ip"))


def test_resolve_without_parser_strips(store):
    resolver = ConfigResolver(store, None, environ={"CUSTOM": "  value "})

    value = resolver.resolve("custom", "default", env_vars=("CUSTOM",))

    assert value == SettingValue("custom", "value", Tier.ENVIRONMENT)


def test_save_then_resolve_round_trip(store):
    resolver = ConfigResolver(store, "coolify", environ={})
    settings = resolver.resolveAll({"var_cpu": 4, "var_ram": 8192, "var_disk": 200})
    settings.set(SettingValue("var_ram", 16384, Tier.PROMPT))
    settings.set(SettingValue("var_unprivileged", False, Tier.PROMPT))

    path = resolver.save(settings, Scope.APP)

    assert path == store.appFile("coolify").path
    fresh = ConfigResolver(DefaultsStore(store.base_dir), "coolify", environ={})
    reloaded = fresh.resolveAll({"var_cpu": 4, "var_ram": 8192, "var_disk": 200})
    for value in settings:
        if value.value not in (None, "") and value.key != "var_id":
            assert reloaded.get(value.key) == value.value
            assert reloaded[value.key].tier == Tier.APP_DEFAULTS


def test_save_skips_unset_and_non_persistable_values(store):
    resolver = ConfigResolver(store, "coolify", environ={})
    settings = ResolvedSettings(
        [
            SettingValue("var_id", 150, Tier.ENVIRONMENT),
            SettingValue("var_gateway", None, Tier.BUILTIN),
            SettingValue("var_cpu", 2, Tier.PROMPT),
        ]
    )

    resolver.save(settings, Scope.GLOBAL)

    assert store.globalFile().load() == {"var_cpu": "2"}


def test_save_global_is_seen_by_other_apps(store):
    resolver = ConfigResolver(store, "coolify", environ={})
    resolver.save(
        ResolvedSettings([SettingValue("var_bridge", "vmbr1", Tier.PROMPT)]),
        Scope.GLOBAL,
    )

    other = ConfigResolver(DefaultsStore(store.base_dir), "inbox-zero", environ={})

    assert other.resolveSpec(get_spec("var_bridge")) == SettingValue(
        "var_bridge", "vmbr1", Tier.GLOBAL_DEFAULTS
    )
