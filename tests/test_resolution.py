"""Tests for value resolution precedence."""

import logging

import pytest

from installkit.errors import UnknownModuleError
from installkit.modules import Module, ModuleSet
from installkit.params import Parameter, ValueSource
from installkit.resolution import preview_values, resolve, unset_parameters
from installkit.validators import validate_all


def _ntp_module(enabled=True):
    return Module(
        "ntp",
        enabled=enabled,
        params=[
            Parameter(name="server", module="ntp", default="pool.ntp.org", required=True),
            Parameter(name="fallback_servers", module="ntp", param_type="array"),
            Parameter(name="iburst", module="ntp", param_type="boolean", default=True),
        ],
    )


def _motd_module():
    return Module("motd", params=[Parameter(name="message", module="motd", required=True)])


@pytest.fixture
def module_set():
    return ModuleSet([_ntp_module(), _motd_module()])


class TestPrecedence:
    def test_default_used(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {}, {})
        assert resolved["ntp"]["server"] == "pool.ntp.org"
        assert module_set.get("ntp").get_param("server").source is ValueSource.DEFAULT

    def test_stored_answer_beats_default(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {"ntp": {"server": "stored.example.com"}}, {})
        assert resolved["ntp"]["server"] == "stored.example.com"

    def test_cli_beats_stored_answer(self, module_set):
        resolved = resolve(
            module_set,
            module_set.defaults(),
            {"ntp": {"server": "stored.example.com"}},
            {"ntp": {"server": "time.example.com"}},
        )
        assert resolved["ntp"]["server"] == "time.example.com"
        param = module_set.get("ntp").get_param("server")
        assert param.source is ValueSource.CLI
        assert param.value_set

    def test_precedence_independent_of_module_order(self):
        stored = {"ntp": {"server": "stored"}, "motd": {"message": "stored"}}
        cli = {"motd": {"message": "cli"}}
        for modules in ([_ntp_module(), _motd_module()], [_motd_module(), _ntp_module()]):
            module_set = ModuleSet(modules)
            resolved = resolve(module_set, module_set.defaults(), stored, cli)
            assert resolved["ntp"]["server"] == "stored"
            assert resolved["motd"]["message"] == "cli"

    def test_false_cli_value_wins(self, module_set):
        resolve(module_set, module_set.defaults(), {}, {"ntp": {"iburst": "false"}})
        assert module_set.get("ntp").get_param("iburst").value is False

    def test_empty_cli_value_wins(self, module_set):
        resolve(module_set, module_set.defaults(), {"ntp": {"server": "stored"}}, {"ntp": {"server": ""}})
        assert module_set.get("ntp").get_param("server").value == ""

    def test_defaults_layer_overrides_definition(self, module_set):
        resolved = resolve(module_set, {"ntp": {"server": "site.example.com"}}, {}, {})
        assert resolved["ntp"]["server"] == "site.example.com"

    def test_null_stored_answer_overrides_default(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {"ntp": {"server": None}}, {})
        assert resolved["ntp"]["server"] is None
        server = module_set.get("ntp").get_param("server")
        assert server.source is ValueSource.ANSWER
        assert not server.valid

    def test_absent_stored_answer_uses_default(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {"ntp": {"iburst": False}}, {})
        assert resolved["ntp"]["server"] == "pool.ntp.org"
        assert resolved["ntp"]["iburst"] is False

    def test_module_level_booleans_in_answers(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {"ntp": True, "motd": False}, {})
        assert resolved["ntp"]["server"] == "pool.ntp.org"


class TestValues:
    def test_multivalued_resolves_to_list(self, module_set):
        resolve(module_set, None, {"ntp": {"fallback_servers": "a.example.com"}}, {})
        assert module_set.get("ntp").get_param("fallback_servers").value == ["a.example.com"]

        resolve(module_set, None, {}, {"ntp": {"fallback_servers": ["b", "c"]}})
        assert module_set.get("ntp").get_param("fallback_servers").value == ["b", "c"]

    def test_missing_required_is_not_fatal(self, module_set):
        resolved = resolve(module_set, module_set.defaults(), {}, {})
        assert resolved["motd"]["message"] is None
        assert [p.identifier for p in unset_parameters(module_set)] == [
            "ntp::fallback_servers",
            "motd::message",
        ]
        assert not validate_all(module_set.enabled_parameters())


class TestReferences:
    def test_unknown_module_in_cli(self, module_set):
        with pytest.raises(UnknownModuleError, match="dns"):
            resolve(module_set, None, {}, {"dns": {"server": "x"}})

    def test_unknown_module_in_answers(self, module_set):
        with pytest.raises(UnknownModuleError):
            resolve(module_set, None, {"dns": True}, {})

    def test_unknown_parameter_ignored(self, module_set, caplog):
        with caplog.at_level(logging.WARNING):
            resolve(module_set, None, {"ntp": {"bogus": 1}}, {})
        assert "Ignoring unknown parameter 'bogus'" in caplog.text


class TestDisabledModules:
    def test_disabled_module_excluded_but_retained(self):
        module_set = ModuleSet([_ntp_module(enabled=False), _motd_module()])
        resolve(module_set, module_set.defaults(), {}, {"ntp": {"server": ""}, "motd": {"message": "hi"}})

        assert [p.identifier for p in module_set.enabled_parameters()] == ["motd::message"]
        assert validate_all(module_set.enabled_parameters())
        assert module_set.answers_data()["ntp"] is False
        assert module_set.get("ntp").get_param("server").value == ""


def test_preview_does_not_mutate(module_set):
    preview = preview_values(module_set, module_set.defaults(), {"ntp": {"server": "stored"}})
    assert preview["ntp"]["server"] == "stored"
    assert module_set.get("ntp").get_param("server").value is None
