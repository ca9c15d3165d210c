"""Built-in rule plugin tests: settings forms and normalization."""

import pytest

from ad_entity.domain.context import ContextAssignment
from ad_entity.domain.forms import FieldType
from ad_entity.plugins.base import RulePlugin, SettingsValidationError, split_list
from ad_entity.plugins.rules import DeviceRule, GeoRule, TargetingRule, TurnoffRule, UserRoleRule
from ad_entity.plugins.rules.targeting import format_targeting, parse_targeting

ALL_RULES = [TargetingRule, TurnoffRule, DeviceRule, GeoRule, UserRoleRule]


@pytest.mark.parametrize("rule_cls", ALL_RULES)
def test_rules_satisfy_plugin_protocol(rule_cls):
    assert isinstance(rule_cls(), RulePlugin)


@pytest.mark.parametrize("rule_cls", ALL_RULES)
def test_settings_form_accepts_empty_settings(rule_cls):
    elements = rule_cls().settings_form({}, ContextAssignment(), {})
    assert elements
    assert all(e.name for e in elements)


def test_split_list_handles_text_and_lists():
    assert split_list("a, b\nc,,") == ["a", "b", "c"]
    assert split_list([" a ", "", "b"]) == ["a", "b"]
    assert split_list(None) == []
    with pytest.raises(ValueError):
        split_list(42)


class TestTargetingRule:
    def test_parse_collects_repeated_keys(self):
        assert parse_targeting("section: sports, section: news, lang: en") == {
            "section": ["sports", "news"],
            "lang": ["en"],
        }

    def test_massage_normalizes_text(self):
        settings = TargetingRule().massage_settings({"targeting": "Section: sports, section: news, section: sports"})
        assert settings == {"targeting": {"section": ["sports", "news"]}}

    def test_massage_accepts_mapping(self):
        settings = TargetingRule().massage_settings({"targeting": {"Lang": "en", "tags": ["a", "b"]}})
        assert settings == {"targeting": {"lang": ["en"], "tags": ["a", "b"]}}

    def test_pair_without_colon_rejected(self):
        with pytest.raises(SettingsValidationError) as excinfo:
            TargetingRule().massage_settings({"targeting": "section sports"})
        assert excinfo.value.rule_type_id == "targeting"

    def test_empty_targeting_rejected(self):
        with pytest.raises(SettingsValidationError):
            TargetingRule().massage_settings({})

    def test_form_prefilled_as_text(self):
        elements = TargetingRule().settings_form(
            {"targeting": {"section": ["sports", "news"]}}, ContextAssignment(), {}
        )
        assert elements[0].type == FieldType.textarea
        assert elements[0].default_value == "section: sports, section: news"

    def test_format_round_trips_through_massage(self):
        stored = {"section": ["sports"], "lang": ["en", "de"]}
        massaged = TargetingRule().massage_settings({"targeting": format_targeting(stored)})
        assert massaged == {"targeting": stored}

    @pytest.mark.parametrize(
        "targeting",
        [
            "Section: sports, section: news\nlang: en",
            {"Tags": ["a", "b: c"], "lang": "en"},
            {"url": "https://example.com/path"},
        ],
    )
    def test_saved_value_survives_reopen_and_resubmit(self, targeting):
        rule = TargetingRule()
        saved = rule.massage_settings({"targeting": targeting})
        prefill = rule.settings_form(saved, ContextAssignment(), {})[0].default_value
        assert rule.massage_settings({"targeting": prefill}) == saved

    @pytest.mark.parametrize(
        "targeting",
        [
            {"k": ["a,b"]},
            {"k": "a\nb"},
            {"a:b": ["c"]},
            {"a,b": ["c"]},
        ],
    )
    def test_unformattable_mapping_rejected(self, targeting):
        with pytest.raises(SettingsValidationError):
            TargetingRule().massage_settings({"targeting": targeting})


class TestTurnoffRule:
    def test_massage_discards_everything(self):
        assert TurnoffRule().massage_settings({"anything": 1}) == {}

    def test_form_is_markup_only(self):
        elements = TurnoffRule().settings_form({}, ContextAssignment(), {})
        assert [e.type for e in elements] == [FieldType.item]


class TestDeviceRule:
    def test_massage_lowercases(self):
        assert DeviceRule().massage_settings({"target": " TABLET "}) == {"target": "tablet"}

    def test_unknown_device_rejected(self):
        with pytest.raises(SettingsValidationError):
            DeviceRule().massage_settings({"target": "fridge"})

    def test_missing_target_rejected(self):
        with pytest.raises(SettingsValidationError):
            DeviceRule().massage_settings({})

    def test_extra_keys_dropped(self):
        assert DeviceRule().massage_settings({"target": "mobile", "stale": "x"}) == {"target": "mobile"}

    def test_form_is_select_with_default(self):
        element = DeviceRule().settings_form({"target": "desktop"}, ContextAssignment(), {})[0]
        assert element.type == FieldType.select
        assert set(element.options) == {"mobile", "tablet", "desktop"}
        assert element.default_value == "desktop"


class TestGeoRule:
    def test_massage_uppercases_and_dedupes(self):
        assert GeoRule().massage_settings({"countries": "us, De, US"}) == {"countries": ["US", "DE"]}

    def test_invalid_code_rejected(self):
        with pytest.raises(SettingsValidationError) as excinfo:
            GeoRule().massage_settings({"countries": ["USA"]})
        assert "USA" in str(excinfo.value)

    def test_empty_rejected(self):
        with pytest.raises(SettingsValidationError):
            GeoRule().massage_settings({"countries": ""})


class TestUserRoleRule:
    def test_massage_normalizes_roles(self):
        assert UserRoleRule().massage_settings({"roles": "Editor\nauthenticated, editor"}) == {
            "roles": ["editor", "authenticated"]
        }

    def test_non_machine_name_rejected(self):
        with pytest.raises(SettingsValidationError):
            UserRoleRule().massage_settings({"roles": "site admin"})

    def test_form_prefilled(self):
        element = UserRoleRule().settings_form({"roles": ["editor", "admin"]}, ContextAssignment(), {})[0]
        assert element.default_value == "editor, admin"
