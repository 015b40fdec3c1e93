"""Tests for lazily validated advanced-settings blobs."""

import pytest
from omo_config_cli.catalog import Dimension
from omo_config_cli.composer import AdvancedSettingsStore
from omo_config_cli.composer import JsonSlot
from omo_config_cli.composer.advanced import parse_json_object
from omo_config_cli.errors import AdvancedSettingsError
from omo_config_cli.errors import ValidationError

ORACLE = (Dimension.AGENTS, "oracle")
QUICK = (Dimension.CATEGORIES, "quick")


class TestParseJsonObject:
    def test_parses_object(self):
        assert parse_json_object('{"temperature": 0.2}', "advanced settings") == {"temperature": 0.2}

    def test_invalid_json_names_group_and_key(self):
        with pytest.raises(AdvancedSettingsError) as exc_info:
            parse_json_object("{temperature: 0.2}", "agent advanced settings", "oracle")

        assert exc_info.value.group == "agent advanced settings"
        assert exc_info.value.key == "oracle"
        assert str(exc_info.value).startswith("Invalid JSON in agent advanced settings 'oracle'")

    @pytest.mark.parametrize(("text", "kind"), [("[1, 2]", "array"), ('"x"', "string"), ("null", "null")])
    def test_rejects_non_objects(self, text, kind):
        with pytest.raises(AdvancedSettingsError, match=f"expected an object, got {kind}"):
            parse_json_object(text, "other fields")

    def test_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_json_object("nope", "other fields")


class TestJsonSlot:
    def test_untouched_slot_resolves_to_initial_copy(self):
        slot = JsonSlot(initial={"temperature": 0.2})

        resolved = slot.resolve("group")
        resolved["temperature"] = 1.0

        assert not slot.touched
        assert slot.resolve("group") == {"temperature": 0.2}

    def test_blank_text_means_no_settings(self):
        slot = JsonSlot(initial={"temperature": 0.2})
        slot.set_raw("   \n")

        assert slot.touched
        assert slot.resolve("group") == {}

    def test_typed_text_replaces_initial(self):
        slot = JsonSlot(initial={"temperature": 0.2})
        slot.set_raw('{"top_p": 0.9}')

        assert slot.resolve("group") == {"top_p": 0.9}

    def test_load_forgets_typed_text(self):
        slot = JsonSlot()
        slot.set_raw("{broken")
        slot.load({"a": 1})

        assert not slot.touched
        assert slot.resolve("group") == {"a": 1}

    def test_as_text_shows_raw_or_pretty_initial(self):
        assert JsonSlot().as_text() == ""
        assert JsonSlot(initial={"a": 1}).as_text() == '{\n  "a": 1\n}'
        assert JsonSlot(initial={"a": 1}, raw="{typed").as_text() == "{typed"


class TestAdvancedSettingsStore:
    def test_invalid_text_is_kept_until_resolved(self):
        store = AdvancedSettingsStore()
        store.set_raw(ORACLE, "{not json")

        assert store.get_raw(ORACLE) == "{not json"
        with pytest.raises(AdvancedSettingsError, match="agent advanced settings 'oracle'"):
            store.get_parsed_or_fail(ORACLE)

    def test_missing_slot_is_empty(self):
        store = AdvancedSettingsStore()

        assert store.get_raw(QUICK) == ""
        assert store.get_parsed_or_fail(QUICK) == {}

    def test_init_resets_slot(self):
        store = AdvancedSettingsStore()
        store.load(ORACLE, {"temperature": 0.2})
        store.init(ORACLE)

        assert store.get_parsed_or_fail(ORACLE) == {}

    def test_resolve_all_stops_at_first_invalid_slot(self):
        store = AdvancedSettingsStore()
        store.load(ORACLE, {"temperature": 0.2})
        store.set_raw(QUICK, "[]")

        with pytest.raises(AdvancedSettingsError, match="category advanced settings 'quick'"):
            store.resolve_all([ORACLE, QUICK])

    def test_discard(self):
        store = AdvancedSettingsStore()
        store.load(ORACLE, {"a": 1})
        store.discard(ORACLE)

        assert ORACLE not in store
