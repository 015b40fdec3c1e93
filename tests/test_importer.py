"""Tests for importing external oh-my-opencode JSON into an edit session."""

import json

import pytest
from omo_config_cli.catalog import Dimension
from omo_config_cli.composer import Binding
from omo_config_cli.composer import fragment_from_dict
from omo_config_cli.composer import parse_import_text
from omo_config_cli.errors import ImportFormatError

A = Dimension.AGENTS
C = Dimension.CATEGORIES


class TestParseImportText:
    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty_input_rejected(self, text):
        with pytest.raises(ImportFormatError, match="empty"):
            parse_import_text(text)

    def test_invalid_json_rejected(self):
        with pytest.raises(ImportFormatError, match="Invalid JSON"):
            parse_import_text('{"agents": ')

    def test_non_object_root_rejected(self):
        with pytest.raises(ImportFormatError, match="must be an object"):
            parse_import_text('[{"agents": {}}]')

    def test_requires_agents_or_categories(self):
        with pytest.raises(ImportFormatError, match="no 'agents' or 'categories'"):
            parse_import_text('{"disabled_hooks": []}')

    def test_accepts_comments_and_trailing_commas(self):
        fragment = parse_import_text(
            """
            {
              // main agents
              "agents": {
                "oracle": {"model": "openai/gpt-5.2", /* strong */ "variant": "high",},
              },
            }
            """
        )

        assert fragment.agents == {"oracle": {"model": "openai/gpt-5.2", "variant": "high"}}
        assert fragment.categories is None

    def test_full_mode_keeps_other_fields_without_schema(self):
        fragment = fragment_from_dict(
            {"$schema": "https://x", "agents": {}, "disabled_hooks": ["a"], "experimental": {"x": 1}},
            mode="full",
        )

        assert fragment.other_fields == {"disabled_hooks": ["a"], "experimental": {"x": 1}}

    def test_core_mode_drops_other_fields(self):
        fragment = fragment_from_dict({"categories": {}, "disabled_hooks": ["a"]}, mode="core")

        assert fragment.other_fields is None
        assert fragment.categories == {}


class TestImportIntoSession:
    def test_overwrites_only_supplied_binding_parts(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")
        session.set_variant(A, "oracle", "high")

        session.import_text(json.dumps({"agents": {"oracle": {"model": "anthropic/claude-opus-4-5"}}}))

        assert session.get_binding(A, "oracle") == Binding("anthropic/claude-opus-4-5", "high")

    def test_keys_absent_from_import_are_untouched(self, session):
        session.set_model(C, "quick", "opencode/grok-code")

        session.import_text('{"agents": {"oracle": {"model": "openai/gpt-5.2"}}}')

        assert session.get_binding(C, "quick").model == "opencode/grok-code"

    def test_advanced_settings_are_replaced(self, session):
        session.set_advanced_raw(A, "oracle", '{"temperature": 0.9}')

        session.import_text('{"agents": {"oracle": {"model": "openai/gpt-5.2", "top_p": 0.5}}}')

        assert session.advanced.get_parsed_or_fail((A, "oracle")) == {"top_p": 0.5}

    def test_jsonc_string_values_are_kept_verbatim(self, session):
        session.import_text('{"agents": {"oracle": {"model": "openai/gpt-5.2", "prompt_append": "a, ]b"}}, // c\n}')

        assert session.advanced.get_parsed_or_fail((A, "oracle")) == {"prompt_append": "a, ]b"}

    def test_unknown_keys_become_custom_keys(self, session):
        result = session.import_text(
            '{"agents": {"Reviewer": {"model": "openai/gpt-5.2"}}, "categories": {"research": {}}}'
        )

        assert result.new_custom_agents == ["reviewer"]
        assert result.new_custom_categories == ["research"]
        assert "reviewer" in session.keys(A)
        assert session.get_binding(A, "reviewer").model == "openai/gpt-5.2"

    def test_skips_non_objects_and_separators(self, session):
        result = session.import_text('{"agents": {"oracle": "openai/gpt-5.2", "__core__": {"model": "x"}}}')

        assert result.agent_count == 0
        assert "__core__" not in session.keys(A)
        assert session.get_binding(A, "oracle").is_empty

    def test_other_fields_replaced_in_full_mode(self, session):
        session.set_other_fields_raw('{"keep": false}')

        result = session.import_text('{"agents": {}, "disabled_hooks": ["x"]}', mode="full")

        assert result.other_fields_replaced
        assert session.other_fields.resolve("other fields") == {"disabled_hooks": ["x"]}

    def test_core_mode_keeps_other_fields(self, session):
        session.set_other_fields_raw('{"keep": true}')

        result = session.import_text('{"agents": {}, "disabled_hooks": ["x"]}', mode="core")

        assert not result.other_fields_replaced
        assert session.other_fields.resolve("other fields") == {"keep": True}

    def test_parse_error_changes_nothing(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")
        before = dict(session.bindings)

        with pytest.raises(ImportFormatError):
            session.import_text("{broken")

        assert session.bindings == before
        assert session.keys(A) == list(session.registry.builtin(A))

    def test_counts_imported_entries(self, session):
        result = session.import_text(
            '{"agents": {"oracle": {}, "explore": {}}, "categories": {"quick": {"model": "opencode/grok-code"}}}'
        )

        assert (result.agent_count, result.category_count) == (2, 1)
