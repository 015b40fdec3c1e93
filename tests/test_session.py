"""Tests for the profile edit session lifecycle."""

import re

import pytest
from omo_config_cli.catalog import Dimension
from omo_config_cli.composer import Binding
from omo_config_cli.composer import EditSession
from omo_config_cli.composer import SessionState
from omo_config_cli.errors import AdvancedSettingsError
from omo_config_cli.errors import PersistenceError
from omo_config_cli.errors import SessionStateError
from omo_config_cli.errors import UnknownKeyError
from omo_config_cli.errors import ValidationError
from omo_config_cli.errors import VariantError
from omo_config_cli.profiles import ConfigDocument

A = Dimension.AGENTS
C = Dimension.CATEGORIES


@pytest.fixture
def stored():
    return ConfigDocument(
        id="omo_config_abc123def456",
        name="Stored",
        is_applied=True,
        sort_index=2,
        created_at="2026-01-01T00:00:00+00:00",
        agents={
            "oracle": {"model": "openai/gpt-5.2", "variant": "high", "temperature": 0.2},
            "reviewer": {"model": "anthropic/claude-opus-4-5"},
        },
        categories={"quick": {"model": "opencode/grok-code"}},
        other_fields={"disabled_hooks": ["comment-checker"]},
    )


class Recorder:
    """Save callable that records what it was given."""

    def __init__(self, error: Exception | None = None):
        self.saved: list[ConfigDocument] = []
        self.error = error

    def __call__(self, document: ConfigDocument):
        if self.error:
            raise self.error
        self.saved.append(document)
        return document


class TestLifecycle:
    def test_new_profile_gets_generated_id(self, catalog):
        session = EditSession(catalog)

        assert session.open(name="New") is True
        assert session.state is SessionState.EDITING
        assert re.fullmatch(r"omo_config_[0-9a-f]{12}", session.document_id)
        assert session.is_new

    def test_reopening_same_record_keeps_edits(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)
        session.set_model(A, "explore", "opencode/grok-code")

        assert session.open(stored) is False
        assert session.get_binding(A, "explore").model == "opencode/grok-code"

    def test_opening_another_record_is_rejected(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        with pytest.raises(SessionStateError):
            session.open(ConfigDocument(id="other"))

    def test_edits_require_an_open_session(self, catalog):
        session = EditSession(catalog)

        with pytest.raises(SessionStateError):
            session.set_model(A, "oracle", "openai/gpt-5.2")

    def test_close_discards_everything(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")
        session.add_custom_key(C, "research")

        session.close()

        assert session.state is SessionState.CLOSED
        assert session.bindings == {}
        assert "research" not in session.keys(C)

    def test_load_registers_custom_keys_and_advanced(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        assert session.name == "Stored"
        assert session.keys(A)[-1] == "reviewer"
        assert session.get_binding(A, "oracle") == Binding("openai/gpt-5.2", "high")
        assert '"temperature": 0.2' in session.advanced_text(A, "oracle")


class TestEditing:
    def test_set_model_clears_unsupported_variant(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")
        session.set_variant(A, "oracle", "xhigh")

        assert session.set_model(A, "oracle", "anthropic/claude-opus-4-5") is True
        assert session.get_binding(A, "oracle") == Binding("anthropic/claude-opus-4-5", None)

    def test_set_model_keeps_supported_variant(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")
        session.set_variant(A, "oracle", "high")

        assert session.set_model(A, "oracle", "openai/gpt-5.2") is False
        assert session.get_binding(A, "oracle").variant == "high"

    def test_variant_must_be_offered_by_model(self, session):
        session.set_model(A, "oracle", "opencode/grok-code")

        with pytest.raises(VariantError):
            session.set_variant(A, "oracle", "high")

    def test_variant_requires_model(self, session):
        with pytest.raises(VariantError, match="Select a model"):
            session.set_variant(C, "quick", "low")

    def test_unknown_key_rejected(self, session):
        with pytest.raises(UnknownKeyError):
            session.set_model(A, "nobody", "openai/gpt-5.2")

    def test_clear_resets_binding_and_advanced(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        session.clear(A, "oracle")

        assert "oracle" not in session.compose().agents

    def test_remove_custom_key_drops_its_entry(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        session.remove_custom_key(A, "reviewer")

        assert "reviewer" not in session.compose().agents

    def test_custom_key_is_encoded_once_bound(self, session):
        session.add_custom_key(C, "research")
        session.set_model(C, "research", "openai/gpt-5.2")

        assert session.compose().categories == {"research": {"model": "openai/gpt-5.2"}}

    def test_flat_fields(self, session):
        session.set_model(C, "quick", "opencode/grok-code")

        assert session.flat_fields() == {"category_quick": "opencode/grok-code"}


class TestSubmit:
    def test_unedited_document_round_trips(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        saved = session.submit(Recorder())

        assert saved.agents == stored.agents
        assert saved.categories == stored.categories
        assert saved.other_fields == stored.other_fields

    def test_metadata_is_preserved(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)

        saved = session.submit(Recorder())

        assert (saved.id, saved.is_applied, saved.sort_index, saved.created_at) == (
            stored.id,
            True,
            2,
            "2026-01-01T00:00:00+00:00",
        )

    def test_success_closes_session(self, session):
        recorder = Recorder()

        session.submit(recorder)

        assert session.state is SessionState.CLOSED
        assert recorder.saved[0].name == "Test profile"

    def test_blank_name_rejected(self, session):
        session.name = "   "
        recorder = Recorder()

        with pytest.raises(ValidationError, match="name is required"):
            session.submit(recorder)

        assert recorder.saved == []
        assert session.state is SessionState.EDITING

    def test_invalid_advanced_blocks_submit_and_keeps_text(self, session):
        session.set_advanced_raw(A, "oracle", '{"temperature": }')
        recorder = Recorder()

        with pytest.raises(AdvancedSettingsError, match="agent advanced settings 'oracle'"):
            session.submit(recorder)

        assert recorder.saved == []
        assert session.state is SessionState.EDITING
        assert session.advanced_text(A, "oracle") == '{"temperature": }'

    def test_invalid_other_fields_blocks_submit(self, session):
        session.set_other_fields_raw("[1]")

        with pytest.raises(AdvancedSettingsError, match="other fields"):
            session.submit(Recorder())

    def test_blank_advanced_text_removes_settings(self, catalog, stored):
        session = EditSession(catalog)
        session.open(stored)
        session.set_advanced_raw(A, "oracle", "")

        saved = session.submit(Recorder())

        assert saved.agents["oracle"] == {"model": "openai/gpt-5.2", "variant": "high"}

    def test_save_failure_is_wrapped_and_state_kept(self, session):
        session.set_model(A, "oracle", "openai/gpt-5.2")

        with pytest.raises(PersistenceError, match="disk full"):
            session.submit(Recorder(error=OSError("disk full")))

        assert session.state is SessionState.EDITING
        assert session.get_binding(A, "oracle").model == "openai/gpt-5.2"

    def test_retry_after_failure_succeeds(self, session):
        with pytest.raises(PersistenceError):
            session.submit(Recorder(error=RuntimeError("locked")))

        saved = session.submit(Recorder())

        assert saved.name == "Test profile"

    def test_reentrant_submit_rejected(self, session):
        def save(document):
            session.submit(Recorder())

        with pytest.raises(SessionStateError, match="already in progress"):
            session.submit(save)

        assert session.state is SessionState.EDITING

    def test_close_rejected_while_submitting(self, session):
        def save(document):
            session.close()

        with pytest.raises(SessionStateError):
            session.submit(save)

    def test_saved_document_replaces_composed_one(self, session):
        def save(document):
            return document.model_copy(update={"updated_at": "now"})

        assert session.submit(save).updated_at == "now"

    def test_missing_document_id_is_a_state_error(self, session):
        session.document_id = None

        with pytest.raises(SessionStateError, match="no document id"):
            session.compose()


class TestKeyCaseRoundTrip:
    def test_mixed_case_agent_key_is_stable_across_saves(self, catalog):
        original = ConfigDocument(
            id="omo_config_0123456789ab",
            name="Cased",
            agents={"Explore": {"model": "opencode/grok-code", "temperature": 0.1}},
        )
        first_session = EditSession(catalog)
        first_session.open(original)
        first = first_session.submit(Recorder())

        second_session = EditSession(catalog)
        second_session.open(first)
        second = second_session.submit(Recorder())

        expected = {"explore": {"model": "opencode/grok-code", "temperature": 0.1}}
        assert first.agents == expected
        assert second.agents == expected
