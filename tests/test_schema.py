"""Tests for stored profile and global config schemas."""

from omo_config_cli.profiles import DEFAULT_SCHEMA_URL
from omo_config_cli.profiles import GLOBAL_FIELDS
from omo_config_cli.profiles import ConfigDocument
from omo_config_cli.profiles import GlobalConfig


class TestConfigDocument:
    def test_reads_legacy_camel_case_record(self):
        document = ConfigDocument.model_validate(
            {
                "configId": "omo_config_1",
                "name": "Legacy",
                "isApplied": True,
                "isDisabled": True,
                "sortIndex": 3,
                "otherFields": {"lsp": {}},
                "createdAt": "2025-01-01",
            }
        )

        assert document.id == "omo_config_1"
        assert document.is_applied and document.is_disabled
        assert document.sort_index == 3
        assert document.other_fields == {"lsp": {}}
        assert document.created_at == "2025-01-01"

    def test_writes_snake_case_without_nulls(self):
        record = ConfigDocument(id="p1", name="P").to_record()

        assert record == {
            "id": "p1",
            "name": "P",
            "is_applied": False,
            "is_disabled": False,
            "agents": {},
            "categories": {},
        }

    def test_non_object_sections_load_empty(self):
        document = ConfigDocument.model_validate({"id": "p1", "agents": ["oracle"], "categories": None})

        assert document.agents == {}
        assert document.categories == {}

    def test_empty_other_fields_load_as_none(self):
        assert ConfigDocument.model_validate({"id": "p1", "other_fields": {}}).other_fields is None

    def test_default_name(self):
        assert ConfigDocument.model_validate({"id": "p1"}).name == "Unnamed Config"


class TestGlobalConfig:
    def test_schema_aliases(self):
        assert GlobalConfig.model_validate({"$schema": "https://a"}).schema_url == "https://a"
        assert GlobalConfig.model_validate({"schema": "https://b"}).schema_url == "https://b"

    def test_record_uses_schema_key(self):
        record = GlobalConfig(schema_url="https://a", disabled_hooks=["x"]).to_record()

        assert record == {"schema": "https://a", "disabled_hooks": ["x"]}
        assert GlobalConfig.model_validate(record).schema_url == "https://a"

    def test_camel_case_fields(self):
        config = GlobalConfig.model_validate({"sisyphusAgent": {"disabled": True}, "disabledMcps": ["m"]})

        assert config.sisyphus_agent == {"disabled": True}
        assert config.disabled_mcps == ["m"]

    def test_explicit_fields_exclude_bookkeeping(self):
        config = GlobalConfig(schema_url="https://a", lsp={"x": 1}, other_fields={"y": 2}, updated_at="now")

        assert config.explicit_fields() == {"lsp": {"x": 1}}

    def test_global_fields(self):
        assert "schema_url" in GLOBAL_FIELDS
        assert "updated_at" not in GLOBAL_FIELDS
        assert DEFAULT_SCHEMA_URL.endswith("oh-my-opencode.schema.json")
