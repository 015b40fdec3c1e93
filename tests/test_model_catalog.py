"""Tests for the model catalog."""

from omo_config_cli.model_catalog import ModelCatalog


class TestModelCatalog:
    def test_variants_lookup(self, catalog):
        assert catalog.variants("openai/gpt-5.2") == ("low", "medium", "high", "xhigh")
        assert catalog.variants("opencode/grok-code") == ()
        assert catalog.variants("unknown/model") == ()
        assert catalog.variants(None) == ()

    def test_supports_variant(self, catalog):
        assert catalog.supports_variant("anthropic/claude-opus-4-5", "max")
        assert not catalog.supports_variant("anthropic/claude-opus-4-5", "high")
        assert not catalog.supports_variant(None, "high")

    def test_duplicate_variants_collapse(self):
        catalog = ModelCatalog({"m": ["a", "b", "a"]})

        assert catalog.variants("m") == ("a", "b")

    def test_merged_overrides_entries(self, catalog):
        merged = catalog.merged(ModelCatalog({"opencode/grok-code": ["fast"], "new/model": []}))

        assert merged.variants("opencode/grok-code") == ("fast",)
        assert "new/model" in merged
        assert len(merged) == 4
        assert len(catalog) == 3

    def test_to_dict(self):
        assert ModelCatalog({"m": ("a",)}).to_dict() == {"m": ["a"]}


class TestFromSettings:
    def test_mapping_of_variant_lists(self):
        catalog = ModelCatalog.from_settings({"models": {"openai/gpt-5.2": ["low", "high"], "x/y": None}})

        assert catalog.variants("openai/gpt-5.2") == ("low", "high")
        assert "x/y" in catalog

    def test_plain_list_of_models(self):
        catalog = ModelCatalog.from_settings({"models": ["a/b", "c/d"]})

        assert catalog.models == ["a/b", "c/d"]

    def test_malformed_section_is_ignored(self):
        assert len(ModelCatalog.from_settings({"models": "a/b"})) == 0
        assert len(ModelCatalog.from_settings({})) == 0


class TestFromOpencodeConfig:
    def test_reads_provider_models_and_variants(self):
        config = {
            "provider": {
                "openai": {
                    "models": {
                        "gpt-5.2": {"variants": {"low": {}, "high": {"reasoningEffort": "high"}}},
                        "gpt-5.2-codex": {},
                    }
                },
                "broken": "not a provider",
            }
        }

        catalog = ModelCatalog.from_opencode_config(config)

        assert catalog.models == ["openai/gpt-5.2", "openai/gpt-5.2-codex"]
        assert catalog.variants("openai/gpt-5.2") == ("low", "high")
        assert catalog.variants("openai/gpt-5.2-codex") == ()

    def test_missing_provider_section(self):
        assert len(ModelCatalog.from_opencode_config({"model": "x"})) == 0
