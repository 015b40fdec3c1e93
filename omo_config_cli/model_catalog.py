"""Selectable models and their variants.

The catalog is a read-only snapshot taken when a session starts. It can be
built from ``settings.yaml`` (``models:`` section) and from an OpenCode
config file, where variants live under
``provider.<provider_id>.models.<model_id>.variants``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)


class ModelCatalog:
    """Map of model id to its ordered variant names."""

    def __init__(self, variants: Mapping[str, Iterable[str]] | None = None):
        self._variants: dict[str, tuple[str, ...]] = {}
        for model_id, names in (variants or {}).items():
            self._variants[model_id] = _dedupe(names)

    @property
    def models(self) -> list[str]:
        """All known model ids, in insertion order."""
        return list(self._variants)

    def variants(self, model_id: str | None) -> tuple[str, ...]:
        """Variants offered by a model; empty for unknown models."""
        if not model_id:
            return ()
        return self._variants.get(model_id, ())

    def supports_variant(self, model_id: str | None, variant: str) -> bool:
        return variant in self.variants(model_id)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._variants

    def __len__(self) -> int:
        return len(self._variants)

    def merged(self, other: ModelCatalog) -> ModelCatalog:
        """Return a catalog with ``other`` overriding entries of this one."""
        combined: dict[str, tuple[str, ...]] = dict(self._variants)
        combined.update(other._variants)
        return ModelCatalog(combined)

    def to_dict(self) -> dict[str, list[str]]:
        return {model_id: list(names) for model_id, names in self._variants.items()}

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> ModelCatalog:
        """Build a catalog from the ``models`` section of merged settings.

        Settings format:
        ```yaml
        models:
          openai/gpt-5.2: [low, medium, high, xhigh]
          anthropic/claude-opus-4-5:
            - max
          opencode/grok-code: []
        ```
        A plain list of model ids is accepted as well (no variants).
        """
        section = settings.get("models") or {}
        if isinstance(section, list):
            return cls({str(model_id): () for model_id in section})
        if not isinstance(section, dict):
            logger.warning(f"Ignoring malformed 'models' setting of type {type(section).__name__}")
            return cls()

        variants: dict[str, list[str]] = {}
        for model_id, names in section.items():
            if names is None:
                variants[str(model_id)] = []
            elif isinstance(names, list):
                variants[str(model_id)] = [str(name) for name in names]
            elif isinstance(names, dict):
                variants[str(model_id)] = [str(name) for name in names]
            else:
                logger.warning(f"Ignoring variants for '{model_id}': expected a list")
                variants[str(model_id)] = []
        return cls(variants)

    @classmethod
    def from_opencode_config(cls, config: dict[str, Any]) -> ModelCatalog:
        """Build a catalog from an OpenCode config document."""
        variants: dict[str, list[str]] = {}
        providers = config.get("provider") or {}
        if not isinstance(providers, dict):
            return cls()

        for provider_id, provider in providers.items():
            if not isinstance(provider, dict):
                continue
            models = provider.get("models") or {}
            if not isinstance(models, dict):
                continue
            for model_id, model in models.items():
                names: list[str] = []
                if isinstance(model, dict) and isinstance(model.get("variants"), dict):
                    names = list(model["variants"])
                variants[f"{provider_id}/{model_id}"] = names

        return cls(variants)


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return tuple(seen)
