"""Conversion between stored profile entries and editable bindings.

A stored entry such as ``{"model": "openai/gpt-5.2", "variant": "high",
"temperature": 0.2}`` is split into a Binding (model + variant) and an
advanced blob holding every other field. Encoding reverses this and drops
entries that carry nothing.

Callers that work with flat form fields (``agent_<key>``,
``agent_<key>_variant``, ``category_<key>``, ``category_<key>_variant``) can
use the flat field helpers at the bottom of this module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

from ..catalog import Dimension
from ..catalog import builtin_keys
from ..catalog import is_separator_key
from ..catalog import normalize_agent_key
from .models import Binding
from .models import DecodedDocument
from .models import EntryRef
from .models import KeyCollision

logger = logging.getLogger(__name__)

VARIANT_SUFFIX = "_variant"


def _sections(document: Any) -> dict[Dimension, Mapping[str, Any]]:
    if isinstance(document, Mapping):
        agents = document.get("agents")
        categories = document.get("categories")
    else:
        agents = getattr(document, "agents", None)
        categories = getattr(document, "categories", None)
    return {
        Dimension.AGENTS: agents if isinstance(agents, Mapping) else {},
        Dimension.CATEGORIES: categories if isinstance(categories, Mapping) else {},
    }


def split_entry(entry: Mapping[str, Any]) -> tuple[Binding, dict[str, Any]]:
    """Split one stored entry into its binding and advanced fields.

    Only string model/variant values become part of the binding; anything
    else stays in the advanced blob so it survives a round trip.
    """
    model = entry.get("model")
    variant = entry.get("variant")
    binding = Binding(
        model=model if isinstance(model, str) else None,
        variant=variant if isinstance(variant, str) else None,
    )

    advanced: dict[str, Any] = {}
    for name, value in entry.items():
        if value is None:
            continue
        if name in ("model", "variant") and isinstance(value, str):
            continue
        advanced[name] = value
    return binding, advanced


def decode(document: Any) -> DecodedDocument:
    """Split a stored document into bindings, advanced blobs and custom keys.

    Args:
        document: A ConfigDocument or a mapping with ``agents``/``categories``

    Returns:
        DecodedDocument keyed by (dimension, key)
    """
    decoded = DecodedDocument()

    for dimension, entries in _sections(document).items():
        builtin = set(builtin_keys(dimension))
        source_keys: dict[str, str] = {}

        for raw_key, entry in entries.items():
            if is_separator_key(raw_key):
                continue
            if not isinstance(entry, Mapping):
                logger.debug(f"Skipping non-object {dimension.label} entry '{raw_key}'")
                continue

            key = normalize_agent_key(raw_key) if dimension is Dimension.AGENTS else raw_key

            if key in source_keys:
                collision = KeyCollision(normalized=key, kept=raw_key, dropped=source_keys[key])
                decoded.collisions.append(collision)
                logger.warning(
                    f"Agent keys '{collision.dropped}' and '{collision.kept}' both normalize to '{key}'; "
                    f"keeping '{collision.kept}'"
                )
            source_keys[key] = raw_key

            binding, advanced = split_entry(entry)
            ref = (dimension, key)
            decoded.bindings[ref] = binding
            decoded.advanced[ref] = advanced

            if key not in builtin and key not in decoded.custom_keys[dimension]:
                decoded.custom_keys[dimension].append(key)

    return decoded


def encode_entry(binding: Binding | None, advanced: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Build one stored entry, or None when it would be empty.

    The binding wins over same-named advanced fields; in particular a
    ``variant`` typed into the advanced blob is ignored when the binding
    carries one.
    """
    entry: dict[str, Any] = {}
    if binding is not None:
        if binding.model:
            entry["model"] = binding.model
        if binding.variant:
            entry["variant"] = binding.variant

    for name, value in (advanced or {}).items():
        if name in entry:
            continue
        entry[name] = value

    return entry or None


def encode(
    bindings: Mapping[EntryRef, Binding],
    advanced: Mapping[EntryRef, Mapping[str, Any]],
    keys: Mapping[Dimension, Iterable[str]],
) -> dict[Dimension, dict[str, dict[str, Any]]]:
    """Build the agents and categories sections of a document.

    Args:
        bindings: Binding per (dimension, key)
        advanced: Parsed advanced blob per (dimension, key)
        keys: Keys to encode per dimension (built-in and custom)

    Returns:
        Mapping of dimension to its entries; empty entries are omitted
    """
    result: dict[Dimension, dict[str, dict[str, Any]]] = {}
    for dimension in Dimension:
        section: dict[str, dict[str, Any]] = {}
        for key in keys.get(dimension, ()):
            if is_separator_key(key):
                continue
            ref = (dimension, key)
            entry = encode_entry(bindings.get(ref), advanced.get(ref))
            if entry is not None:
                section[key] = entry
        result[dimension] = section
    return result


# ===== FLAT FIELDS =====


def field_name(dimension: Dimension, key: str, variant: bool = False) -> str:
    """Flat form field name for a binding, e.g. ``agent_oracle_variant``."""
    name = f"{dimension.label}_{key}"
    return f"{name}{VARIANT_SUFFIX}" if variant else name


def parse_field_name(name: str) -> tuple[Dimension, str, bool] | None:
    """Inverse of field_name; returns None for unrelated field names.

    A trailing ``_variant`` always marks the variant field, which is why the
    registry refuses custom keys with that suffix.
    """
    for dimension in Dimension:
        prefix = f"{dimension.label}_"
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix) :]
        is_variant = rest.endswith(VARIANT_SUFFIX)
        if is_variant:
            rest = rest[: -len(VARIANT_SUFFIX)]
        if not rest:
            return None
        return dimension, rest, is_variant
    return None


def to_flat_fields(bindings: Mapping[EntryRef, Binding]) -> dict[str, str]:
    """Flatten bindings into form fields; unset values are left out."""
    fields: dict[str, str] = {}
    for (dimension, key), binding in bindings.items():
        if binding.model:
            fields[field_name(dimension, key)] = binding.model
        if binding.variant:
            fields[field_name(dimension, key, variant=True)] = binding.variant
    return fields


def from_flat_fields(fields: Mapping[str, Any]) -> dict[EntryRef, Binding]:
    """Collect bindings from flat form fields, ignoring unrelated fields."""
    bindings: dict[EntryRef, Binding] = {}
    for name, value in fields.items():
        parsed = parse_field_name(name)
        if parsed is None or not isinstance(value, str):
            continue
        dimension, key, is_variant = parsed
        binding = bindings.setdefault((dimension, key), Binding())
        if is_variant:
            binding.variant = value or None
        else:
            binding.model = value or None
    return bindings
