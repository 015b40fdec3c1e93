"""Import of externally supplied oh-my-opencode JSON into an edit session.

Import is additive: keys present in the fragment are overwritten, keys
absent from it are left alone.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any
from typing import Literal

from ..catalog import Dimension
from ..catalog import is_separator_key
from ..catalog import normalize_agent_key
from ..errors import ImportFormatError
from ..utils.jsonc import loads_jsonc
from .field_codec import split_entry
from .models import ImportFragment
from .models import ImportResult

if TYPE_CHECKING:
    from .session import EditSession

logger = logging.getLogger(__name__)

ImportMode = Literal["core", "full"]

# Top-level keys that never become part of other_fields
_STRUCTURAL_KEYS = frozenset({"agents", "categories", "$schema"})


def fragment_from_dict(config: Mapping[str, Any], mode: ImportMode = "full") -> ImportFragment:
    """Split a parsed config object into agents, categories and other fields.

    Raises:
        ImportFormatError: If there are neither agents nor categories
    """
    agents = config.get("agents")
    categories = config.get("categories")
    agents = dict(agents) if isinstance(agents, Mapping) else None
    categories = dict(categories) if isinstance(categories, Mapping) else None

    if agents is None and categories is None:
        raise ImportFormatError("Nothing to import: no 'agents' or 'categories' object found")

    other_fields = {key: value for key, value in config.items() if key not in _STRUCTURAL_KEYS}

    return ImportFragment(
        agents=agents,
        categories=categories,
        other_fields=other_fields if mode == "full" and other_fields else None,
    )


def parse_import_text(text: str, mode: ImportMode = "full") -> ImportFragment:
    """Parse pasted or file JSON (comments allowed) into an import fragment.

    Args:
        text: JSON or JSONC text
        mode: "core" keeps only agents and categories, "full" keeps other fields too

    Raises:
        ImportFormatError: If the text is empty, malformed or not an object
    """
    if not text.strip():
        raise ImportFormatError("Nothing to import: input is empty")
    try:
        config = loads_jsonc(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
    if not isinstance(config, dict):
        raise ImportFormatError("Invalid JSON: the top level must be an object")
    return fragment_from_dict(config, mode)


def apply_import(session: EditSession, fragment: ImportFragment) -> ImportResult:
    """Fold a fragment into the session.

    For every object entry the model and variant replace the current ones when
    the entry provides them as strings, and the remaining properties replace
    the advanced blob. Non-object entries are skipped. Unknown keys are
    registered as custom keys. A non-empty ``other_fields`` replaces the
    session's other fields as a whole.
    """
    result = ImportResult()

    for dimension in Dimension:
        new_custom = result.new_custom_agents if dimension is Dimension.AGENTS else result.new_custom_categories

        for raw_key, entry in fragment.entries(dimension).items():
            if not isinstance(entry, Mapping):
                logger.debug(f"Import skipped non-object {dimension.label} '{raw_key}'")
                continue
            if is_separator_key(raw_key):
                continue

            key = normalize_agent_key(raw_key) if dimension is Dimension.AGENTS else raw_key
            if session.registry.ensure(dimension, key):
                new_custom.append(key)

            ref = (dimension, key)
            incoming, advanced = split_entry(entry)
            binding = session.binding(dimension, key)
            if incoming.model:
                binding.model = incoming.model
            if incoming.variant:
                binding.variant = incoming.variant
            session.advanced.load(ref, advanced)

            if dimension is Dimension.AGENTS:
                result.agent_count += 1
            else:
                result.category_count += 1

    if fragment.other_fields:
        session.other_fields.load(fragment.other_fields)
        result.other_fields_replaced = True

    logger.info(
        f"Imported {result.agent_count} agents and {result.category_count} categories "
        f"({len(result.new_custom_agents) + len(result.new_custom_categories)} new custom keys)"
    )
    return result
