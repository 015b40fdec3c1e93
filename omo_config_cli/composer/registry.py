"""Custom agent and category keys.

Built-in keys come from the catalog; custom keys are user-defined or were
discovered in a loaded or imported document. The two dimensions are
separate namespaces.
"""

from __future__ import annotations

import logging

from ..catalog import Dimension
from ..catalog import builtin_keys
from ..catalog import is_separator_key
from ..catalog import normalize_agent_key
from ..errors import DuplicateKeyError
from ..errors import EmptyKeyError
from ..errors import ReservedKeyError
from ..errors import UnknownKeyError
from .field_codec import VARIANT_SUFFIX

logger = logging.getLogger(__name__)


class CustomKeyRegistry:
    """Custom keys active in one edit session."""

    def __init__(self):
        self._custom: dict[Dimension, list[str]] = {dimension: [] for dimension in Dimension}

    def builtin(self, dimension: Dimension) -> tuple[str, ...]:
        return builtin_keys(dimension)

    def custom(self, dimension: Dimension) -> list[str]:
        return list(self._custom[dimension])

    def all_keys(self, dimension: Dimension) -> list[str]:
        """Built-in keys followed by custom keys, separators excluded."""
        keys = [key for key in builtin_keys(dimension) if not is_separator_key(key)]
        return keys + self._custom[dimension]

    def is_builtin(self, dimension: Dimension, key: str) -> bool:
        return key in builtin_keys(dimension)

    def is_custom(self, dimension: Dimension, key: str) -> bool:
        return key in self._custom[dimension]

    def knows(self, dimension: Dimension, key: str) -> bool:
        return self.is_builtin(dimension, key) or self.is_custom(dimension, key)

    def clean_key(self, dimension: Dimension, key: str) -> str:
        """Trim a key and, for agents, lower-case it."""
        key = key.strip()
        return normalize_agent_key(key) if dimension is Dimension.AGENTS else key

    def validate_new(self, dimension: Dimension, key: str) -> str:
        """Check that a key could be added; returns the cleaned key.

        Raises:
            EmptyKeyError: If the key is blank
            ReservedKeyError: If the key is a structural marker
            DuplicateKeyError: If the key already exists in this dimension
        """
        cleaned = self.clean_key(dimension, key)
        if not cleaned:
            raise EmptyKeyError(f"Custom {dimension.label} key must not be empty")
        if is_separator_key(cleaned):
            raise ReservedKeyError(f"'{cleaned}' is a reserved {dimension.label} key")
        if cleaned.endswith(VARIANT_SUFFIX):
            raise ReservedKeyError(f"Custom {dimension.label} keys cannot end with '{VARIANT_SUFFIX}'")
        if self.knows(dimension, cleaned):
            raise DuplicateKeyError(f"{dimension.label.capitalize()} '{cleaned}' already exists")
        return cleaned

    def add(self, dimension: Dimension, key: str) -> str:
        """Register a custom key; returns the cleaned key."""
        cleaned = self.validate_new(dimension, key)
        self._custom[dimension].append(cleaned)
        logger.debug(f"Registered custom {dimension.label} '{cleaned}'")
        return cleaned

    def ensure(self, dimension: Dimension, key: str) -> bool:
        """Register a discovered key unless it is already known.

        Returns:
            True if the key was newly registered
        """
        if self.knows(dimension, key) or is_separator_key(key):
            return False
        self._custom[dimension].append(key)
        return True

    def remove(self, dimension: Dimension, key: str) -> None:
        """Drop a custom key.

        Raises:
            UnknownKeyError: If the key is built-in or not registered
        """
        if not self.is_custom(dimension, key):
            if self.is_builtin(dimension, key):
                raise UnknownKeyError(f"Built-in {dimension.label} '{key}' cannot be removed")
            raise UnknownKeyError(f"Unknown custom {dimension.label} '{key}'")
        self._custom[dimension].remove(key)
        logger.debug(f"Removed custom {dimension.label} '{key}'")
