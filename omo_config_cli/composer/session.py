"""Edit session for one oh-my-opencode profile.

The session owns all editing state: bindings, advanced-settings slots,
custom keys and the other-fields blob. It moves through

    CLOSED -> LOADING -> EDITING -> SUBMITTING -> (CLOSED | EDITING)

Nothing is persisted until ``submit``; ``close`` discards everything.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from ..catalog import Dimension
from ..errors import ConfigError
from ..errors import PersistenceError
from ..errors import SessionStateError
from ..errors import UnknownKeyError
from ..errors import ValidationError
from ..errors import VariantError
from ..model_catalog import ModelCatalog
from ..profiles.schema import ConfigDocument
from ..utils.error_format import format_error_message
from . import field_codec
from .advanced import AdvancedSettingsStore
from .advanced import JsonSlot
from .batch_replace import plan_batch_replace
from .importer import ImportMode
from .importer import apply_import
from .importer import parse_import_text
from .models import BatchReplaceResult
from .models import BatchReplaceSpec
from .models import Binding
from .models import EntryRef
from .models import ImportFragment
from .models import ImportResult
from .models import KeyCollision
from .models import SessionState
from .registry import CustomKeyRegistry

logger = logging.getLogger(__name__)

OTHER_FIELDS_GROUP = "other fields"


def new_profile_id() -> str:
    """Generate an id for a profile that has never been stored."""
    return f"omo_config_{uuid.uuid4().hex[:12]}"


class EditSession:
    """In-memory editing state for a single profile.

    Contract:
    - Inputs: a stored ConfigDocument (or none, for a new profile) and a model catalog
    - Outputs: a composed ConfigDocument handed to a save callable on submit
    - Errors: ValidationError subclasses before any mutation; PersistenceError from submit
    """

    def __init__(self, catalog: ModelCatalog | None = None):
        self.catalog = catalog or ModelCatalog()
        self.state = SessionState.CLOSED
        self._reset()

    def _reset(self) -> None:
        self.registry = CustomKeyRegistry()
        self.advanced = AdvancedSettingsStore()
        self.bindings: dict[EntryRef, Binding] = {}
        self.other_fields = JsonSlot()
        self.collisions: list[KeyCollision] = []
        self.name = ""
        self.document_id: str | None = None
        self._source: ConfigDocument | None = None

    # ===== LIFECYCLE =====

    def open(self, document: ConfigDocument | None = None, name: str | None = None) -> bool:
        """Load a document (or start a new one) into the session.

        Re-opening the record that is already being edited is a no-op, so
        repeated calls never overwrite edits in progress.

        Returns:
            True if the session was (re)loaded, False for a no-op

        Raises:
            SessionStateError: If another record is being edited or a submit is running
        """
        if self.state is SessionState.EDITING:
            same_record = (document is None and self._source is None) or (
                document is not None and self._source is not None and document.id == self._source.id
            )
            if same_record:
                return False
            raise SessionStateError("Another profile is already open in this session")
        if self.state is not SessionState.CLOSED:
            raise SessionStateError(f"Cannot open a profile while {self.state.value}")

        self.state = SessionState.LOADING
        self._reset()

        if document is None:
            self.document_id = new_profile_id()
            self.name = name or ""
        else:
            self._load(document)
            if name is not None:
                self.name = name

        self.state = SessionState.EDITING
        logger.debug(f"Opened profile {self.document_id}")
        return True

    def _load(self, document: ConfigDocument) -> None:
        decoded = field_codec.decode(document)
        self._source = document
        self.document_id = document.id
        self.name = document.name
        self.collisions = decoded.collisions
        self.bindings = decoded.bindings

        for dimension, keys in decoded.custom_keys.items():
            for key in keys:
                self.registry.ensure(dimension, key)
        for ref, advanced in decoded.advanced.items():
            self.advanced.load(ref, advanced)

        self.other_fields.load(document.other_fields or {})

    def close(self) -> None:
        """Discard all editing state."""
        if self.state is SessionState.SUBMITTING:
            raise SessionStateError("Cannot close while a submit is running")
        self._reset()
        self.state = SessionState.CLOSED

    def _require_editing(self) -> None:
        if self.state is not SessionState.EDITING:
            raise SessionStateError(f"No profile is being edited (session is {self.state.value})")

    @property
    def is_new(self) -> bool:
        return self._source is None

    # ===== KEYS AND BINDINGS =====

    def keys(self, dimension: Dimension) -> list[str]:
        """Built-in and custom keys of a dimension."""
        return self.registry.all_keys(dimension)

    def refs(self) -> list[EntryRef]:
        """Every editable (dimension, key), agents first."""
        return [(dimension, key) for dimension in Dimension for key in self.keys(dimension)]

    def _require_known(self, dimension: Dimension, key: str) -> None:
        if not self.registry.knows(dimension, key):
            raise UnknownKeyError(f"Unknown {dimension.label} '{key}'")

    def binding(self, dimension: Dimension, key: str) -> Binding:
        """Mutable binding for a key, created empty on first access."""
        return self.bindings.setdefault((dimension, key), Binding())

    def get_binding(self, dimension: Dimension, key: str) -> Binding:
        """Copy of the current binding for a key."""
        current = self.bindings.get((dimension, key))
        return Binding(current.model, current.variant) if current else Binding()

    def set_model(self, dimension: Dimension, key: str, model: str | None) -> bool:
        """Select a model; clears a variant the new model does not offer.

        Returns:
            True if the variant was cleared as a side effect
        """
        self._require_editing()
        self._require_known(dimension, key)
        binding = self.binding(dimension, key)
        binding.model = model or None

        if binding.variant and not self.catalog.supports_variant(binding.model, binding.variant):
            binding.variant = None
            return True
        return False

    def set_variant(self, dimension: Dimension, key: str, variant: str | None) -> None:
        """Select a variant of the bound model, or clear it with None.

        Raises:
            VariantError: If no model is bound or the model lacks the variant
        """
        self._require_editing()
        self._require_known(dimension, key)
        binding = self.binding(dimension, key)
        if not variant:
            binding.variant = None
            return
        if not binding.model:
            raise VariantError(f"Select a model for {dimension.label} '{key}' before choosing a variant")
        if not self.catalog.supports_variant(binding.model, variant):
            raise VariantError(f"Model '{binding.model}' has no variant '{variant}'")
        binding.variant = variant

    def clear(self, dimension: Dimension, key: str) -> None:
        """Unset model, variant and advanced settings of a key."""
        self._require_editing()
        self._require_known(dimension, key)
        self.bindings.pop((dimension, key), None)
        self.advanced.init((dimension, key))

    def flat_fields(self) -> dict[str, str]:
        """Current bindings as flat form fields."""
        return field_codec.to_flat_fields(self.bindings)

    # ===== ADVANCED SETTINGS =====

    def set_advanced_raw(self, dimension: Dimension, key: str, text: str) -> None:
        """Store advanced-settings text for a key; validated on submit."""
        self._require_editing()
        self._require_known(dimension, key)
        self.advanced.set_raw((dimension, key), text)

    def advanced_text(self, dimension: Dimension, key: str) -> str:
        return self.advanced.get_raw((dimension, key))

    def set_other_fields_raw(self, text: str) -> None:
        """Store other-fields text; validated on submit."""
        self._require_editing()
        self.other_fields.set_raw(text)

    # ===== CUSTOM KEYS =====

    def add_custom_key(self, dimension: Dimension, key: str) -> str:
        """Register a custom key with an empty advanced slot."""
        self._require_editing()
        cleaned = self.registry.add(dimension, key)
        self.advanced.init((dimension, cleaned))
        return cleaned

    def remove_custom_key(self, dimension: Dimension, key: str) -> None:
        """Drop a custom key together with its binding and advanced slot."""
        self._require_editing()
        self.registry.remove(dimension, key)
        self.bindings.pop((dimension, key), None)
        self.advanced.discard((dimension, key))

    # ===== BULK OPERATIONS =====

    def batch_replace(self, spec: BatchReplaceSpec) -> BatchReplaceResult:
        """Rewrite every binding matching the request; see batch_replace module."""
        self._require_editing()
        result, updates = plan_batch_replace(self.bindings, self.refs(), spec, self.catalog)
        self.bindings.update(updates)
        if result.matched:
            logger.info(
                f"Replaced {spec.from_model} with {spec.to_model} in {result.replaced} bindings "
                f"({result.cleared_variants} variants cleared)"
            )
        return result

    def import_fragment(self, fragment: ImportFragment) -> ImportResult:
        self._require_editing()
        return apply_import(self, fragment)

    def import_text(self, text: str, mode: ImportMode = "full") -> ImportResult:
        """Parse JSON/JSONC text and import it; parse errors change nothing."""
        self._require_editing()
        return apply_import(self, parse_import_text(text, mode))

    # ===== SUBMIT =====

    def compose(self) -> ConfigDocument:
        """Validate every blob and build the document to persist.

        Raises:
            ValidationError: If the name is blank or any JSON blob is invalid
        """
        name = self.name.strip()
        if not name:
            raise ValidationError("Profile name is required")

        keys = {dimension: self.keys(dimension) for dimension in Dimension}
        advanced = self.advanced.resolve_all(self.refs())
        other_fields = self.other_fields.resolve(OTHER_FIELDS_GROUP)
        sections = field_codec.encode(self.bindings, advanced, keys)

        metadata: dict[str, Any] = {}
        if self._source is not None:
            metadata = self._source.model_dump(
                include={"is_applied", "is_disabled", "sort_index", "created_at", "updated_at"}
            )

        if self.document_id is None:
            raise SessionStateError("Session has no document id")
        return ConfigDocument(
            id=self.document_id,
            name=name,
            agents=sections[Dimension.AGENTS],
            categories=sections[Dimension.CATEGORIES],
            other_fields=other_fields or None,
            **metadata,
        )

    def submit(self, save: Callable[[ConfigDocument], Any]) -> ConfigDocument:
        """Compose the document and hand it to ``save``.

        On success the session closes. On any failure it stays open with its
        state unchanged so the user can fix the input or retry.

        Args:
            save: Persistence callable; its return value replaces the document
                if it is a ConfigDocument

        Raises:
            SessionStateError: If nothing is open or a submit is already running
            ValidationError: If the composed document is invalid
            PersistenceError: If ``save`` fails
        """
        if self.state is SessionState.SUBMITTING:
            raise SessionStateError("A submit is already in progress")
        self._require_editing()

        self.state = SessionState.SUBMITTING
        try:
            document = self.compose()
            saved = save(document)
        except ConfigError:
            self.state = SessionState.EDITING
            raise
        except Exception as e:
            self.state = SessionState.EDITING
            raise PersistenceError(format_error_message(e)) from e

        result = saved if isinstance(saved, ConfigDocument) else document
        logger.info(f"Saved profile {result.id} ('{result.name}')")
        self._reset()
        self.state = SessionState.CLOSED
        return result
