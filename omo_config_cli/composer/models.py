"""Composer data models.

Defines the in-memory types used while a profile is being edited:
- Binding: the (model, variant) pair selected for one agent or category
- DecodedDocument: a stored document split into bindings and advanced blobs
- BatchReplaceSpec / BatchReplaceResult: one batch model rewrite
- ImportFragment / ImportResult: one JSON import
- SessionState: edit session lifecycle
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any

from ..catalog import Dimension

EntryRef = tuple[Dimension, str]


@dataclass
class Binding:
    """Model selection for one agent or category.

    Empty strings are treated as unset.
    """

    model: str | None = None
    variant: str | None = None

    def __post_init__(self) -> None:
        self.model = self.model or None
        self.variant = self.variant or None

    @property
    def is_empty(self) -> bool:
        return self.model is None and self.variant is None


@dataclass
class KeyCollision:
    """Two stored agent keys that normalize to the same key."""

    normalized: str
    kept: str
    dropped: str


@dataclass
class DecodedDocument:
    """A stored document split into the pieces the session edits."""

    bindings: dict[EntryRef, Binding] = field(default_factory=dict)
    advanced: dict[EntryRef, dict[str, Any]] = field(default_factory=dict)
    custom_keys: dict[Dimension, list[str]] = field(
        default_factory=lambda: {Dimension.AGENTS: [], Dimension.CATEGORIES: []}
    )
    collisions: list[KeyCollision] = field(default_factory=list)


@dataclass(frozen=True)
class BatchReplaceSpec:
    """Rewrite every binding on ``from_model`` to ``to_model``.

    Attributes:
        from_model: Model to look for
        to_model: Model to write
        from_variant: Only rewrite bindings with exactly this variant
        to_variant: Variant to write; when omitted, unsupported variants are cleared
    """

    from_model: str | None
    to_model: str | None
    from_variant: str | None = None
    to_variant: str | None = None


class BatchReplaceOutcome(str, Enum):
    REPLACED = "replaced"
    NO_MATCH = "no_match"


@dataclass
class BatchReplaceResult:
    """Outcome of a batch replacement."""

    outcome: BatchReplaceOutcome
    replaced: int = 0
    cleared_variants: int = 0
    touched: list[EntryRef] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.outcome is BatchReplaceOutcome.REPLACED


@dataclass
class ImportFragment:
    """Parsed import payload.

    ``agents`` and ``categories`` map keys to raw entries; entries that are
    not objects are kept here and skipped when the fragment is applied.
    """

    agents: dict[str, Any] | None = None
    categories: dict[str, Any] | None = None
    other_fields: dict[str, Any] | None = None

    def entries(self, dimension: Dimension) -> dict[str, Any]:
        section = self.agents if dimension is Dimension.AGENTS else self.categories
        return section or {}


@dataclass
class ImportResult:
    """Summary of an applied import."""

    agent_count: int = 0
    category_count: int = 0
    new_custom_agents: list[str] = field(default_factory=list)
    new_custom_categories: list[str] = field(default_factory=list)
    other_fields_replaced: bool = False


class SessionState(str, Enum):
    """Edit session lifecycle."""

    CLOSED = "closed"
    LOADING = "loading"
    EDITING = "editing"
    SUBMITTING = "submitting"
