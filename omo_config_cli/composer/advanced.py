"""Free-form JSON blobs attached to agents, categories and the profile itself.

Raw text is stored as typed and only parsed when the session is submitted,
so an edit in progress can be temporarily invalid. A slot that was never
edited in the session resolves to the object it was loaded with.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from ..errors import AdvancedSettingsError
from .models import EntryRef


def parse_json_object(text: str, group: str, key: str | None = None) -> dict[str, Any]:
    """Parse text that must hold a JSON object.

    Raises:
        AdvancedSettingsError: If the text is not valid JSON or not an object
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise AdvancedSettingsError(group, key, f"{e.msg} (line {e.lineno}, column {e.colno})") from e
    if not isinstance(value, dict):
        raise AdvancedSettingsError(group, key, f"expected an object, got {_json_type(value)}")
    return value


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


@dataclass
class JsonSlot:
    """Raw text plus the object it started from.

    Attributes:
        initial: Parsed object loaded from the stored document or an import
        raw: Text typed during the session; None until first edited
    """

    initial: dict[str, Any] = field(default_factory=dict)
    raw: str | None = None

    @property
    def touched(self) -> bool:
        return self.raw is not None

    def set_raw(self, text: str) -> None:
        self.raw = text

    def load(self, value: dict[str, Any]) -> None:
        """Replace the slot content with an object and forget typed text."""
        self.initial = dict(value)
        self.raw = None

    def resolve(self, group: str, key: str | None = None) -> dict[str, Any]:
        """Parsed value for submit.

        Blank typed text means "no settings"; untouched slots keep the loaded
        object.
        """
        if self.raw is None:
            return dict(self.initial)
        if not self.raw.strip():
            return {}
        return parse_json_object(self.raw, group, key)

    def as_text(self) -> str:
        """Text to show in an editor."""
        if self.raw is not None:
            return self.raw
        return json.dumps(self.initial, indent=2, ensure_ascii=False) if self.initial else ""


class AdvancedSettingsStore:
    """Advanced-settings slots keyed by (dimension, key)."""

    GROUP = "advanced settings"

    def __init__(self):
        self._slots: dict[EntryRef, JsonSlot] = {}

    def __contains__(self, ref: object) -> bool:
        return ref in self._slots

    def slot(self, ref: EntryRef) -> JsonSlot:
        """Slot for a key, created empty on first use."""
        if ref not in self._slots:
            self._slots[ref] = JsonSlot()
        return self._slots[ref]

    def init(self, ref: EntryRef) -> None:
        """Reset a slot to empty."""
        self._slots[ref] = JsonSlot()

    def load(self, ref: EntryRef, value: dict[str, Any]) -> None:
        self.slot(ref).load(value)

    def set_raw(self, ref: EntryRef, text: str) -> None:
        self.slot(ref).set_raw(text)

    def get_raw(self, ref: EntryRef) -> str:
        return self._slots[ref].as_text() if ref in self._slots else ""

    def discard(self, ref: EntryRef) -> None:
        self._slots.pop(ref, None)

    def get_parsed_or_fail(self, ref: EntryRef) -> dict[str, Any]:
        """Parsed advanced settings for one key; empty if none.

        Raises:
            AdvancedSettingsError: If the typed text is invalid
        """
        slot = self._slots.get(ref)
        if slot is None:
            return {}
        dimension, key = ref
        return slot.resolve(f"{dimension.label} {self.GROUP}", key)

    def resolve_all(self, refs: list[EntryRef]) -> dict[EntryRef, dict[str, Any]]:
        """Parse every listed slot; the first invalid one aborts the whole call."""
        return {ref: self.get_parsed_or_fail(ref) for ref in refs}
