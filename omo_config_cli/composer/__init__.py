"""Profile composition engine.

Turns stored oh-my-opencode profiles into editable state and back:

- field_codec: stored entries <-> bindings + advanced blobs (and flat fields)
- advanced: lazily validated JSON blobs per agent/category
- registry: custom agent/category keys next to the built-in catalog
- batch_replace: rewrite one model to another across all bindings
- importer: fold external JSON/JSONC fragments into a session
- session: the edit session that ties it together and submits
"""

from .advanced import AdvancedSettingsStore
from .advanced import JsonSlot
from .batch_replace import plan_batch_replace
from .batch_replace import validate_spec
from .field_codec import decode
from .field_codec import encode
from .field_codec import encode_entry
from .field_codec import field_name
from .field_codec import from_flat_fields
from .field_codec import parse_field_name
from .field_codec import to_flat_fields
from .importer import fragment_from_dict
from .importer import parse_import_text
from .models import BatchReplaceOutcome
from .models import BatchReplaceResult
from .models import BatchReplaceSpec
from .models import Binding
from .models import DecodedDocument
from .models import ImportFragment
from .models import ImportResult
from .models import KeyCollision
from .models import SessionState
from .registry import CustomKeyRegistry
from .session import EditSession
from .session import new_profile_id

__all__ = [
    "AdvancedSettingsStore",
    "JsonSlot",
    "plan_batch_replace",
    "validate_spec",
    "decode",
    "encode",
    "encode_entry",
    "field_name",
    "from_flat_fields",
    "parse_field_name",
    "to_flat_fields",
    "fragment_from_dict",
    "parse_import_text",
    "BatchReplaceOutcome",
    "BatchReplaceResult",
    "BatchReplaceSpec",
    "Binding",
    "DecodedDocument",
    "ImportFragment",
    "ImportResult",
    "KeyCollision",
    "SessionState",
    "CustomKeyRegistry",
    "EditSession",
    "new_profile_id",
]
