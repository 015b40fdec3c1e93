"""Profile persistence."""

from .profile_store import ProfileStore
from .profile_store import read_json_with_backup
from .profile_store import write_json_atomic

__all__ = ["ProfileStore", "read_json_with_backup", "write_json_atomic"]
