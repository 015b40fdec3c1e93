"""Exception types raised by the profile composer and its collaborators.

Validation errors are raised before anything is mutated, so callers can
surface them and let the user retry without losing session state.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base class for all profile configuration errors."""


class ValidationError(ConfigError, ValueError):
    """User input was rejected. Nothing was changed."""


class AdvancedSettingsError(ValidationError):
    """An advanced-settings or other-fields blob is not a JSON object."""

    def __init__(self, group: str, key: str | None = None, detail: str | None = None):
        self.group = group
        self.key = key
        self.detail = detail
        where = f"{group} '{key}'" if key else group
        message = f"Invalid JSON in {where}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EmptyKeyError(ValidationError):
    """A custom key was blank after trimming."""


class DuplicateKeyError(ValidationError):
    """A custom key already exists as a built-in or custom key."""


class ReservedKeyError(ValidationError):
    """A key uses the reserved ``__marker__`` form."""


class UnknownKeyError(ValidationError):
    """The key is not known in the requested dimension."""


class VariantError(ValidationError):
    """A variant is not offered by the model it is bound to."""


class BatchReplaceError(ValidationError):
    """A batch model replacement request is malformed."""


class ImportFormatError(ValidationError):
    """Imported text could not be turned into a config fragment."""


class SessionStateError(ConfigError):
    """An edit session operation was attempted in the wrong state."""


class PersistenceError(ConfigError, OSError):
    """The storage collaborator failed. Session state is left untouched."""


class ProfileNotFoundError(PersistenceError, LookupError):
    """No stored profile has the requested id."""

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Profile '{profile_id}' not found")
