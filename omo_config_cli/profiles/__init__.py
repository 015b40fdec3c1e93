"""Stored profile schemas."""

from .schema import DEFAULT_SCHEMA_URL
from .schema import GLOBAL_FIELDS
from .schema import ConfigDocument
from .schema import GlobalConfig

__all__ = ["ConfigDocument", "GlobalConfig", "DEFAULT_SCHEMA_URL", "GLOBAL_FIELDS"]
