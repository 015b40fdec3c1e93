"""CLI path policy and dependency injection helpers.

Library modules receive paths and collaborators via injection; this module
makes the CLI's choices from settings.
"""

from pathlib import Path

from .apply import resolve_config_path
from .model_catalog import ModelCatalog
from .settings import AppSettings
from .settings import get_settings
from .storage import ProfileStore


def create_settings() -> AppSettings:
    return get_settings()


def create_profile_store(settings: AppSettings | None = None) -> ProfileStore:
    """Profile store rooted at the configured data directory."""
    settings = settings or create_settings()
    return ProfileStore(settings.get_data_dir())


def create_model_catalog(settings: AppSettings | None = None) -> ModelCatalog:
    settings = settings or create_settings()
    return settings.load_model_catalog()


def get_target_config_path(settings: AppSettings | None = None) -> Path:
    """The oh-my-opencode config file that ``apply`` overwrites."""
    settings = settings or create_settings()
    return resolve_config_path(settings.get_opencode_config_dir())
