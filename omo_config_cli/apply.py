"""Write a stored profile out as the live oh-my-opencode config file.

Merge order, lowest precedence first:

1. explicit fields of the global config
2. the global config's other fields
3. the profile's agents and categories
4. the profile's other fields
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .composer.session import new_profile_id
from .errors import ImportFormatError
from .errors import PersistenceError
from .profiles.schema import DEFAULT_SCHEMA_URL
from .profiles.schema import ConfigDocument
from .profiles.schema import GlobalConfig
from .storage.profile_store import ProfileStore
from .storage.profile_store import write_json_atomic
from .utils.jsonc import load_jsonc_file

logger = logging.getLogger(__name__)

CONFIG_BASENAME = "oh-my-opencode"
LOCAL_PROFILE_NAME = "Local config"


def clean_empty_values(value: Any) -> Any:
    """Recursively drop nulls, empty objects and empty lists from mappings.

    Lists are cleaned element-wise but their elements are never dropped.
    """
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = clean_empty_values(item)
            if item is None or item == {} or item == []:
                continue
            cleaned[key] = item
        return cleaned
    if isinstance(value, list):
        return [clean_empty_values(item) for item in value]
    return value


def build_applied_config(global_config: GlobalConfig, profile: ConfigDocument) -> dict[str, Any]:
    """Merge the global config and a profile into one plugin config object."""
    merged: dict[str, Any] = {"$schema": global_config.schema_url or DEFAULT_SCHEMA_URL}

    merged.update(global_config.explicit_fields())
    merged.update(global_config.other_fields or {})

    if profile.agents:
        merged["agents"] = profile.agents
    if profile.categories:
        merged["categories"] = profile.categories

    merged.update(profile.other_fields or {})

    return clean_empty_values(merged)


def resolve_config_path(config_dir: Path) -> Path:
    """Path of the plugin config file; ``.jsonc`` wins when it exists."""
    jsonc_path = config_dir / f"{CONFIG_BASENAME}.jsonc"
    if jsonc_path.exists():
        return jsonc_path
    return config_dir / f"{CONFIG_BASENAME}.json"


def write_applied_config(store: ProfileStore, profile: ConfigDocument, target: Path) -> None:
    """Write the merged config for ``profile`` to ``target`` without touching applied flags."""
    write_json_atomic(target, build_applied_config(store.get_global(), profile))


def apply_profile(store: ProfileStore, profile_id: str, target: Path) -> ConfigDocument:
    """Write the merged config for a profile to ``target`` and mark it applied.

    Args:
        store: Profile store
        profile_id: Profile to apply
        target: Config file to overwrite

    Returns:
        The profile as stored after being marked applied

    Raises:
        ProfileNotFoundError: If the profile does not exist
        PersistenceError: If the config file cannot be written
    """
    profile = store.get(profile_id)
    write_applied_config(store, profile, target)
    logger.info(f"Applied profile {profile_id} to {target}")

    return store.mark_applied(profile_id)


def refresh_applied_config(store: ProfileStore, target: Path) -> ConfigDocument | None:
    """Re-write ``target`` from the currently applied profile.

    Called after the applied profile or the global config changes so the
    live file follows the stored data.

    Returns:
        The applied profile, or None if no profile is applied
    """
    applied = next((document for document in store.list() if document.is_applied), None)
    if applied is None:
        return None
    write_applied_config(store, applied, target)
    logger.info(f"Refreshed {target} from applied profile {applied.id}")
    return applied


def import_local_config(store: ProfileStore, path: Path) -> ConfigDocument | None:
    """Seed an empty store from the config file currently in use.

    The file's agents and categories become a profile named "Local config",
    marked applied; every other top-level key except ``$schema`` is kept as
    its other fields.

    Returns:
        The new profile, or None if the store already has profiles or the
        file does not exist

    Raises:
        ImportFormatError: If the file is not a JSON/JSONC object
        PersistenceError: If the file cannot be read
    """
    if store.list():
        return None
    if not path.exists():
        logger.debug(f"No local config at {path}")
        return None

    try:
        data = load_jsonc_file(path)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Failed to parse {path}: {e.msg} (line {e.lineno})") from e
    except OSError as e:
        raise PersistenceError(f"Failed to read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ImportFormatError(f"Failed to parse {path}: the top level must be an object")

    other_fields = {key: value for key, value in data.items() if key not in ("agents", "categories", "$schema")}
    document = ConfigDocument(
        id=new_profile_id(),
        name=LOCAL_PROFILE_NAME,
        is_applied=True,
        agents=data.get("agents"),
        categories=data.get("categories"),
        other_fields=other_fields,
    )

    stored = store.save(document)
    logger.info(f"Imported local config {path} as profile {stored.id}")
    return stored
