"""File-backed persistence for oh-my-opencode profiles.

Layout under the data directory:

    profiles/<profile-id>.json         one record per profile
    profiles/<profile-id>.json.backup  previous version of the record
    global.json                        settings shared by all profiles
"""

from __future__ import annotations

import contextlib
import json
import logging
import shutil
import tempfile
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as SchemaError

from ..errors import PersistenceError
from ..errors import ProfileNotFoundError
from ..profiles.schema import ConfigDocument
from ..profiles.schema import GlobalConfig

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _check_id(profile_id: str) -> None:
    if not profile_id or not profile_id.strip():
        raise ValueError("profile_id cannot be empty")
    # Prevent path traversal
    if "/" in profile_id or "\\" in profile_id or profile_id in (".", ".."):
        raise ValueError(f"Invalid profile_id: {profile_id}")


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON through a temp file and rename, keeping a ``.backup`` copy.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    backup_file = path.with_name(path.name + ".backup")

    if path.exists():
        try:
            shutil.copy2(path, backup_file)
        except OSError as e:
            logger.warning(f"Failed to create backup of {path}: {e}")

    with tempfile.NamedTemporaryFile(
        mode="w", dir=path.parent, prefix=f"{path.stem}_", suffix=".tmp", delete=False, encoding="utf-8"
    ) as tmp_file:
        temp_path = Path(tmp_file.name)
        try:
            json.dump(data, tmp_file, indent=2, ensure_ascii=False)
            tmp_file.write("\n")
            tmp_file.flush()

            temp_path.replace(path)

        except Exception as e:
            with contextlib.suppress(Exception):
                temp_path.unlink()
            raise PersistenceError(f"Failed to write {path}: {e}") from e


def read_json_with_backup(path: Path) -> Any | None:
    """Read JSON, falling back to the ``.backup`` copy when the file is corrupt.

    Returns:
        Parsed data, or None if neither file exists

    Raises:
        PersistenceError: If both copies exist but are unreadable
    """
    backup_file = path.with_name(path.name + ".backup")
    if not path.exists() and not backup_file.exists():
        return None

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load {path}, trying backup: {e}")

    if backup_file.exists():
        try:
            with open(backup_file, encoding="utf-8") as f:
                data = json.load(f)
            logger.info(f"Loaded {path.name} from backup")
            return data
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Backup of {path.name} also corrupted: {e}")

    raise PersistenceError(f"Unable to read {path} or its backup")


class ProfileStore:
    """
    Stores profiles and the global config as JSON files.

    Contract:
    - Inputs: ConfigDocument / GlobalConfig instances, profile ids
    - Outputs: validated ConfigDocument / GlobalConfig instances
    - Side Effects: Filesystem writes under base_dir
    - Errors: ProfileNotFoundError for unknown ids, PersistenceError for I/O issues
    """

    def __init__(self, base_dir: Path):
        """Initialize with the data directory.

        Args:
            base_dir: Directory holding profiles/ and global.json
        """
        self.base_dir = base_dir
        self.profiles_dir = base_dir / "profiles"
        self.global_file = base_dir / "global.json"

    def _profile_path(self, profile_id: str) -> Path:
        _check_id(profile_id)
        return self.profiles_dir / f"{profile_id}.json"

    def _parse(self, data: Any, source: Path) -> ConfigDocument:
        try:
            return ConfigDocument.model_validate(data)
        except SchemaError as e:
            raise PersistenceError(f"Invalid profile record {source.name}: {e}") from e

    # ===== PROFILES =====

    def exists(self, profile_id: str) -> bool:
        try:
            return self._profile_path(profile_id).exists()
        except ValueError:
            return False

    def get(self, profile_id: str) -> ConfigDocument:
        """Load one profile.

        Raises:
            ProfileNotFoundError: If no record has this id
            PersistenceError: If the record is unreadable
        """
        path = self._profile_path(profile_id)
        data = read_json_with_backup(path)
        if data is None:
            raise ProfileNotFoundError(profile_id)
        return self._parse(data, path)

    def list(self) -> list[ConfigDocument]:
        """All readable profiles, ordered by sort_index and then name."""
        if not self.profiles_dir.exists():
            return []

        documents = []
        for path in self.profiles_dir.glob("*.json"):
            try:
                data = read_json_with_backup(path)
                if data is not None:
                    documents.append(self._parse(data, path))
            except PersistenceError as e:
                logger.warning(f"Skipping unreadable profile: {e}")

        documents.sort(key=lambda d: (d.sort_index is None, d.sort_index or 0, d.name.lower()))
        return documents

    def find(self, ref: str) -> ConfigDocument:
        """Look a profile up by id, falling back to an exact name match.

        Raises:
            ProfileNotFoundError: If neither matches
        """
        if self.exists(ref):
            return self.get(ref)
        for document in self.list():
            if document.name == ref:
                return document
        raise ProfileNotFoundError(ref)

    def save(self, document: ConfigDocument) -> ConfigDocument:
        """Create or update a profile; stamps created_at/updated_at.

        Returns:
            The document as stored
        """
        path = self._profile_path(document.id)
        now = _now()
        stored = document.model_copy(update={"created_at": document.created_at or now, "updated_at": now})
        write_json_atomic(path, stored.to_record())
        logger.debug(f"Profile {document.id} saved")
        return stored

    def delete(self, profile_id: str) -> None:
        path = self._profile_path(profile_id)
        if not path.exists():
            raise ProfileNotFoundError(profile_id)
        try:
            path.unlink()
            path.with_name(path.name + ".backup").unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete profile {profile_id}: {e}") from e
        logger.info(f"Deleted profile {profile_id}")

    def reorder(self, profile_ids: list[str]) -> None:
        """Assign sort_index in the given order.

        Every id is checked before anything is written.
        """
        documents = [self.get(profile_id) for profile_id in profile_ids]
        for index, document in enumerate(documents):
            self.save(document.model_copy(update={"sort_index": index}))

    def mark_applied(self, profile_id: str) -> ConfigDocument:
        """Flag one profile as applied and clear the flag on all others."""
        target = self.get(profile_id)
        for document in self.list():
            if document.id != profile_id and document.is_applied:
                self.save(document.model_copy(update={"is_applied": False}))
        return self.save(target.model_copy(update={"is_applied": True}))

    def set_disabled(self, profile_id: str, disabled: bool) -> ConfigDocument:
        document = self.get(profile_id)
        return self.save(document.model_copy(update={"is_disabled": disabled}))

    # ===== GLOBAL CONFIG =====

    def get_global(self) -> GlobalConfig:
        """Load the global config; an empty one if none was saved yet."""
        data = read_json_with_backup(self.global_file)
        if data is None:
            return GlobalConfig()
        try:
            return GlobalConfig.model_validate(data)
        except SchemaError as e:
            raise PersistenceError(f"Invalid global config record: {e}") from e

    def save_global(self, config: GlobalConfig) -> GlobalConfig:
        stored = config.model_copy(update={"updated_at": _now()})
        write_json_atomic(self.global_file, stored.to_record())
        logger.debug("Global config saved")
        return stored
