"""Settings management for omo-config.

Scope-aware YAML settings, deep merged with the most specific scope winning:

1. local (.omo-config/settings.local.yaml) - gitignored, machine-specific
2. project (.omo-config/settings.yaml) - committed, team-shared
3. user (~/.omo-config/settings.yaml) - user defaults

Recognized keys:

```yaml
storage:
  data_dir: ~/.omo-config/data
opencode:
  config_dir: ~/.config/opencode
  config_file: ~/.config/opencode/opencode.json
models:
  openai/gpt-5.2: [low, medium, high]
```
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml

from .model_catalog import ModelCatalog
from .utils.jsonc import load_jsonc_file

logger = logging.getLogger(__name__)

Scope = Literal["local", "project", "user"]


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    user_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for the standard omo-config layout."""
        return cls(
            user_settings=Path.home() / ".omo-config" / "settings.yaml",
            project_settings=Path.cwd() / ".omo-config" / "settings.yaml",
            local_settings=Path.cwd() / ".omo-config" / "settings.local.yaml",
        )


class AppSettings:
    """Settings manager with scope-aware merging.

    Usage:
        settings = AppSettings()
        store = ProfileStore(settings.get_data_dir())
        catalog = settings.load_model_catalog()
    """

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths or SettingsPaths.default()

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for scope in ("user", "project", "local"):
            result = self._deep_merge(result, self._read_scope(scope))
        return result

    # ----- Storage -----

    def get_data_dir(self) -> Path:
        """Directory holding stored profiles and the global config."""
        storage = self.get_merged_settings().get("storage") or {}
        configured = storage.get("data_dir") if isinstance(storage, dict) else None
        if configured:
            return Path(str(configured)).expanduser()
        return Path.home() / ".omo-config" / "data"

    def set_data_dir(self, path: Path, scope: Scope = "user") -> None:
        self._update_section("storage", "data_dir", str(path), scope)

    # ----- OpenCode locations -----

    def get_opencode_config_dir(self) -> Path:
        """Directory containing oh-my-opencode.json(c) and opencode.json(c)."""
        opencode = self.get_merged_settings().get("opencode") or {}
        configured = opencode.get("config_dir") if isinstance(opencode, dict) else None
        if configured:
            return Path(str(configured)).expanduser()
        return Path.home() / ".config" / "opencode"

    def get_opencode_config_file(self) -> Path:
        """OpenCode's own config file, the source of provider model variants."""
        opencode = self.get_merged_settings().get("opencode") or {}
        configured = opencode.get("config_file") if isinstance(opencode, dict) else None
        if configured:
            return Path(str(configured)).expanduser()
        config_dir = self.get_opencode_config_dir()
        jsonc_path = config_dir / "opencode.jsonc"
        return jsonc_path if jsonc_path.exists() else config_dir / "opencode.json"

    # ----- Models -----

    def load_model_catalog(self) -> ModelCatalog:
        """Models from the OpenCode config, overridden by the ``models`` setting."""
        catalog = ModelCatalog()

        config_file = self.get_opencode_config_file()
        if config_file.exists():
            try:
                config = load_jsonc_file(config_file)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable OpenCode config {config_file}: {e}")
            else:
                if isinstance(config, dict):
                    catalog = ModelCatalog.from_opencode_config(config)

        return catalog.merged(ModelCatalog.from_settings(self.get_merged_settings()))

    def set_model_variants(self, model_id: str, variants: list[str], scope: Scope = "user") -> None:
        """Declare a model and its variants at the given scope."""
        self._update_section("models", model_id, list(variants), scope)

    # ----- Scope utilities -----

    def _get_scope_path(self, scope: Scope) -> Path:
        """Get settings file path for scope."""
        return {
            "local": self.paths.local_settings,
            "project": self.paths.project_settings,
            "user": self.paths.user_settings,
        }[scope]

    def _read_scope(self, scope: Scope) -> dict[str, Any]:
        """Read settings from a specific scope; malformed files are skipped."""
        path = self._get_scope_path(scope)
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Skipping malformed settings file {path}: {e}")
            return {}
        if not isinstance(content, dict):
            logger.warning(f"Skipping settings file {path}: top level is not a mapping")
            return {}
        return content

    def _write_scope(self, scope: Scope, settings: dict[str, Any]) -> None:
        """Write settings to a specific scope."""
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)

    def _update_section(self, section: str, key: str, value: Any, scope: Scope) -> None:
        """Set ``section.key`` at the specified scope."""
        settings = self._read_scope(scope)
        current = settings.get(section)
        if not isinstance(current, dict):
            current = {}
        current[key] = value
        settings[section] = current
        self._write_scope(scope, settings)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def get_settings() -> AppSettings:
    """Get a settings instance with default paths."""
    return AppSettings()
