"""Pydantic schemas for stored oh-my-opencode profiles.

Stored records use snake_case keys. Records written by older releases used
camelCase (``configId``, ``isApplied``, ``otherFields``); both spellings are
accepted on read and snake_case is always written back.
"""

from typing import Any

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

DEFAULT_SCHEMA_URL = (
    "https://raw.githubusercontent.com/code-yeongyu/oh-my-opencode/master/assets/oh-my-opencode.schema.json"
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _compat(name: str, *extra: str) -> AliasChoices:
    """Accept a field under its snake_case, camelCase and any extra spellings."""
    return AliasChoices(name, _camel(name), *extra)


class ConfigDocument(BaseModel):
    """A named agents/categories profile."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., validation_alias=_compat("id", "config_id", "configId"), description="Profile identifier")
    name: str = Field("Unnamed Config", description="Human-readable label")
    is_applied: bool = Field(False, validation_alias=_compat("is_applied"))
    is_disabled: bool = Field(False, validation_alias=_compat("is_disabled"))
    sort_index: int | None = Field(None, validation_alias=_compat("sort_index"))
    agents: dict[str, Any] = Field(default_factory=dict, description="Agent key -> entry object")
    categories: dict[str, Any] = Field(default_factory=dict, description="Category key -> entry object")
    other_fields: dict[str, Any] | None = Field(
        None, validation_alias=_compat("other_fields"), description="Unrecognized top-level fields, kept verbatim"
    )
    created_at: str | None = Field(None, validation_alias=_compat("created_at"))
    updated_at: str | None = Field(None, validation_alias=_compat("updated_at"))

    @field_validator("agents", "categories", mode="before")
    @classmethod
    def _entries_or_empty(cls, value: Any) -> Any:
        # Absent or non-object entry maps load as empty maps
        return value if isinstance(value, dict) else {}

    @field_validator("other_fields", mode="before")
    @classmethod
    def _other_fields_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) and value else None

    def to_record(self) -> dict[str, Any]:
        """Serialize for storage."""
        return self.model_dump(exclude_none=True)


class GlobalConfig(BaseModel):
    """Settings shared by every profile when it is applied."""

    model_config = ConfigDict(populate_by_name=True)

    schema_url: str | None = Field(
        None,
        validation_alias=AliasChoices("schema", "$schema", "schema_url"),
        serialization_alias="schema",
        description="JSON schema URL written as $schema",
    )
    sisyphus_agent: dict[str, Any] | None = Field(None, validation_alias=_compat("sisyphus_agent"))
    disabled_agents: list[str] | None = Field(None, validation_alias=_compat("disabled_agents"))
    disabled_mcps: list[str] | None = Field(None, validation_alias=_compat("disabled_mcps"))
    disabled_hooks: list[str] | None = Field(None, validation_alias=_compat("disabled_hooks"))
    disabled_skills: list[str] | None = Field(None, validation_alias=_compat("disabled_skills"))
    lsp: dict[str, Any] | None = None
    experimental: dict[str, Any] | None = None
    background_task: dict[str, Any] | None = Field(None, validation_alias=_compat("background_task"))
    browser_automation_engine: Any = Field(None, validation_alias=_compat("browser_automation_engine"))
    claude_code: dict[str, Any] | None = Field(None, validation_alias=_compat("claude_code"))
    other_fields: dict[str, Any] | None = Field(None, validation_alias=_compat("other_fields"))
    updated_at: str | None = Field(None, validation_alias=_compat("updated_at"))

    def explicit_fields(self) -> dict[str, Any]:
        """Fields that map one-to-one onto top-level plugin config keys."""
        return self.model_dump(
            exclude_none=True,
            exclude={"schema_url", "other_fields", "updated_at"},
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize for storage."""
        return self.model_dump(exclude_none=True, by_alias=True)


# Fields of GlobalConfig that `omo-config global set` may change
GLOBAL_FIELDS = tuple(name for name in GlobalConfig.model_fields if name != "updated_at")
