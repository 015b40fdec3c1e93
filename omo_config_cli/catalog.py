"""Built-in agent and category catalog for oh-my-opencode.

The catalog is static configuration data. Agents are grouped into sections
through their ``group`` attribute; section boundaries are never encoded as
keys. Keys of the form ``__name__`` are treated as structural markers
wherever they show up in input and are never written to a document.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CATALOG_VERSION = "3.1"


class Dimension(str, Enum):
    """The two independent key namespaces of a profile."""

    AGENTS = "agents"
    CATEGORIES = "categories"

    @property
    def label(self) -> str:
        return "agent" if self is Dimension.AGENTS else "category"


@dataclass(frozen=True)
class AgentDefinition:
    """A built-in agent known to the plugin."""

    key: str
    display_name: str
    description: str
    recommended_model: str | None = None
    group: str = "core"


@dataclass(frozen=True)
class CategoryDefinition:
    """A built-in task category known to the plugin."""

    key: str
    display_name: str
    description: str
    recommended_model: str | None = None


BUILTIN_AGENTS: tuple[AgentDefinition, ...] = (
    AgentDefinition(
        "sisyphus",
        "Sisyphus",
        "Main orchestrator: plans complex work and delegates to other agents",
        "anthropic/claude-opus-4-5",
    ),
    AgentDefinition(
        "hephaestus",
        "Hephaestus",
        "Autonomous deep worker for long implementation tasks",
        "openai/gpt-5.2-codex",
    ),
    AgentDefinition(
        "oracle",
        "Oracle",
        "Architecture decisions, code review and debugging advice",
        "openai/gpt-5.2",
    ),
    AgentDefinition(
        "librarian",
        "Librarian",
        "Documentation lookup and open source research",
        "opencode/glm-4.7-free",
    ),
    AgentDefinition(
        "explore",
        "Explore",
        "Fast codebase search and structure discovery",
        "opencode/grok-code",
    ),
    AgentDefinition(
        "multimodal-looker",
        "Multimodal Looker",
        "Image, PDF and diagram analysis",
        "google/gemini-3-flash",
    ),
    AgentDefinition(
        "prometheus",
        "Prometheus",
        "Interview-driven planner that writes work plans",
        "anthropic/claude-opus-4-5",
        group="planning",
    ),
    AgentDefinition(
        "metis",
        "Metis",
        "Plan consultant that finds gaps before execution",
        "anthropic/claude-opus-4-5",
        group="planning",
    ),
    AgentDefinition(
        "momus",
        "Momus",
        "Plan reviewer that rejects vague or unverifiable plans",
        "openai/gpt-5.2",
        group="planning",
    ),
    AgentDefinition(
        "atlas",
        "Atlas",
        "Executes a reviewed plan step by step",
        "anthropic/claude-sonnet-4-5",
        group="planning",
    ),
    AgentDefinition(
        "sisyphus-junior",
        "Sisyphus Junior",
        "Focused executor spawned for delegated categories",
        None,
        group="delegation",
    ),
)

BUILTIN_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        "visual-engineering",
        "Visual engineering",
        "Frontend, UI/UX, design and animation work",
        "google/gemini-3-pro",
    ),
    CategoryDefinition(
        "ultrabrain",
        "Ultrabrain",
        "Hard logic and architecture problems",
        "openai/gpt-5.2-codex",
    ),
    CategoryDefinition(
        "deep",
        "Deep",
        "Goal-oriented autonomous problem solving",
        "openai/gpt-5.2-codex",
    ),
    CategoryDefinition(
        "artistry",
        "Artistry",
        "Creative, unconventional approaches",
        "google/gemini-3-pro",
    ),
    CategoryDefinition(
        "quick",
        "Quick",
        "Trivial single-file changes and typo fixes",
        "anthropic/claude-haiku-4-5",
    ),
    CategoryDefinition(
        "unspecified-low",
        "Unspecified (low effort)",
        "Tasks that fit no other category, low effort",
        "anthropic/claude-sonnet-4-5",
    ),
    CategoryDefinition(
        "unspecified-high",
        "Unspecified (high effort)",
        "Tasks that fit no other category, high effort",
        "anthropic/claude-opus-4-5",
    ),
    CategoryDefinition(
        "writing",
        "Writing",
        "Documentation, prose and technical writing",
        "google/gemini-3-flash",
    ),
)


def is_separator_key(key: str) -> bool:
    """Return True for ``__name__`` style structural marker keys."""
    return len(key) > 4 and key.startswith("__") and key.endswith("__")


def normalize_agent_key(key: str) -> str:
    """Lower-case an agent key; older documents stored mixed-case keys."""
    return key.lower()


def builtin_keys(dimension: Dimension) -> tuple[str, ...]:
    """Built-in keys for a dimension, in catalog order."""
    if dimension is Dimension.AGENTS:
        return tuple(agent.key for agent in BUILTIN_AGENTS)
    return tuple(category.key for category in BUILTIN_CATEGORIES)


def get_definition(dimension: Dimension, key: str) -> AgentDefinition | CategoryDefinition | None:
    """Look up the built-in definition for a key, if any."""
    definitions = BUILTIN_AGENTS if dimension is Dimension.AGENTS else BUILTIN_CATEGORIES
    for definition in definitions:
        if definition.key == key:
            return definition
    return None


def agent_groups() -> dict[str, list[AgentDefinition]]:
    """Built-in agents grouped by section, in catalog order."""
    groups: dict[str, list[AgentDefinition]] = {}
    for agent in BUILTIN_AGENTS:
        groups.setdefault(agent.group, []).append(agent)
    return groups
