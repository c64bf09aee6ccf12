"""Configuration for the snippet trigger layer.

Values come from ``SNIPPETS_*`` environment variables (a ``.env`` file is
honored through python-dotenv), mirroring the option names of the editor
integration: ``autoTrigger``, ``expandFallbackWithPum``, ``extends`` ...
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

FALLBACK_MODES = ("refresh", "next", "confirm")


@dataclass
class SnippetsConfig:
    """Configuration for snippet sources and the interaction layer."""

    # Auto-trigger debounce
    auto_trigger: bool = True
    staleness_window_ms: float = 50.0  # max gap between char insert and text change
    settle_delay_ms: float = 50.0  # wait before querying candidates

    # Fallback when nothing expands and the popup menu is visible
    expand_fallback_with_pum: str = "refresh"

    # Sources
    load_from_extensions: bool = True
    snippet_dirs: list[str] = field(default_factory=list)
    extends: dict[str, list[str]] = field(default_factory=dict)

    # Completion provider registration
    trigger_characters: list[str] = field(default_factory=list)
    priority: int = 90

    # Recency list
    mru_dir: str = "~/.snipflow/mru"
    mru_max_items: int = 5000

    # Logging
    log_level: str = "INFO"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


def parse_extends(value: str) -> dict[str, list[str]]:
    """Parse ``ft:parent1,parent2;ft2:parent`` into a mapping.

    Entries without a ``:`` are ignored.
    """
    extends: dict[str, list[str]] = {}
    for entry in value.split(";"):
        if ":" not in entry:
            continue
        filetype, parents = entry.split(":", 1)
        filetype = filetype.strip()
        if not filetype:
            continue
        extends[filetype] = [p.strip() for p in parents.split(",") if p.strip()]
    return extends


def load_config() -> SnippetsConfig:
    """Load configuration from environment variables."""
    load_dotenv()
    defaults = SnippetsConfig()

    return SnippetsConfig(
        auto_trigger=_env_bool("SNIPPETS_AUTO_TRIGGER", defaults.auto_trigger),
        staleness_window_ms=float(os.getenv("SNIPPETS_STALENESS_WINDOW_MS", defaults.staleness_window_ms)),
        settle_delay_ms=float(os.getenv("SNIPPETS_SETTLE_DELAY_MS", defaults.settle_delay_ms)),
        expand_fallback_with_pum=os.getenv("SNIPPETS_EXPAND_FALLBACK_WITH_PUM", defaults.expand_fallback_with_pum),
        load_from_extensions=_env_bool("SNIPPETS_LOAD_FROM_EXTENSIONS", defaults.load_from_extensions),
        snippet_dirs=_env_list("SNIPPETS_DIRS"),
        extends=parse_extends(os.getenv("SNIPPETS_EXTENDS", "")),
        trigger_characters=_env_list("SNIPPETS_TRIGGER_CHARACTERS"),
        priority=int(os.getenv("SNIPPETS_PRIORITY", defaults.priority)),
        mru_dir=os.getenv("SNIPPETS_MRU_DIR", defaults.mru_dir),
        mru_max_items=int(os.getenv("SNIPPETS_MRU_MAX_ITEMS", defaults.mru_max_items)),
        log_level=os.getenv("SNIPPETS_LOG_LEVEL", defaults.log_level).upper(),
    )
