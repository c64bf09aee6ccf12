"""File-backed most-recently-used list.

Records which trigger prefix was chosen last. Entries are stored newest
first, one per line, in ``<base_dir>/<name>``.
"""

from pathlib import Path

from snipflow.logger import get_logger

logger = get_logger(__name__)


class MruList:
    """Newest-first, de-duplicated, capped recency list.

    Example:
        >>> mru = MruList("snippets-mru", base_dir="~/.snipflow/mru")
        >>> await mru.add("fori")
        >>> await mru.load()
        ['fori']
    """

    def __init__(self, name: str, base_dir: str | Path = "~/.snipflow/mru", max_items: int = 5000):
        self.name = name
        self.base_dir = Path(base_dir).expanduser().resolve()
        self.max_items = max_items
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.base_dir / name
        logger.debug(f"MruList initialized: path={self.path}")

    async def load(self) -> list[str]:
        """Return the entries, newest first; a missing file is an empty list."""
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read MRU file {self.path}: {e}")
            return []
        return [line for line in text.splitlines() if line]

    async def add(self, item: str) -> None:
        """Move ``item`` to the front, trimming to ``max_items``."""
        if not item or "\n" in item:
            logger.debug(f"Ignoring MRU entry {item!r}")
            return
        items = [existing for existing in await self.load() if existing != item]
        items.insert(0, item)
        await self._write(items[: self.max_items])

    async def remove(self, item: str) -> None:
        items = await self.load()
        if item in items:
            await self._write([existing for existing in items if existing != item])

    async def clean(self) -> None:
        if self.path.exists():
            self.path.unlink()

    async def rank(self, item: str) -> int | None:
        """Zero-based position of ``item``, or None when never used."""
        items = await self.load()
        return items.index(item) if item in items else None

    async def _write(self, items: list[str]) -> None:
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_text("\n".join(items) + "\n", encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write MRU file {self.path}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise IOError(f"Cannot write MRU file: {e}") from e
