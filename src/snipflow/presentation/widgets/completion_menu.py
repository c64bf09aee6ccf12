"""
CompletionMenu - popup listing snippet completion items.
"""

from rich.text import Text
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from snipflow.completion import CompletionItem
from snipflow.logger import get_logger

logger = get_logger("completion_menu")


class CompletionMenu(OptionList):
    """Option list shown under the editor while completing."""

    DEFAULT_CSS = """
    CompletionMenu {
        height: auto;
        max-height: 8;
        border: round $accent;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._items: list[CompletionItem] = []
        self.display = False

    @property
    def visible(self) -> bool:
        return bool(self.display)

    @property
    def items(self) -> list[CompletionItem]:
        return list(self._items)

    def show_items(self, items: list[CompletionItem]) -> None:
        self._items = list(items)
        self.clear_options()
        self.add_options([Option(self._render_item(item)) for item in self._items])
        self.display = bool(self._items)
        if self._items:
            self.highlighted = 0
        logger.debug(f"Completion menu showing {len(self._items)} item(s)")

    def hide(self) -> None:
        self.display = False

    def select_next(self) -> None:
        if not self._items:
            return
        current = self.highlighted if self.highlighted is not None else -1
        self.highlighted = (current + 1) % len(self._items)

    def current_item(self) -> CompletionItem | None:
        if self.highlighted is None or not 0 <= self.highlighted < len(self._items):
            return None
        return self._items[self.highlighted]

    @staticmethod
    def _render_item(item: CompletionItem) -> Text:
        return Text.assemble((item.label, "bold"), "  ", (item.detail, "dim"), f"  {item.shortcut}")
