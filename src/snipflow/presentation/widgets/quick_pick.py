"""QuickPickScreen - single choice among several snippet candidates."""

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static

from snipflow.logger import get_logger

logger = get_logger("quick_pick")


class QuickPickScreen(ModalScreen[int]):
    """Dismisses with the chosen index, or ``-1`` when cancelled."""

    DEFAULT_CSS = """
    QuickPickScreen {
        align: center middle;
    }
    #quick-pick-dialog {
        width: 60;
        height: auto;
        border: thick $accent;
        background: $surface;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel", priority=True)]

    def __init__(self, items: list[str], title: str):
        super().__init__()
        self.items = items
        self.title_text = title

    def compose(self) -> ComposeResult:
        with Container(id="quick-pick-dialog"):
            yield Static(self.title_text, id="quick-pick-title")
            yield OptionList(*[Text(item) for item in self.items], id="quick-pick-options")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        logger.debug(f"Picked option {event.option_index}")
        self.dismiss(event.option_index)

    def action_cancel(self) -> None:
        self.dismiss(-1)
