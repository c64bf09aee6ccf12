"""
SnipflowApp - a small Textual editor wired to the snippet commands.
"""

from __future__ import annotations

from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from snipflow.config import SnippetsConfig
from snipflow.domain.events import DocumentOpened, EventBus
from snipflow.extension import SnippetExtension
from snipflow.logger import get_logger
from snipflow.orchestration import InteractionState, SnippetCommands
from snipflow.presentation.widgets import CompletionMenu, SnippetTextArea

from .engine import TextAreaSnippetEngine
from .host import TextAreaHost

logger = get_logger("tui.app")

FILETYPES = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".md": "markdown",
    ".rs": "rust",
    ".sh": "sh",
    ".snippets": "snippets",
}


def detect_filetype(path: Path | None) -> str:
    if path is None:
        return "text"
    return FILETYPES.get(path.suffix, path.suffix.lstrip(".") or "text")


class SnipflowApp(App):
    """Editor with expand, expand-or-jump and capture-selection bindings."""

    TITLE = "snipflow"

    BINDINGS = [
        Binding("tab", "expand_or_jump", "Expand/Jump", priority=True),
        Binding("ctrl+e", "expand", "Expand"),
        Binding("ctrl+s", "capture_selection", "Capture selection"),
        Binding("ctrl+n", "next_entry", "Next", show=False),
        Binding("ctrl+y", "confirm_entry", "Confirm", show=False),
        Binding("escape", "close_menu", "Close menu", show=False),
        Binding("ctrl+w", "save", "Save"),
    ]

    def __init__(self, path: Path | None = None, config: SnippetsConfig | None = None, filetype: str | None = None):
        super().__init__()
        self.path = path
        self.config = config or SnippetsConfig()
        self.filetype = filetype or detect_filetype(path)
        self.event_bus = EventBus()
        self.state = InteractionState()
        self.extension: SnippetExtension | None = None
        self.host: TextAreaHost | None = None

    def compose(self) -> ComposeResult:
        text = self.path.read_text(encoding="utf-8") if self.path and self.path.exists() else ""
        yield Header()
        yield SnippetTextArea(text, event_bus=self.event_bus, id="editor")
        yield CompletionMenu(id="completion-menu")
        yield Footer()

    async def on_mount(self) -> None:
        editor = self.query_one("#editor", SnippetTextArea)
        menu = self.query_one("#completion-menu", CompletionMenu)
        engine = TextAreaSnippetEngine(editor, self.state, buffer_id=editor.buffer_id)
        self.host = TextAreaHost(self, editor, menu, self.event_bus, filetype=self.filetype, buffer_id=editor.buffer_id)
        self.extension = SnippetExtension(self.config, self.host, engine, self.event_bus, state=self.state)

        await self.extension.activate()
        self.host.completion_provider = self.extension.completion
        if self.path is not None:
            self.event_bus.publish(DocumentOpened(uri=self.path.as_uri(), buffer_id=editor.buffer_id))
        editor.focus()
        logger.info(f"Editor ready (filetype={self.filetype})")

    def on_unmount(self) -> None:
        if self.extension is not None:
            self.extension.deactivate()

    def _run_command(self, name: str) -> None:
        if self.extension is None:
            return
        handler = self.extension.commands.keymaps()[name]
        self.run_worker(handler(), group="snippets", exclusive=False)

    def action_expand(self) -> None:
        self._run_command(SnippetCommands.EXPAND)

    def action_expand_or_jump(self) -> None:
        self._run_command(SnippetCommands.EXPAND_JUMP)

    def action_capture_selection(self) -> None:
        self._run_command(SnippetCommands.SELECT)

    async def action_next_entry(self) -> None:
        if self.host is not None:
            await self.host.select_next_popup_entry()

    async def action_confirm_entry(self) -> None:
        if self.host is not None:
            await self.host.confirm_popup_entry()

    def action_close_menu(self) -> None:
        self.query_one("#completion-menu", CompletionMenu).hide()

    def action_save(self) -> None:
        if self.path is None:
            self.notify("No file to save to", severity="warning")
            return
        self.path.write_text(self.query_one("#editor", SnippetTextArea).text, encoding="utf-8")
        self.notify(f"Saved {self.path.name}")
