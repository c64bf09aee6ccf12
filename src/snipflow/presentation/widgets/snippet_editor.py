"""
SnippetTextArea - TextArea that reports edits to the snippet event bus.
"""

from textual import events
from textual.widgets import TextArea

from snipflow.domain.events import EditEvent, EditKind, EventBus
from snipflow.logger import get_logger

logger = get_logger("snippet_editor")


class SnippetTextArea(TextArea):
    """Publishes ``CHAR_INSERTED`` before a printable key lands and
    ``TEXT_CHANGED`` after every change of the document."""

    BORDER_TITLE = "Editor"

    def __init__(self, text: str = "", *, event_bus: EventBus, buffer_id: int = 1, **kwargs):
        super().__init__(text, **kwargs)
        self.event_bus = event_bus
        self.buffer_id = buffer_id

    async def _on_key(self, event: events.Key) -> None:
        if event.is_printable and event.character:
            self.event_bus.publish(EditEvent(kind=EditKind.CHAR_INSERTED, buffer_id=self.buffer_id))
        await super()._on_key(event)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.event_bus.publish(EditEvent(kind=EditKind.TEXT_CHANGED, buffer_id=self.buffer_id))
