"""Event system connecting the host editor to the snippet layer.

Example:
    ```python
    from snipflow.domain.events import EditEvent, EditKind, EventBus

    bus = EventBus()
    bus.subscribe(EditEvent, lambda event: print(event.kind))
    bus.publish(EditEvent(kind=EditKind.CHAR_INSERTED))
    ```
"""

from .bus import EventBus
from .types import CompleteDone, DocumentOpened, EditEvent, EditKind, Event

__all__ = [
    "EventBus",
    "Event",
    "EditEvent",
    "EditKind",
    "CompleteDone",
    "DocumentOpened",
]
