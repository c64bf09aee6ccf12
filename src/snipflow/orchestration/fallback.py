"""Secondary action when no snippet matched and no session is active."""

from snipflow.domain.protocols import EditorHost
from snipflow.domain.types import FallbackAction, MessageLevel
from snipflow.logger import get_logger

logger = get_logger("orchestration.fallback")

NO_MATCH_MESSAGE = "No matching snippet found"


class FallbackDispatcher:
    """Delegates to completion-popup control; never expands a snippet itself."""

    def __init__(self, editor: EditorHost, mode: str = "refresh", completion_source: str = "snippets") -> None:
        self._editor = editor
        self._mode = mode
        self._completion_source = completion_source

    @property
    def mode(self) -> str:
        return self._mode

    async def resolve_action(self) -> FallbackAction:
        if not await self._editor.pum_visible():
            return FallbackAction.REFRESH
        return FallbackAction.from_mode(self._mode)

    async def dispatch(self) -> FallbackAction:
        action = await self.resolve_action()
        logger.debug(f"Fallback action: {action.value}")

        if action is FallbackAction.REFRESH:
            await self._editor.start_completion(self._completion_source)
        elif action is FallbackAction.NEXT_POPUP_ENTRY:
            await self._editor.select_next_popup_entry()
        elif action is FallbackAction.CONFIRM_POPUP_ENTRY:
            await self._editor.confirm_popup_entry()
        else:
            self._editor.show_message(NO_MATCH_MESSAGE, MessageLevel.WARNING)
        return action
