"""Shared coordination state for the interaction layer.

One ``InteractionState`` instance is created per editor and handed to the
trigger orchestrator, the expansion coordinator and the visual capture.
It holds the only mutable state they share: the current arm record, the
text-change generation and the last captured selection.

All access happens on the event loop thread, so no locking is needed.
"""

from dataclasses import dataclass

from snipflow.domain.types import SelectionCapture, TriggerAttempt
from snipflow.logger import get_logger

logger = get_logger("orchestration.state")


@dataclass(frozen=True)
class ArmRecord:
    """Time and generation of the latest character insert."""

    armed_at_ms: float
    generation: int


class InteractionState:
    """Single-writer state object shared by the command handlers."""

    def __init__(self) -> None:
        self._arm: ArmRecord | None = None
        self._arm_generation = 0
        self._change_generation = 0
        self._last_capture: SelectionCapture | None = None
        self._last_placeholder: object | None = None

    # -- auto-trigger arm -------------------------------------------------

    @property
    def arm(self) -> ArmRecord | None:
        return self._arm

    def arm_insert(self, timestamp_ms: float) -> ArmRecord:
        """Record a character insert, superseding any previous arm."""
        self._arm_generation += 1
        self._arm = ArmRecord(armed_at_ms=timestamp_ms, generation=self._arm_generation)
        return self._arm

    def drop_arm(self) -> None:
        self._arm = None

    def begin_attempt(self, timestamp_ms: float) -> TriggerAttempt:
        """Start an evaluation for the current arm.

        Bumps the change generation so every earlier attempt becomes stale.
        """
        if self._arm is None:
            raise RuntimeError("cannot start a trigger attempt without an arm")
        self._change_generation += 1
        return TriggerAttempt(
            started_at_ms=timestamp_ms,
            armed_at_ms=self._arm.armed_at_ms,
            arm_generation=self._arm.generation,
            change_generation=self._change_generation,
        )

    def note_change(self) -> None:
        """Record a text change that did not start an attempt."""
        self._change_generation += 1

    def is_current(self, attempt: TriggerAttempt) -> bool:
        """True when no newer insert or text change superseded ``attempt``."""
        return (
            attempt.arm_generation == self._arm_generation
            and attempt.change_generation == self._change_generation
        )

    # -- selection slot ---------------------------------------------------

    @property
    def last_capture(self) -> SelectionCapture | None:
        return self._last_capture

    @property
    def selected_text(self) -> str | None:
        return self._last_capture.text if self._last_capture else None

    def store_capture(self, capture: SelectionCapture) -> None:
        """Overwrite the single capture slot."""
        self._last_capture = capture
        logger.debug(f"Stored captured selection ({len(capture.text)} chars)")

    def clear_capture(self) -> None:
        self._last_capture = None

    # -- placeholder markers ----------------------------------------------

    @property
    def last_placeholder(self) -> object | None:
        """The placeholder the live snippet session last selected."""
        return self._last_placeholder

    def set_last_placeholder(self, placeholder: object | None) -> None:
        self._last_placeholder = placeholder

    def clear_placeholder_marker(self) -> None:
        """Detach the previous snippet session before a new one starts."""
        self._last_placeholder = None
