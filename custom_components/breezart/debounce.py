"""Per-field override window for optimistic state handling."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .const import DEBOUNCE_WINDOW
from .models import DebouncedField

if TYPE_CHECKING:
    from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)


class OverrideDebounceStore:
    """Track when each settable field was last changed locally.

    A poll result may only overwrite a field once ``window`` seconds have
    passed since the field was last set, so the device has time to apply
    the command before its own readback is trusted again.
    """

    def __init__(
        self,
        window: float = DEBOUNCE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window
        self._clock = clock
        self._last_set: dict[DebouncedField, float | None] = dict.fromkeys(
            DebouncedField
        )

    @property
    def window(self) -> float:
        """Return the override window in seconds."""
        return self._window

    def record_set(self, field: DebouncedField | str) -> None:
        """Mark ``field`` as set locally now."""
        field = DebouncedField(field)
        self._last_set[field] = self._clock()
        _LOGGER.debug("Holding %s against polls for %.1fs", field, self._window)

    def may_apply_poll(self, field: DebouncedField | str) -> bool:
        """Return True if a poll result may overwrite ``field``."""
        return self.remaining(field) <= 0

    def remaining(self, field: DebouncedField | str) -> float:
        """Return seconds left in the override window of ``field``."""
        last_set = self._last_set[DebouncedField(field)]
        if last_set is None:
            return 0.0
        return max(0.0, self._window - (self._clock() - last_set))
