"""Cooldown / dedup state machine that gates tip emission.

States: idle -> running -> idle. Only one pipeline run may be in flight; a
trigger that arrives while running is dropped, not queued, so slow OCR can
never build up a backlog.

Emission rules for a selected tip:
- force (manual runs, system notices) skips both checks below.
- Category repeat: a tip whose category equals the last emitted category is
  suppressed. A persisting condition (low HP for ten polls) yields one tip,
  not ten.
- Cooldown: nothing is emitted until cooldown_s has passed since the last
  emission.
On emission, last_emission_at and last_category update; on suppression
neither does.

Automatic runs also skip unchanged captures: if the recognized text equals
the last seen text, the run stops before signal extraction.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from .game_profiles import FORTNITE
from .tip_selector import TipChoice


DEFAULT_COOLDOWN_S = 3.5

# Shorter recognized text is treated as noise and never remembered
MIN_TEXT_LEN = 3


@dataclass
class EngineState:
    """Mutable engine state. One instance per pipeline, never shared."""
    last_emission_at: float | None = None   # monotonic seconds
    last_category: str | None = None
    last_raw_text: str = ''
    active_profile: str = FORTNITE
    busy: bool = False


class DispatchThrottle:
    """Owns every read and write of an EngineState's dispatch fields.

    Args:
        state: The engine state to mutate.
        cooldown_s: Minimum seconds between two non-forced emissions.
        clock: Monotonic time source (seconds). Injected for tests.
    """

    def __init__(self, state: EngineState, cooldown_s: float = DEFAULT_COOLDOWN_S,
                 clock: Callable[[], float] = time.monotonic):
        self.state = state
        self.cooldown_s = cooldown_s
        self._clock = clock
        self._guard = threading.Lock()

    # ------------------------------------------------------------------
    # Single-flight guard
    # ------------------------------------------------------------------

    def try_begin(self) -> bool:
        """Claim the run slot. Returns False (silently) if already busy."""
        with self._guard:
            if self.state.busy:
                return False
            self.state.busy = True
            return True

    def finish(self) -> None:
        with self._guard:
            self.state.busy = False

    @contextmanager
    def running(self) -> Iterator[bool]:
        """Context manager form of try_begin/finish.

        Yields whether the slot was claimed; the slot is always released on
        exit if it was.
        """
        claimed = self.try_begin()
        try:
            yield claimed
        finally:
            if claimed:
                self.finish()

    # ------------------------------------------------------------------
    # Capture dedup
    # ------------------------------------------------------------------

    def is_repeat_capture(self, text: str, manual: bool) -> bool:
        return not manual and text == self.state.last_raw_text

    def remember_text(self, text: str) -> None:
        if len(text) >= MIN_TEXT_LEN:
            self.state.last_raw_text = text

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def cooldown_active(self) -> bool:
        last = self.state.last_emission_at
        if last is None:
            return False
        return self._clock() - last < self.cooldown_s

    def offer(self, choice: TipChoice, force: bool = False) -> bool:
        """Decide whether a selected tip is emitted. Updates state on emit."""
        if not force:
            if choice.category == self.state.last_category:
                return False
            if self.cooldown_active():
                return False
        self.state.last_emission_at = self._clock()
        self.state.last_category = choice.category
        return True

    def offer_notice(self, force: bool = True) -> bool:
        """Gate a system notice (mode changes, errors). Category is untouched."""
        if not force and self.cooldown_active():
            return False
        self.state.last_emission_at = self._clock()
        return True
