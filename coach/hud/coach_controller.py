"""Coaching on/off switch and the periodic capture ticker.

While coaching is on, a daemon thread calls the pipeline every interval with
the latest frame. Manual "simulate" requests call the same pipeline from the
request thread; the pipeline's single-flight guard keeps the two from
overlapping.
"""

import logging
import sys
import threading
import time

from .coach_pipeline import EMITTED, CoachPipeline
from .frame_source import LatestFrame


logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 2.0
STATUS_ON = 'Status: Coaching ON'
STATUS_OFF = 'Status: Not running'


class CoachController:
    """Owns the ticker thread and the coaching flag.

    Args:
        pipeline: The pipeline to drive.
        frames: Latest-frame holder fed by the frame source.
        interval_s: Seconds between automatic runs.
    """

    def __init__(self, pipeline: CoachPipeline, frames: LatestFrame,
                 interval_s: float = DEFAULT_INTERVAL_S):
        self.pipeline = pipeline
        self.frames = frames
        self.interval_s = interval_s
        self._coaching = False
        self._thread: threading.Thread | None = None
        # Each ticker thread gets its own stop event
        self._stop: threading.Event | None = None
        self._lock = threading.Lock()
        self._start_time = time.time()
        self._last_logged_run = 0
        pipeline.output.display.set_status(STATUS_OFF)

    @property
    def coaching(self) -> bool:
        return self._coaching

    def start_coaching(self) -> None:
        with self._lock:
            self._coaching = True
            self.pipeline.output.display.set_status(STATUS_ON)
            if self._thread is not None and self._thread.is_alive() \
                    and not self._stop.is_set():
                return
            self._stop = threading.Event()
            self._thread = threading.Thread(target=self._tick_loop, args=(self._stop,),
                                            name='coach-ticker', daemon=True)
            self._thread.start()

    def stop_coaching(self) -> None:
        with self._lock:
            self._coaching = False
            self.pipeline.output.display.set_status(STATUS_OFF)
            if self._stop is not None:
                self._stop.set()
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval_s + 1.0)

    def simulate(self) -> str:
        """Manual run: forced emission, notices on failure."""
        return self.pipeline.run(self.frames.get(), manual=True)

    def tick(self) -> str | None:
        """One automatic run; None if coaching is off."""
        if not self._coaching:
            return None
        outcome = self.pipeline.run(self.frames.get(), manual=False)
        runs = self.pipeline.run_count
        if runs != self._last_logged_run and (outcome == EMITTED or runs % 20 == 0):
            self._last_logged_run = runs
            elapsed = time.time() - self._start_time
            print(f'[Coach] {runs} runs, {self.pipeline.emit_count} tips, '
                  f'{self.frames.frame_count} frames in {elapsed:.0f}s, '
                  f'last: {outcome}', file=sys.stderr)
        return outcome

    def _tick_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_s):
            try:
                self.tick()
            except Exception:
                logger.exception('Coaching tick failed')
