"""Pytest fixtures for HUD coach tests."""
import random
import sys
from pathlib import Path

import numpy as np
import pytest

COACH_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(COACH_DIR))
sys.path.insert(0, str(COACH_DIR.parent / 'settings_api'))

from hud.coach_pipeline import CoachPipeline, CoachSettings
from hud.tip_output import CoachDisplay, TipLog, TipOutput


class ScriptedReader:
    """Recognizer fake: returns (right, left) text pairs in order.

    The pipeline OCRs the right region first, then the left one. Once the
    script runs out, the last pair repeats.
    """

    def __init__(self, pairs=None, ready=True, error=None):
        self.pairs = list(pairs or [('', '')])
        self.ready = ready
        self.error = error
        self.calls = 0
        self.images = []

    def is_ready(self):
        return self.ready

    def recognize(self, image):
        if self.error is not None:
            raise self.error
        self.images.append(image)
        pair = self.pairs[min(self.calls // 2, len(self.pairs) - 1)]
        text = pair[self.calls % 2]
        self.calls += 1
        return text


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def frame():
    """A 200x320 mid-gray BGR frame (100x160 after the default downscale)."""
    return np.full((200, 320, 3), 90, dtype=np.uint8)


@pytest.fixture
def output():
    return TipOutput(CoachDisplay(), TipLog(None), speech=None)


@pytest.fixture
def make_pipeline(output, clock):
    """Factory: make_pipeline(pairs, **pipeline_kwargs) -> CoachPipeline."""
    def _make(pairs=None, reader=None, seed=7, settings=None, **kwargs):
        reader = reader or ScriptedReader(pairs)
        return CoachPipeline(
            reader, output,
            settings=settings or CoachSettings(),
            rng=random.Random(seed),
            clock=clock,
            **kwargs,
        )
    return _make


@pytest.fixture
def scripted_reader():
    return ScriptedReader
