"""Pipeline driver: frame in, at most one coaching tip out.

One run:

    frame -> downscale -> crop right + left -> prep each -> OCR each
          -> arbitrate -> (auto: skip if unchanged) -> signals -> tip
          -> throttle -> emit

Runs come from the periodic ticker and from manual "simulate" requests.
Both share one single-flight guard: a run that arrives while another is in
flight is dropped. Manual runs are forced (they bypass cooldown and the
category-repeat rule) and report problems as notices; automatic runs stay
quiet.

The pipeline also owns mode selection (active profile, custom game name,
crop geometry, side preference) since those feed directly into region
arbitration and tip bank choice.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .dispatch_throttle import DEFAULT_COOLDOWN_S, MIN_TEXT_LEN, DispatchThrottle, EngineState
from .errors import LookupFailure, RecognitionFailure, RecognitionUnavailable
from .game_profiles import CUSTOM, detect_profile, label_for, normalize_profile
from .hud_regions import (
    DEFAULT_CAPTURE_SCALE, CropSettings, crop_bottom_left, crop_bottom_right,
    downscale_frame,
)
from .mode_store import ModeSelection, ModeStore
from .ocr_prep import CONTRAST_GAIN, DEFAULT_UPSCALE, prep_for_ocr
from .region_arbiter import choose_text
from .settings_lookup import DEFAULT_DEBOUNCE_S, DebouncedLookup, GameSettings, SettingsLookupClient
from .signal_extractor import (
    CRITICAL_HEALTH, LOW_HEALTH, MAX_HEALTH, extract_signals, normalize_text,
)
from .tip_bank import bank_for_profile
from .tip_output import TipOutput
from .tip_selector import select_tip


logger = logging.getLogger(__name__)

# Run outcomes
BUSY = 'busy'
NO_FRAME = 'no_frame'
FRAME_TOO_SMALL = 'frame_too_small'
RECOGNIZER_UNAVAILABLE = 'recognizer_unavailable'
RECOGNITION_FAILED = 'recognition_failed'
NO_TEXT = 'no_text'
UNCHANGED = 'unchanged'
EMITTED = 'emitted'
SUPPRESSED = 'suppressed'
NO_SIGNAL = 'no_signal'

# Smallest capture (after downscale) worth sending to OCR
MIN_FRAME_DIM = 8

NOTICE_NO_TEXT = 'No clear HUD text detected yet.'
NOTICE_NO_SIGNAL = 'No real HUD signal yet—try showing HP / Reload / Storm / Eliminated.'
NOTICE_OCR_ERROR = 'OCR error. Check logs.'
NOTICE_OCR_UNAVAILABLE = 'OCR engine not available.'
NOTICE_LOOKUP_ERROR = 'Game settings API error.'
NOTICE_LOOKUP_UNREACHABLE = 'Could not reach game settings API.'


@dataclass
class CoachSettings:
    """Tunables for one pipeline instance."""
    capture_scale: float = DEFAULT_CAPTURE_SCALE
    upscale: int = DEFAULT_UPSCALE
    contrast_gain: float = CONTRAST_GAIN
    cooldown_s: float = DEFAULT_COOLDOWN_S
    low_health: int = LOW_HEALTH
    critical_health: int = CRITICAL_HEALTH
    max_health: int = MAX_HEALTH
    lookup_debounce_s: float = DEFAULT_DEBOUNCE_S


class CoachPipeline:
    """Owns the EngineState and drives every run against it.

    Args:
        recognizer: Object with recognize(image) -> str. If it also has
                    is_ready(), a False answer skips the run.
        output: Sinks for emitted tips and notices.
        settings: Tunables; defaults match the shipped overlay.
        rng: Random source for tip choice and the general-tip roll.
        clock: Monotonic clock (seconds) for the cooldown.
        mode_store: Persists mode selection; restored on construction.
        lookup_client: Settings service client for custom games. None
                       disables lookups.
    """

    def __init__(self, recognizer, output: TipOutput,
                 settings: CoachSettings | None = None,
                 rng: random.Random | None = None,
                 clock: Callable[[], float] = time.monotonic,
                 mode_store: ModeStore | None = None,
                 lookup_client: SettingsLookupClient | None = None):
        self.recognizer = recognizer
        self.output = output
        self.settings = settings or CoachSettings()
        self.rng = rng or random.Random()
        self.state = EngineState()
        self.throttle = DispatchThrottle(self.state, self.settings.cooldown_s, clock)
        self.crop = CropSettings()
        self.prefer_side: str | None = None
        self.custom_game = ''
        self.mode_store = mode_store or ModeStore(None)

        # Guards crop/profile/side (written by the lookup timer thread)
        self._mode_lock = threading.Lock()
        # Serializes throttle decisions + sink writes across threads
        self._emit_lock = threading.Lock()

        self._lookup = None
        if lookup_client is not None:
            self._lookup = DebouncedLookup(
                lookup_client, self._on_lookup_result, self._on_lookup_error,
                delay_s=self.settings.lookup_debounce_s,
            )

        self.run_count = 0
        self.emit_count = 0
        self._restore_mode(self.mode_store.load())

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, frame: np.ndarray | None, manual: bool = False) -> str:
        """Run the full pipeline once. Returns one of the outcome constants."""
        display = self.output.display
        if frame is None:
            display.set_capture_status('Waiting for video stream...')
            return NO_FRAME

        capture = downscale_frame(frame, self.settings.capture_scale)
        h, w = capture.shape[:2]
        if w < MIN_FRAME_DIM or h < MIN_FRAME_DIM:
            display.set_capture_status('Waiting for video...')
            return FRAME_TOO_SMALL
        display.set_capture_status('Captured at ' + time.strftime('%H:%M:%S'))

        is_ready = getattr(self.recognizer, 'is_ready', None)
        if is_ready is not None and not is_ready():
            if manual:
                self.notice(NOTICE_OCR_UNAVAILABLE)
            return RECOGNIZER_UNAVAILABLE

        with self.throttle.running() as claimed:
            if not claimed:
                return BUSY
            self.run_count += 1
            return self._run_claimed(capture, manual)

    def _run_claimed(self, capture: np.ndarray, manual: bool) -> str:
        with self._mode_lock:
            keep_w, keep_h = self.crop.keep_w, self.crop.keep_h
            profile = self.state.active_profile
            prefer_side = self.prefer_side

        try:
            right_text, left_text = self._read_regions(capture, keep_w, keep_h)
        except RecognitionUnavailable:
            if manual:
                self.notice(NOTICE_OCR_UNAVAILABLE)
            return RECOGNIZER_UNAVAILABLE
        except RecognitionFailure:
            logger.exception('OCR failed')
            if manual:
                self.notice(NOTICE_OCR_ERROR)
            return RECOGNITION_FAILED
        except Exception:
            logger.exception('Unexpected error during OCR run')
            if manual:
                self.notice(NOTICE_OCR_ERROR)
            return RECOGNITION_FAILED

        text = normalize_text(choose_text(right_text, left_text, profile, prefer_side))
        if len(text) < MIN_TEXT_LEN:
            if manual:
                self.notice(NOTICE_NO_TEXT)
            return NO_TEXT

        if self.throttle.is_repeat_capture(text, manual):
            return UNCHANGED
        self.throttle.remember_text(text)

        cfg = self.settings
        signals = extract_signals(text, low_health=cfg.low_health,
                                  critical_health=cfg.critical_health,
                                  max_health=cfg.max_health)
        choice = select_tip(signals, bank_for_profile(profile), self.rng)

        if choice is None:
            if manual:
                self.notice(NOTICE_NO_SIGNAL)
            return NO_SIGNAL

        with self._emit_lock:
            if not self.throttle.offer(choice, force=manual):
                return SUPPRESSED
            self.output.emit(choice.text)
            self.emit_count += 1
        return EMITTED

    def _read_regions(self, capture: np.ndarray, keep_w: float,
                      keep_h: float) -> tuple[str, str]:
        cfg = self.settings
        right = prep_for_ocr(crop_bottom_right(capture, keep_w, keep_h),
                             cfg.upscale, cfg.contrast_gain)
        left = prep_for_ocr(crop_bottom_left(capture, keep_w, keep_h),
                            cfg.upscale, cfg.contrast_gain)
        right_text = self.recognizer.recognize(right) or ''
        left_text = self.recognizer.recognize(left) or ''
        return right_text.strip(), left_text.strip()

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def notice(self, text: str, force: bool = True) -> bool:
        """Emit a system notice (not a bank tip). Returns True if emitted."""
        with self._emit_lock:
            if not self.throttle.offer_notice(force):
                return False
            self.output.emit(text)
        return True

    # ------------------------------------------------------------------
    # Mode selection
    # ------------------------------------------------------------------

    @property
    def active_profile(self) -> str:
        return self.state.active_profile

    def set_game_mode(self, mode: str) -> str:
        """Select a profile explicitly (dropdown). Returns the applied profile."""
        profile = normalize_profile(mode)
        self._apply_profile(profile)
        self.notice(f'Game mode set to: {label_for(profile)}')
        return profile

    def set_custom_game(self, name: str) -> str | None:
        """Record a typed game name and auto-detect its profile.

        Known games switch profile immediately. Unknown names switch to the
        custom profile and schedule a debounced settings lookup. Blank names
        are stored but otherwise ignored (returns None).
        """
        with self._mode_lock:
            self.custom_game = name or ''
        profile = detect_profile(name)
        if profile is None:
            self._save_mode()
            return None

        self._apply_profile(profile)
        if profile != CUSTOM:
            self.notice(f'Auto-detected: {label_for(profile)}')
            return profile

        self.notice(f'Custom game: {name} (looking up settings…)')
        if self._lookup is not None:
            self._lookup.submit(name)
        return profile

    def _apply_profile(self, profile: str) -> None:
        with self._mode_lock:
            self.state.active_profile = profile
            self.crop.reset()
            if profile != CUSTOM:
                self.prefer_side = None
        if profile != CUSTOM and self._lookup is not None:
            self._lookup.cancel()
        self._save_mode()

    def _lookup_is_current(self, name: str) -> bool:
        # Caller holds _mode_lock
        return self.state.active_profile == CUSTOM and name == self.custom_game

    def _on_lookup_result(self, name: str, result: GameSettings) -> None:
        with self._mode_lock:
            if not self._lookup_is_current(name):
                logger.info('Dropping stale settings lookup for %r', name)
                return
            if result.keep_w is not None:
                self.crop.keep_w = result.keep_w
            if result.keep_h is not None:
                self.crop.keep_h = result.keep_h
            if result.prefer_side is not None:
                self.prefer_side = result.prefer_side
        self._save_mode()

        if result.prefer_side is not None:
            self.notice(f'Auto-configured: prefer {result.prefer_side.upper()} HUD')
        else:
            self.notice('Auto-configured (no side preference).')

    def _on_lookup_error(self, name: str, error: LookupFailure) -> None:
        with self._mode_lock:
            if not self._lookup_is_current(name):
                return
        self.notice(NOTICE_LOOKUP_ERROR if error.reachable else NOTICE_LOOKUP_UNREACHABLE)

    def mode_snapshot(self) -> dict:
        with self._mode_lock:
            return {
                'game_mode': self.state.active_profile,
                'label': label_for(self.state.active_profile),
                'custom_game': self.custom_game,
                'prefer_side': self.prefer_side,
                'keep_w': self.crop.keep_w,
                'keep_h': self.crop.keep_h,
            }

    def _save_mode(self) -> None:
        with self._mode_lock:
            selection = ModeSelection(
                game_mode=self.state.active_profile,
                custom_game=self.custom_game,
                custom_prefer_side=self.prefer_side,
            )
        try:
            self.mode_store.save(selection)
        except OSError as e:
            logger.warning('Could not save mode selection: %s', e)

    def _restore_mode(self, selection: ModeSelection) -> None:
        self.state.active_profile = selection.game_mode
        self.custom_game = selection.custom_game
        if selection.game_mode == CUSTOM:
            self.prefer_side = selection.custom_prefer_side

    def shutdown(self) -> None:
        if self._lookup is not None:
            self._lookup.cancel()
