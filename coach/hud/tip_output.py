"""Output sinks for emitted tips.

An emitted tip goes to three places:

  CoachDisplay  current tip + status lines, read by the control API /status
  TipLog        append-only history persisted as JSON; entries can be
                removed by position or cleared
  SpeechClient  POST to the TTS service, which interrupts any tip still
                being spoken and plays the new one

Sinks are pure side effects. A failing sink is logged and never feeds back
into the engine state.
"""

import json
import logging
import os
import threading
from pathlib import Path

import requests


logger = logging.getLogger(__name__)

NO_TIP_TEXT = 'No tip yet.'
DEFAULT_SPEECH_RATE = 1.05


class CoachDisplay:
    """Thread-safe holder for what the overlay currently shows."""

    def __init__(self):
        self._lock = threading.Lock()
        self.status = 'Status: Not running'
        self.capture_status = 'Waiting for video stream...'
        self.current_tip = NO_TIP_TEXT

    def set_status(self, text: str) -> None:
        with self._lock:
            self.status = text

    def set_capture_status(self, text: str) -> None:
        with self._lock:
            self.capture_status = text

    def set_current_tip(self, text: str) -> None:
        with self._lock:
            self.current_tip = text

    def snapshot(self) -> dict:
        with self._lock:
            return {
                'status': self.status,
                'capture_status': self.capture_status,
                'current_tip': self.current_tip,
            }


class TipLog:
    """Tip history persisted to a JSON list on disk.

    A missing or unreadable file starts an empty history. path=None keeps the
    history in memory only.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._entries: list[str] = self._load()

    def _load(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return []
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning('Tip log %s unreadable, starting empty: %s', self.path, e)
            return []
        if not isinstance(data, list):
            return []
        return [str(t) for t in data]

    def _save(self) -> None:
        if self.path is None:
            return
        os.makedirs(self.path.parent, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(self._entries, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def entries(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def append(self, text: str) -> None:
        with self._lock:
            self._entries.append(text)
            self._save()

    def remove(self, index: int) -> str:
        """Delete the entry at `index`. Raises IndexError if out of range."""
        with self._lock:
            if not 0 <= index < len(self._entries):
                raise IndexError(f'No tip at position {index}')
            removed = self._entries.pop(index)
            self._save()
            return removed

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._save()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SpeechClient:
    """Fire-and-forget client for the TTS service's /speak endpoint.

    Args:
        base_url: TTS service root, e.g. http://127.0.0.1:5123
        voice: Kokoro voice id.
        speed: Speech rate multiplier.
        timeout_s: Request timeout; synthesis of one tip takes well under it.
    """

    def __init__(self, base_url: str, voice: str = 'af_heart',
                 speed: float = DEFAULT_SPEECH_RATE, timeout_s: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.voice = voice
        self.speed = speed
        self.timeout_s = timeout_s

    def speak(self, text: str) -> None:
        threading.Thread(target=self._post, args=(text,), daemon=True).start()

    def _post(self, text: str) -> None:
        try:
            resp = requests.post(
                f'{self.base_url}/speak',
                json={'text': text, 'voice': self.voice, 'speed': self.speed},
                timeout=self.timeout_s,
            )
            if not resp.ok:
                logger.warning('TTS /speak answered %s', resp.status_code)
        except requests.RequestException as e:
            logger.warning('TTS request failed: %s', e)


class TipOutput:
    """Fan an emitted tip out to display, log and (optionally) speech."""

    def __init__(self, display: CoachDisplay, log: TipLog,
                 speech: SpeechClient | None = None):
        self.display = display
        self.log = log
        self.speech = speech

    def emit(self, text: str) -> None:
        self.display.set_current_tip(text)
        try:
            self.log.append(text)
        except OSError as e:
            logger.warning('Could not write tip log %s: %s', self.log.path, e)
        if self.speech is not None:
            try:
                self.speech.speak(text)
            except RuntimeError as e:
                # Thread start failure
                logger.warning('Could not start speech request: %s', e)

    def reset_history(self) -> None:
        self.log.clear()
        self.display.set_current_tip(NO_TIP_TEXT)
