"""Client for the game-settings lookup service.

Unknown (custom) games have no built-in HUD bias. The settings service
takes a free-text game name and may answer with crop geometry and a HUD
side preference:

    GET {base_url}/api/game-settings?name=<game>
    -> {"game": "...", "preferSide": "left", "keepW": 0.5, "keepH": 0.45}

Every field is optional. Missing or malformed fields are ignored, never an
error. keepWidthFraction / keepHeightFraction are accepted as aliases.

Lookups are debounced: typing a game name fires one request 500 ms after the
last keystroke instead of one request per character.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable

import requests

from .errors import LookupFailure


logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 0.5
DEFAULT_TIMEOUT_S = 3.0


@dataclass
class GameSettings:
    keep_w: float | None = None
    keep_h: float | None = None
    prefer_side: str | None = None


def _fraction(value: object) -> float | None:
    # bool is an int subclass; true/false are not fractions
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not 0.0 <= float(value) <= 1.0:
        return None
    return float(value)


def parse_settings(payload: object) -> GameSettings:
    """Build GameSettings from a decoded JSON response, dropping bad fields."""
    if not isinstance(payload, dict):
        return GameSettings()

    keep_w = _fraction(payload.get('keepW', payload.get('keepWidthFraction')))
    keep_h = _fraction(payload.get('keepH', payload.get('keepHeightFraction')))
    side = payload.get('preferSide')
    prefer_side = side if side in ('left', 'right') else None
    return GameSettings(keep_w=keep_w, keep_h=keep_h, prefer_side=prefer_side)


class SettingsLookupClient:
    """Blocking HTTP client for the settings service.

    Args:
        base_url: Service root, e.g. http://localhost:3000
        timeout_s: Per-request timeout.
    """

    def __init__(self, base_url: str, timeout_s: float = DEFAULT_TIMEOUT_S):
        self.base_url = base_url.rstrip('/')
        self.timeout_s = timeout_s

    def lookup(self, game_name: str) -> GameSettings:
        """Query settings for a game.

        Raises:
            LookupFailure: service unreachable (reachable=False) or answered
                           with a non-OK status / non-JSON body (reachable=True).
        """
        url = f'{self.base_url}/api/game-settings'
        try:
            resp = requests.get(url, params={'name': game_name},
                                headers={'Cache-Control': 'no-store'},
                                timeout=self.timeout_s)
        except requests.RequestException as e:
            raise LookupFailure(f'Could not reach {url}: {e}', reachable=False) from e

        if not resp.ok:
            raise LookupFailure(f'{url} answered {resp.status_code}', reachable=True)
        try:
            payload = resp.json()
        except ValueError as e:
            raise LookupFailure(f'{url} returned invalid JSON', reachable=True) from e
        return parse_settings(payload)


class DebouncedLookup:
    """Run a lookup once the game name has stopped changing.

    Each submit() cancels the pending timer and starts a new one; only the
    last name submitted within the debounce window is looked up. Results
    (or the LookupFailure) are delivered on the timer thread.

    Args:
        client: Object with lookup(name) -> GameSettings.
        on_result: Called with (name, GameSettings) on success.
        on_error: Called with (name, LookupFailure) on failure.
        delay_s: Debounce window in seconds.
    """

    def __init__(self, client: SettingsLookupClient,
                 on_result: Callable[[str, GameSettings], None],
                 on_error: Callable[[str, LookupFailure], None],
                 delay_s: float = DEFAULT_DEBOUNCE_S):
        self._client = client
        self._on_result = on_result
        self._on_error = on_error
        self.delay_s = delay_s
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def submit(self, game_name: str) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay_s, self._run, args=(game_name,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _run(self, game_name: str) -> None:
        try:
            settings = self._client.lookup(game_name)
        except LookupFailure as e:
            logger.warning('Settings lookup failed for %r: %s', game_name, e)
            self._on_error(game_name, e)
            return
        self._on_result(game_name, settings)
