"""Turn recognized HUD text into discrete gameplay signals.

The detectors are keyword / number heuristics, not a classifier. They are
tuned for noisy Tesseract output of shooter HUDs:

- Health: the first labelled number ("HP 45", "HEALTH: 80", "45 HP",
  "80 HEALTH") whose value is within [0, MAX_HEALTH]. If no labelled number
  fits, the first standalone 1-3 digit token in range is used instead.
- Low / critical health: health at or below LOW_HEALTH / CRITICAL_HEALTH.
  Since CRITICAL_HEALTH <= LOW_HEALTH, critical always implies low.
- reload, hazard_zone, eliminated, victory: plain substring tests against
  fixed keyword sets. Flags are independent; the tip selector decides which
  one matters most.

Matching is case-insensitive and whitespace runs are collapsed first.
"""

import re
from dataclasses import dataclass, asdict


# Upper bound for a plausible HUD health/shield number. Larger values are
# usually ammo counts or timers misread as health.
MAX_HEALTH = 300
LOW_HEALTH = 50
CRITICAL_HEALTH = 25

# Labelled health patterns, tried in order. NN is a 1-3 digit run that is
# not part of a longer number.
HEALTH_PATTERNS = [
    re.compile(r'HP\s*[:\-]?\s*(\d{1,3})(?!\d)'),
    re.compile(r'HEALTH\s*[:\-]?\s*(\d{1,3})(?!\d)'),
    re.compile(r'(?<!\d)(\d{1,3})\s*HP'),
    re.compile(r'(?<!\d)(\d{1,3})\s*HEALTH'),
]
_STANDALONE_NUMBER = re.compile(r'\b(\d{1,3})\b')

RELOAD_KEYWORDS = ('RELOAD', 'OUT OF AMMO', 'NO AMMO', 'AMMO')
HAZARD_ZONE_KEYWORDS = ('STORM', 'CIRCLE', 'SAFE ZONE', 'ZONE')
ELIMINATED_KEYWORDS = ('ELIMINATED', 'YOU DIED', 'DEFEAT')
VICTORY_KEYWORDS = ('VICTORY', 'WIN')

_WHITESPACE = re.compile(r'\s+')


@dataclass
class HudSignals:
    """Signals derived from one pipeline run's HUD text."""
    health: int | None = None
    low_health: bool = False
    critical_health: bool = False
    reload: bool = False
    hazard_zone: bool = False
    eliminated: bool = False
    victory: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    def any_fired(self) -> bool:
        return any(v for k, v in self.to_dict().items() if k != 'health')


def normalize_text(text: str | None) -> str:
    """Uppercase and collapse whitespace runs to single spaces."""
    return _WHITESPACE.sub(' ', (text or '').upper()).strip()


def _first_in_range(pattern: re.Pattern, text: str, max_health: int) -> int | None:
    for m in pattern.finditer(text):
        value = int(m.group(1))
        if 0 <= value <= max_health:
            return value
    return None


def health_from_text(text: str | None, max_health: int = MAX_HEALTH) -> int | None:
    """Extract a health value from HUD text, or None if nothing plausible."""
    t = normalize_text(text)
    for pattern in HEALTH_PATTERNS:
        value = _first_in_range(pattern, t, max_health)
        if value is not None:
            return value
    return _first_in_range(_STANDALONE_NUMBER, t, max_health)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def extract_signals(text: str | None,
                    low_health: int = LOW_HEALTH,
                    critical_health: int = CRITICAL_HEALTH,
                    max_health: int = MAX_HEALTH) -> HudSignals:
    """Parse HUD text into a HudSignals set.

    Args:
        text: Raw or normalized OCR text.
        low_health: Health at or below this counts as low.
        critical_health: Health at or below this counts as critical.
                         Must not exceed low_health.
        max_health: Numbers above this are never read as health.
    """
    if critical_health > low_health:
        raise ValueError(
            f'critical_health ({critical_health}) must not exceed low_health ({low_health})')

    t = normalize_text(text)
    health = health_from_text(t, max_health)

    return HudSignals(
        health=health,
        low_health=health is not None and health <= low_health,
        critical_health=health is not None and health <= critical_health,
        reload=_contains_any(t, RELOAD_KEYWORDS),
        hazard_zone=_contains_any(t, HAZARD_ZONE_KEYWORDS),
        eliminated=_contains_any(t, ELIMINATED_KEYWORDS),
        victory=_contains_any(t, VICTORY_KEYWORDS),
    )
