"""Map a HudSignals set to at most one coaching tip.

Priority (first match wins):

    critical_health > low_health > reload > hazard_zone > eliminated > victory

hazard_zone only counts when the active bank has hazard-zone tips. When no
signal fires, a general tip is returned with the bank's general_chance so
quiet stretches of play are not completely silent.

The random source is injected; pass random.Random(seed) in tests to pin
both the general-tip roll and the sentence choice.
"""

import random
from dataclasses import dataclass

from .signal_extractor import HudSignals
from .tip_bank import (
    CRITICAL_HEALTH, ELIMINATED, GENERAL, HAZARD_ZONE, LOW_HEALTH, RELOAD,
    VICTORY, TipBank,
)


@dataclass(frozen=True)
class TipChoice:
    category: str
    text: str


def _fired_categories(signals: HudSignals, bank: TipBank) -> list[str]:
    ordered = [
        (CRITICAL_HEALTH, signals.critical_health),
        (LOW_HEALTH, signals.low_health),
        (RELOAD, signals.reload),
        (HAZARD_ZONE, signals.hazard_zone),
        (ELIMINATED, signals.eliminated),
        (VICTORY, signals.victory),
    ]
    return [cat for cat, fired in ordered if fired and bank.has(cat)]


def pick_tip(candidates: tuple[str, ...], rng: random.Random) -> str:
    return rng.choice(candidates)


def select_tip(signals: HudSignals, bank: TipBank,
               rng: random.Random | None = None) -> TipChoice | None:
    """Return the tip for the highest-priority signal, a rare general tip,
    or None."""
    rng = rng or random.Random()

    fired = _fired_categories(signals, bank)
    if fired:
        category = fired[0]
        return TipChoice(category, pick_tip(bank.candidates(category), rng))

    if bank.has(GENERAL) and rng.random() < bank.general_chance:
        return TipChoice(GENERAL, pick_tip(bank.candidates(GENERAL), rng))
    return None
