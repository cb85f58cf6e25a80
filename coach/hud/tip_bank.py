"""Curated coaching tips, grouped per game profile and signal category.

Tips are what the player sees and hears; recognized HUD text never is.
Each bank maps a category to candidate sentences. A bank may omit a
category (the generic shooter bank has no hazard-zone tips), in which case
that signal is ignored for profiles using it.
"""

from dataclasses import dataclass, field
from types import MappingProxyType

from .game_profiles import FORTNITE


CRITICAL_HEALTH = 'critical_health'
LOW_HEALTH = 'low_health'
RELOAD = 'reload'
HAZARD_ZONE = 'hazard_zone'
ELIMINATED = 'eliminated'
VICTORY = 'victory'
GENERAL = 'general'

CATEGORIES = (CRITICAL_HEALTH, LOW_HEALTH, RELOAD, HAZARD_ZONE,
              ELIMINATED, VICTORY, GENERAL)

# Chance of a general tip on a run where no signal fired
DEFAULT_GENERAL_CHANCE = 0.12


@dataclass(frozen=True)
class TipBank:
    name: str
    tips: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    general_chance: float = DEFAULT_GENERAL_CHANCE

    def has(self, category: str) -> bool:
        return bool(self.tips.get(category))

    def candidates(self, category: str) -> tuple[str, ...]:
        return self.tips.get(category, ())


def make_bank(name: str, tips: dict[str, list[str]],
              general_chance: float = DEFAULT_GENERAL_CHANCE) -> TipBank:
    """Build an immutable bank, validating category names."""
    unknown = set(tips) - set(CATEGORIES)
    if unknown:
        raise ValueError(f'Unknown tip categories for {name}: {sorted(unknown)}')
    if not 0.0 <= general_chance <= 1.0:
        raise ValueError(f'general_chance must be within [0, 1], got {general_chance}')
    frozen = {k: tuple(v) for k, v in tips.items() if v}
    return TipBank(name=name, tips=MappingProxyType(frozen),
                   general_chance=general_chance)


FORTNITE_BANK = make_bank('fortnite', {
    LOW_HEALTH: [
        'Heal ASAP, then reposition. Don’t re-peek while weak.',
        'Play cover first—box up or use natural cover before healing.',
        'If you’re low, disengage and reset instead of forcing it.',
    ],
    CRITICAL_HEALTH: [
        'CRITICAL HP—hard cover NOW, then heal immediately.',
        'You’re one-shot. Break line-of-sight, then heal.',
    ],
    RELOAD: [
        'Reload behind cover—don’t wide peek while reloading.',
        'Weapon swap is faster than reloading. Use your inventory order.',
    ],
    HAZARD_ZONE: [
        'Check map + rotate early. Don’t get stuck running from storm.',
        'Use storm edge to reduce angles enemies can shoot from.',
    ],
    ELIMINATED: [
        'Reset: next fight, use cover longer and don’t over-peek.',
        'Think: positioning, timing, or tunnel vision—fix one thing next round.',
    ],
    VICTORY: [
        'Nice. Repeat what worked: cover + timing + smart rotates.',
        'Good game—keep your inventory order consistent for faster swaps.',
    ],
    GENERAL: [
        'Turn on Visualize Sound Effects. Huge awareness advantage.',
        'Prioritize high ground in fights. Better angles, harder to hit you.',
        'Keep moving—even while looting/healing. Don’t be a free snipe.',
        'Carry heals + mobility. Use shields when you find them.',
    ],
})

GENERIC_SHOOTER_BANK = make_bank('generic_shooter', {
    LOW_HEALTH: [
        'Low health—stop wide peeking. Heal behind cover first.',
        'Break line-of-sight, then heal. Don’t ego-challenge on low HP.',
    ],
    CRITICAL_HEALTH: [
        'CRITICAL—hard cover NOW. Reset the fight and heal.',
        'One-shot danger. Disengage and heal immediately.',
    ],
    RELOAD: [
        'Reload behind cover, not in the open.',
        'Swap weapons instead of reloading in a close fight.',
    ],
    ELIMINATED: [
        'Eliminated—review: were you exposed too long or fighting without cover?',
        'Next fight: pre-aim common angles and use cover discipline.',
    ],
    VICTORY: [
        'Nice. Keep the same good habits: cover, timing, and repositioning.',
    ],
    GENERAL: [
        'Don’t stand still—strafe and reposition between shots.',
        'Take fights with cover. Minimize how much of you is visible.',
    ],
})

BANKS = MappingProxyType({
    FORTNITE: FORTNITE_BANK,
})


def bank_for_profile(profile: str) -> TipBank:
    """Fortnite has its own bank; every other profile uses the generic one."""
    return BANKS.get(profile, GENERIC_SHOOTER_BANK)
