"""Game profiles: which HUD corner to trust and which tip bank to use.

A profile is one of a small set of known games plus 'custom'. Known games
carry a fixed HUD-side bias (learned from where each game draws health and
ammo). Custom games get their side preference from the settings lookup
service, if it has one.
"""

FORTNITE = 'fortnite'
VALORANT = 'valorant'
COD = 'cod'
CUSTOM = 'custom'

PROFILES = (FORTNITE, VALORANT, COD, CUSTOM)

PROFILE_LABELS = {
    FORTNITE: 'FORTNITE',
    COD: 'CALL OF DUTY',
    VALORANT: 'VALORANT',
}

# HUD text is most reliably read from these corners
RIGHT_HUD_PROFILES = frozenset({FORTNITE})
LEFT_HUD_PROFILES = frozenset({VALORANT, COD})

# Substring table for free-text game names, checked in order.
# Exact-match aliases are handled separately (e.g. 'fn' would match too much
# as a substring).
_NAME_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    (FORTNITE, ('fortnite',)),
    (VALORANT, ('valorant', 'valo')),
    (COD, ('call of duty', 'cod', 'warzone', 'modern warfare')),
]
_EXACT_ALIASES = {
    'fn': FORTNITE,
}


def label_for(profile: str) -> str:
    """Display label for a profile ('CUSTOM' for anything unknown)."""
    return PROFILE_LABELS.get(profile, 'CUSTOM')


def normalize_profile(raw: object) -> str:
    profile = str(raw or '').strip().lower()
    return profile if profile in PROFILES else CUSTOM


def detect_profile(game_name: str) -> str | None:
    """Map a free-text game name to a profile.

    Returns:
        A known profile id, CUSTOM for a non-blank unknown name, or None
        when the name is blank (nothing to detect).
    """
    typed = (game_name or '').strip().lower()
    if not typed:
        return None
    if typed in _EXACT_ALIASES:
        return _EXACT_ALIASES[typed]
    for profile, keywords in _NAME_KEYWORDS:
        if any(k in typed for k in keywords):
            return profile
    return CUSTOM


def fixed_side(profile: str) -> str | None:
    """HUD side a known profile always prefers, or None for custom games."""
    if profile in RIGHT_HUD_PROFILES:
        return 'right'
    if profile in LEFT_HUD_PROFILES:
        return 'left'
    return None
