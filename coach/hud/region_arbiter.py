"""Pick which of the two recognized HUD texts to trust.

OCR reliability differs by HUD layout. Known profiles carry a fixed side
bias; custom games may get one from the settings service. In both cases a
blank (score 0) preferred side falls back to the other side, so a garbled
read never hides a usable one. With no bias at all, the text with more
alphanumerics wins, ties going to the right.
"""

import re

from .game_profiles import fixed_side


_ALNUM = re.compile(r'[A-Z0-9]')


def score_text(text: str | None) -> int:
    """Count of alphanumeric characters after uppercasing."""
    return len(_ALNUM.findall((text or '').upper()))


def _prefer(side: str, right_text: str, left_text: str,
            right_score: int, left_score: int) -> str:
    if side == 'right':
        return right_text if right_score > 0 else left_text
    return left_text if left_score > 0 else right_text


def choose_text(right_text: str, left_text: str, profile: str,
                prefer_side: str | None = None) -> str:
    """Return the HUD text to parse for this run.

    Args:
        right_text: OCR text from the bottom-right region.
        left_text: OCR text from the bottom-left region.
        profile: Active game profile id.
        prefer_side: 'left' / 'right' from the settings service; only
                     consulted for profiles without a fixed side.
    """
    right_text = right_text or ''
    left_text = left_text or ''
    r_score = score_text(right_text)
    l_score = score_text(left_text)

    side = fixed_side(profile)
    if side is None and prefer_side in ('left', 'right'):
        side = prefer_side
    if side is not None:
        return _prefer(side, right_text, left_text, r_score, l_score)

    return right_text if r_score >= l_score else left_text
