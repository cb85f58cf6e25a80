"""Unit tests for region arbitration (which HUD corner's text to parse).

Key nuances:
- Score = number of [A-Z0-9] chars after uppercasing
- Fixed-side profiles fall back to the other side only when theirs scores 0
- prefer_side only applies to profiles without a fixed side
- No bias: higher score wins, ties go right
"""
import sys
from pathlib import Path

import pytest

COACH_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(COACH_DIR))

from hud.game_profiles import COD, CUSTOM, FORTNITE, VALORANT
from hud.region_arbiter import choose_text, score_text


class TestScore:

    @pytest.mark.parametrize('text,score', [
        ('', 0),
        (None, 0),
        ('hp 40', 4),
        ('!!--  ..', 0),
        ('Reload!', 6),
    ])
    def test_counts_alphanumerics(self, text, score):
        assert score_text(text) == score


# ── Fixed-side profiles ───────────────────────────────────────────────────────

class TestFixedSide:

    def test_right_profile_prefers_right(self):
        assert choose_text('HP 40', 'STORM INCOMING', FORTNITE) == 'HP 40'

    def test_right_profile_falls_back_to_left(self):
        assert choose_text('...', 'STORM', FORTNITE) == 'STORM'

    @pytest.mark.parametrize('profile', [VALORANT, COD])
    def test_left_profile_prefers_left(self, profile):
        assert choose_text('AMMO 30', 'HEALTH 100', profile) == 'HEALTH 100'

    def test_left_profile_falls_back_to_nonempty_right(self):
        assert choose_text('HP 40', '', VALORANT) == 'HP 40'

    def test_fixed_side_ignores_prefer_side(self):
        assert choose_text('RIGHT', 'LEFT', VALORANT, prefer_side='right') == 'LEFT'


# ── Custom profile ────────────────────────────────────────────────────────────

class TestCustomProfile:

    def test_prefer_side_right(self):
        assert choose_text('HP 9', 'A MUCH LONGER LEFT TEXT', CUSTOM, 'right') == 'HP 9'

    def test_prefer_side_left_falls_back(self):
        assert choose_text('HP 9', '  ', CUSTOM, 'left') == 'HP 9'

    def test_higher_score_wins_without_preference(self):
        assert choose_text('HP', 'HEALTH 100', CUSTOM) == 'HEALTH 100'

    def test_tie_goes_right(self):
        assert choose_text('ABCD', 'WXYZ', CUSTOM) == 'ABCD'

    def test_invalid_preference_is_ignored(self):
        assert choose_text('AB', 'WXYZ', CUSTOM, prefer_side='up') == 'WXYZ'
