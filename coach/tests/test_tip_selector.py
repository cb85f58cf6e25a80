"""Unit tests for tip banks and priority-based tip selection.

Key nuances:
- Priority: critical > low > reload > hazard_zone > eliminated > victory
- hazard_zone is skipped for banks without hazard-zone tips
- With no signal, a general tip is returned with probability general_chance
- Tip text is drawn from the injected RNG, never the OCR text
"""
import random
import sys
from pathlib import Path

import pytest

COACH_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(COACH_DIR))

from hud.game_profiles import COD, CUSTOM, FORTNITE, VALORANT
from hud.signal_extractor import HudSignals, extract_signals
from hud.tip_bank import (
    CATEGORIES, FORTNITE_BANK, GENERIC_SHOOTER_BANK, bank_for_profile, make_bank,
)
from hud.tip_selector import TipChoice, select_tip


class _FixedRoll(random.Random):
    """Random whose random() always returns `roll`; choice() stays seeded."""

    def __init__(self, roll, seed=0):
        super().__init__(seed)
        self.roll = roll

    def random(self):
        return self.roll


# ── Banks ─────────────────────────────────────────────────────────────────────

class TestBanks:

    def test_fortnite_profile_uses_fortnite_bank(self):
        assert bank_for_profile(FORTNITE) is FORTNITE_BANK

    @pytest.mark.parametrize('profile', [VALORANT, COD, CUSTOM, 'unknown'])
    def test_other_profiles_use_generic_bank(self, profile):
        assert bank_for_profile(profile) is GENERIC_SHOOTER_BANK

    def test_generic_bank_has_no_hazard_zone(self):
        assert FORTNITE_BANK.has('hazard_zone')
        assert not GENERIC_SHOOTER_BANK.has('hazard_zone')

    def test_banks_only_use_known_categories(self):
        for bank in (FORTNITE_BANK, GENERIC_SHOOTER_BANK):
            assert set(bank.tips) <= set(CATEGORIES)

    def test_make_bank_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            make_bank('x', {'sprint': ['Run!']})

    def test_make_bank_rejects_bad_chance(self):
        with pytest.raises(ValueError):
            make_bank('x', {'general': ['Hi']}, general_chance=1.5)

    def test_banks_are_immutable(self):
        with pytest.raises(TypeError):
            FORTNITE_BANK.tips['reload'] = ('nope',)


# ── Priority ─────────────────────────────────────────────────────────────────

class TestPriority:

    def test_critical_beats_reload(self):
        choice = select_tip(extract_signals('HEALTH: 18 RELOAD'), FORTNITE_BANK,
                            random.Random(1))
        assert choice.category == 'critical_health'
        assert choice.text in FORTNITE_BANK.candidates('critical_health')

    @pytest.mark.parametrize('signals,expected', [
        (HudSignals(health=40, low_health=True, reload=True), 'low_health'),
        (HudSignals(reload=True, hazard_zone=True, eliminated=True), 'reload'),
        (HudSignals(hazard_zone=True, eliminated=True, victory=True), 'hazard_zone'),
        (HudSignals(eliminated=True, victory=True), 'eliminated'),
        (HudSignals(victory=True), 'victory'),
    ])
    def test_priority_order(self, signals, expected):
        assert select_tip(signals, FORTNITE_BANK, random.Random(0)).category == expected

    def test_hazard_zone_skipped_without_bank_support(self):
        signals = HudSignals(hazard_zone=True, victory=True)
        choice = select_tip(signals, GENERIC_SHOOTER_BANK, random.Random(0))
        assert choice.category == 'victory'

    def test_hazard_only_on_generic_bank_may_yield_nothing(self):
        signals = HudSignals(hazard_zone=True)
        assert select_tip(signals, GENERIC_SHOOTER_BANK, _FixedRoll(0.99)) is None


# ── General fallback ─────────────────────────────────────────────────────────

class TestGeneralFallback:

    def test_roll_below_chance_gives_general_tip(self):
        choice = select_tip(HudSignals(), FORTNITE_BANK, _FixedRoll(0.05))
        assert choice.category == 'general'
        assert choice.text in FORTNITE_BANK.candidates('general')

    def test_roll_above_chance_gives_nothing(self):
        assert select_tip(HudSignals(), FORTNITE_BANK, _FixedRoll(0.12)) is None

    def test_chance_is_per_bank(self):
        chatty = make_bank('chatty', {'general': ['Stay sharp.']}, general_chance=1.0)
        assert select_tip(HudSignals(), chatty, _FixedRoll(0.99)) == \
            TipChoice('general', 'Stay sharp.')

    def test_rate_is_roughly_general_chance(self):
        rng = random.Random(1234)
        hits = sum(select_tip(HudSignals(), FORTNITE_BANK, rng) is not None
                   for _ in range(5000))
        assert 0.09 < hits / 5000 < 0.15


# ── Randomness ───────────────────────────────────────────────────────────────

class TestRandomText:

    def test_same_seed_same_text(self):
        s = HudSignals(reload=True)
        a = select_tip(s, FORTNITE_BANK, random.Random(42))
        b = select_tip(s, FORTNITE_BANK, random.Random(42))
        assert a == b

    def test_all_candidates_reachable(self):
        rng = random.Random(3)
        seen = {select_tip(HudSignals(reload=True), FORTNITE_BANK, rng).text
                for _ in range(200)}
        assert seen == set(FORTNITE_BANK.candidates('reload'))

    def test_never_returns_ocr_text(self):
        choice = select_tip(extract_signals('RELOAD'), FORTNITE_BANK, random.Random(0))
        assert choice.text != 'RELOAD'
