"""Unit tests for output sinks (display, tip log, speech) and the mode store."""
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import requests

COACH_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(COACH_DIR))

from hud.game_profiles import CUSTOM, FORTNITE
from hud.mode_store import ModeSelection, ModeStore
from hud.tip_output import (
    NO_TIP_TEXT, CoachDisplay, SpeechClient, TipLog, TipOutput,
)


# ── Tip log ──────────────────────────────────────────────────────────────────

class TestTipLog:

    def test_in_memory(self):
        log = TipLog(None)
        log.append('a')
        log.append('b')
        assert log.entries() == ['a', 'b']
        assert len(log) == 2

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / 'tips.json'
        log = TipLog(path)
        log.append('Reload behind cover, not in the open.')
        log.append('Storm’s moving—rotate now.')
        assert TipLog(path).entries() == log.entries()
        assert json.loads(path.read_text(encoding='utf-8'))[1] == 'Storm’s moving—rotate now.'

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / 'nested' / 'tips.json'
        TipLog(path).append('x')
        assert path.exists()

    def test_remove_by_position(self, tmp_path):
        log = TipLog(tmp_path / 'tips.json')
        for t in ('a', 'b', 'c'):
            log.append(t)
        assert log.remove(1) == 'b'
        assert TipLog(tmp_path / 'tips.json').entries() == ['a', 'c']

    @pytest.mark.parametrize('index', [-1, 3, 99])
    def test_remove_out_of_range(self, index):
        log = TipLog(None)
        for t in ('a', 'b', 'c'):
            log.append(t)
        with pytest.raises(IndexError):
            log.remove(index)
        assert len(log) == 3

    def test_clear(self, tmp_path):
        log = TipLog(tmp_path / 'tips.json')
        log.append('a')
        log.clear()
        assert TipLog(tmp_path / 'tips.json').entries() == []

    @pytest.mark.parametrize('content', ['not json', '{"a": 1}', ''])
    def test_unreadable_file_starts_empty(self, tmp_path, content):
        path = tmp_path / 'tips.json'
        path.write_text(content)
        assert TipLog(path).entries() == []


# ── Fan-out ──────────────────────────────────────────────────────────────────

class _FakeSpeech:
    def __init__(self):
        self.spoken = []

    def speak(self, text):
        self.spoken.append(text)


class TestTipOutput:

    def test_emit_fans_out(self):
        speech = _FakeSpeech()
        out = TipOutput(CoachDisplay(), TipLog(None), speech)
        out.emit('Heal up.')
        assert out.display.current_tip == 'Heal up.'
        assert out.log.entries() == ['Heal up.']
        assert speech.spoken == ['Heal up.']

    def test_reset_history(self):
        out = TipOutput(CoachDisplay(), TipLog(None))
        out.emit('Heal up.')
        out.reset_history()
        assert out.display.current_tip == NO_TIP_TEXT
        assert len(out.log) == 0

    def test_failing_sinks_are_contained(self, tmp_path):
        class _BrokenSpeech:
            def speak(self, text):
                raise RuntimeError("can't start new thread")

        log = TipLog(None)
        log.path = tmp_path   # a directory; saving fails with OSError
        out = TipOutput(CoachDisplay(), log, _BrokenSpeech())
        out.emit('Heal up.')
        assert out.display.current_tip == 'Heal up.'
        assert log.entries() == ['Heal up.']

    def test_display_defaults(self):
        snap = CoachDisplay().snapshot()
        assert snap == {
            'status': 'Status: Not running',
            'capture_status': 'Waiting for video stream...',
            'current_tip': NO_TIP_TEXT,
        }


class TestSpeechClient:

    def test_posts_to_speak(self):
        client = SpeechClient('http://127.0.0.1:5123/', voice='af_bella', speed=1.05)
        with patch('hud.tip_output.requests.post') as post:
            post.return_value.ok = True
            client._post('Reload now.')
        post.assert_called_once_with(
            'http://127.0.0.1:5123/speak',
            json={'text': 'Reload now.', 'voice': 'af_bella', 'speed': 1.05},
            timeout=10.0,
        )

    def test_failure_is_swallowed(self):
        client = SpeechClient('http://127.0.0.1:5123')
        with patch('hud.tip_output.requests.post',
                   side_effect=requests.ConnectionError('refused')):
            client._post('Reload now.')   # must not raise


# ── Mode store ───────────────────────────────────────────────────────────────

class TestModeStore:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert ModeStore(tmp_path / 'mode.json').load() == ModeSelection()

    def test_round_trip(self, tmp_path):
        store = ModeStore(tmp_path / 'mode.json')
        store.save(ModeSelection(CUSTOM, 'Deep Rock', 'left'))
        assert store.load() == ModeSelection(CUSTOM, 'Deep Rock', 'left')

    def test_bad_fields_normalized(self, tmp_path):
        path = tmp_path / 'mode.json'
        path.write_text('{"game_mode": "TETRIS", "custom_game": null, '
                        '"custom_prefer_side": "up"}')
        assert ModeStore(path).load() == ModeSelection(CUSTOM, '', None)

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'mode.json'
        path.write_text('{oops')
        assert ModeStore(path).load().game_mode == FORTNITE

    def test_save_replaces_file_atomically(self, tmp_path):
        path = tmp_path / 'mode.json'
        store = ModeStore(path)
        store.save(ModeSelection(CUSTOM, 'Deep Rock', 'left'))
        store.save(ModeSelection(FORTNITE))
        assert store.load() == ModeSelection(FORTNITE)
        assert sorted(p.name for p in tmp_path.iterdir()) == ['mode.json']

    def test_no_path_is_noop(self):
        store = ModeStore(None)
        store.save(ModeSelection(CUSTOM))
        assert store.load() == ModeSelection()
