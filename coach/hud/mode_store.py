"""Persist the player's game-mode selection between runs."""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path

from .game_profiles import FORTNITE, normalize_profile


logger = logging.getLogger(__name__)


@dataclass
class ModeSelection:
    game_mode: str = FORTNITE
    custom_game: str = ''
    custom_prefer_side: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


class ModeStore:
    """JSON-file store for ModeSelection. path=None disables persistence."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None

    def load(self) -> ModeSelection:
        if self.path is None or not self.path.exists():
            return ModeSelection()
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning('Mode file %s unreadable, using defaults: %s', self.path, e)
            return ModeSelection()
        if not isinstance(data, dict):
            return ModeSelection()

        side = data.get('custom_prefer_side')
        return ModeSelection(
            game_mode=normalize_profile(data.get('game_mode', FORTNITE)),
            custom_game=str(data.get('custom_game') or ''),
            custom_prefer_side=side if side in ('left', 'right') else None,
        )

    def save(self, selection: ModeSelection) -> None:
        if self.path is None:
            return
        os.makedirs(self.path.parent, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(selection.to_dict(), f, indent=2)
        os.replace(tmp, self.path)
