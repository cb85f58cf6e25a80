"""
HUD Coach Game Settings Service (FastAPI)

Answers the coach engine's custom-game lookups with HUD crop geometry and
which corner the game draws its HUD text in.

Usage:
  python -m uvicorn settings_server:app --host 127.0.0.1 --port 3000
"""

import sys

from fastapi import FastAPI

# ─── HUD layout table ───

RIGHT_HUD_GAMES = ["fortnite", "apex", "pubg", "overwatch"]
LEFT_HUD_GAMES = [
    "valorant",
    "counter strike",
    "csgo",
    "cs2",
    "call of duty",
    "warzone",
]

DEFAULT_SIDE = "right"
KEEP_W = 0.5
KEEP_H = 0.45


def prefer_side_for(name: str) -> str:
    """Right-HUD matches win over left-HUD matches; unknown games get right."""
    name = (name or "").lower()
    side = DEFAULT_SIDE
    if any(g in name for g in LEFT_HUD_GAMES):
        side = "left"
    if any(g in name for g in RIGHT_HUD_GAMES):
        side = "right"
    return side


app = FastAPI()


# ─── Endpoints ───

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/game-settings")
async def game_settings(name: str = ""):
    game = name.lower()
    side = prefer_side_for(game)
    print(f"[Settings] {game or 'unknown'!r} -> prefer {side}", file=sys.stderr, flush=True)
    return {
        "game": game or "unknown",
        "preferSide": side,
        "keepW": KEEP_W,
        "keepH": KEEP_H,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=3000)
