"""
HUD Coach control API (FastAPI)

The overlay page talks to the running coach through these endpoints: start
and stop coaching, simulate a tip, pick the game mode, and manage the tip
history. /status is polled by the overlay to render the current tip.

Built by coach_engine.py; create_app() takes an already-wired controller so
tests can drive it with fakes.
"""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from hud.coach_controller import CoachController
from hud.game_profiles import PROFILES


# ─── Request Models ───

class ModeRequest(BaseModel):
    mode: str


class CustomGameRequest(BaseModel):
    name: str


# ─── App ───

def create_app(controller: CoachController) -> FastAPI:
    app = FastAPI(title='HUD Coach')
    pipeline = controller.pipeline
    output = pipeline.output

    @app.get('/health')
    async def health():
        return {
            'status': 'ok',
            'coaching': controller.coaching,
            'frames': controller.frames.frame_count,
        }

    @app.get('/status')
    async def status():
        return {
            **output.display.snapshot(),
            **pipeline.mode_snapshot(),
            'coaching': controller.coaching,
        }

    @app.post('/coaching/start')
    def start_coaching():
        controller.start_coaching()
        return {'coaching': True}

    @app.post('/coaching/stop')
    def stop_coaching():
        controller.stop_coaching()
        return {'coaching': False}

    # Sync handlers run in the threadpool; OCR may take a while
    @app.post('/simulate')
    def simulate():
        outcome = controller.simulate()
        return {'outcome': outcome, 'current_tip': output.display.current_tip}

    @app.post('/mode')
    def set_mode(request: ModeRequest):
        if request.mode not in PROFILES:
            raise HTTPException(400, f'Unknown mode: {request.mode}. Available: {list(PROFILES)}')
        profile = pipeline.set_game_mode(request.mode)
        return {'game_mode': profile}

    @app.post('/custom-game')
    def set_custom_game(request: CustomGameRequest):
        profile = pipeline.set_custom_game(request.name)
        return {'game_mode': pipeline.active_profile, 'detected': profile}

    @app.get('/tips')
    def tips():
        return {'tips': output.log.entries()}

    @app.delete('/tips/{index}')
    def delete_tip(index: int):
        try:
            removed = output.log.remove(index)
        except IndexError:
            raise HTTPException(404, f'No tip at position {index}')
        return {'removed': removed, 'tips': output.log.entries()}

    @app.delete('/tips')
    def reset_tips():
        output.reset_history()
        return {'tips': []}

    return app
