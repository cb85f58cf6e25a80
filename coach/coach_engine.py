"""HUD Coach Engine: main entry point.

Reads raw video frames from stdin (piped from ffmpeg), periodically OCRs the
two bottom HUD corners, and turns what it reads into coaching tips. Tips are
shown through the control API (/status), appended to the tip log, and spoken
through the TTS service.

Usage:
    ffmpeg -i rtmp://localhost:1935/live/player1 -vf "fps=5" \
        -pix_fmt bgr24 -vcodec rawvideo -f rawvideo pipe:1 \
        | python coach_engine.py --width 1920 --height 1080 \
            --game fortnite --settings-url http://localhost:3000 --autostart

Args:
    --width / --height: Source frame size (must match ffmpeg output)
    --interval-ms: Time between automatic captures while coaching
    --cooldown-ms: Minimum time between two automatic tips
    --game: Initial game mode (fortnite, valorant, cod, custom)
    --custom-game: Free-text game name; auto-detects the mode
    --settings-url: Game-settings lookup service base URL
    --tts-url: TTS service base URL (see tts/tts_server.py)
    --port: Control API port
"""

import argparse
import logging
import random
import sys
from pathlib import Path

import uvicorn

from control_api import create_app
from hud.coach_controller import CoachController
from hud.coach_pipeline import CoachPipeline, CoachSettings
from hud.errors import RecognitionUnavailable
from hud.frame_source import LatestFrame, StdinFrameSource
from hud.game_profiles import PROFILES
from hud.mode_store import ModeStore
from hud.settings_lookup import SettingsLookupClient
from hud.text_reader import TesseractReader
from hud.tip_output import CoachDisplay, SpeechClient, TipLog, TipOutput


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='HUD Coach Engine')
    parser.add_argument('--width', type=int, default=1920,
                        help='Source frame width')
    parser.add_argument('--height', type=int, default=1080,
                        help='Source frame height')
    parser.add_argument('--interval-ms', type=int, default=2000,
                        help='Automatic capture interval while coaching')
    parser.add_argument('--cooldown-ms', type=int, default=3500,
                        help='Minimum time between automatic tips')
    parser.add_argument('--scale', type=float, default=0.5,
                        help='Capture downscale applied before cropping')
    parser.add_argument('--upscale', type=int, default=3,
                        help='Nearest-neighbor upscale factor before OCR')
    parser.add_argument('--game', choices=PROFILES, default=None,
                        help='Game mode (overrides the saved selection)')
    parser.add_argument('--custom-game', default=None,
                        help='Free-text game name; auto-detects the mode')
    parser.add_argument('--settings-url', default=None,
                        help='Game settings service URL (enables custom-game lookups)')
    parser.add_argument('--tts-url', default='http://127.0.0.1:5123',
                        help='TTS service URL')
    parser.add_argument('--voice', default='af_heart',
                        help='TTS voice id')
    parser.add_argument('--no-speech', action='store_true',
                        help='Do not speak tips')
    parser.add_argument('--log-path', default=str(DATA_DIR / 'coach-tips.json'),
                        help='Tip history file')
    parser.add_argument('--state-path', default=str(DATA_DIR / 'coach-mode.json'),
                        help='Saved game-mode selection file')
    parser.add_argument('--host', default='127.0.0.1',
                        help='Control API host')
    parser.add_argument('--port', type=int, default=5124,
                        help='Control API port')
    parser.add_argument('--autostart', action='store_true',
                        help='Start coaching immediately')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for tip selection (reproducible runs)')
    parser.add_argument('--log-level', default='INFO',
                        help='Python logging level')
    return parser.parse_args(argv)


def build_controller(args, stream=None) -> tuple[CoachController, StdinFrameSource]:
    """Wire recognizer, sinks, pipeline, frame source and ticker from CLI args."""
    reader = TesseractReader()
    try:
        reader.init()
    except RecognitionUnavailable as e:
        # Keep serving; manual runs will report OCR as unavailable
        print(f'[Coach] OCR unavailable: {e}', file=sys.stderr)

    speech = None if args.no_speech else SpeechClient(args.tts_url, voice=args.voice)
    output = TipOutput(CoachDisplay(), TipLog(args.log_path), speech)

    settings = CoachSettings(
        capture_scale=args.scale,
        upscale=args.upscale,
        cooldown_s=args.cooldown_ms / 1000.0,
    )
    lookup = SettingsLookupClient(args.settings_url) if args.settings_url else None
    rng = random.Random(args.seed) if args.seed is not None else random.Random()

    pipeline = CoachPipeline(reader, output, settings=settings, rng=rng,
                             mode_store=ModeStore(args.state_path),
                             lookup_client=lookup)
    if args.game:
        pipeline.set_game_mode(args.game)
    if args.custom_game:
        pipeline.set_custom_game(args.custom_game)

    frames = LatestFrame()
    source = StdinFrameSource(stream if stream is not None else sys.stdin.buffer,
                              args.width, args.height, frames)
    controller = CoachController(pipeline, frames, interval_s=args.interval_ms / 1000.0)
    return controller, source


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        stream=sys.stderr,
    )

    controller, source = build_controller(args)
    pipeline = controller.pipeline
    mode = pipeline.mode_snapshot()

    print(f'[Coach] Frame size: {args.width}x{args.height} ({source.frame_size} bytes)',
          file=sys.stderr)
    print(f'[Coach] Mode: {mode["label"]} (custom game: {mode["custom_game"] or "-"})',
          file=sys.stderr)
    print(f'[Coach] Interval: {args.interval_ms}ms, cooldown: {args.cooldown_ms}ms',
          file=sys.stderr)

    source.start()
    if args.autostart:
        controller.start_coaching()

    print(f'[Coach] Control API on http://{args.host}:{args.port}', file=sys.stderr)
    try:
        uvicorn.run(create_app(controller), host=args.host, port=args.port,
                    log_level='warning')
    finally:
        controller.stop_coaching()
        pipeline.shutdown()


if __name__ == '__main__':
    main()
