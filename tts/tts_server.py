"""
HUD Coach Speech Service: Kokoro TTS via FastAPI

Runs next to the coach engine. The engine calls /speak for every emitted tip;
the service synthesizes it and plays it on the default audio device, cutting
off whatever tip is still playing so the player only hears the newest one.
/synthesize returns the WAV instead of playing it (overlay pages that do
their own playback).

Usage:
  python -m uvicorn tts_server:app --host 127.0.0.1 --port 5123
"""

import io
import sys
import threading
import time
from contextlib import asynccontextmanager

import numpy as np
import sounddevice as sd
import soundfile as sf
from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

# ─── Kokoro Pipeline ───

SAMPLE_RATE = 24000
DEFAULT_VOICE = "af_heart"
DEFAULT_SPEED = 1.05

pipeline = None
_playback_lock = threading.Lock()

AVAILABLE_VOICES = [
    "af_heart",    # American female (warm)
    "af_nice",     # American female (nice)
    "am_adam",     # American male
    "am_michael",  # American male
    "bf_emma",     # British female
    "bm_george",   # British male
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load Kokoro model on startup."""
    global pipeline
    print("[TTS] Loading Kokoro model...", file=sys.stderr, flush=True)
    start = time.time()
    try:
        from kokoro import KPipeline
        pipeline = KPipeline(lang_code='a')  # 'a' = American English
        elapsed = time.time() - start
        print(f"[TTS] Kokoro model loaded in {elapsed:.1f}s", file=sys.stderr, flush=True)
    except Exception as e:
        print(f"[TTS] Failed to load Kokoro: {e}", file=sys.stderr, flush=True)
        # Service runs but /speak and /synthesize will return 503
    yield
    sd.stop()
    print("[TTS] Shutting down", file=sys.stderr, flush=True)


app = FastAPI(lifespan=lifespan)


# ─── Request Models ───

class SpeakRequest(BaseModel):
    text: str
    voice: str = DEFAULT_VOICE
    speed: float = DEFAULT_SPEED


# ─── Synthesis ───

def _validate(request: SpeakRequest) -> None:
    if pipeline is None:
        raise HTTPException(503, "TTS model not loaded yet")
    if not request.text.strip():
        raise HTTPException(400, "Empty text")
    if request.voice not in AVAILABLE_VOICES:
        raise HTTPException(400, f"Unknown voice: {request.voice}. Available: {AVAILABLE_VOICES}")


def _synthesize(request: SpeakRequest) -> np.ndarray:
    """Run Kokoro and return the full utterance as one float array."""
    # Kokoro yields (graphemes, phonemes, audio) tuples per sentence
    segments = [
        audio
        for _graphemes, _phonemes, audio in pipeline(
            request.text, voice=request.voice, speed=request.speed,
        )
        if audio is not None
    ]
    if not segments:
        raise HTTPException(500, "No audio generated")
    return np.concatenate(segments)


# ─── Endpoints ───

@app.get("/health")
async def health():
    return {
        "status": "ok" if pipeline is not None else "loading",
        "model": "kokoro",
        "ready": pipeline is not None,
    }


@app.get("/voices")
async def voices():
    return {"voices": AVAILABLE_VOICES}


@app.post("/speak")
def speak(request: SpeakRequest):
    _validate(request)
    start = time.time()
    try:
        audio = _synthesize(request)
    except HTTPException:
        raise
    except Exception as e:
        print(f"[TTS] Synthesis error: {e}", file=sys.stderr, flush=True)
        raise HTTPException(500, f"Synthesis failed: {e}")

    with _playback_lock:
        sd.stop()   # newest tip wins
        sd.play(audio, SAMPLE_RATE)

    duration_sec = len(audio) / SAMPLE_RATE
    print(f"[TTS] Speaking {len(request.text)} chars ({duration_sec:.1f}s audio, "
          f"synth {time.time() - start:.2f}s)", file=sys.stderr, flush=True)
    return {"duration_ms": int(duration_sec * 1000)}


@app.post("/synthesize")
def synthesize(request: SpeakRequest):
    _validate(request)
    start = time.time()
    try:
        audio = _synthesize(request)
    except HTTPException:
        raise
    except Exception as e:
        print(f"[TTS] Synthesis error: {e}", file=sys.stderr, flush=True)
        raise HTTPException(500, f"Synthesis failed: {e}")

    buf = io.BytesIO()
    sf.write(buf, audio, SAMPLE_RATE, format='WAV')
    buf.seek(0)

    elapsed = time.time() - start
    return StreamingResponse(
        buf,
        media_type="audio/wav",
        headers={
            "X-Audio-Duration-Ms": str(int(len(audio) / SAMPLE_RATE * 1000)),
            "X-Synthesis-Ms": str(int(elapsed * 1000)),
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=5123)
