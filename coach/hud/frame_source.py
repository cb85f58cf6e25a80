"""Live frame intake from an ffmpeg raw-video pipe.

ffmpeg decodes the stream and writes packed bgr24 frames to stdout:

    ffmpeg -i <source> -vf "fps=5" -pix_fmt bgr24 -vcodec rawvideo \
        -f rawvideo pipe:1 | python coach_engine.py --width 1920 --height 1080

A reader thread keeps only the most recent frame. The pipeline samples it
on every tick; there is no frame queue, so a slow OCR run simply skips the
frames that arrived meanwhile.
"""

import sys
import threading
from typing import BinaryIO

import numpy as np


class LatestFrame:
    """Lock-protected slot holding the newest frame (or None)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: np.ndarray | None = None
        self.frame_count = 0

    def publish(self, frame: np.ndarray) -> None:
        with self._lock:
            self._frame = frame
            self.frame_count += 1

    def get(self) -> np.ndarray | None:
        with self._lock:
            return self._frame

    def clear(self) -> None:
        with self._lock:
            self._frame = None


class StdinFrameSource:
    """Read fixed-size bgr24 frames from a binary stream into a LatestFrame.

    Args:
        stream: Binary stream (sys.stdin.buffer in production).
        width: Frame width in pixels.
        height: Frame height in pixels.
        sink: Where decoded frames are published.
    """

    def __init__(self, stream: BinaryIO, width: int, height: int, sink: LatestFrame):
        if width <= 0 or height <= 0:
            raise ValueError(f'Invalid frame size {width}x{height}')
        self.stream = stream
        self.width = width
        self.height = height
        self.sink = sink
        self.frame_size = width * height * 3  # BGR24
        self.ended = threading.Event()
        self._thread: threading.Thread | None = None

    def read_one(self) -> np.ndarray | None:
        """Read and publish one frame. Returns None at end of stream."""
        raw = self.stream.read(self.frame_size)
        if raw is None or len(raw) < self.frame_size:
            return None
        frame = np.frombuffer(raw, dtype=np.uint8).reshape((self.height, self.width, 3))
        self.sink.publish(frame)
        return frame

    def run(self) -> None:
        while self.read_one() is not None:
            pass
        print('[Coach] End of input stream', file=sys.stderr)
        self.ended.set()

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name='frame-reader', daemon=True)
        self._thread.start()
