"""Tesseract wrapper used by the coaching pipeline.

The pipeline only needs one capability from an OCR backend:

    recognize(image: np.ndarray) -> str

Anything with that method can be injected (tests use a scripted fake).
TesseractReader is the production implementation. It must be initialized
before use; until then recognize() raises RecognitionUnavailable so that
automatic runs can skip quietly and manual runs can tell the user.
"""

import logging
import subprocess

import numpy as np
import pytesseract

from .errors import RecognitionFailure, RecognitionUnavailable


logger = logging.getLogger(__name__)

# PSM 6: assume a single uniform block of text (HUD corner)
DEFAULT_PSM = 6


class TesseractReader:
    """Best-effort text recognition for prepped HUD regions.

    Args:
        lang: Tesseract language pack.
        psm: Page segmentation mode.
        oem: Optional OCR engine mode; None keeps Tesseract's default.
    """

    def __init__(self, lang: str = 'eng', psm: int = DEFAULT_PSM,
                 oem: int | None = None):
        self.lang = lang
        self.psm = int(psm)
        self.oem = oem
        self._initialized = False

    @property
    def config(self) -> str:
        tokens = [f'--psm {self.psm}']
        if self.oem is not None:
            tokens.insert(0, f'--oem {int(self.oem)}')
        return ' '.join(tokens)

    def init(self) -> None:
        """Verify the tesseract binary is callable.

        Raises:
            RecognitionUnavailable: binary missing or broken.
        """
        try:
            out = subprocess.run(['tesseract', '--version'],
                                 capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise RecognitionUnavailable(
                'tesseract binary not found; install tesseract-ocr') from e
        if out.returncode != 0:
            raise RecognitionUnavailable(out.stderr.strip() or 'tesseract not available')

        self._initialized = True
        logger.info('OCR initialized: lang=%s, %s', self.lang, self.config)

    def is_ready(self) -> bool:
        return self._initialized

    def recognize(self, image: np.ndarray) -> str:
        """Return the recognized text (stripped), possibly empty."""
        if not self._initialized:
            raise RecognitionUnavailable('OCR not initialized')
        if image.size == 0:
            return ''
        try:
            text = pytesseract.image_to_string(image, lang=self.lang, config=self.config)
        except Exception as e:
            raise RecognitionFailure(f'Tesseract failed: {e}') from e
        return (text or '').strip()
