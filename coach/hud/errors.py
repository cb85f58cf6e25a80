"""Failure taxonomy for the coaching pipeline.

None of these are fatal to the process. The pipeline catches each one at a
known seam and turns it into a status line or a forced notice:

  RecognitionUnavailable  OCR engine missing or not initialized
  RecognitionFailure      OCR call raised; the run ends with no emission
  LookupFailure           game-settings service unreachable or non-OK
"""


class CoachError(Exception):
    """Base class for recoverable coaching errors."""


class RecognitionUnavailable(CoachError):
    pass


class RecognitionFailure(CoachError):
    pass


class LookupFailure(CoachError):
    """Raised by the settings lookup client.

    Attributes:
        reachable: True when the service answered with a non-OK status,
                   False when it could not be reached at all.
    """

    def __init__(self, message: str, reachable: bool = False):
        super().__init__(message)
        self.reachable = reachable
