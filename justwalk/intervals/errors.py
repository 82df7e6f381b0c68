"""Interval walk error types.

Configuration errors are raised when a configuration is built or a session
is started, never from inside the tick loop.

Standard configuration error codes:
- EMPTY_PHASES: Configuration has no phases
- INVALID_DURATION: A timed phase has a missing or non-positive duration
- INVALID_CYCLE_COUNT: Cycle count is negative
- OPEN_ENDED_MIXED: An open-ended phase (classic/slow) is combined with other phases
- MALFORMED_SEQUENCE: Phases are not warmup? (brisk recovery)* cooldown?
- CYCLE_COUNT_MISMATCH: Number of brisk/recovery pairs differs from the cycle count
"""


class IntervalConfigurationError(ValueError):
    """Raised when an interval configuration is empty or malformed.

    Attributes:
        code: Error code (e.g., "EMPTY_PHASES", "MALFORMED_SEQUENCE")
        details: List of error detail strings
    """

    def __init__(self, code: str, details: list[str]):
        self.code = code
        self.details = details
        super().__init__(f"{code}: {details}")


class SessionStateError(RuntimeError):
    """Raised when a session lifecycle call is not valid in the current state."""
