"""Errors tailored for this project.

This module provides:
- ConfigurationError: An error if a generator is configured with impossible values
- ClockMovedBackwardsError: An error if the system clock went back and did not recover
- GenerationCancelledError: An error if a caller cancelled a generator while it waited
"""


class ConfigurationError(ValueError):
    """Bit widths or the worker ID are out of their allowed ranges."""

class ClockMovedBackwardsError(RuntimeError):
    """The device clock was called back past the last issued timestamp.

    Attributes:
        timestamp (int): The offending wall-clock reading, in Unix milliseconds
        last_timestamp (int): The timestamp of the last issued ID, in Unix milliseconds
    """

    def __init__(self, timestamp: int, last_timestamp: int):
        super().__init__(
            f"Clock moved backwards: read {timestamp} ms, "
            f"last ID was issued at {last_timestamp} ms"
        )
        self.timestamp = timestamp
        self.last_timestamp = last_timestamp

    @property
    def offset(self) -> int:
        """How far behind the clock is, in milliseconds."""
        return self.last_timestamp - self.timestamp

class GenerationCancelledError(InterruptedError):
    """A wait for the clock to catch up was cancelled."""
