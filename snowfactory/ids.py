"""A module for handling unique ID generation.

This module provides:
- IdParts: a tuple of the fields packed into an ID
- IdLayout: a class that packs and unpacks IDs for given bit widths
- IdGenerator: a class that spits out unique, time-ordered IDs for one worker
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Event, Lock
from typing import Callable, NamedTuple, Optional

from .utils.clock import DEFAULT_EPOCH, ClockWaiter
from .utils.errors import ConfigurationError

DEFAULT_SEQUENCE_BITS = 12
DEFAULT_WORKER_BITS = 10
# Leaves at least 35 timestamp bits in a signed 64-bit integer
MAX_PAYLOAD_BITS = 28


class IdParts(NamedTuple):
    """Fields of a decoded ID."""

    timestamp: int
    worker_id: int
    sequence: int


@dataclass(frozen=True)
class IdLayout:
    """Bit layout of an ID: ``[timestamp][worker ID][sequence]``, high to low."""

    sequence_bits: int = DEFAULT_SEQUENCE_BITS
    worker_bits: int = DEFAULT_WORKER_BITS
    epoch_millis: int = DEFAULT_EPOCH

    def __post_init__(self):
        if self.sequence_bits < 0 or self.worker_bits < 0:
            raise ConfigurationError("Bit widths cannot be negative")
        if self.sequence_bits + self.worker_bits > MAX_PAYLOAD_BITS:
            raise ConfigurationError(
                f"The sum of sequence_bits and worker_bits cannot be greater than {MAX_PAYLOAD_BITS}"
            )

    @property
    def max_sequence(self) -> int:
        return -1 ^ (-1 << self.sequence_bits)

    @property
    def max_worker_id(self) -> int:
        return -1 ^ (-1 << self.worker_bits)

    @property
    def worker_shift(self) -> int:
        return self.sequence_bits

    @property
    def timestamp_shift(self) -> int:
        return self.sequence_bits + self.worker_bits

    def compose(self, timestamp: int, worker_id: int, sequence: int) -> int:
        """Packs the fields into an ID.

        Args:
            timestamp (int): Milliseconds since the layout epoch
            worker_id (int): The worker that issues the ID
            sequence (int): The position of the ID within its millisecond
        Returns:
            int: The ID
        """
        return timestamp << self.timestamp_shift | worker_id << self.worker_shift | sequence

    def decode(self, snowflake: int) -> IdParts:
        """Unpacks an ID into its fields.

        Args:
            snowflake (int): An ID made with this layout
        Returns:
            IdParts: The epoch-relative timestamp, worker ID and sequence
        """
        return IdParts(
            timestamp=snowflake >> self.timestamp_shift,
            worker_id=(snowflake >> self.worker_shift) & self.max_worker_id,
            sequence=snowflake & self.max_sequence,
        )

    def issued_at(self, snowflake: int) -> datetime:
        """Gets the moment an ID was issued, as an aware UTC datetime."""
        millis = self.decode(snowflake).timestamp + self.epoch_millis
        return datetime.fromtimestamp(millis / 1000, tz=UTC)


class IdGenerator:
    """A class that spits out unique IDs for a single worker."""

    def __init__(
            self,
            worker_id: int,
            sequence_bits: int = DEFAULT_SEQUENCE_BITS,
            worker_bits: int = DEFAULT_WORKER_BITS,
            epoch: int = DEFAULT_EPOCH,
            clock: Optional[Callable[[], int]] = None,
            sleeper: Optional[Callable[[float, Optional[Event]], bool]] = None,
    ):
        """Validates the layout and seeds the last issued ID.

        Args:
            worker_id (int): This worker's ID, unique across the deployment
            sequence_bits (int): Width of the per-millisecond counter
            worker_bits (int): Width of the worker ID
            epoch (int): Unix milliseconds timestamps are counted from
            clock (Callable): Returns the wall clock in Unix milliseconds
            sleeper (Callable): Sleeps for given seconds, returns True if cancelled
        Raises:
            ConfigurationError: If the bit widths or the worker ID are out of range or not integers
        """
        self.layout = IdLayout(sequence_bits, worker_bits, epoch)
        if not isinstance(worker_id, int) or not 0 <= worker_id <= self.layout.max_worker_id:
            raise ConfigurationError(
                f"The worker_id must be between 0 and {self.layout.max_worker_id}"
            )
        self.worker_id = worker_id
        self.waiter = ClockWaiter(epoch, clock, sleeper)
        self.lock = Lock()
        self.logger = logging.getLogger(__name__)
        # Never handed out, only gives the first call something to compare against
        self.last_id = self.layout.compose(0, worker_id, 0)
        self.logger.info(
            "ID generator ready: worker %d, %d worker bits, %d sequence bits",
            worker_id, worker_bits, sequence_bits,
        )

    def next_id(self, cancel: Optional[Event] = None) -> int:
        """Generates a 64-bit Snowflake ID.

        Args:
            cancel (Event): An optional event that aborts a wait for a called-back clock
        Returns:
            int: The ID, greater than any ID this generator returned before
        Raises:
            ClockMovedBackwardsError: If the clock went back and did not recover
            GenerationCancelledError: If ``cancel`` was set while waiting on the clock
        """
        with self.lock:
            now = self.waiter.now()
            prev_moment, _, prev_sequence = self.layout.decode(self.last_id)
            if now < prev_moment or now < 0:
                now = self.waiter.wait_past(prev_moment, cancel)
            if now == prev_moment:
                if prev_sequence >= self.layout.max_sequence:
                    self.logger.debug("Sequence exhausted at %d, waiting for the next ms", now)
                    sequence = 0
                    now = self.waiter.wait_past(prev_moment, cancel)
                else:
                    sequence = prev_sequence + 1
            else:
                sequence = 0
            self.last_id = self.layout.compose(now, self.worker_id, sequence)
            return self.last_id

    def decode(self, snowflake: int) -> IdParts:
        """Unpacks an ID made by this generator's layout."""
        return self.layout.decode(snowflake)
