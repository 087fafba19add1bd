"""A module for reading and waiting out the generator clock.

This module provides:
- DEFAULT_EPOCH: the reference instant IDs count their timestamps from
- ClockWaiter: a class that reconciles a stalled or called-back clock
"""

import logging
from threading import Event
from time import sleep, time
from typing import Callable, Optional

from .errors import ClockMovedBackwardsError, GenerationCancelledError

# 2023-01-25 16:27:32 UTC+8, changing it changes the encoding of every ID
DEFAULT_EPOCH = 1674635252000

# Regressions shorter than this are slept out once, longer ones fail right away
MAX_BACKWARDS_WAIT = 5


def wall_clock() -> int:
    """Reads the system clock.

    Returns:
        int: Milliseconds since the Unix epoch
    """
    return int(time() * 1000)


def interruptible_sleep(seconds: float, cancel: Optional[Event] = None) -> bool:
    """Sleeps for a while unless cancelled.

    Args:
        seconds (float): How long to sleep
        cancel (Event): An optional event that cuts the sleep short once set
    Returns:
        bool: True if the sleep was cancelled, False if it ran its course
    """
    if cancel is None:
        sleep(seconds)
        return False
    return cancel.wait(seconds)


class ClockWaiter:
    """Waits for the clock to move past a moment, or gives up loudly."""

    def __init__(
            self,
            epoch: int = DEFAULT_EPOCH,
            clock: Optional[Callable[[], int]] = None,
            sleeper: Optional[Callable[[float, Optional[Event]], bool]] = None,
    ):
        """Binds the waiter to a clock.

        Args:
            epoch (int): Unix milliseconds subtracted from every reading
            clock (Callable): Returns the wall clock in Unix milliseconds
            sleeper (Callable): Sleeps for given seconds, returns True if cancelled
        """
        self.epoch = epoch
        self.clock = clock or wall_clock
        self.sleeper = sleeper or interruptible_sleep
        self.logger = logging.getLogger(__name__)

    def now(self) -> int:
        """Milliseconds elapsed since the epoch, negative if the clock is behind it."""
        return self.clock() - self.epoch

    def wait_past(self, prev_moment: int, cancel: Optional[Event] = None) -> int:
        """Gets a moment strictly after ``prev_moment``.

        A clock running behind by less than ``MAX_BACKWARDS_WAIT`` ms is given
        one sleep of twice the offset to recover. A clock sitting exactly on
        ``prev_moment`` is busy-polled until it ticks over, which takes under a
        millisecond.

        Args:
            prev_moment (int): The epoch-relative timestamp of the last issued ID
            cancel (Event): An optional event that aborts the recovery sleep
        Returns:
            int: An epoch-relative timestamp greater than ``prev_moment``
        Raises:
            ClockMovedBackwardsError: If the clock went back too far or did not recover
            GenerationCancelledError: If ``cancel`` was set during the recovery sleep
        """
        now_moment = self.now()
        if now_moment < prev_moment:
            offset = prev_moment - now_moment
            if offset >= MAX_BACKWARDS_WAIT:
                self._fail(now_moment, prev_moment)
            self.logger.warning("Clock is %d ms behind, waiting %d ms", offset, offset * 2)
            if self.sleeper((offset << 1) / 1000, cancel):
                raise GenerationCancelledError("Cancelled while waiting for the clock to recover")
            now_moment = self.now()
            if now_moment < prev_moment:
                self._fail(now_moment, prev_moment)
        while now_moment == prev_moment:
            now_moment = self.now()
        if now_moment < prev_moment:
            # slipped back while spinning
            self._fail(now_moment, prev_moment)
        return now_moment

    def _fail(self, now_moment: int, prev_moment: int):
        error = ClockMovedBackwardsError(now_moment + self.epoch, prev_moment + self.epoch)
        self.logger.error(str(error))
        raise error
