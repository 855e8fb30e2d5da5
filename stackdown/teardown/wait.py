"""
Wait for a stack's tasks to reach a terminal state.
"""

import logging
import threading
import time
from typing import Callable, Optional

from ..backends.base import ResourceDirectory
from ..errors import DirectoryQueryError, TeardownCancelled, WaitError, WaitTimeout

logger = logging.getLogger(__name__)


class ConvergenceWaiter:
    """
    Polls a stack's tasks until every one of them is terminal.

    Polls back off exponentially from ``poll_interval`` up to
    ``max_interval``. There is no deadline unless ``timeout`` is given.
    Setting the cancel event interrupts the wait between polls.
    """

    def __init__(
        self,
        poll_interval: float = 0.5,
        max_interval: float = 5.0,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.poll_interval = poll_interval
        self.max_interval = max(max_interval, poll_interval)
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings) -> "ConvergenceWaiter":
        return cls(
            poll_interval=settings.poll_interval,
            max_interval=settings.max_poll_interval,
            timeout=settings.wait_timeout,
        )

    def _pause(self, delay: float, stack: str, cancel: Optional[threading.Event]) -> None:
        if self._sleep is not None:
            self._sleep(delay)
            interrupted = cancel is not None and cancel.is_set()
        else:
            interrupted = (cancel or threading.Event()).wait(delay)

        if interrupted:
            raise TeardownCancelled(stack)

    def wait(self, directory: ResourceDirectory, stack: str, cancel: Optional[threading.Event] = None) -> int:
        """
        Block until all of the stack's tasks are terminal.

        A stack with no tasks has converged straight away.

        Args:
            directory: Where to list tasks from
            stack: Stack name
            cancel: Optional cancellation event

        Returns:
            Number of polls it took

        Raises:
            WaitError: If listing tasks fails
            WaitTimeout: If a timeout is set and runs out first
            TeardownCancelled: If cancel is set before convergence, including
                when a listing fails because it was interrupted
        """
        deadline = None if self.timeout is None else self._clock() + self.timeout
        delay = self.poll_interval
        polls = 0

        while True:
            if cancel is not None and cancel.is_set():
                raise TeardownCancelled(stack)

            try:
                tasks = directory.list_tasks(stack)
            except DirectoryQueryError as e:
                # an interrupted docker call fails too; that is not a wait error
                if cancel is not None and cancel.is_set():
                    raise TeardownCancelled(stack) from e
                raise WaitError(stack, e.cause) from e
            polls += 1

            terminal = sum(1 for task in tasks if task.terminal)
            logger.debug(f"Stack {stack}: {terminal}/{len(tasks)} tasks terminal (poll {polls})")
            if terminal == len(tasks):
                return polls

            if deadline is not None and self._clock() >= deadline:
                raise WaitTimeout(stack, self.timeout, len(tasks) - terminal)

            self._pause(delay, stack, cancel)
            delay = min(delay * 2, self.max_interval)
