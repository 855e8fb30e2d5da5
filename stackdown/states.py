"""
Task lifecycle states and the terminal-state ordering used when waiting on a stack.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class TaskState(Enum):
    """Swarm task states, declared in lifecycle order."""
    NEW = "new"
    ALLOCATED = "allocated"
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETE = "complete"
    SHUTDOWN = "shutdown"
    FAILED = "failed"
    REJECTED = "rejected"
    REMOVE = "remove"
    ORPHANED = "orphaned"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["TaskState"]:
        """
        Parse a state string as reported by the daemon.

        Accepts plain values ("running") as well as the human readable
        CurrentState column of ``docker stack ps`` ("Running 5 minutes ago").

        Args:
            text: Raw state text

        Returns:
            Matching TaskState, or None if the text is not a known state
        """
        if not text:
            return None

        head = text.strip().split(" ", 1)[0].lower()
        try:
            return cls(head)
        except ValueError:
            return None


# Ranks start at 1 so an unknown state (rank 0) sorts below every real one.
TASK_STATE_RANKS: Mapping[TaskState, int] = MappingProxyType(
    {state: position for position, state in enumerate(TaskState, start=1)}
)


def rank(state: Union[TaskState, str, None]) -> int:
    """Return the lifecycle rank of a state; unknown states rank 0."""
    if not isinstance(state, TaskState):
        state = TaskState.parse(state)
    if state is None:
        return 0
    return TASK_STATE_RANKS[state]


def is_terminal(state: Union[TaskState, str, None]) -> bool:
    """
    Check whether a task in this state has finished, successfully or not.

    Every state ordered after RUNNING is terminal.
    """
    return rank(state) > TASK_STATE_RANKS[TaskState.RUNNING]
