"""
Exception types raised while tearing down stacks.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


class StackdownError(Exception):
    """Base class for all stackdown errors."""


class ConfigError(StackdownError):
    """Invalid configuration file or value."""


class InvalidStackName(ValueError, StackdownError):
    """A stack name given on the command line is not usable."""


class DirectoryQueryError(StackdownError):
    """Listing resources for a stack failed."""

    def __init__(self, resource: str, stack: Optional[str], cause: object):
        self.resource = resource
        self.stack = stack
        self.cause = cause
        if stack:
            super().__init__(f"failed to list {resource} for stack {stack}: {cause}")
        else:
            super().__init__(f"failed to query {resource}: {cause}")


class RemovalError(StackdownError):
    """Removing a single resource failed."""

    def __init__(self, kind: str, resource_id: str, cause: object):
        self.kind = kind
        self.resource_id = resource_id
        self.cause = cause
        super().__init__(str(cause))


class WaitError(StackdownError):
    """Waiting for a stack's tasks to converge failed."""

    def __init__(self, stack: str, cause: object):
        self.stack = stack
        self.cause = cause
        super().__init__(f"failed to get tasks for stack: {stack}: {cause}")


class WaitTimeout(WaitError):
    """Tasks did not reach a terminal state in time."""

    def __init__(self, stack: str, timeout: float, pending: int):
        self.timeout = timeout
        self.pending = pending
        super().__init__(stack, f"{pending} task(s) still running after {timeout:g}s")


class TeardownCancelled(StackdownError):
    """The teardown was cancelled before it finished."""

    def __init__(self, stack: Optional[str] = None):
        self.stack = stack
        message = "teardown cancelled"
        if stack:
            message += f" while processing stack: {stack}"
        super().__init__(message)


@dataclass(frozen=True)
class StackFailure:
    """One stack that could not be fully removed."""
    stack: str
    cause: str


class StackRemovalError(StackdownError):
    """
    Aggregate error for a multi-stack removal.

    ``failures`` keeps one entry per failing stack; the message is their
    causes joined by newlines.
    """

    def __init__(self, failures: Sequence[StackFailure], results: Optional[list] = None):
        self.failures: List[StackFailure] = list(failures)
        self.results = results or []
        super().__init__("\n".join(failure.cause for failure in self.failures))

    @property
    def stacks(self) -> List[str]:
        return [failure.stack for failure in self.failures]
