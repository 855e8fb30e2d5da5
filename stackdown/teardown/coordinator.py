"""
Remove one or more stacks end to end.
"""

import logging
import threading
from typing import Iterable, List, Optional

from ..backends.base import ResourceDirectory, ResourceMutator
from ..errors import (
    DirectoryQueryError,
    StackFailure,
    StackRemovalError,
    TeardownCancelled,
    WaitError,
)
from ..models import Config, Network, Secret, Service, StackTeardownResult
from ..progress import NullSink, ProgressSink
from .collect import collect_stack_resources
from .remove import remove_all
from .wait import ConvergenceWaiter

logger = logging.getLogger(__name__)

# Services first since they reference everything else; networks last.
REMOVAL_SEQUENCE = (
    (Service.kind, "services"),
    (Secret.kind, "secrets"),
    (Config.kind, "configs"),
    (Network.kind, "networks"),
)


def _check_cancelled(cancel: Optional[threading.Event], stack: str) -> None:
    if cancel is not None and cancel.is_set():
        raise TeardownCancelled(stack)


def remove_stacks(
    directory: ResourceDirectory,
    mutator: ResourceMutator,
    stacks: Iterable[str],
    detach: bool = True,
    sink: Optional[ProgressSink] = None,
    cancel: Optional[threading.Event] = None,
    waiter: Optional[ConvergenceWaiter] = None,
) -> List[StackTeardownResult]:
    """
    Remove every resource of each stack, in the order given.

    A stack with removal failures does not stop the stacks after it; all
    failures are raised together at the end. A failed listing, on the other
    hand, stops everything straight away.

    Args:
        directory: Where stack resources and tasks are listed from
        mutator: What removes them
        stacks: Stack names
        detach: If False, wait for each stack's tasks to finish after removal
        sink: Progress output, defaults to discarding it
        cancel: Optional cancellation event
        waiter: Convergence waiter used when not detached

    Returns:
        One StackTeardownResult per stack

    Raises:
        DirectoryQueryError: If listing a stack's resources fails
        StackRemovalError: If any stack could not be fully removed
        TeardownCancelled: If cancel was set before the run finished
    """
    sink = sink or NullSink()
    waiter = waiter or ConvergenceWaiter()

    results: List[StackTeardownResult] = []
    failures: List[StackFailure] = []

    for stack in stacks:
        _check_cancelled(cancel, stack)

        try:
            found = collect_stack_resources(directory, stack)
        except DirectoryQueryError as e:
            # a listing killed by the interrupt is a cancellation, not a query failure
            if cancel is not None and cancel.is_set():
                raise TeardownCancelled(stack) from e
            raise

        result = StackTeardownResult(stack=stack)
        results.append(result)

        if found.is_empty():
            sink.err(f"nothing found in stack: {stack}")
            logger.info(f"Nothing found in stack {stack}")
            result.nothing_found = True
            continue

        logger.info(f"Removing {found.total()} resources from stack {stack}")
        for kind, attribute in REMOVAL_SEQUENCE:
            outcome = remove_all(mutator, kind, getattr(found, attribute), sink, cancel)
            result.outcomes.append(outcome)
            _check_cancelled(cancel, stack)

        if result.had_error:
            failures.append(StackFailure(stack, f"failed to remove some resources from stack: {stack}"))

        if not detach:
            try:
                waiter.wait(directory, stack, cancel)
            except WaitError as e:
                result.wait_error = e
                sink.err(str(e))
                logger.warning(f"Waiting on stack {stack} failed: {e}")
            _check_cancelled(cancel, stack)

    if failures:
        raise StackRemovalError(failures, results)
    return results
