"""
Remove every resource of one kind, carrying on past individual failures.
"""

import logging
import threading
from typing import Iterable, List, Optional

from ..backends.base import ResourceMutator
from ..errors import TeardownCancelled
from ..models import RemovalOutcome, Service, StackResource
from ..progress import ProgressSink

logger = logging.getLogger(__name__)


def removal_order(kind: str, resources: Iterable[StackResource]) -> List[StackResource]:
    """Services go by name; everything else keeps the order it was listed in."""
    if kind == Service.kind:
        return sorted(resources, key=lambda resource: resource.name)
    return list(resources)


def remove_all(
    mutator: ResourceMutator,
    kind: str,
    resources: Iterable[StackResource],
    sink: ProgressSink,
    cancel: Optional[threading.Event] = None,
) -> RemovalOutcome:
    """
    Remove a list of resources of the same kind.

    Every resource is attempted exactly once; a failure is reported to the
    sink and recorded, then the next resource is tried.

    Args:
        mutator: Backend that performs the removals
        kind: Resource kind, used for messages and dispatch
        resources: Resources to remove
        sink: Where progress and failure lines go
        cancel: Optional event; when set, no further resource is attempted

    Returns:
        RemovalOutcome with the attempted ids and any failures

    Raises:
        TeardownCancelled: If cancel is set before all resources were tried
    """
    outcome = RemovalOutcome(kind=kind)

    for resource in removal_order(kind, resources):
        if cancel is not None and cancel.is_set():
            raise TeardownCancelled(resource.stack or None)

        sink.out(f"Removing {kind} {resource.name}")
        logger.info(f"Removing {kind} {resource.name} ({resource.id})")
        outcome.attempted.append(resource.id)

        try:
            mutator.remove(kind, resource.id)
        except Exception as e:
            outcome.failures.append((resource.id, e))
            sink.err(f"Failed to remove {kind} {resource.id}: {e}")
            logger.warning(f"Failed to remove {kind} {resource.id}: {e}")

    return outcome
