"""
Stack teardown: collect, remove, and wait for convergence.
"""

from .collect import collect_stack_resources
from .remove import remove_all, removal_order
from .wait import ConvergenceWaiter
from .coordinator import remove_stacks, REMOVAL_SEQUENCE

__all__ = [
    "collect_stack_resources",
    "remove_all",
    "removal_order",
    "ConvergenceWaiter",
    "remove_stacks",
    "REMOVAL_SEQUENCE",
]
