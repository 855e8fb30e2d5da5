"""
Stack name validation.
"""

from typing import Iterable

from .errors import InvalidStackName


def validate_stack_name(name: str) -> None:
    """
    Reject stack names that are empty or only whitespace.

    Raises:
        InvalidStackName: If the name is not usable
    """
    if not name or not name.strip():
        raise InvalidStackName(f"invalid stack name: {name!r}")


def validate_stack_names(names: Iterable[str]) -> None:
    for name in names:
        validate_stack_name(name)
