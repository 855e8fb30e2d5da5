"""
Find every resource that belongs to a stack.
"""

import logging

from ..backends.base import ResourceDirectory
from ..models import StackResources

logger = logging.getLogger(__name__)


def collect_stack_resources(directory: ResourceDirectory, stack: str) -> StackResources:
    """
    List the services, networks, secrets and configs labelled with a stack.

    Secrets and configs are only queried when the directory's API version
    supports them; otherwise they come back empty.

    Args:
        directory: Where to look resources up
        stack: Stack name

    Returns:
        The stack's resources grouped by kind

    Raises:
        DirectoryQueryError: If any query fails. Nothing should be removed
            for the stack in that case.
    """
    found = StackResources(stack=stack)

    # capability is decided once for the whole collection run
    with_secrets = directory.supports_secrets()
    with_configs = directory.supports_configs()

    found.services = list(directory.list_services(stack))
    found.networks = list(directory.list_networks(stack))
    if with_secrets:
        found.secrets = list(directory.list_secrets(stack))
    if with_configs:
        found.configs = list(directory.list_configs(stack))

    logger.debug(
        f"Stack {stack}: {len(found.services)} services, {len(found.networks)} networks, "
        f"{len(found.secrets)} secrets, {len(found.configs)} configs"
    )
    return found
