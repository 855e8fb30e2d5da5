"""
Backends that list and remove stack resources.
"""

from .base import ResourceDirectory, ResourceMutator, version_gte
from .docker_cli import DockerCLI, DockerCommandError

__all__ = [
    "ResourceDirectory",
    "ResourceMutator",
    "version_gte",
    "DockerCLI",
    "DockerCommandError",
]
