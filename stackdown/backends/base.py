"""
Abstract interfaces for listing and removing stack resources.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Config, Network, Secret, Service, Task

# Lowest API versions that know about secrets and configs.
SECRETS_MIN_API_VERSION = "1.25"
CONFIGS_MIN_API_VERSION = "1.30"


def _version_parts(version: str) -> List[int]:
    parts = []
    for piece in version.strip().split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return parts


def version_gte(version: Optional[str], minimum: str) -> bool:
    """
    Compare two dotted API versions.

    Args:
        version: Version reported by the daemon or client (e.g. "1.41")
        minimum: Required version

    Returns:
        True if version >= minimum. An empty or missing version is never
        enough.
    """
    if not version:
        return False

    left = _version_parts(version)
    right = _version_parts(minimum)
    width = max(len(left), len(right))
    left += [0] * (width - len(left))
    right += [0] * (width - len(right))
    return left >= right


class ResourceDirectory(ABC):
    """Read side: lists the resources carrying a stack's label."""

    @property
    @abstractmethod
    def api_version(self) -> Optional[str]:
        """API version used to decide which kinds can be queried."""
        pass

    @abstractmethod
    def list_services(self, stack: str) -> List[Service]:
        pass

    @abstractmethod
    def list_networks(self, stack: str) -> List[Network]:
        pass

    @abstractmethod
    def list_secrets(self, stack: str) -> List[Secret]:
        pass

    @abstractmethod
    def list_configs(self, stack: str) -> List[Config]:
        pass

    @abstractmethod
    def list_tasks(self, stack: str) -> List[Task]:
        pass

    def supports_secrets(self) -> bool:
        return version_gte(self.api_version, SECRETS_MIN_API_VERSION)

    def supports_configs(self) -> bool:
        return version_gte(self.api_version, CONFIGS_MIN_API_VERSION)


class ResourceMutator(ABC):
    """Write side: removes resources by id."""

    @abstractmethod
    def remove_service(self, resource_id: str) -> None:
        pass

    @abstractmethod
    def remove_network(self, resource_id: str) -> None:
        pass

    @abstractmethod
    def remove_secret(self, resource_id: str) -> None:
        pass

    @abstractmethod
    def remove_config(self, resource_id: str) -> None:
        pass

    def remove(self, kind: str, resource_id: str) -> None:
        """
        Remove a resource of the given kind.

        Raises:
            ValueError: If kind is not one of service, network, secret, config
            RemovalError: If the backend refused or failed the removal
        """
        handlers = {
            Service.kind: self.remove_service,
            Network.kind: self.remove_network,
            Secret.kind: self.remove_secret,
            Config.kind: self.remove_config,
        }
        if kind not in handlers:
            raise ValueError(f"Unknown resource kind: {kind}")
        handlers[kind](resource_id)
