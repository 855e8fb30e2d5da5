"""
Data models for stack resources and teardown results.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple

from .states import TaskState, is_terminal


@dataclass(frozen=True)
class StackResource:
    """A resource labelled as belonging to a stack."""
    kind: ClassVar[str] = "resource"

    id: str
    name: str
    stack: str = ""


@dataclass(frozen=True)
class Service(StackResource):
    kind: ClassVar[str] = "service"


@dataclass(frozen=True)
class Network(StackResource):
    kind: ClassVar[str] = "network"


@dataclass(frozen=True)
class Secret(StackResource):
    kind: ClassVar[str] = "secret"


@dataclass(frozen=True)
class Config(StackResource):
    kind: ClassVar[str] = "config"


@dataclass(frozen=True)
class Task:
    """A unit of work scheduled for one of the stack's services."""
    id: str
    state: Optional[TaskState]
    service: str = ""
    stack: str = ""

    @property
    def terminal(self) -> bool:
        return is_terminal(self.state)


@dataclass
class StackResources:
    """Everything found for one stack, grouped by kind."""
    stack: str
    services: List[Service] = field(default_factory=list)
    networks: List[Network] = field(default_factory=list)
    secrets: List[Secret] = field(default_factory=list)
    configs: List[Config] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.services or self.networks or self.secrets or self.configs)

    def total(self) -> int:
        return len(self.services) + len(self.networks) + len(self.secrets) + len(self.configs)


@dataclass
class RemovalOutcome:
    """Result of removing one kind of resource from a stack."""
    kind: str
    attempted: List[str] = field(default_factory=list)
    failures: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def had_error(self) -> bool:
        return bool(self.failures)

    @property
    def removed(self) -> List[str]:
        failed = {resource_id for resource_id, _ in self.failures}
        return [resource_id for resource_id in self.attempted if resource_id not in failed]


@dataclass
class StackTeardownResult:
    """Per-stack summary returned by the coordinator."""
    stack: str
    outcomes: List[RemovalOutcome] = field(default_factory=list)
    nothing_found: bool = False
    wait_error: Optional[Exception] = None

    @property
    def had_error(self) -> bool:
        return any(outcome.had_error for outcome in self.outcomes)

    def outcome_for(self, kind: str) -> Optional[RemovalOutcome]:
        for outcome in self.outcomes:
            if outcome.kind == kind:
                return outcome
        return None
