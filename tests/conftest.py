"""
Shared fixtures: an in-memory swarm that records every query and removal.
"""

import os

import pytest

from stackdown.backends.base import ResourceDirectory, ResourceMutator
from stackdown.errors import DirectoryQueryError, RemovalError
from stackdown.models import Task
from stackdown.progress import RecordingSink
from stackdown.states import TaskState


class FakeSwarm(ResourceDirectory, ResourceMutator):
    """In-memory directory and mutator for tests."""

    def __init__(self, version="1.41"):
        self.version = version
        self.resources = {"service": {}, "network": {}, "secret": {}, "config": {}}
        self.task_rounds = {}
        self.query_failures = set()
        self.removal_failures = {}
        self.queries = []
        self.removed = []
        # called with (operation, stack or id) before each query or removal
        self.before_call = None

    def add(self, stack, *resources):
        for resource in resources:
            self.resources[resource.kind].setdefault(stack, []).append(resource)

    def set_task_rounds(self, stack, *rounds):
        """Each poll returns the next round; the last one repeats."""
        self.task_rounds[stack] = [
            [Task(id=f"{stack}-t{i}", state=TaskState(state), stack=stack) for i, state in enumerate(states)]
            for states in rounds
        ]

    @property
    def api_version(self):
        return self.version

    def _query(self, resource, stack):
        self.queries.append((resource, stack))
        if self.before_call is not None:
            self.before_call(resource, stack)
        if (resource, stack) in self.query_failures:
            raise DirectoryQueryError(resource, stack, "connection refused")

    def _list(self, kind, stack):
        self._query(f"{kind}s", stack)
        return list(self.resources[kind].get(stack, []))

    def list_services(self, stack):
        return self._list("service", stack)

    def list_networks(self, stack):
        return self._list("network", stack)

    def list_secrets(self, stack):
        return self._list("secret", stack)

    def list_configs(self, stack):
        return self._list("config", stack)

    def list_tasks(self, stack):
        self._query("tasks", stack)
        rounds = self.task_rounds.get(stack, [])
        if not rounds:
            return []
        if len(rounds) > 1:
            return rounds.pop(0)
        return rounds[0]

    def _remove(self, kind, resource_id):
        self.removed.append((kind, resource_id))
        if self.before_call is not None:
            self.before_call(kind, resource_id)
        if resource_id in self.removal_failures:
            raise RemovalError(kind, resource_id, self.removal_failures[resource_id])

    def remove_service(self, resource_id):
        self._remove("service", resource_id)

    def remove_network(self, resource_id):
        self._remove("network", resource_id)

    def remove_secret(self, resource_id):
        self._remove("secret", resource_id)

    def remove_config(self, resource_id):
        self._remove("config", resource_id)


@pytest.fixture
def swarm():
    return FakeSwarm()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no STACKDOWN_* variables set."""
    for name in list(os.environ):
        if name.startswith("STACKDOWN_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path
