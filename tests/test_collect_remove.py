"""
Tests for collecting a stack's resources and removing them.
"""

import threading

import pytest

from stackdown.errors import DirectoryQueryError, TeardownCancelled
from stackdown.models import Config, Network, Secret, Service
from stackdown.teardown import collect_stack_resources, remove_all, removal_order


class TestCollect:
    """Test resource collection and capability gating."""

    def test_collects_all_kinds(self, swarm):
        swarm.add("web", Service("s1", "web_api", "web"), Network("n1", "web_default", "web"))
        swarm.add("web", Secret("x1", "web_token", "web"), Config("c1", "web_conf", "web"))

        found = collect_stack_resources(swarm, "web")

        assert [s.name for s in found.services] == ["web_api"]
        assert [n.name for n in found.networks] == ["web_default"]
        assert [s.name for s in found.secrets] == ["web_token"]
        assert [c.name for c in found.configs] == ["web_conf"]
        assert not found.is_empty()
        assert found.total() == 4

    def test_old_api_skips_secrets_and_configs(self, swarm):
        """Test that unsupported kinds come back empty without being queried."""
        swarm.version = "1.24"
        swarm.add("web", Secret("x1", "web_token", "web"), Config("c1", "web_conf", "web"))

        found = collect_stack_resources(swarm, "web")

        assert found.secrets == []
        assert found.configs == []
        assert ("secrets", "web") not in swarm.queries
        assert ("configs", "web") not in swarm.queries
        assert found.is_empty()

    def test_secrets_without_configs(self, swarm):
        swarm.version = "1.25"
        swarm.add("web", Secret("x1", "web_token", "web"), Config("c1", "web_conf", "web"))

        found = collect_stack_resources(swarm, "web")

        assert len(found.secrets) == 1
        assert found.configs == []

    def test_unsupported_kind_ignores_query_failure(self, swarm):
        swarm.version = "1.24"
        swarm.query_failures.add(("secrets", "web"))

        found = collect_stack_resources(swarm, "web")
        assert found.secrets == []

    def test_service_query_failure_is_fatal(self, swarm):
        swarm.query_failures.add(("services", "web"))

        with pytest.raises(DirectoryQueryError, match="web"):
            collect_stack_resources(swarm, "web")

    def test_network_query_failure_is_fatal(self, swarm):
        swarm.query_failures.add(("networks", "web"))

        with pytest.raises(DirectoryQueryError):
            collect_stack_resources(swarm, "web")

    def test_empty_stack(self, swarm):
        found = collect_stack_resources(swarm, "nothing")
        assert found.is_empty()
        assert found.total() == 0


class TestRemoveAll:
    """Test removal of one kind of resource."""

    def test_continues_past_failures(self, swarm, sink):
        """Test that every item is attempted once even when some fail."""
        networks = [Network(f"n{i}", f"net{i}", "web") for i in range(4)]
        swarm.removal_failures = {"n1": "network is in use", "n3": "not found"}

        outcome = remove_all(swarm, "network", networks, sink)

        assert swarm.removed == [("network", "n0"), ("network", "n1"), ("network", "n2"), ("network", "n3")]
        assert outcome.had_error
        assert [resource_id for resource_id, _ in outcome.failures] == ["n1", "n3"]
        assert outcome.removed == ["n0", "n2"]
        assert "Failed to remove network n1: network is in use" in sink.stderr
        assert "Failed to remove network n3: not found" in sink.stderr

    def test_no_failures(self, swarm, sink):
        secrets = [Secret("x1", "token", "web"), Secret("x2", "key", "web")]

        outcome = remove_all(swarm, "secret", secrets, sink)

        assert not outcome.had_error
        assert outcome.attempted == ["x1", "x2"]
        assert sink.stdout == ["Removing secret token", "Removing secret key"]
        assert sink.stderr == []

    def test_services_removed_in_name_order(self, swarm, sink):
        services = [
            Service("3", "web_worker", "web"),
            Service("1", "web_api", "web"),
            Service("2", "web_cache", "web"),
        ]

        remove_all(swarm, "service", services, sink)

        assert sink.stdout == [
            "Removing service web_api",
            "Removing service web_cache",
            "Removing service web_worker",
        ]
        assert [resource_id for _, resource_id in swarm.removed] == ["1", "2", "3"]

    def test_other_kinds_keep_listed_order(self):
        configs = [Config("b", "zeta", "web"), Config("a", "alpha", "web")]
        assert [c.id for c in removal_order("config", configs)] == ["b", "a"]

    def test_empty_list(self, swarm, sink):
        outcome = remove_all(swarm, "config", [], sink)
        assert not outcome.had_error
        assert sink.lines == []

    def test_cancel_stops_before_next_item(self, swarm, sink):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(TeardownCancelled):
            remove_all(swarm, "service", [Service("1", "web_api", "web")], sink, cancel)
        assert swarm.removed == []
