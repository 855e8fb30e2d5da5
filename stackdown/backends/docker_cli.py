"""
Docker swarm backend driven through the ``docker`` command-line client.
"""

import json
import logging
import subprocess
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import DirectoryQueryError, RemovalError, StackdownError
from ..models import Config, Network, Secret, Service, StackResource, Task
from ..states import TaskState
from .base import ResourceDirectory, ResourceMutator

logger = logging.getLogger(__name__)

STACK_NAMESPACE_LABEL = "com.docker.stack.namespace"
JSON_FORMAT = "{{json .}}"

R = TypeVar("R", bound=StackResource)


class DockerCommandError(StackdownError):
    """The docker client could not be run or exited non-zero."""

    def __init__(self, command: List[str], message: str, stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class _ListRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="ID")
    name: str = Field(alias="Name")


class _TaskRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    current_state: str = Field(default="", alias="CurrentState")


class _ClientVersion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_version: str = Field(alias="ApiVersion")


class DockerCLI(ResourceDirectory, ResourceMutator):
    """
    Lists and removes stack resources by shelling out to ``docker``.

    Resources are matched on the ``com.docker.stack.namespace`` label that
    ``docker stack deploy`` puts on everything it creates.
    """

    def __init__(
        self,
        docker_bin: str = "docker",
        context: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: float = 60.0,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.docker_bin = docker_bin
        self.context = context
        self.timeout = timeout
        self._runner = runner
        self._api_version = api_version

    @classmethod
    def from_settings(cls, settings) -> "DockerCLI":
        return cls(
            docker_bin=settings.docker_bin,
            context=settings.docker_context,
            api_version=settings.api_version,
            timeout=settings.command_timeout,
        )

    def _command(self, *args: str) -> List[str]:
        command = [self.docker_bin]
        if self.context:
            command += ["--context", self.context]
        command += list(args)
        return command

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a docker command and capture its output.

        Raises:
            DockerCommandError: If the binary is missing, the command times
                out, or (with check) it exits non-zero
        """
        command = self._command(*args)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            proc = self._runner(
                command,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DockerCommandError(command, f"docker client not found: {self.docker_bin}") from e
        except subprocess.TimeoutExpired as e:
            raise DockerCommandError(command, f"command timed out after {self.timeout:g}s") from e

        if check and proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise DockerCommandError(command, stderr or f"exit status {proc.returncode}", stderr)
        return proc

    @staticmethod
    def _json_lines(output: str) -> List[dict]:
        records = []
        for line in (output or "").splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))
        return records

    @property
    def api_version(self) -> Optional[str]:
        """API version of the docker client, detected once and cached."""
        if self._api_version is None:
            # the client block is printed even when the daemon is unreachable
            try:
                proc = self._run("version", "--format", "{{json .Client}}", check=False)
                self._api_version = _ClientVersion.model_validate_json((proc.stdout or "").strip()).api_version
            except (DockerCommandError, ValidationError, ValueError) as e:
                raise DirectoryQueryError("docker api version", None, e) from e
            logger.debug(f"Detected docker API version {self._api_version}")
        return self._api_version

    def _list(self, resource_cls: Type[R], subcommand: str, stack: str) -> List[R]:
        try:
            proc = self._run(
                subcommand, "ls",
                "--filter", f"label={STACK_NAMESPACE_LABEL}={stack}",
                "--format", JSON_FORMAT,
            )
            records = [_ListRecord.model_validate(data) for data in self._json_lines(proc.stdout)]
        except (DockerCommandError, ValidationError, ValueError) as e:
            raise DirectoryQueryError(f"{resource_cls.kind}s", stack, e) from e

        return [resource_cls(id=record.id, name=record.name, stack=stack) for record in records]

    def list_services(self, stack: str) -> List[Service]:
        return self._list(Service, "service", stack)

    def list_networks(self, stack: str) -> List[Network]:
        return self._list(Network, "network", stack)

    def list_secrets(self, stack: str) -> List[Secret]:
        return self._list(Secret, "secret", stack)

    def list_configs(self, stack: str) -> List[Config]:
        return self._list(Config, "config", stack)

    def list_tasks(self, stack: str) -> List[Task]:
        try:
            proc = self._run("stack", "ps", "--no-trunc", "--format", JSON_FORMAT, stack)
            records = [_TaskRecord.model_validate(data) for data in self._json_lines(proc.stdout)]
        except DockerCommandError as e:
            # once every service is gone the stack has no tasks left
            if "nothing found in stack" in e.stderr.lower():
                return []
            raise DirectoryQueryError("tasks", stack, e) from e
        except (ValidationError, ValueError) as e:
            raise DirectoryQueryError("tasks", stack, e) from e

        return [
            Task(
                id=record.id,
                state=TaskState.parse(record.current_state),
                service=record.name.rsplit(".", 1)[0],
                stack=stack,
            )
            for record in records
        ]

    def _remove(self, kind: str, resource_id: str) -> None:
        try:
            self._run(kind, "rm", resource_id)
        except DockerCommandError as e:
            raise RemovalError(kind, resource_id, e) from e

    def remove_service(self, resource_id: str) -> None:
        self._remove(Service.kind, resource_id)

    def remove_network(self, resource_id: str) -> None:
        self._remove(Network.kind, resource_id)

    def remove_secret(self, resource_id: str) -> None:
        self._remove(Secret.kind, resource_id)

    def remove_config(self, resource_id: str) -> None:
        self._remove(Config.kind, resource_id)
