"""Domain models for crawled metadata trees."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from metadata_snapshot.app.constants import BRANCH
from metadata_snapshot.app.domain.errors import MetadataError
from metadata_snapshot.app.schemas.metadata import TasksEndpoint


@dataclass(frozen=True)
class KeyValue:
    """Flat JSON object of strings, already redacted."""

    values: dict[str, str]

    def to_jsonable(self) -> dict[str, str]:
        return dict(self.values)


@dataclass(frozen=True)
class Container:
    docker_id: str
    docker_name: str
    name: str

    def to_jsonable(self) -> dict[str, str]:
        return {"DockerId": self.docker_id, "DockerName": self.docker_name, "Name": self.name}


@dataclass(frozen=True)
class Task:
    arn: str
    desired_status: str
    known_status: str
    family: str
    version: str
    containers: tuple[Container, ...] = ()

    def to_jsonable(self) -> dict[str, Any]:
        return {
            "Arn": self.arn,
            "DesiredStatus": self.desired_status,
            "KnownStatus": self.known_status,
            "Family": self.family,
            "Version": self.version,
            "Containers": [c.to_jsonable() for c in self.containers],
        }


@dataclass(frozen=True)
class TaskListing:
    """ECS agent `/v1/tasks` style leaf."""

    tasks: tuple[Task, ...]

    @staticmethod
    def from_endpoint(endpoint: TasksEndpoint) -> "TaskListing":
        return TaskListing(
            tasks=tuple(
                Task(
                    arn=t.arn,
                    desired_status=t.desired_status,
                    known_status=t.known_status,
                    family=t.family,
                    version=t.version,
                    containers=tuple(
                        Container(docker_id=c.docker_id, docker_name=c.docker_name, name=c.name)
                        for c in t.containers
                    ),
                )
                for t in endpoint.tasks
            )
        )

    def to_jsonable(self) -> dict[str, Any]:
        return {"Tasks": [t.to_jsonable() for t in self.tasks]}


@dataclass(frozen=True)
class Opaque:
    """Body that is neither a key-value object nor a task listing."""

    text: str

    def to_jsonable(self) -> str:
        return self.text


@dataclass(frozen=True)
class Document:
    """Arbitrary JSON object, as read from the container metadata file."""

    content: dict[str, Any]

    def to_jsonable(self) -> dict[str, Any]:
        return self.content


@dataclass(frozen=True)
class Failure:
    """Error captured at one path; siblings are unaffected."""

    error: MetadataError

    @property
    def message(self) -> str:
        return str(self.error)

    def to_jsonable(self) -> dict[str, str]:
        return {"error": self.message, "kind": type(self.error).__name__}


@dataclass
class Directory:
    children: dict[str, "MetadataNode"] = field(default_factory=dict)

    def __getitem__(self, key: str) -> "MetadataNode":
        return self.children[key]

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def keys(self):
        return self.children.keys()

    def to_jsonable(self) -> dict[str, Any]:
        return {name: child.to_jsonable() for name, child in self.children.items()}


Leaf = Union[KeyValue, TaskListing, Opaque]
MetadataNode = Union[KeyValue, TaskListing, Opaque, Directory, Failure]
BranchValue = Union[MetadataNode, Document]


@dataclass(frozen=True)
class Snapshot:
    """Present branches only; absent sources never appear, not even as null."""

    branches: dict[str, BranchValue]

    @staticmethod
    def from_results(results: dict[str, BranchValue | None]) -> "Snapshot":
        return Snapshot(
            branches={
                name: results[name]
                for name in BRANCH.ORDER
                if results.get(name) is not None
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return {name: value.to_jsonable() for name, value in self.branches.items()}
