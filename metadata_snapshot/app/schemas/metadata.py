"""Wire shapes returned by the metadata services.

Each parser returns None when the body does not have its shape, so callers
can try them in order.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

# JSON null (as a value or as the whole body) reads as an empty string or empty map.
_KEY_VALUE = TypeAdapter(dict[str, str | None] | None)


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ContainerRecord(_WireModel):
    docker_id: str = Field("", alias="DockerId")
    docker_name: str = Field("", alias="DockerName")
    name: str = Field("", alias="Name")


class TaskRecord(_WireModel):
    arn: str = Field("", alias="Arn")
    desired_status: str = Field("", alias="DesiredStatus")
    known_status: str = Field("", alias="KnownStatus")
    family: str = Field("", alias="Family")
    version: str = Field("", alias="Version")
    containers: list[ContainerRecord] = Field(default_factory=list, alias="Containers")

    @field_validator("containers", mode="before")
    @classmethod
    def _null_containers(cls, value: Any) -> Any:
        return [] if value is None else value


class TasksEndpoint(_WireModel):
    tasks: list[TaskRecord] = Field(default_factory=list, alias="Tasks")

    @field_validator("tasks", mode="before")
    @classmethod
    def _null_tasks(cls, value: Any) -> Any:
        return [] if value is None else value


class AvailableCommandsResponse(_WireModel):
    available_commands: list[str] = Field(default_factory=list, alias="AvailableCommands")


def parse_key_value(body: str) -> dict[str, str] | None:
    try:
        values = _KEY_VALUE.validate_json(body, strict=True)
    except ValidationError:
        return None
    if values is None:
        return {}
    return {key: "" if value is None else value for key, value in values.items()}


def parse_task_listing(body: str) -> TasksEndpoint | None:
    """Return the task listing only when it holds at least one task."""
    try:
        listing = TasksEndpoint.model_validate_json(body)
    except ValidationError:
        return None
    if not listing.tasks:
        return None
    return listing


def parse_available_commands(body: str) -> list[str]:
    """Sub-command paths of a command menu; empty when the body is not one."""
    try:
        return AvailableCommandsResponse.model_validate_json(body).available_commands
    except ValidationError:
        return []
