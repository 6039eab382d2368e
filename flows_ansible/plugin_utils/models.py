# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


MESSAGE_TITLE = "Ansible Playbook"

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class Param:
    key: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Param":
        return cls(key=str(data.get("key", "")), value=str(data.get("value", "")))


@dataclass(frozen=True)
class Action:
    name: str = ""
    params: Tuple[Param, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        params = data.get("params") or []
        return cls(
            name=str(data.get("name", "")),
            params=tuple(Param.from_dict(param) for param in params),
        )


@dataclass(frozen=True)
class Step:
    id: str
    action: Action = field(default_factory=Action)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        return cls(id=str(data.get("id", "")), action=Action.from_dict(data.get("action") or {}))


@dataclass(frozen=True)
class Execution:
    id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Execution":
        return cls(id=str(data.get("id", "")))


@dataclass(frozen=True)
class PlatformConfig:
    """Connection settings for one workflow platform.

    Attributes:
        url: Base URL of the platform API.
        api_key: Runner API key sent in the Authorization header.
    """

    url: str = ""
    api_key: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformConfig":
        return cls(url=str(data.get("url", "")), api_key=str(data.get("api_key", "")))


@dataclass(frozen=True)
class RunnerConfig:
    """Runner configuration forwarded by the host with every task.

    Attributes:
        platforms: Platform settings keyed by platform name (alertflow, exflow).
    """

    platforms: Dict[str, PlatformConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunnerConfig":
        platforms = {
            name: PlatformConfig.from_dict(value)
            for name, value in data.items()
            if isinstance(value, dict)
        }
        return cls(platforms=platforms)


@dataclass(frozen=True)
class ExecuteTaskRequest:
    """A single unit of work sent by the host runner.

    Attributes:
        config: Platform connection settings used for step updates.
        execution: The workflow execution the step belongs to.
        step: The step definition, including its action parameters.
        workspace: Directory holding the checked out flow files.
        platform: Name of the platform to report to.
    """

    config: RunnerConfig
    execution: Execution
    step: Step
    workspace: str = ""
    platform: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecuteTaskRequest":
        return cls(
            config=RunnerConfig.from_dict(data.get("config") or {}),
            execution=Execution.from_dict(data.get("execution") or {}),
            step=Step.from_dict(data.get("step") or {}),
            workspace=str(data.get("workspace", "")),
            platform=str(data.get("platform", "")),
        )


@dataclass(frozen=True)
class Message:
    lines: Tuple[str, ...]
    title: str = MESSAGE_TITLE

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "lines": list(self.lines)}


@dataclass(frozen=True)
class ExecutionStepUpdate:
    """A partial update of an execution step record.

    Attributes:
        id: The step ID.
        messages: Messages appended to the step.
        status: New step status, empty to leave it unchanged.
        started_at: Optional start time of the step.
        finished_at: Optional finish time of the step.
    """

    id: str
    messages: Tuple[Message, ...] = ()
    status: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the update to its JSON body, excluding unset fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "messages": [message.to_dict() for message in self.messages],
        }
        if self.status:
            data["status"] = self.status
        if self.started_at is not None:
            data["started_at"] = self.started_at.isoformat()
        if self.finished_at is not None:
            data["finished_at"] = self.finished_at.isoformat()
        return data


@dataclass(frozen=True)
class Response:
    success: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ParamSchema:
    key: str
    title: str
    category: str
    type: str
    default: str = ""
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class ActionMetadata:
    name: str
    description: str
    plugin: str
    icon: str
    category: str
    params: Tuple[ParamSchema, ...] = ()


@dataclass(frozen=True)
class PluginMetadata:
    """Static description of the plugin used by the platform to render its UI."""

    name: str
    type: str
    version: str
    author: str
    action: ActionMetadata
    endpoint: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action"]["params"] = list(data["action"]["params"])
        return data


@dataclass(frozen=True)
class HostMessage:
    host: str
    message: str


@dataclass(frozen=True)
class HostResult:
    host: str
    stdout: str = ""
    failed: bool = False
    msg: str = ""


@dataclass(frozen=True)
class TaskResult:
    name: str
    hosts: Tuple[HostResult, ...] = ()


@dataclass(frozen=True)
class PlayResult:
    name: str
    tasks: Tuple[TaskResult, ...] = ()


@dataclass(frozen=True)
class PlaybookResults:
    plays: Tuple[PlayResult, ...] = ()

    def hosts(self) -> List[HostResult]:
        """Return every host result in play and task order."""
        return [host for play in self.plays for task in play.tasks for host in task.hosts]
