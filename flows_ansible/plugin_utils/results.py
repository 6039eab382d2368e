# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import json
import re

from typing import Any, Dict, Iterator

from flows_ansible.plugin_utils.errors import ResultParseError
from flows_ansible.plugin_utils.models import (
    HostMessage,
    HostResult,
    PlaybookResults,
    PlayResult,
    TaskResult,
)


# lines the profile callbacks print after the JSON document
_SKIP_LINE_PATTERNS = [
    re.compile(
        r"^\s*Playbook run took [0-9]+ days, [0-9]+ hours, [0-9]+ minutes, [0-9]+ seconds$"
    ),
]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _clean_stream(output: str) -> str:
    """Drop the non JSON preamble (warnings, deprecations) and known trailers."""
    lines = output.splitlines()
    for index, line in enumerate(lines):
        if line.startswith("{"):
            lines = lines[index:]
            break
    else:
        return ""

    return "\n".join(
        line for line in lines if not any(pattern.match(line) for pattern in _SKIP_LINE_PATTERNS)
    )


def _parse_host(host: str, data: Dict[str, Any]) -> HostResult:
    return HostResult(
        host=host,
        stdout=_as_text(data.get("stdout")),
        failed=bool(data.get("failed", False)),
        msg=_as_text(data.get("msg")),
    )


def _parse_task(data: Dict[str, Any]) -> TaskResult:
    hosts = data.get("hosts") or {}
    return TaskResult(
        name=str((data.get("task") or {}).get("name", "")),
        hosts=tuple(_parse_host(host, result or {}) for host, result in hosts.items()),
    )


def _parse_play(data: Dict[str, Any]) -> PlayResult:
    return PlayResult(
        name=str((data.get("play") or {}).get("name", "")),
        tasks=tuple(_parse_task(task) for task in data.get("tasks") or []),
    )


def parse_results(output: str) -> PlaybookResults:
    """Parse the output of a playbook run using the json stdout callback.

    Args:
        output: Captured standard output of ansible-playbook.
    Returns:
        The plays, tasks and per host results of the run.
    Raises:
        ResultParseError: If the output holds no valid JSON document.
    """
    document = _clean_stream(output)
    if not document:
        raise ResultParseError("Ansible playbook output contains no JSON results")

    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise ResultParseError(f"Invalid JSON results: {str(e)}")

    if not isinstance(data, dict):
        raise ResultParseError(
            f"Invalid JSON results: expected an object, got {type(data).__name__}"
        )

    try:
        return PlaybookResults(plays=tuple(_parse_play(play) for play in data.get("plays") or []))
    except (AttributeError, TypeError) as e:
        raise ResultParseError(f"Unexpected JSON results layout: {str(e)}")


def host_messages(results: PlaybookResults) -> Iterator[HostMessage]:
    """Yield the messages printed by the playbook tasks.

    Tasks printing a ``{"host": ..., "message": ...}`` object on stdout are
    reported with those values, any other output is reported as is for the
    inventory host. A failed task without stdout is reported with its error
    message, other results without stdout are skipped.
    """
    for host in results.hosts():
        if not host.stdout:
            if host.failed and host.msg:
                yield HostMessage(host=host.host, message=host.msg)
            continue
        try:
            data = json.loads(host.stdout)
        except ValueError:
            data = None

        if isinstance(data, dict) and "message" in data:
            yield HostMessage(
                host=_as_text(data.get("host")) or host.host,
                message=_as_text(data["message"]),
            )
        else:
            yield HostMessage(host=host.host, message=host.stdout)
