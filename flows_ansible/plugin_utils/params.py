# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable

from flows_ansible.plugin_utils.models import Param


@dataclass(frozen=True)
class PlaybookParams:
    """Typed action parameters of an Ansible step.

    Attributes:
        playbook: Resolved playbook path.
        inventory: Resolved inventory path or comma separated host list.
        become: Run the playbook with privilege escalation.
        limit: Additional host pattern.
        check: Run in check mode.
        diff: Show file differences.
        user: Remote connection user.
        password: Remote connection password.
        become_user: User to become.
        become_pass: Password of the become user.
    """

    playbook: str = ""
    inventory: str = ""
    become: bool = False
    limit: str = ""
    check: bool = False
    diff: bool = False
    user: str = ""
    password: str = ""
    become_user: str = ""
    become_pass: str = ""


def resolve_path(value: str, workspace: str) -> str:
    """Prefix values that look like a path with the workspace directory.

    Bare names (and inline host lists without a slash) are returned as is.
    """
    if "/" in value:
        return workspace + "/" + value
    return value


def parse_flag(value: str) -> bool:
    return value == "true"


def _parsers(workspace: str) -> Dict[str, Callable[[str], object]]:
    def as_path(value: str) -> str:
        return resolve_path(value, workspace)

    def verbatim(value: str) -> str:
        return value

    return {
        "playbook": as_path,
        "inventory": as_path,
        "become": parse_flag,
        "check": parse_flag,
        "diff": parse_flag,
        "limit": verbatim,
        "user": verbatim,
        "password": verbatim,
        "become_user": verbatim,
        "become_pass": verbatim,
    }


def extract_params(params: Iterable[Param], workspace: str) -> PlaybookParams:
    """Resolve the step key/value list into typed playbook parameters.

    Unknown keys are ignored and a repeated key overwrites the earlier value.

    Args:
        params: Ordered action parameters of the step.
        workspace: Workspace directory used to resolve relative paths.
    Returns:
        The extracted parameters.
    """
    parsers = _parsers(workspace)
    result = PlaybookParams()
    for param in params:
        parser = parsers.get(param.key)
        if parser is None:
            continue
        result = replace(result, **{param.key: parser(param.value)})
    return result
