# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import json
import tempfile

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

import ansible_runner

from ansible.utils.display import Display

from flows_ansible.plugin_utils.errors import PlaybookExecutionError
from flows_ansible.plugin_utils.params import PlaybookParams


display = Display()

# shipped by the ansible.posix collection, ansible-core has no json callback
STDOUT_CALLBACK = "ansible.posix.json"

# exit codes of ansible-playbook
EXIT_CODE_MESSAGES = {
    1: "error",
    2: "one or more hosts failed",
    3: "one or more hosts were unreachable",
    4: "parser error",
    5: "bad or incomplete options",
    99: "user interrupted execution",
    250: "unexpected error",
}


def describe_exit_code(rc: int) -> str:
    """Return a human readable explanation of an ansible-playbook exit code."""
    return EXIT_CODE_MESSAGES.get(rc, "unknown error")


@dataclass(frozen=True)
class PlaybookOptions:
    """Command line options of a single ansible-playbook run.

    Attributes:
        inventory: Inventory path or comma separated host list.
        connection: Connection type, always local for runner executed steps.
        become: Run operations with become.
        limit: Further limit selected hosts to an additional pattern.
        check: Don't make any changes, predict them instead.
        diff: Show the differences in changed files and templates.
        user: Connect as this user.
        become_user: Run operations as this user.
        extra_vars: Additional variables passed with --extra-vars.
    """

    inventory: str = ""
    connection: str = "local"
    become: bool = False
    limit: str = ""
    check: bool = False
    diff: bool = False
    user: str = ""
    become_user: str = ""
    extra_vars: Dict[str, Any] = field(default_factory=dict)

    def to_args(self) -> List[str]:
        """Render the options as ansible-playbook arguments."""
        args = ["--connection", self.connection]
        if self.inventory:
            args += ["--inventory", self.inventory]
        if self.become:
            args.append("--become")
        if self.limit:
            args += ["--limit", self.limit]
        if self.check:
            args.append("--check")
        if self.diff:
            args.append("--diff")
        if self.user:
            args += ["--user", self.user]
        if self.become_user:
            args += ["--become-user", self.become_user]
        if self.extra_vars:
            args += ["--extra-vars", json.dumps(self.extra_vars)]
        return args


def build_options(params: PlaybookParams) -> PlaybookOptions:
    """Translate step parameters into playbook options.

    Credentials are passed as the ansible_password and ansible_become_pass
    extra vars, which take precedence over inventory variables.
    """
    extra_vars: Dict[str, Any] = {}
    if params.password:
        extra_vars["ansible_password"] = params.password
    if params.become_pass:
        extra_vars["ansible_become_pass"] = params.become_pass

    return PlaybookOptions(
        inventory=params.inventory,
        become=params.become,
        limit=params.limit,
        check=params.check,
        diff=params.diff,
        user=params.user,
        become_user=params.become_user,
        extra_vars=extra_vars,
    )


class PlaybookRunner(ABC):
    @abstractmethod
    def run(self, playbook: str, options: PlaybookOptions) -> str:
        """Run a playbook to completion with the JSON stdout callback.

        Args:
            playbook: Path of the playbook to run.
            options: Options of the run.
        Returns:
            The captured standard output.
        Raises:
            PlaybookExecutionError: If the run could not be started or failed.
        """
        pass


class AnsibleRunnerPlaybook(PlaybookRunner):
    """Run ansible-playbook through ansible-runner's command interface."""

    def __init__(self, executable: str = "ansible-playbook") -> None:
        self.executable = executable

    def run(self, playbook: str, options: PlaybookOptions) -> str:
        cmdline_args = options.to_args() + [playbook]
        display.vvv(f"[ansible] Running {self.executable} {playbook}")

        try:
            # the artifacts hold the command line, extra vars included
            with tempfile.TemporaryDirectory(prefix="flows-ansible-") as private_data_dir:
                stdout, stderr, rc = ansible_runner.run_command(
                    executable_cmd=self.executable,
                    cmdline_args=cmdline_args,
                    envvars={
                        "ANSIBLE_STDOUT_CALLBACK": STDOUT_CALLBACK,
                        "ANSIBLE_NOCOLOR": "true",
                    },
                    private_data_dir=private_data_dir,
                    runner_mode="subprocess",
                    quiet=True,
                )
        except Exception as e:
            raise PlaybookExecutionError(f"Failed to run {self.executable}: {str(e)}")

        stdout = stdout or ""
        if rc != 0:
            message = f"{self.executable} exited with code {rc}: {describe_exit_code(rc)}"
            if stderr:
                message = f"{message}\n{stderr.strip()}"
            raise PlaybookExecutionError(message, rc=rc, output=stdout)
        return stdout
