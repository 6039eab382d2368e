# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from typing import Optional


class PluginError(Exception):
    """Base exception class for plugin related errors.

    This exception is raised when a task execution fails, such as missing
    files, playbook failures, unreadable results or step update failures.
    """

    pass


class PreconditionError(PluginError):
    """A playbook or inventory file required by the task does not exist."""

    pass


class PlaybookExecutionError(PluginError):
    """The ansible-playbook run failed.

    Attributes:
        rc: Exit code of the process, None when the process could not be started.
        output: Captured standard output of the run.
    """

    def __init__(self, message: str, rc: Optional[int] = None, output: str = "") -> None:
        super().__init__(message)
        self.rc = rc
        self.output = output


class ResultParseError(PluginError):
    """The JSON result stream of a playbook run could not be decoded."""

    pass


class PlatformError(PluginError):
    """A step update could not be delivered to the workflow platform."""

    pass


class PluginNotImplementedError(PluginError):
    pass
