# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import os

from typing import Optional

from ansible.utils.display import Display

from flows_ansible.plugin_utils.errors import PreconditionError
from flows_ansible.plugin_utils.params import PlaybookParams
from flows_ansible.plugin_utils.reporter import StepReporter


display = Display()


def missing_file_error(path: str) -> Optional[str]:
    """Return the OS error text when path does not exist, None otherwise.

    A path that can never name a file, such as one holding a NUL byte, counts
    as missing. Other errors are left to the playbook run.
    """
    try:
        os.stat(path)
    except (FileNotFoundError, ValueError) as e:
        return str(e)
    except OSError as e:
        display.vvv(f"[ansible] Unable to stat '{path}': {e}")
    return None


def is_host_list(inventory: str) -> bool:
    """An inventory containing a comma is an inline host list, not a file."""
    return "," in inventory


def check_preconditions(params: PlaybookParams, reporter: StepReporter) -> None:
    """Ensure the playbook and inventory files exist before running.

    A missing file is reported to the platform as a terminal error.

    Raises:
        PreconditionError: If the playbook or inventory file does not exist.
        PlatformError: If the error could not be reported.
    """
    error = missing_file_error(params.playbook)
    if error is not None:
        reporter.error(["Playbook file does not exist", error])
        raise PreconditionError("playbook file does not exist")

    if is_host_list(params.inventory):
        return

    error = missing_file_error(params.inventory)
    if error is not None:
        reporter.error(["Inventory file does not exist", error])
        raise PreconditionError("inventory file does not exist")
