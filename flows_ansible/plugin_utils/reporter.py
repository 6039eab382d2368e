# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from flows_ansible.plugin_utils.client import StepClient
from flows_ansible.plugin_utils.models import (
    STATUS_ERROR,
    STATUS_RUNNING,
    STATUS_SUCCESS,
    ExecutionStepUpdate,
    Message,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepReporter:
    """Push status and progress messages of one step to the platform.

    Every call is delivered immediately. A delivery failure is raised to the
    caller and aborts the task, updates are never retried or buffered.

    Attributes:
        client: Client used to deliver the updates.
        execution_id: ID of the workflow execution.
        step_id: ID of the step being updated.
        started_at: Start time of the task, reused by the terminal update.
    """

    def __init__(
        self,
        client: StepClient,
        execution_id: str,
        step_id: str,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.execution_id = execution_id
        self.step_id = step_id
        self._clock = clock
        self.started_at = clock()

    def _send(
        self,
        lines: Iterable[str],
        status: str = "",
        started_at: Optional[datetime] = None,
        finished_at: Optional[datetime] = None,
    ) -> None:
        update = ExecutionStepUpdate(
            id=self.step_id,
            messages=(Message(lines=tuple(lines)),),
            status=status,
            started_at=started_at,
            finished_at=finished_at,
        )
        self.client.update_step(self.execution_id, update)

    def _finished_at(self) -> datetime:
        # a wall clock step back must not finish before the start
        return max(self._clock(), self.started_at)

    def running(self, lines: Iterable[str]) -> None:
        """Mark the step as running."""
        self._send(lines, status=STATUS_RUNNING, started_at=self.started_at)

    def progress(self, lines: Iterable[str]) -> None:
        """Append a message without changing the step status."""
        self._send(lines)

    def success(self, lines: Iterable[str]) -> None:
        self._send(
            lines,
            status=STATUS_SUCCESS,
            started_at=self.started_at,
            finished_at=self._finished_at(),
        )

    def error(self, lines: Iterable[str]) -> None:
        self._send(
            lines,
            status=STATUS_ERROR,
            started_at=self.started_at,
            finished_at=self._finished_at(),
        )
