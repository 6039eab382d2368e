# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import pytest

from flows_ansible.plugin_utils.client import StepClient
from flows_ansible.plugin_utils.errors import PlatformError


class RecordingClient(StepClient):
    def __init__(self, fail_on=None):
        self.updates = []
        self.fail_on = fail_on

    def update_step(self, execution_id, step):
        if self.fail_on is not None and len(self.updates) == self.fail_on:
            raise PlatformError(f"Failed to update step {step.id}: connection refused")
        self.updates.append((execution_id, step))

    @property
    def steps(self):
        return [step for _, step in self.updates]


@pytest.fixture
def step_client():
    return RecordingClient()


@pytest.fixture
def failing_step_client():
    """A client whose first update fails."""
    return RecordingClient(fail_on=0)


@pytest.fixture
def make_step_client():
    return RecordingClient
