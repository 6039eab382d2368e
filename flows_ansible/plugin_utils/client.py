# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import json

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ansible.module_utils.urls import open_url
from ansible.utils.display import Display

from flows_ansible.plugin_utils.errors import PlatformError
from flows_ansible.plugin_utils.models import ExecutionStepUpdate, RunnerConfig


display = Display()


class StepClient(ABC):
    @abstractmethod
    def update_step(self, execution_id: str, step: ExecutionStepUpdate) -> None:
        """Update an execution step on the workflow platform.

        Args:
            execution_id: ID of the workflow execution.
            step: The partial step update.
        Raises:
            PlatformError: If the update could not be delivered.
        """
        pass


class PlatformClient(StepClient):
    """HTTP client for the step API of AlertFlow and exFlow."""

    def __init__(self, url: str, api_key: str, validate_certs: bool = True, timeout: int = 30):
        """Initialize the platform client.

        Args:
            url: Base URL of the platform API.
            api_key: Runner API key sent as the Authorization header.
            validate_certs: Whether to validate SSL certificates (default: True).
            timeout: Timeout of a single HTTP request in seconds.
        """
        self.url = url.rstrip("/")
        self._api_key = api_key
        self.validate_certs = validate_certs
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: RunnerConfig, platform: str) -> "PlatformClient":
        """Create the client for the platform named in the task request.

        Raises:
            PlatformError: If the platform is unknown or has no URL configured.
        """
        platform_config = config.platforms.get(platform)
        if platform_config is None:
            raise PlatformError(f"Platform '{platform}' is not configured")
        if not platform_config.url:
            raise PlatformError(f"Platform '{platform}' has no url configured")
        return cls(platform_config.url, platform_config.api_key)

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": self._api_key,
        }

    def step_url(self, execution_id: str, step_id: str) -> str:
        return f"{self.url}/api/v1/executions/{execution_id}/steps/{step_id}"

    def update_step(self, execution_id: str, step: ExecutionStepUpdate) -> None:
        """Update an execution step on the workflow platform.

        Args:
            execution_id: ID of the workflow execution.
            step: The partial step update.
        Raises:
            PlatformError: If the update could not be delivered.
        """
        url = self.step_url(execution_id, step.id)
        display.vvv(f"[platform] PUT {url} status={step.status or '-'}")

        response_code: Optional[int] = None
        try:
            response = open_url(
                url,
                method="PUT",
                data=json.dumps(step.to_dict()),
                headers=self._build_headers(),
                validate_certs=self.validate_certs,
                timeout=self.timeout,
            )
            response_code = response.getcode()
        except Exception as e:
            raise PlatformError(f"Failed to update step {step.id}: {str(e)}")

        if response_code not in (200, 201, 204):
            raise PlatformError(
                f"Failed to update step {step.id}: unexpected response code: {response_code}"
            )
