# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from typing import Any, Callable, Dict, Optional

from ansible.utils.display import Display

from flows_ansible.plugin_utils.checks import check_preconditions
from flows_ansible.plugin_utils.client import PlatformClient, StepClient
from flows_ansible.plugin_utils.errors import (
    PlaybookExecutionError,
    PluginNotImplementedError,
    ResultParseError,
)
from flows_ansible.plugin_utils.metadata import PLUGIN_METADATA
from flows_ansible.plugin_utils.models import (
    ExecuteTaskRequest,
    PluginMetadata,
    Response,
    RunnerConfig,
)
from flows_ansible.plugin_utils.params import PlaybookParams, extract_params
from flows_ansible.plugin_utils.reporter import StepReporter
from flows_ansible.plugin_utils.results import host_messages, parse_results
from flows_ansible.plugin_utils.runner import (
    AnsibleRunnerPlaybook,
    PlaybookRunner,
    build_options,
)


display = Display()

ClientFactory = Callable[[RunnerConfig, str], StepClient]


class Plugin:
    """Ansible action plugin for the flow runners.

    Attributes:
        runner: Runner used to execute the playbooks.
        client_factory: Creates the step API client for a task request.
    """

    def __init__(
        self,
        runner: Optional[PlaybookRunner] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.runner = runner or AnsibleRunnerPlaybook()
        self.client_factory = client_factory or PlatformClient.from_config

    def execute_task(self, request: ExecuteTaskRequest) -> Response:
        """Run the playbook of an Ansible step and report its progress.

        Every failure after the step reporter is available is reported to the
        platform as a terminal error before it is raised.

        Args:
            request: The task request sent by the runner.
        Returns:
            A successful response.
        Raises:
            PreconditionError: If the playbook or inventory file does not exist.
            PlaybookExecutionError: If the playbook run failed.
            ResultParseError: If the results of a successful run are unreadable.
            PlatformError: If a step update could not be delivered.
        """
        params = extract_params(request.step.action.params, request.workspace)
        client = self.client_factory(request.config, request.platform)
        reporter = StepReporter(client, request.execution.id, request.step.id)

        check_preconditions(params, reporter)

        reporter.running(
            [
                "Starting Ansible Playbook",
                "Playbook: " + params.playbook,
                "Inventory: " + params.inventory,
            ]
        )

        execution_error: Optional[PlaybookExecutionError] = None
        try:
            output = self._run(params)
        except PlaybookExecutionError as e:
            display.warning(f"[ansible] {e}")
            execution_error = e
            output = e.output

        # a run that never started has nothing to parse
        if execution_error is not None and not output:
            reporter.error(["Ansible Playbook failed", str(execution_error)])
            raise execution_error

        try:
            self._report_hosts(output, reporter)
        except ResultParseError as e:
            lines = ["Failed to parse Ansible Playbook output", str(e)]
            if execution_error is not None:
                reporter.error(["Ansible Playbook failed", str(execution_error)] + lines)
                raise execution_error
            reporter.error(lines)
            raise

        if execution_error is not None:
            reporter.error(["Ansible Playbook failed", str(execution_error)])
            raise execution_error

        reporter.success(["Ansible Playbook executed successfully"])
        return Response(success=True)

    def _run(self, params: PlaybookParams) -> str:
        display.vvv(f"[ansible] Inventory: {params.inventory}, limit: {params.limit or '-'}")
        return self.runner.run(params.playbook, build_options(params))

    def _report_hosts(self, output: str, reporter: StepReporter) -> None:
        """Report the message of every host and task found in the results.

        Raises:
            ResultParseError: If the output could not be parsed.
            PlatformError: If a progress update could not be delivered.
        """
        results = parse_results(output)
        for host_message in host_messages(results):
            reporter.progress(["Host: " + host_message.host, host_message.message])
            display.display(f"[{host_message.host}] {host_message.message}")

    def endpoint_request(self, request: Dict[str, Any]) -> Response:
        """Handle a webhook request sent to the plugin endpoint.

        Raises:
            PluginNotImplementedError: Always, the plugin exposes no endpoint.
        """
        raise PluginNotImplementedError("not implemented")

    def info(self, request: Optional[Dict[str, Any]] = None) -> PluginMetadata:
        """Return the static plugin metadata, the request is ignored."""
        return PLUGIN_METADATA
