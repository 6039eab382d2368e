# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

from flows_ansible import __version__
from flows_ansible.plugin_utils.models import ActionMetadata, ParamSchema, PluginMetadata


PARAMS = (
    ParamSchema(
        key="playbook",
        title="Playbook",
        category="General",
        type="text",
        required=True,
        description="Path to the playbook file",
    ),
    ParamSchema(
        key="inventory",
        title="Inventory",
        category="General",
        type="text",
        required=True,
        description="Path to the inventory file or comma separated host list",
    ),
    ParamSchema(
        key="user",
        title="User",
        category="Authentication",
        type="text",
        description="Connect as this user",
    ),
    ParamSchema(
        key="password",
        title="Password",
        category="Authentication",
        type="password",
        description="Connection user password",
    ),
    ParamSchema(
        key="limit",
        title="Limit",
        category="General",
        type="text",
        description="Further limit selected hosts to an additional pattern",
    ),
    ParamSchema(
        key="become",
        title="Become",
        category="Sudo",
        type="boolean",
        default="false",
        description="Run playbook with become",
    ),
    ParamSchema(
        key="become_user",
        title="Become User",
        category="Sudo",
        type="text",
        default="root",
        description="User to run become tasks with",
    ),
    ParamSchema(
        key="become_pass",
        title="Become Password",
        category="Sudo",
        type="password",
        description="Become user password",
    ),
    ParamSchema(
        key="check",
        title="Check",
        category="Utility",
        type="boolean",
        default="false",
        description="Don't make any changes; instead, try to predict some of the changes that may occur",
    ),
    ParamSchema(
        key="diff",
        title="Diff",
        category="Utility",
        type="boolean",
        default="false",
        description="When changing (small) files and templates, show the differences in those files",
    ),
)


PLUGIN_METADATA = PluginMetadata(
    name="Ansible",
    type="action",
    version=__version__,
    author="JustNZ",
    action=ActionMetadata(
        name="Ansible",
        description="Execute Ansible Playbook",
        plugin="ansible",
        icon="mdi:ansible",
        category="Automation",
        params=PARAMS,
    ),
)
