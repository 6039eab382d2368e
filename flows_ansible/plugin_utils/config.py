# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import os

from dataclasses import dataclass
from typing import Mapping, Optional

from flows_ansible.plugin_utils.errors import PluginError


MAGIC_COOKIE_KEY = "PLUGIN_MAGIC_COOKIE"
MAGIC_COOKIE_VALUE = "hello"
CORE_PROTOCOL_VERSION = 1
APP_PROTOCOL_VERSION = 1


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise PluginError(f"Environment variable {name} must be an integer, got '{value}'")


@dataclass(frozen=True)
class ServeConfig:
    """Settings of the plugin process, read from the environment set by the host.

    Attributes:
        magic_cookie: Value of PLUGIN_MAGIC_COOKIE, None when unset.
        min_port: Lowest TCP port the RPC server may listen on.
        max_port: Highest TCP port the RPC server may listen on.
        host: Address the RPC server binds to.
        verbosity: Display verbosity of the plugin log output.
        playbook_bin: The ansible-playbook executable.
    """

    magic_cookie: Optional[str] = None
    min_port: int = 10000
    max_port: int = 25000
    host: str = "127.0.0.1"
    verbosity: int = 0
    playbook_bin: str = "ansible-playbook"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ServeConfig":
        if env is None:
            env = os.environ

        config = cls(
            magic_cookie=env.get(MAGIC_COOKIE_KEY),
            min_port=_get_int(env, "PLUGIN_MIN_PORT", cls.min_port),
            max_port=_get_int(env, "PLUGIN_MAX_PORT", cls.max_port),
            verbosity=_get_int(env, "FLOWS_ANSIBLE_VERBOSITY", cls.verbosity),
            playbook_bin=env.get("FLOWS_ANSIBLE_PLAYBOOK_BIN") or cls.playbook_bin,
        )
        if config.min_port > config.max_port:
            raise PluginError(
                f"PLUGIN_MIN_PORT ({config.min_port}) is greater than "
                f"PLUGIN_MAX_PORT ({config.max_port})"
            )
        return config

    @property
    def handshake_valid(self) -> bool:
        return self.magic_cookie == MAGIC_COOKIE_VALUE
