# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import sys

from ansible.utils.display import Display

from flows_ansible.plugin_utils.config import ServeConfig
from flows_ansible.plugin_utils.errors import PluginError
from flows_ansible.server import serve


display = Display()


def main() -> int:
    try:
        config = ServeConfig.from_env()
        display.verbosity = config.verbosity
        serve(config=config)
    except PluginError as e:
        sys.stderr.write(f"{e}\n")
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
