"""
Followed conventions:
 - https://specifications.freedesktop.org/basedir-spec/basedir-spec-latest.html
"""

import os
import re
from pathlib import Path
from typing import List, Optional

CONFIG_DIR = 'actiontools'
CONFIG_FILE = 'purge.toml'


def lookup_config_file(file=CONFIG_FILE) -> Optional[Path]:
    """Returns config found in the search path or None when the file is not present in any of the directories"""
    for config_dir in config_file_search_path():
        config = config_dir / file
        if config.exists():
            return config

    return None


def config_file_search_path(*, exclude_cwd=False) -> List[Path]:
    """Sorted list of directories in which the program should look for configuration files:

    1. Current working directory unless `exclude_cwd` is True
    2. ${XDG_CONFIG_HOME}/actiontools or defaults to ${HOME}/.config/actiontools
    3. ${XDG_CONFIG_DIRS}/actiontools or defaults to /etc/xdg/actiontools

    :return: list of directories for configuration file lookup
    """
    search_path = []
    if not exclude_cwd:
        search_path.append(Path.cwd())

    search_path.append(xdg_config_home() / CONFIG_DIR)
    search_path += [path / CONFIG_DIR for path in xdg_config_dirs()]

    return search_path


def xdg_config_home() -> Path:
    if os.environ.get('XDG_CONFIG_HOME'):
        return Path(os.environ['XDG_CONFIG_HOME'])
    else:
        return Path.home() / '.config'


def xdg_config_dirs() -> List[Path]:
    if os.environ.get('XDG_CONFIG_DIRS'):
        return [Path(path) for path in re.split(r":", os.environ['XDG_CONFIG_DIRS'])]
    else:
        return [Path('/etc/xdg')]

