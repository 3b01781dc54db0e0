import logging
import os
from configparser import ConfigParser
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Union

from blamepr.common import DEFAULT_GITLAB_HOST

logger = logging.getLogger(__name__)

SECTION = 'blamepr'
REPO_CONFIG_NAME = '.blamepr'

ENV_VARIABLES = {
    'gitlab_host': 'BLAMEPR_GITLAB_HOST',
    'default_branch': 'BLAMEPR_DEFAULT_BRANCH',
}


@dataclass(frozen=True)
class Config:
    gitlab_host: str = DEFAULT_GITLAB_HOST
    default_branch: str = 'master'


def user_config_path() -> Path:
    try:
        base = Path(os.environ['XDG_CONFIG_HOME'])
    except KeyError:
        base = Path.home() / '.config'
    return base / 'blamepr' / 'config'


def config_paths(workdir: Optional[Union[str, Path]] = None) -> List[Path]:
    paths = [user_config_path()]
    if workdir is not None:
        paths.append(Path(workdir) / REPO_CONFIG_NAME)
    return paths


def load_config(workdir: Optional[Union[str, Path]] = None, **overrides: Optional[str]) -> Config:
    """
    Builds the configuration from, in increasing priority: defaults, the user config file,
    the repository's .blamepr file, BLAMEPR_* environment variables and explicit overrides.
    Empty values are skipped at every level.

    >>> load_config(workdir=None, gitlab_host='git.corp.net').gitlab_host
    'git.corp.net'
    """
    parser = ConfigParser()
    read = parser.read(config_paths(workdir))
    if read:
        logger.debug(f'Read configuration from {read}')

    values = {}
    if parser.has_section(SECTION):
        for key in ENV_VARIABLES:
            value = parser[SECTION].get(key, '').strip()
            if value:
                values[key] = value

    for key, env_variable in ENV_VARIABLES.items():
        value = os.environ.get(env_variable, '').strip()
        if value:
            values[key] = value

    for key, value in overrides.items():
        if key not in ENV_VARIABLES:
            raise TypeError(f'Unknown configuration option: {key}')
        if value is not None and value.strip():
            values[key] = value.strip()

    config = replace(Config(), **values)
    logger.debug(f'Using {config}')
    return config
