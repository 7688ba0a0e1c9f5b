"""Config parser logic."""

from pathlib import Path
from typing import Dict, Any, Optional
import logging
import yaml

from ...typing import GitInterface, GitExtError

# Get module logger
logger = logging.getLogger(__name__)

RawConfig = Dict[str, Dict[str, Any]]

REPO_CONFIG_FILE = ".gitext.yaml"
SECTIONS = ('repo', 'user', 'tree')

def _merge(config: RawConfig, loaded: Any, sections: tuple) -> None:
    if not isinstance(loaded, dict):
        return
    for section in sections:
        value = loaded.get(section)
        if isinstance(value, dict):
            config[section].update(value)

def _load_yaml(path: Path) -> Optional[Any]:
    try:
        with open(path, 'r') as f:
            logger.debug(f"Found {path}, loading...")
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug(f"No {path} found")
        return None

def parse_config(git_cmd: GitInterface, user_config_path: Optional[Path] = None) -> RawConfig:
    """Parse config from the repository file, then the user file.

    The repository file may set any section. The user file only
    overrides the `user` and `tree` sections.
    """
    config: RawConfig = {
        'repo': {
            'remote': 'origin',
            'default_branch': 'main',
        },
        'user': {},
        'tree': {},
    }

    try:
        top_level = git_cmd.run(["rev-parse", "--show-toplevel"])
    except GitExtError as e:
        logger.debug(f"Not reading repository config: {e}")
    else:
        _merge(config, _load_yaml(Path(top_level) / REPO_CONFIG_FILE), SECTIONS)

    if user_config_path is None:
        user_config_path = Path(internal_config_file_path())
    _merge(config, _load_yaml(user_config_path), ('user', 'tree'))

    logger.debug(f"Effective config: {config}")
    return config

def internal_config_file_path() -> str:
    """Get path to the per-user config file."""
    return str(Path.home() / ".gitext.yml")
