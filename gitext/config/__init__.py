"""Config module."""

from typing import Dict, Any
from .models import RepoConfig, UserConfig, TreeConfig, GitExtConfig

class Config(GitExtConfig):
    """Config object built from the merged YAML sections.

    Takes the raw dict produced by the config parser and validates each
    section into its Pydantic model.
    """
    def __init__(self, config: Dict[str, Dict[str, Any]]):
        """Initialize with parsed config dict."""
        super().__init__(
            repo=RepoConfig.model_validate(config.get('repo', {})),
            user=UserConfig.model_validate(config.get('user', {})),
            tree=TreeConfig.model_validate(config.get('tree', {})),
        )

def default_config() -> Config:
    """Get default config without reading any files."""
    return Config({
        'repo': {
            'remote': 'origin',
            'default_branch': 'main',
        },
        'user': {},
        'tree': {},
    })
