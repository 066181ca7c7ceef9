"""Configuration Store package for one installation's configuration state.

This package provides:
- ConfigStore: Main class for reading/writing configuration items
- MainConfig/ProfileSettings: Settings shapes
- StoreError: Raised on unreadable items and critical write failures

Directory structure managed:
    ~/.dirconf/
    ├── main.yaml
    ├── certificates.pem
    ├── profiles/
    └── templates/
"""

from .schema import MainConfig, ProfileSettings
from .store import (
    ConfigStore,
    StoreError,
    DEFAULT_CONFIG_DIR,
    get_default_base_dir,
)

__all__ = [
    "ConfigStore",
    "StoreError",
    "MainConfig",
    "ProfileSettings",
    "DEFAULT_CONFIG_DIR",
    "get_default_base_dir",
]
