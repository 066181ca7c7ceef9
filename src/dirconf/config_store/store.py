"""Configuration Store for one installation's configuration state.

Handles:
- Reading/writing YAML files for main config, profiles and account templates
- Raw certificate storage
- Directory structure initialization
"""
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .schema import MainConfig, ProfileSettings

logger = logging.getLogger(__name__)

# Default config directory
DEFAULT_CONFIG_DIR = Path.home() / ".dirconf"


def get_default_base_dir() -> Path:
    """Get the store directory from DIRCONF_HOME (default: ~/.dirconf)."""
    path_str = os.environ.get("DIRCONF_HOME")
    return Path(path_str).expanduser() if path_str else DEFAULT_CONFIG_DIR


class StoreError(Exception):
    """A configuration item could not be read or written."""
    pass


def _check_name(name: str, what: str) -> str:
    """Reject names that would escape their directory."""
    if (
        not name
        or name.startswith(".")
        or "/" in name
        or "\\" in name
        or "\0" in name
    ):
        raise StoreError(f"Invalid {what} name: {name!r}")
    return name


class ConfigStore:
    """
    Manages configuration storage and retrieval.

    Directory structure:
        <base_dir>/
        ├── main.yaml             # Installation-wide settings
        ├── certificates.pem      # TLS CA certificates (raw bytes)
        ├── profiles/             # One YAML file per server profile
        └── templates/            # Account templates
            └── <profile>/<type_id>/<template>.yaml

    The store object is the configuration handle: exporter, importer and
    callers all receive it explicitly.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize the config store.

        Args:
            base_dir: Base directory for configs (default: DIRCONF_HOME or ~/.dirconf)
        """
        self.base_dir = Path(base_dir) if base_dir else get_default_base_dir()
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Create directory structure if it doesn't exist."""
        for d in (self.profiles_dir, self.templates_dir):
            d.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Config store initialized at {self.base_dir}")

    @property
    def main_config_path(self) -> Path:
        return self.base_dir / "main.yaml"

    @property
    def certificates_path(self) -> Path:
        return self.base_dir / "certificates.pem"

    @property
    def profiles_dir(self) -> Path:
        return self.base_dir / "profiles"

    @property
    def templates_dir(self) -> Path:
        return self.base_dir / "templates"

    def _read_yaml(self, path: Path) -> Any:
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    def _write_yaml(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )

    # === Main Config ===

    def load_main_config(self) -> MainConfig:
        """Get the main configuration (defaults if none was saved yet)."""
        if not self.main_config_path.exists():
            return MainConfig()

        data = self._read_yaml(self.main_config_path) or {}
        try:
            return MainConfig.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid main config: {e}") from e

    def save_main_config(self, config: MainConfig) -> None:
        """
        Save the main configuration.

        Raises:
            StoreError: If the file cannot be written
        """
        try:
            self._write_yaml(self.main_config_path, config.model_dump(mode="json"))
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to save main config: {e}") from e

        logger.info("Saved main config")

    # === Certificates ===

    def load_certificates(self) -> bytes:
        """Get the stored certificate bytes (empty if none)."""
        if not self.certificates_path.exists():
            return b""

        try:
            return self.certificates_path.read_bytes()
        except OSError as e:
            raise StoreError(f"Failed to read certificates: {e}") from e

    def save_certificates(self, data: bytes) -> None:
        """
        Replace the stored certificates. Empty data removes the file.

        Raises:
            StoreError: If the file cannot be written
        """
        try:
            if data:
                self.certificates_path.write_bytes(data)
            elif self.certificates_path.exists():
                self.certificates_path.unlink()
        except OSError as e:
            raise StoreError(f"Failed to save certificates: {e}") from e

        logger.info(f"Saved certificates ({len(data)} bytes)")

    # === Server Profiles ===

    def list_profiles(self) -> list[str]:
        """List all profile names."""
        return sorted(p.stem for p in self.profiles_dir.glob("*.yaml"))

    def load_profile(self, name: str) -> ProfileSettings:
        """
        Get a profile by name.

        Raises:
            StoreError: If the profile is missing or unreadable
        """
        path = self.profiles_dir / f"{_check_name(name, 'profile')}.yaml"
        if not path.exists():
            raise StoreError(f"Profile '{name}' not found")

        data = self._read_yaml(path) or {}
        try:
            return ProfileSettings.from_dict(name, data)
        except (ValidationError, TypeError) as e:
            raise StoreError(f"Invalid profile '{name}': {e}") from e

    def save_profile(self, profile: ProfileSettings) -> bool:
        """
        Save a profile.

        Returns:
            True on success, False if the profile could not be written
        """
        try:
            path = self.profiles_dir / f"{_check_name(profile.name, 'profile')}.yaml"
            self._write_yaml(path, profile.to_dict())
        except (StoreError, OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save profile '{profile.name}': {e}")
            return False

        logger.info(f"Saved profile '{profile.name}'")
        return True

    def list_active_types(self, profile: str) -> list[str]:
        """Account types enabled in a profile."""
        return list(self.load_profile(profile).active_types)

    # === Account Templates ===

    def _template_dir(self, profile: str, type_id: str) -> Path:
        return (
            self.templates_dir
            / _check_name(profile, "profile")
            / _check_name(type_id, "account type")
        )

    def list_templates(self, profile: str, type_id: str) -> list[str]:
        """List template names for a (profile, account type) pair."""
        template_dir = self._template_dir(profile, type_id)
        if not template_dir.is_dir():
            return []
        return sorted(p.stem for p in template_dir.glob("*.yaml"))

    def load_template(self, profile: str, type_id: str, name: str) -> dict[str, Any]:
        """
        Get an account template.

        Raises:
            StoreError: If the template is missing or unreadable
        """
        path = self._template_dir(profile, type_id) / f"{_check_name(name, 'template')}.yaml"
        if not path.exists():
            raise StoreError(f"Template '{profile}:{type_id}:{name}' not found")

        data = self._read_yaml(path)
        return data if data is not None else {}

    def save_template(
        self,
        profile: str,
        type_id: str,
        name: str,
        data: Any,
    ) -> bool:
        """
        Save an account template.

        Returns:
            True on success, False if the template could not be written
        """
        try:
            path = self._template_dir(profile, type_id) / f"{_check_name(name, 'template')}.yaml"
            self._write_yaml(path, data)
        except (StoreError, OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save template '{profile}:{type_id}:{name}': {e}")
            return False

        logger.info(f"Saved template '{profile}:{type_id}:{name}'")
        return True

