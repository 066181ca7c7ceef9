"""Exporter: read the live store into a snapshot document."""
import logging
from typing import Any

from ..config_store import ConfigStore, StoreError
from ..utils.logging_config import timed
from .errors import ExportError
from .snapshot import (
    ACCOUNT_PROFILES,
    CERTIFICATES,
    MAIN_CONFIG,
    SERVER_PROFILES,
    Snapshot,
    encode_certificates,
)

logger = logging.getLogger(__name__)


class ConfigExporter:
    """Export the complete configuration state of a store (read-only)."""

    def __init__(self, store: ConfigStore):
        self.store = store

    @timed("export")
    def export(self) -> Snapshot:
        """
        Read main config, certificates, profiles and account templates.

        Every recognized section is present, empty when there is no data.

        Raises:
            ExportError: If any item of the store cannot be read
        """
        try:
            main_config = self.store.load_main_config().model_dump(mode="json")
            certificates = encode_certificates(self.store.load_certificates())

            server_profiles: dict[str, Any] = {}
            account_profiles: dict[str, Any] = {}
            for profile_name in self.store.list_profiles():
                profile = self.store.load_profile(profile_name)
                server_profiles[profile_name] = profile.to_dict()
                account_profiles[profile_name] = self._export_templates(profile_name)
        except StoreError as e:
            logger.error(f"Export failed: {e}")
            raise ExportError(str(e)) from e

        logger.info(
            f"Exported {len(server_profiles)} profiles "
            f"({sum(len(t) for types in account_profiles.values() for t in types.values())} templates)"
        )

        return Snapshot({
            MAIN_CONFIG: main_config,
            CERTIFICATES: certificates,
            SERVER_PROFILES: server_profiles,
            ACCOUNT_PROFILES: account_profiles,
        })

    def _export_templates(self, profile_name: str) -> dict[str, dict[str, Any]]:
        types: dict[str, dict[str, Any]] = {}
        for type_id in self.store.list_active_types(profile_name):
            types[type_id] = {
                name: self.store.load_template(profile_name, type_id, name)
                for name in self.store.list_templates(profile_name, type_id)
            }
        return types

    def export_json(self, indent: int = 2) -> str:
        """Export and serialize in one step."""
        return self.export().to_json(indent=indent)
