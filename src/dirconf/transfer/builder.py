"""Builder for the import unit tree.

Turns a snapshot document into an ordered list of units the caller can
activate one by one before handing them to the importer.
"""
import copy
import logging
from collections.abc import Mapping
from typing import Any, Union

from .errors import (
    EmptySnapshotError,
    ParseError,
    UnknownSectionWarning,
    UnrecognizedSnapshotError,
)
from .schema import ContainerUnit, ImportUnit, LeafUnit, UnitIdentity, UnitKind
from .snapshot import (
    ACCOUNT_PROFILES,
    CERTIFICATES,
    MAIN_CONFIG,
    SERVER_PROFILES,
    Snapshot,
    decode_certificates,
)

logger = logging.getLogger(__name__)

SnapshotInput = Union[Snapshot, Mapping, str, bytes]


def _require_mapping(value: Any, where: str, nullable: bool = True) -> Mapping:
    if value is None:
        if not nullable:
            raise ParseError(f"{where} must be an object, got null")
        return {}
    if not isinstance(value, Mapping):
        raise ParseError(f"{where} must be an object, got {type(value).__name__}")
    return value


class StepBuilder:
    """Build the import unit tree from a snapshot."""

    def __init__(self):
        self.warnings: list[UnknownSectionWarning] = []

    def build_units(self, snapshot: SnapshotInput) -> list[ImportUnit]:
        """
        Parse a snapshot into import units, in document order.

        Args:
            snapshot: Snapshot object, decoded mapping or JSON document

        Returns:
            List of units (all inactive)

        Raises:
            ParseError: If the document or one of its sections is malformed
            FormatError: If no recognized section is present
        """
        self.warnings = []
        snapshot = self._coerce(snapshot)

        if len(snapshot) == 0:
            raise EmptySnapshotError("Snapshot contains no sections")
        if not snapshot.recognized_sections:
            raise UnrecognizedSnapshotError(snapshot.unknown_sections)

        units: list[ImportUnit] = []
        for name, payload in snapshot.sections.items():
            # units own their payloads; the snapshot stays untouched
            payload = copy.deepcopy(payload)
            if name == MAIN_CONFIG:
                units.append(self._main_config_unit(payload))
            elif name == CERTIFICATES:
                units.append(self._certificates_unit(payload))
            elif name == SERVER_PROFILES:
                units.append(self._server_profiles_unit(payload))
            elif name == ACCOUNT_PROFILES:
                units.append(self._account_profiles_unit(payload))
            else:
                warning = UnknownSectionWarning(f"Unknown snapshot section '{name}' skipped")
                self.warnings.append(warning)
                logger.warning(str(warning))

        logger.info(
            f"Built {len(units)} import units from {len(snapshot)} snapshot sections"
        )
        return units

    def _coerce(self, snapshot: SnapshotInput) -> Snapshot:
        if isinstance(snapshot, Snapshot):
            return snapshot
        if isinstance(snapshot, (str, bytes)):
            return Snapshot.from_json(snapshot)
        return Snapshot.from_dict(snapshot)

    def _main_config_unit(self, payload: Any) -> LeafUnit:
        return LeafUnit(
            label="Main configuration",
            identity=UnitIdentity(UnitKind.MAIN_CONFIG),
            payload=dict(_require_mapping(payload, f"Section '{MAIN_CONFIG}'", nullable=False)),
        )

    def _certificates_unit(self, payload: Any) -> LeafUnit:
        return LeafUnit(
            label="Certificates",
            identity=UnitIdentity(UnitKind.CERTIFICATES),
            payload=decode_certificates(payload),
        )

    def _server_profiles_unit(self, payload: Any) -> ContainerUnit:
        profiles = _require_mapping(payload, f"Section '{SERVER_PROFILES}'")
        children = []
        for profile_name, settings in profiles.items():
            settings = _require_mapping(settings, f"Server profile '{profile_name}'", nullable=False)
            children.append(LeafUnit(
                label=str(profile_name),
                identity=UnitIdentity(UnitKind.SERVER_PROFILE, profile_name=str(profile_name)),
                payload=dict(settings),
            ))

        return ContainerUnit(
            label="Server profiles",
            kind=UnitKind.SERVER_PROFILES,
            children=children,
        )

    def _account_profiles_unit(self, payload: Any) -> ContainerUnit:
        profiles = _require_mapping(payload, f"Section '{ACCOUNT_PROFILES}'")
        children = []
        for profile_name, types in profiles.items():
            where = f"Account profiles of '{profile_name}'"
            types = _require_mapping(types, where)
            bundle = {}
            for type_id, templates in types.items():
                templates = _require_mapping(templates, f"{where}, type '{type_id}'")
                bundle[str(type_id)] = {str(k): v for k, v in templates.items()}

            children.append(LeafUnit(
                label=str(profile_name),
                identity=UnitIdentity(UnitKind.ACCOUNT_PROFILE, profile_name=str(profile_name)),
                payload=bundle,
            ))

        return ContainerUnit(
            label="Account profiles",
            kind=UnitKind.ACCOUNT_PROFILES,
            children=children,
        )
