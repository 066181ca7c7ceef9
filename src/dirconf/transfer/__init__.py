"""Snapshot transfer - export and selective import of configuration state.

Usage:
    from dirconf.config_store import ConfigStore
    from dirconf.transfer import TransferEngine, activate_all

    engine = TransferEngine(ConfigStore(base_dir))
    document = engine.export_json()

    units = engine.build_units(document)
    activate_all(units)
    engine.apply(units)
"""

from .engine import TransferEngine, summarize_units
from .schema import (
    UnitKind,
    UnitIdentity,
    LeafUnit,
    ContainerUnit,
    ImportUnit,
    ImportOptions,
    ImportReport,
    walk_units,
    iter_leaves,
    find_unit,
    activate,
    activate_all,
)
from .snapshot import Snapshot, RECOGNIZED_SECTIONS
from .errors import (
    TransferError,
    ParseError,
    FormatError,
    EmptySnapshotError,
    UnrecognizedSnapshotError,
    ExportError,
    CriticalImportError,
    AggregateImportError,
    UnknownSectionWarning,
)
from .builder import StepBuilder
from .exporter import ConfigExporter
from .importer import ConfigImporter

__all__ = [
    # Main engine
    "TransferEngine",
    "summarize_units",
    # Unit tree
    "UnitKind",
    "UnitIdentity",
    "LeafUnit",
    "ContainerUnit",
    "ImportUnit",
    "ImportOptions",
    "ImportReport",
    "walk_units",
    "iter_leaves",
    "find_unit",
    "activate",
    "activate_all",
    # Document
    "Snapshot",
    "RECOGNIZED_SECTIONS",
    # Errors
    "TransferError",
    "ParseError",
    "FormatError",
    "EmptySnapshotError",
    "UnrecognizedSnapshotError",
    "ExportError",
    "CriticalImportError",
    "AggregateImportError",
    "UnknownSectionWarning",
    # Components (for advanced use)
    "StepBuilder",
    "ConfigExporter",
    "ConfigImporter",
]
