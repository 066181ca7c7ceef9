"""Transfer Engine - single entry point for snapshot export and import.

Provides:
1. Exporting the store into a snapshot document
2. Building the import unit tree from a document
3. Previewing what an activated tree would change
4. Applying the activated tree
"""
import logging
from typing import Iterable, Optional

from ..config_store import ConfigStore
from .builder import SnapshotInput, StepBuilder
from .exporter import ConfigExporter
from .importer import ConfigImporter
from .schema import (
    ContainerUnit,
    ImportOptions,
    ImportReport,
    ImportUnit,
    LeafUnit,
    UnitKind,
)
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


def summarize_units(units: Iterable[ImportUnit]) -> str:
    """
    Create a human-readable summary of a unit tree.

    Useful for dry-run output and logging.
    """
    lines = []
    active = 0

    def describe(leaf: LeafUnit, indent: str) -> None:
        nonlocal active
        mark = "[x]" if leaf.active else "[ ]"
        active += leaf.active
        line = f"{indent}{mark} {leaf.label}"
        if leaf.kind == UnitKind.ACCOUNT_PROFILE and isinstance(leaf.payload, dict):
            count = sum(len(t) for t in leaf.payload.values())
            line += f" ({count} templates)"
        lines.append(line)

    for unit in units:
        if isinstance(unit, ContainerUnit):
            lines.append(f"  {unit.label}:")
            for child in unit.children:
                describe(child, "    ")
        else:
            describe(unit, "  ")

    if active == 0:
        return "Nothing selected for import"

    return "\n".join([f"Units to import ({active} selected):", ""] + lines)


class TransferEngine:
    """
    Export and import an installation's configuration.

    Usage:
        engine = TransferEngine(ConfigStore(base_dir))
        document = engine.export_json()

        units = engine.build_units(document)
        activate_all(units)
        report = engine.apply(units, dry_run=True)
    """

    def __init__(self, store: ConfigStore):
        """
        Initialize the Transfer Engine.

        Args:
            store: Config store to export from and import into
        """
        self.store = store
        self.exporter = ConfigExporter(store)
        self.builder = StepBuilder()
        self.importer = ConfigImporter(store)

    def export_snapshot(self) -> Snapshot:
        return self.exporter.export()

    def export_json(self, indent: int = 2) -> str:
        return self.exporter.export_json(indent=indent)

    def build_units(self, document: SnapshotInput) -> list[ImportUnit]:
        """Parse a document into inactive import units."""
        return self.builder.build_units(document)

    @property
    def warnings(self) -> list[str]:
        """Advisory messages from the last build_units call."""
        return [str(w) for w in self.builder.warnings]

    def preview(self, units: list[ImportUnit]) -> str:
        summary = summarize_units(units)
        if self.warnings:
            summary += "\n\nWarnings:\n" + "\n".join(f"  - {w}" for w in self.warnings)
        return summary

    def apply(
        self,
        units: list[ImportUnit],
        dry_run: bool = False,
        user: Optional[str] = None,
        audit_context: str = "",
    ) -> ImportReport:
        """
        Apply the active units.

        Raises:
            CriticalImportError: Main config or certificates could not be saved
            AggregateImportError: One or more profiles/templates failed
        """
        options = ImportOptions(dry_run=dry_run, user=user, audit_context=audit_context)
        logger.info(f"{'DRY RUN: ' if dry_run else ''}Applying import units to {self.store.base_dir}")
        return self.importer.run_import(units, options)
