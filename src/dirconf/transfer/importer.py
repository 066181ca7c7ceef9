"""Importer for applying an activated unit tree to a config store.

Per-profile and per-template writes are independent and best effort:
failures are collected and reported once at the end. Main config and
certificate failures stop the import immediately.
"""
import logging
from collections.abc import Mapping
from typing import Iterable, Optional

from pydantic import ValidationError

from ..config_store import ConfigStore, MainConfig, ProfileSettings, StoreError
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed, timed_section
from .errors import AggregateImportError, CriticalImportError
from .schema import (
    ImportOptions,
    ImportReport,
    ImportUnit,
    LeafUnit,
    UnitIdentity,
    UnitKind,
    walk_units,
)

logger = logging.getLogger(__name__)


class ConfigImporter:
    """Apply active import units to a config store."""

    def __init__(self, store: ConfigStore):
        self.store = store

    @timed("import")
    def run_import(
        self,
        units: Iterable[ImportUnit],
        options: Optional[ImportOptions] = None,
    ) -> ImportReport:
        """
        Apply every active leaf unit, depth first.

        Args:
            units: Unit tree from StepBuilder.build_units
            options: Dry run and audit settings

        Returns:
            ImportReport listing the applied identities

        Raises:
            CriticalImportError: Main config or certificates could not be saved
            AggregateImportError: One or more profiles/templates failed
        """
        options = options or ImportOptions()
        report = ImportReport(dry_run=options.dry_run)
        tracker = ChangeTracker(user=options.user, context=options.audit_context)

        for unit in walk_units(units):
            if not isinstance(unit, LeafUnit):
                continue
            if not unit.active:
                report.skipped += 1
                continue

            with timed_section("apply_unit", target=str(unit.identity)):
                self._apply(unit, report, tracker, options.dry_run)

        if report.failed:
            logger.error(f"Import finished with {len(report.failed)} failures: {', '.join(report.failed)}")
            raise AggregateImportError(report.failed, report=report)

        logger.info(
            f"{'DRY RUN: ' if options.dry_run else ''}Import finished: "
            f"{len(report.applied)} applied, {report.skipped} skipped"
        )
        return report

    def _apply(
        self,
        unit: LeafUnit,
        report: ImportReport,
        tracker: ChangeTracker,
        dry_run: bool,
    ) -> None:
        kind = unit.identity.kind
        if kind == UnitKind.MAIN_CONFIG:
            self._import_main_config(unit, report, tracker, dry_run)
        elif kind == UnitKind.CERTIFICATES:
            self._import_certificates(unit, report, tracker, dry_run)
        elif kind == UnitKind.SERVER_PROFILE:
            self._import_profile(unit, report, tracker, dry_run)
        elif kind == UnitKind.ACCOUNT_PROFILE:
            self._import_templates(unit, report, tracker, dry_run)
        else:
            raise ValueError(f"Unit kind {kind.value} cannot be applied")

    def _import_main_config(self, unit, report, tracker, dry_run) -> None:
        target = str(unit.identity)
        try:
            config = MainConfig.model_validate(unit.payload or {})
            if not dry_run:
                self.store.save_main_config(config)
        except (ValidationError, StoreError) as e:
            tracker.log_change(target, "import_main_config", False, error=str(e), dry_run=dry_run)
            raise CriticalImportError(unit.identity, str(e)) from e

        tracker.log_change(target, "import_main_config", True, dry_run=dry_run)
        report.applied.append(target)

    def _import_certificates(self, unit, report, tracker, dry_run) -> None:
        target = str(unit.identity)
        try:
            if not dry_run:
                self.store.save_certificates(unit.payload or b"")
        except StoreError as e:
            tracker.log_change(target, "import_certificates", False, error=str(e), dry_run=dry_run)
            raise CriticalImportError(unit.identity, str(e)) from e

        tracker.log_change(target, "import_certificates", True, dry_run=dry_run)
        report.applied.append(target)

    def _import_profile(self, unit, report, tracker, dry_run) -> None:
        profile_name = unit.identity.profile_name
        try:
            profile = ProfileSettings.from_dict(profile_name, unit.payload)
        except (ValidationError, TypeError) as e:
            logger.error(f"Invalid settings for profile '{profile_name}': {e}")
            tracker.log_change(profile_name, "import_profile", False, error=str(e), dry_run=dry_run)
            report.failed.append(profile_name)
            return

        if not dry_run and not self.store.save_profile(profile):
            tracker.log_change(profile_name, "import_profile", False, error="save failed", dry_run=dry_run)
            report.failed.append(profile_name)
            return

        tracker.log_change(profile_name, "import_profile", True, dry_run=dry_run)
        report.applied.append(profile_name)

    def _import_templates(self, unit, report, tracker, dry_run) -> None:
        profile_name = unit.identity.profile_name
        payload = unit.payload if isinstance(unit.payload, Mapping) else {}
        for type_id, templates in payload.items():
            for template_name, data in templates.items():
                target = str(UnitIdentity(
                    UnitKind.ACCOUNT_PROFILE,
                    profile_name=profile_name,
                    type_id=type_id,
                    template_name=template_name,
                ))
                if not dry_run and not self.store.save_template(profile_name, type_id, template_name, data):
                    tracker.log_change(target, "import_template", False, error="save failed", dry_run=dry_run)
                    report.failed.append(target)
                    continue

                tracker.log_change(target, "import_template", True, dry_run=dry_run)
                report.applied.append(target)
