"""Audit logging for configuration imports.

Provides change tracking with:
- Timestamped entries for every applied import unit
- Structured JSON log format
- Separate audit log file
"""
import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Create dedicated audit logger
audit_logger = logging.getLogger("dirconf.audit")

DEFAULT_AUDIT_DIR = "~/.dirconf"


def setup_audit_logging(log_dir: Optional[str] = None) -> Path:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.dirconf/

    Returns:
        Path of the audit log file
    """
    if log_dir is None:
        log_dir = os.path.expanduser(DEFAULT_AUDIT_DIR)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    audit_file = Path(log_dir) / "audit.log"

    audit_logger.setLevel(logging.INFO)
    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )

    # One JSON document per line
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)

    # Don't propagate to the application log
    audit_logger.propagate = False

    return audit_file


@dataclass
class ChangeRecord:
    """Record of one configuration change."""
    timestamp: str
    target: str  # unit identity, e.g. "p1" or "main_config"
    operation: str  # import_main_config, import_profile, ...
    user: str
    dry_run: bool
    success: bool
    context: str = ""
    error: Optional[str] = None

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        """Parse from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class ChangeTracker:
    """Track and log configuration changes for one import run."""

    def __init__(self, user: Optional[str] = None, context: str = ""):
        self.user = user or "system"
        self.context = context
        self.records: list[ChangeRecord] = []

    def log_change(
        self,
        target: str,
        operation: str,
        success: bool,
        error: Optional[str] = None,
        dry_run: bool = False,
    ) -> ChangeRecord:
        """Log a configuration change.

        Args:
            target: Identity of the changed item
            operation: The operation performed (e.g., "import_profile")
            success: Whether the operation succeeded
            error: Error message if failed
            dry_run: Whether this was a dry-run (no actual changes)

        Returns:
            The ChangeRecord that was logged
        """
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            target=target,
            operation=operation,
            user=self.user,
            dry_run=dry_run,
            success=success,
            context=self.context,
            error=error,
        )

        self.records.append(record)
        audit_logger.info(record.to_json())

        return record


def get_recent_changes(
    log_file: Optional[str] = None,
    target: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from audit log.

    Args:
        log_file: Path to audit log. Defaults to ~/.dirconf/audit.log
        target: Filter by unit identity
        operation: Filter by operation type
        limit: Maximum number of records to return

    Returns:
        List of ChangeRecords, most recent first
    """
    if log_file is None:
        log_file = os.path.join(os.path.expanduser(DEFAULT_AUDIT_DIR), "audit.log")

    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if target and record.target != target:
                continue
            if operation and record.operation != operation:
                continue

            records.append(record)

    return list(reversed(records[-limit:]))
