"""Utility modules for logging, timing and audit records."""
from .audit_log import (
    ChangeRecord,
    ChangeTracker,
    setup_audit_logging,
    get_recent_changes,
)
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
    PerfStats,
    global_stats,
)

__all__ = [
    "ChangeRecord",
    "ChangeTracker",
    "setup_audit_logging",
    "get_recent_changes",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
    "PerfStats",
    "global_stats",
]
