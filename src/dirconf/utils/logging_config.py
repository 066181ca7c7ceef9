"""Logging configuration for dirconf.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing decorators for export/import runs

Environment Variables:
    DIRCONF_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    DIRCONF_LOG_FILE: Path to log file (default: ~/.dirconf/dirconf.log)
    DIRCONF_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    DIRCONF_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from dirconf.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("export")
    def export(self):
        ...

    # Or use context manager for sections:
    with timed_section("apply_unit", target="p1"):
        ...
"""
import functools
import logging
import os
import time
from collections import deque
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("dirconf.perf")


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("DIRCONF_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".dirconf" / "dirconf.log"
    path_str = os.environ.get("DIRCONF_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects DIRCONF_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics
    """
    log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("DIRCONF_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("DIRCONF_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-25s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    # perf records propagate to the package logger
    root_logger = logging.getLogger("dirconf")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    root_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")


def _perf_message(operation: str, target: Optional[str], elapsed: float, outcome: str) -> str:
    return f"{operation:20s} | {target or 'N/A':15s} | {elapsed:8.2f}ms | {outcome}"


def timed(operation: str, target: Optional[str] = None):
    """Decorator to log execution time of a function.

    Args:
        operation: Name of the operation (e.g., "export", "import")
        target: Optional target label (profile name, store path, ...)

    Usage:
        @timed("export")
        def export(self):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                global_stats.record(operation, elapsed)
                perf_logger.warning(_perf_message(operation, target, elapsed, f"FAIL: {e}"))
                raise
            elapsed = (time.perf_counter() - start) * 1000
            global_stats.record(operation, elapsed)
            perf_logger.info(_perf_message(operation, target, elapsed, "OK"))
            return result

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, target: Optional[str] = None, **extra):
    """Context manager for timing code sections.

    Args:
        operation: Name of the operation
        target: Target label
        **extra: Additional context to log
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = _perf_message(operation, target, elapsed, f"FAIL: {e}")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise

    elapsed = (time.perf_counter() - start) * 1000
    msg = _perf_message(operation, target, elapsed, "OK")
    if extra_str:
        msg += f" | {extra_str}"
    perf_logger.debug(msg)


class PerfStats:
    """Collect and report performance statistics.

    Usage:
        stats = PerfStats()
        stats.record("export", 150.5)
        stats.record("import", 50.3)
        print(stats.summary())
    """

    def __init__(self, max_samples: int = 1000):
        # newest samples only, per operation
        self.max_samples = max_samples
        self._data: dict[str, deque[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        """Record a timing measurement."""
        self._data.setdefault(operation, deque(maxlen=self.max_samples)).append(duration_ms)

    def count(self, operation: str) -> int:
        return len(self._data.get(operation, []))

    def summary(self) -> str:
        """Generate summary statistics."""
        lines = ["Performance Summary", "=" * 60]

        for op, times in sorted(self._data.items()):
            if not times:
                continue
            count = len(times)
            avg = sum(times) / count

            lines.append(
                f"{op:20s} | count={count:4d} | "
                f"avg={avg:8.2f}ms | min={min(times):8.2f}ms | max={max(times):8.2f}ms"
            )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all recorded data."""
        self._data.clear()


# Global stats instance for convenience
global_stats = PerfStats()
