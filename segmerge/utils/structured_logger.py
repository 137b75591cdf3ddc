"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Enhanced logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("segmerge")
        logger.info("split_completed",
                    source="movie.mp4",
                    parts=4,
                    size_bytes=10_000_000)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"segmerge_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        """Log debug event."""
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        """Log info event."""
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        """Log warning event."""
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        """Log error event."""
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class AssemblyLogger:
    """Specialized logger for split and merge events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def split_started(self, source: str, total_size: int, part_count: int):
        self.logger.debug(
            "split_started",
            source=source,
            total_size=total_size,
            part_count=part_count,
        )

    def split_completed(
        self, source: str, part_count: int, size_bytes: int, duration_s: float
    ):
        """Log split completed."""
        self.logger.info(
            "split_completed",
            source=source,
            part_count=part_count,
            size_bytes=size_bytes,
            size_mb=round(size_bytes / (1024 * 1024), 2),
            duration_s=round(duration_s, 3),
        )

    def merge_started(self, target: str, part_count: int):
        self.logger.debug("merge_started", target=target, part_count=part_count)

    def merge_completed(
        self, target: str, part_count: int, size_bytes: int, duration_s: float
    ):
        """Log merge completed."""
        self.logger.info(
            "merge_completed",
            target=target,
            part_count=part_count,
            size_bytes=size_bytes,
            size_mb=round(size_bytes / (1024 * 1024), 2),
            duration_s=round(duration_s, 3),
        )

    def operation_failed(self, operation: str, path: str, error: str):
        """Log a failed split or merge."""
        self.logger.error(
            f"{operation}_failed",
            path=path,
            error=error,
        )


class DiscoveryLogger:
    """Specialized logger for storage discovery events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def tier_attempted(self, tier: str, candidates: int, accepted: int):
        """Log one enumeration tier's outcome."""
        self.logger.debug(
            "discovery_tier_attempted",
            tier=tier,
            candidates=candidates,
            accepted=accepted,
        )

    def volume_rejected(self, path: str, reason: str):
        self.logger.debug("volume_rejected", path=path, reason=reason)

    def discovery_completed(self, tier: str | None, volumes: list[str]):
        """Log the final discovery result."""
        level = self.logger.info if volumes else self.logger.warning
        level(
            "discovery_completed",
            tier=tier or "none",
            volume_count=len(volumes),
            volumes=volumes,
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, AssemblyLogger, DiscoveryLogger]:
    """
    Create all structured loggers.

    Returns:
        Tuple of (base_logger, assembly_logger, discovery_logger)
    """
    base = StructuredLogger("segmerge", log_dir=log_dir, enable_json=enable_json)
    return base, AssemblyLogger(base), DiscoveryLogger(base)
