"""Run-scoped diagnostics collection.

Collects render failures and label match misses during a single conceptmap
run and flushes them to a ``_diagnostics`` directory next to the output.
"""

import json
import logging
import traceback
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MAX_INDEXED_RUNS = 100


class DiagnosticSeverity(str, Enum):
    """Diagnostic severity levels."""
    CRITICAL = "critical"  # Host could not continue
    ERROR = "error"        # Render failures
    WARNING = "warning"    # Recoverable issues, skipped renders
    INFO = "info"          # Match misses and other notable events


@dataclass
class DiagnosticContext:
    """Where a diagnostic occurred."""
    operation: str                       # e.g. "render", "reconcile"
    component: str                       # e.g. "RenderCoordinator"
    title: str | None = None             # Diagram title
    generation: int | None = None        # Render generation
    additional_context: dict[str, Any] | None = None


@dataclass
class DiagnosticRecord:
    """A single diagnostic occurrence."""
    record_id: str
    run_id: str
    timestamp: str
    severity: DiagnosticSeverity
    error_type: str
    message: str
    context: dict[str, Any]
    traceback_lines: list[str]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


class ErrorCollector:
    """Collects diagnostics for one run."""

    def __init__(self, output_root: Path, command: str):
        self.output_root = Path(output_root)
        self.command = command
        self.start_time = datetime.now(UTC)
        self.run_id = self._generate_run_id()
        self.records: list[DiagnosticRecord] = []

    def collect_error(
        self,
        error: BaseException,
        context: DiagnosticContext,
        severity: DiagnosticSeverity = DiagnosticSeverity.ERROR,
    ) -> str:
        """Collect an exception with context.

        Returns:
            Record ID for reference
        """
        record_id = uuid.uuid4().hex[:8]
        lines = traceback.format_exception(type(error), error, error.__traceback__)

        record = DiagnosticRecord(
            record_id=record_id,
            run_id=self.run_id,
            timestamp=datetime.now(UTC).isoformat(),
            severity=severity,
            error_type=type(error).__name__,
            message=str(error),
            context=asdict(context),
            traceback_lines="".join(lines).splitlines(),
        )
        self.records.append(record)

        logger.debug(f"Collected {severity.value} {record_id}: {record.error_type} - {record.message}")
        return record_id

    def collect_warning(self, message: str, context: DiagnosticContext) -> str:
        return self.collect_error(RuntimeWarning(message), context, DiagnosticSeverity.WARNING)

    def collect_info(self, message: str, context: DiagnosticContext) -> str:
        return self.collect_error(RuntimeError(message), context, DiagnosticSeverity.INFO)

    def has_errors(self) -> bool:
        """Check if any error or critical records were collected."""
        return any(
            r.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for r in self.records
        )

    def get_counts(self) -> dict[str, int]:
        """Record counts by severity."""
        counts = {severity.value: 0 for severity in DiagnosticSeverity}
        for record in self.records:
            counts[record.severity.value] += 1
        return counts

    def flush_to_filesystem(self) -> Path | None:
        """Write collected records to ``<output_root>/_diagnostics``.

        Returns:
            Path to the run summary file, or None if nothing was collected
        """
        if not self.records:
            logger.debug(f"No diagnostics to flush for run {self.run_id}")
            return None

        diagnostics_dir = self.output_root / "_diagnostics"
        diagnostics_dir.mkdir(parents=True, exist_ok=True)

        end_time = datetime.now(UTC)
        summary = {
            "schema_version": "1.0.0",
            "run_id": self.run_id,
            "command": self.command,
            "started_at": self.start_time.isoformat(),
            "completed_at": end_time.isoformat(),
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "total_records": len(self.records),
            "records_by_severity": self.get_counts(),
            "records": [record.to_dict() for record in self.records],
        }

        summary_file = diagnostics_dir / f"{self.run_id}.json"
        with open(summary_file, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2, ensure_ascii=False)

        self._update_index(diagnostics_dir, summary)

        logger.info(f"Flushed {len(self.records)} diagnostics to: {summary_file}")
        return summary_file

    def _update_index(self, diagnostics_dir: Path, summary: dict[str, Any]) -> None:
        index_file = diagnostics_dir / "index.json"

        if index_file.exists():
            try:
                with open(index_file, encoding="utf-8") as f:
                    index_data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to read diagnostics index, creating new one: {e}")
                index_data = self._create_empty_index()
        else:
            index_data = self._create_empty_index()

        runs = [run for run in index_data.get("runs", []) if run["run_id"] != summary["run_id"]]
        runs.append({
            "run_id": summary["run_id"],
            "command": summary["command"],
            "started_at": summary["started_at"],
            "total_records": summary["total_records"],
            "records_by_severity": summary["records_by_severity"],
            "file": f"{summary['run_id']}.json",
        })
        runs.sort(key=lambda r: r["started_at"], reverse=True)

        # Bounded history: drop the oldest runs and their files
        for old_run in runs[MAX_INDEXED_RUNS:]:
            old_file = diagnostics_dir / old_run["file"]
            if old_file.exists():
                old_file.unlink()
        runs = runs[:MAX_INDEXED_RUNS]

        index_data["runs"] = runs
        index_data["total_runs"] = len(runs)
        index_data["last_updated"] = datetime.now(UTC).isoformat()

        with open(index_file, "w", encoding="utf-8") as f:
            json.dump(index_data, f, indent=2, ensure_ascii=False)

    def _create_empty_index(self) -> dict[str, Any]:
        now = datetime.now(UTC).isoformat()
        return {
            "schema_version": "1.0.0",
            "created_at": now,
            "last_updated": now,
            "total_runs": 0,
            "description": "Diagnostics index for conceptmap runs",
            "runs": [],
        }

    def _generate_run_id(self) -> str:
        # Format: run-YYYYMMDD-HHMMSS-{short_uuid}
        timestamp_part = self.start_time.strftime("run-%Y%m%d-%H%M%S")
        return f"{timestamp_part}-{uuid.uuid4().hex[:8]}"


def create_error_collector(output_root: Path, command: str) -> ErrorCollector:
    """Create an error collector for a conceptmap run."""
    return ErrorCollector(output_root, command)
