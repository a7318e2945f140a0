# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Structured result artifact consumer.

The signature scanner writes its detections to a JSON file next to its
stdout. The file is deleted before every malware scan and read exactly once
after the scan's process has terminated.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from shadewatch.core.constants import RISK_SEVERITY, FindingOrigin
from shadewatch.core.exceptions import ArtifactError
from shadewatch.models.artifact import StructuredRecord, StructuredRecordList
from shadewatch.models.finding import Finding

logger = logging.getLogger("shadewatch.scanner.artifact")

UNKNOWN_MATCH_NAME = "(unknown)"


class StructuredResultConsumer:
    """Reads, validates and clears the structured findings artifact."""

    last_error: ArtifactError | None = None

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self.last_error = None

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def clear(self) -> bool:
        """Delete a stale artifact. Returns True if a file was removed.

        Raises:
            ArtifactError: If a stale artifact exists but cannot be deleted.
        """
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ArtifactError(f"Cannot delete old results {self._path}: {exc}") from exc
        logger.debug("Deleted stale result artifact %s", self._path)
        return True

    def read_records(self) -> list[StructuredRecord]:
        """Parse the artifact into records.

        Raises:
            ArtifactError: If the file cannot be read, is not JSON, or does
                not match the expected record schema.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ArtifactError(f"Cannot read {self._path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ArtifactError(f"Invalid JSON in {self._path}: {exc}") from exc
        try:
            return StructuredRecordList.validate_python(data)
        except ValidationError as exc:
            raise ArtifactError(
                f"Unexpected record layout in {self._path}: {exc.error_count()} error(s)"
            ) from exc

    def load(self) -> list[Finding] | None:
        """Return structured findings, or None when the artifact is absent or unusable.

        When the artifact exists but cannot be used, the reason is kept in
        ``last_error``.
        """
        self.last_error = None
        if not self.exists():
            logger.info("No structured result artifact at %s", self._path)
            return None
        try:
            records = self.read_records()
        except ArtifactError as exc:
            logger.warning("Ignoring structured results: %s", exc)
            self.last_error = exc
            return None
        return [record_to_finding(r) for r in records]


def record_to_finding(record: StructuredRecord) -> Finding:
    exact_name = record.exact_match.name if record.exact_match else None
    return Finding(
        severity=RISK_SEVERITY[record.risk.level],
        origin=FindingOrigin.STRUCTURED,
        risk_level=record.risk.level,
        risk_score=record.risk.score,
        reasons=tuple(record.risk.reasons),
        subject_name=record.file_name,
        subject_path=record.path,
        exact_match_name=exact_name or UNKNOWN_MATCH_NAME,
    )


def count_threats(findings: list[Finding]) -> int:
    """Number of structured findings rated High or Medium."""
    return sum(1 for f in findings if f.is_threat)
