# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan session, work unit, and summary models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from shadewatch.core.constants import ScanState, ScanType, Severity
from shadewatch.models.finding import Finding


class WorkUnit(BaseModel):
    """One discrete piece of scan work: a port, or the malware-scan target."""

    index: int = Field(ge=0)
    port: int | None = Field(default=None, ge=0, le=65535)
    target: str | None = None

    @property
    def label(self) -> str:
        if self.port is not None:
            return str(self.port)
        return self.target or ""


class ScanSession(BaseModel):
    """Live state of one user-initiated scan run.

    Owned by the ScanController; nothing else mutates it.
    """

    session_id: str
    scan_type: ScanType
    target: str
    state: ScanState = ScanState.RUNNING
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    units: list[WorkUnit] = Field(default_factory=list)
    completed_units: int = 0
    findings: list[Finding] = Field(default_factory=list)
    open_port_count: int = 0
    threat_count: int = 0
    errors: list[str] = Field(default_factory=list)
    cancelled: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def units_total(self) -> int:
        return len(self.units)

    @property
    def all_units_done(self) -> bool:
        return self.completed_units >= len(self.units)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def finding_count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for f in self.findings:
            counts[f.severity] = counts.get(f.severity, 0) + 1
        return counts

    def findings_with(self, severity: Severity) -> list[Finding]:
        return [f for f in self.findings if f.severity == severity]

    def add_findings(self, new_findings: list[Finding]) -> None:
        self.findings.extend(new_findings)


class ScanSummary(BaseModel):
    """Final per-session summary handed to the presentation layer."""

    scan_type: ScanType
    open_ports: int = 0
    threats: int = 0
    session_id: str = ""
    target: str = ""
    finding_count: int = 0
    duration_ms: int | None = None
    errors: list[str] = Field(default_factory=list)
    cancelled: bool = False

    @classmethod
    def from_session(cls, session: ScanSession) -> ScanSummary:
        duration_ms = None
        if session.completed_at is not None:
            duration_ms = int(
                (session.completed_at - session.started_at).total_seconds() * 1000
            )
        return cls(
            scan_type=session.scan_type,
            open_ports=session.open_port_count,
            threats=session.threat_count,
            session_id=session.session_id,
            target=session.target,
            finding_count=len(session.findings),
            duration_ms=duration_ms,
            errors=list(session.errors),
            cancelled=session.cancelled,
        )
