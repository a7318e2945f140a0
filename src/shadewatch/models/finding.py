# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Classified finding models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, computed_field

from shadewatch.core.constants import (
    THREAT_RISK_LEVELS,
    FindingOrigin,
    OutputStream,
    RiskLevel,
    Severity,
)


class Finding(BaseModel):
    """A single classified observation, from streamed text or the result artifact."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    origin: FindingOrigin
    source_line: str | None = None
    stream: OutputStream | None = None
    unit: str | None = Field(default=None, description="Work unit label, e.g. a port number")

    # Structured findings only
    risk_level: RiskLevel | None = None
    risk_score: float | None = None
    reasons: tuple[str, ...] = ()
    subject_name: str | None = None
    subject_path: str | None = None
    exact_match_name: str | None = None

    detected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_threat(self) -> bool:
        return self.risk_level in THREAT_RISK_LEVELS

    @property
    def display_text(self) -> str:
        if self.origin == FindingOrigin.STRUCTURED:
            return (
                f"Signature scan: {self.subject_name} - "
                f"Risk: {self.risk_level} (score {_format_score(self.risk_score)})"
            )
        return self.source_line or ""


def _format_score(score: float | None) -> str:
    if score is None:
        return "n/a"
    if float(score).is_integer():
        return str(int(score))
    return f"{score:g}"
