# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""On-disk shape of the structured signature-scan result artifact."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from shadewatch.core.constants import RiskLevel


class RiskAssessment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: RiskLevel
    score: float = 0
    reasons: list[str] = Field(default_factory=list)

    @field_validator("reasons", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return [] if v is None else v


class ExactMatch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None


class StructuredRecord(BaseModel):
    """One detection written by the signature scanner, keyed by inspected path."""

    model_config = ConfigDict(extra="ignore")

    path: str
    risk: RiskAssessment
    exact_match: ExactMatch | None = None

    @property
    def file_name(self) -> str:
        """Basename of ``path`` for either separator style."""
        return self.path.replace("\\", "/").rsplit("/", 1)[-1]


StructuredRecordList = TypeAdapter(list[StructuredRecord])
