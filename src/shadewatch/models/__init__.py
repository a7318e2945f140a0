# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for shadewatch."""

from shadewatch.models.artifact import ExactMatch, RiskAssessment, StructuredRecord
from shadewatch.models.finding import Finding
from shadewatch.models.invocation import InvocationResult
from shadewatch.models.session import ScanSession, ScanSummary, WorkUnit

__all__ = [
    "ExactMatch",
    "Finding",
    "InvocationResult",
    "RiskAssessment",
    "ScanSession",
    "ScanSummary",
    "StructuredRecord",
    "WorkUnit",
]
