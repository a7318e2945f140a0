# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, output markers, and progress constants."""

from enum import StrEnum


class Severity(StrEnum):
    NEUTRAL = "neutral"
    INFO = "info"
    DANGER = "danger"


class ScanType(StrEnum):
    PORT_SCAN = "port_scan"
    MALWARE_SCAN = "malware_scan"


class ScanState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"


class FindingOrigin(StrEnum):
    STREAMED = "streamed"
    STRUCTURED = "structured"


class OutputStream(StrEnum):
    STDOUT = "stdout"
    STDERR = "stderr"


class RiskLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


SCAN_TYPE_LABELS: dict[ScanType, str] = {
    ScanType.PORT_SCAN: "Port Scan",
    ScanType.MALWARE_SCAN: "Malware Scan",
}

RISK_SEVERITY: dict[RiskLevel, Severity] = {
    RiskLevel.HIGH: Severity.DANGER,
    RiskLevel.MEDIUM: Severity.INFO,
    RiskLevel.LOW: Severity.NEUTRAL,
}

THREAT_RISK_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.MEDIUM})

# Literal tags emitted by the external scanner
MARKER_DANGER = "[DANGER]"
MARKER_INFO = "[INFO]"
MARKER_SAFE = "[SAFE]"
MARKER_RESULT = "[RESULT]"

OPEN_KEYWORD = "open"
ERROR_KEYWORD = "error"
THREAT_KEYWORD = "threat"

PROGRESS_MIN = 0
PROGRESS_MAX = 100
PROGRESS_IDLE = 0
