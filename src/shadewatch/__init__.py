# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""shadewatch - Scan orchestration and result classification for external scanners."""

__version__ = "0.1.0"

from shadewatch.scanner.base import ScanObserver
from shadewatch.scanner.classifier import classify
from shadewatch.scanner.controller import ScanController

__all__ = [
    "ScanController",
    "ScanObserver",
    "__version__",
    "classify",
]
