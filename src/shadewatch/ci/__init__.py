# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CI/CD integration module for shadewatch.

Maps scan summaries to process exit codes for pipeline use.
"""

from shadewatch.ci.exit_codes import CIExitCode, summary_to_exit_code

__all__ = [
    "CIExitCode",
    "summary_to_exit_code",
]
