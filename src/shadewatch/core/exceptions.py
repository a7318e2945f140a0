# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for shadewatch."""


class ShadewatchError(Exception):
    """Base exception for all shadewatch errors."""


class ConfigurationError(ShadewatchError):
    """Invalid or missing configuration."""


class ScanError(ShadewatchError):
    """Error during scan execution."""


class InvocationError(ScanError):
    """The external scanner could not be started or exited abnormally."""


class ArtifactError(ShadewatchError):
    """The structured result artifact is unreadable or malformed."""
