# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Result of one external scanner invocation."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class InvocationResult(BaseModel):
    """Captured output and terminal status of a single subprocess run.

    A failed start, timeout or non-zero exit is reported through
    ``exit_status`` and ``error`` rather than raised.
    """

    command: list[str]
    exit_status: int | None = None
    stdout_lines: list[str] = Field(default_factory=list)
    stderr_lines: list[str] = Field(default_factory=list)
    error: str | None = None
    duration_ms: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return self.error is None and self.exit_status == 0
