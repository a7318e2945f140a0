# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Progress estimation: exact unit fractions and a capped synthetic ramp."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable

from shadewatch.core.constants import PROGRESS_MAX, PROGRESS_MIN, ScanType

logger = logging.getLogger("shadewatch.scanner.progress")


def exact_percent(units_total: int, units_completed: int) -> int:
    """Percentage of discrete units completed, clamped to [0, 100]."""
    if units_total <= 0:
        return PROGRESS_MAX
    percent = round(PROGRESS_MAX * units_completed / units_total)
    return max(PROGRESS_MIN, min(PROGRESS_MAX, percent))


class SyntheticProgress:
    """Monotonic approximation for scans that report no intermediate progress.

    Each tick adds a random step in ``[step_min, step_max]`` and the value is
    held at ``cap`` until :meth:`complete` is called.
    """

    def __init__(
        self,
        *,
        step_min: int = 2,
        step_max: int = 6,
        cap: int = 90,
        rng: random.Random | None = None,
    ) -> None:
        if step_min < 0 or step_max < step_min:
            raise ValueError(f"Invalid step range: {step_min}..{step_max}")
        if not PROGRESS_MIN <= cap < PROGRESS_MAX:
            raise ValueError(f"Cap must be in [{PROGRESS_MIN}, {PROGRESS_MAX}), got {cap}")
        self._step_min = step_min
        self._step_max = step_max
        self._cap = cap
        self._rng = rng or random.Random()
        self._value = PROGRESS_MIN
        self._completed = False

    @property
    def value(self) -> int:
        return self._value

    @property
    def completed(self) -> bool:
        return self._completed

    def tick(self) -> int:
        if not self._completed:
            step = self._rng.randint(self._step_min, self._step_max)
            self._value = min(self._value + step, self._cap)
        return self._value

    def complete(self) -> int:
        self._completed = True
        self._value = PROGRESS_MAX
        return self._value

    def reset(self) -> None:
        self._completed = False
        self._value = PROGRESS_MIN


class ProgressEstimator:
    """Displayable progress for a scan type."""

    def __init__(self, synthetic: SyntheticProgress | None = None) -> None:
        self.synthetic = synthetic or SyntheticProgress()

    def reset(self) -> None:
        self.synthetic.reset()

    def estimate(self, scan_type: ScanType, units_total: int, units_completed: int) -> int:
        if scan_type == ScanType.PORT_SCAN:
            return exact_percent(units_total, units_completed)
        if units_total > 0 and units_completed >= units_total:
            return self.synthetic.complete()
        return self.synthetic.value


async def run_ramp(
    synthetic: SyntheticProgress,
    on_progress: Callable[[int], None],
    interval: float,
) -> None:
    """Tick ``synthetic`` every ``interval`` seconds until cancelled or completed."""
    while not synthetic.completed:
        await asyncio.sleep(interval)
        if synthetic.completed:
            break
        on_progress(synthetic.tick())
