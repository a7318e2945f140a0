# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan controller: the scan lifecycle state machine.

States run ``IDLE -> RUNNING -> FINALIZING -> IDLE``. At most one session is
live at a time: a start request outside ``IDLE`` is a no-op. Port scans
visit each port in list order with a fixed delay between units; a malware
scan is a single invocation whose streamed output is merged with the
structured result artifact.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from shadewatch.core.config import Settings, get_settings
from shadewatch.core.constants import (
    PROGRESS_IDLE,
    PROGRESS_MIN,
    SCAN_TYPE_LABELS,
    OutputStream,
    ScanState,
    ScanType,
    Severity,
)
from shadewatch.core.exceptions import ArtifactError
from shadewatch.models.finding import Finding
from shadewatch.models.invocation import InvocationResult
from shadewatch.models.session import ScanSession, ScanSummary, WorkUnit
from shadewatch.scanner.artifact import StructuredResultConsumer, count_threats
from shadewatch.scanner.base import NullObserver, ScanObserver
from shadewatch.scanner.classifier import classify_lines, mentions_threat, reports_open_port
from shadewatch.scanner.invoker import ScanInvoker
from shadewatch.scanner.progress import ProgressEstimator, SyntheticProgress, run_ramp

logger = logging.getLogger("shadewatch.scanner.controller")

CANCELLED_MESSAGE = "Scan cancelled"


class ScanController:
    """Owns the single live ScanSession and drives it to completion."""

    def __init__(
        self,
        observer: ScanObserver | None = None,
        *,
        settings: Settings | None = None,
        invoker: ScanInvoker | None = None,
        consumer: StructuredResultConsumer | None = None,
        estimator: ProgressEstimator | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._observer = observer or NullObserver()
        self._invoker = invoker or ScanInvoker(settings=self._settings)
        self._consumer = consumer or StructuredResultConsumer(
            self._settings.result_artifact_path
        )
        self._estimator = estimator or ProgressEstimator(
            SyntheticProgress(
                step_min=self._settings.progress_step_min,
                step_max=self._settings.progress_step_max,
                cap=self._settings.progress_cap,
            )
        )
        self._state = ScanState.IDLE
        self._session: ScanSession | None = None
        self._last_session: ScanSession | None = None
        self._cancel_event: asyncio.Event | None = None
        self._ramp_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state == ScanState.IDLE

    @property
    def session(self) -> ScanSession | None:
        """Copy of the live session, or None when idle."""
        if self._session is None:
            return None
        return self._session.model_copy(deep=True)

    @property
    def last_session(self) -> ScanSession | None:
        """Copy of the most recently finished session."""
        if self._last_session is None:
            return None
        return self._last_session.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Transition entry points
    # ------------------------------------------------------------------

    async def start_port_scan(self) -> ScanSummary | None:
        """Scan every configured port in order. Returns None if a scan is live."""
        if not self._accepting("port scan"):
            return None
        try:
            units = [WorkUnit(index=i, port=p) for i, p in enumerate(self._settings.ports)]
        except ValidationError as exc:
            logger.error("Port scan aborted: invalid port list %s", self._settings.ports)
            self._notify(
                "on_notice", f"Invalid port configuration: {exc.error_count()} bad port(s)."
            )
            return None
        session = self._begin(ScanType.PORT_SCAN, self._settings.port_scan_address, units)
        return await self._drive(session, self._run_port_scan)

    async def start_malware_scan(self, target: str | None) -> ScanSummary | None:
        """Scan a file or folder. Returns None if a scan is live or no target was given."""
        if not self._accepting("malware scan"):
            return None
        if not target or not target.strip():
            logger.info("Malware scan aborted: no target selected")
            self._notify("on_notice", "No target selected.")
            return None
        session = self._begin(
            ScanType.MALWARE_SCAN, target, [WorkUnit(index=0, target=target)]
        )
        return await self._drive(session, self._run_malware_scan)

    def cancel(self) -> bool:
        """Request cooperative cancellation of the running session."""
        if self._state != ScanState.RUNNING or self._cancel_event is None:
            return False
        logger.info("Cancellation requested for session %s", self._session_id())
        self._cancel_event.set()
        return True

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _accepting(self, what: str) -> bool:
        if self._state != ScanState.IDLE:
            logger.info("Ignoring %s request while %s", what, self._state)
            return False
        return True

    def _begin(self, scan_type: ScanType, target: str, units: list[WorkUnit]) -> ScanSession:
        session = ScanSession(
            session_id=uuid.uuid4().hex[:12],
            scan_type=scan_type,
            target=target,
            units=units,
        )
        self._session = session
        self._cancel_event = asyncio.Event()
        self._estimator.reset()
        self._set_state(ScanState.RUNNING)
        logger.info(
            "Session %s started: %s on %s (%d unit(s))",
            session.session_id,
            scan_type,
            target,
            len(units),
            extra={"session_id": session.session_id},
        )
        return session

    async def _drive(
        self,
        session: ScanSession,
        body: Callable[[ScanSession], Awaitable[None]],
    ) -> ScanSummary:
        try:
            self._emit_progress(PROGRESS_MIN)
            try:
                await body(session)
            except Exception as exc:
                logger.exception("Session %s failed", session.session_id)
                session.errors.append(str(exc))
                self._emit_line(Severity.DANGER, f"Error: {exc}")
            finally:
                await self._stop_ramp()

            summary = self._finalize(session)
            await asyncio.sleep(self._settings.display_hold)
            return summary
        finally:
            self._cancel_event = None
            self._emit_progress(PROGRESS_IDLE)
            self._set_state(ScanState.IDLE)
            self._last_session = session
            self._session = None

    def _finalize(self, session: ScanSession) -> ScanSummary:
        self._set_state(ScanState.FINALIZING)
        session.completed_at = datetime.now(UTC)
        summary = ScanSummary.from_session(session)
        logger.info(
            "Session %s complete: type=%s open_ports=%d threats=%d findings=%d",
            session.session_id,
            session.scan_type,
            summary.open_ports,
            summary.threats,
            summary.finding_count,
            extra={"session_id": session.session_id},
        )
        self._notify("on_summary", summary)
        return summary

    def _set_state(self, state: ScanState) -> None:
        self._state = state
        if self._session is not None:
            self._session.state = state
        self._notify("on_state_change", state)

    def _session_id(self) -> str:
        return self._session.session_id if self._session else "-"

    # ------------------------------------------------------------------
    # Port scan
    # ------------------------------------------------------------------

    async def _run_port_scan(self, session: ScanSession) -> None:
        label = SCAN_TYPE_LABELS[ScanType.PORT_SCAN]
        self._emit_line(Severity.INFO, f"Starting {label.lower()}...")

        for unit in session.units:
            if self._cancelled():
                break
            self._emit_line(Severity.INFO, f"Scanning port {unit.port}...")
            result = await self._invoker.run(
                self._invoker.port_scan_args(unit.port),
                cancel_event=self._cancel_event,
            )
            self._fold_port_result(session, unit, result)
            session.completed_units += 1
            self._emit_progress(
                self._estimator.estimate(
                    ScanType.PORT_SCAN, session.units_total, session.completed_units
                )
            )
            if not session.all_units_done:
                await self._pause(self._settings.inter_unit_delay)

        if self._cancelled():
            session.cancelled = True
            self._emit_line(Severity.INFO, f"[INFO] {label.capitalize()} cancelled.")
        else:
            self._emit_line(Severity.INFO, f"[INFO] {label.capitalize()} complete.")

    def _fold_port_result(
        self, session: ScanSession, unit: WorkUnit, result: InvocationResult
    ) -> None:
        self._fold_error(session, result, unit)
        stderr_findings = classify_lines(result.stderr_lines, OutputStream.STDERR, unit.label)
        self._fold_findings(session, stderr_findings)
        stdout_findings = classify_lines(result.stdout_lines, OutputStream.STDOUT, unit.label)
        self._fold_findings(session, stdout_findings)
        session.open_port_count += sum(
            1 for f in stdout_findings if reports_open_port(f.source_line or "")
        )

    # ------------------------------------------------------------------
    # Malware scan
    # ------------------------------------------------------------------

    async def _run_malware_scan(self, session: ScanSession) -> None:
        label = SCAN_TYPE_LABELS[ScanType.MALWARE_SCAN]
        self._emit_line(Severity.INFO, f"Starting {label.lower()}...")
        stale_artifact = False
        try:
            self._consumer.clear()
        except ArtifactError as exc:
            logger.warning("%s", exc, extra={"session_id": session.session_id})
            stale_artifact = True
            self._emit_line(
                Severity.INFO,
                "[INFO] Previous structured results could not be removed; "
                "they will be ignored for this run.",
            )

        args = self._invoker.malware_scan_args(session.target)
        self._emit_line(Severity.INFO, f"Running command: {shlex.join(args)}")

        await self._start_ramp()
        try:
            result = await self._invoker.run(args, cancel_event=self._cancel_event)
        finally:
            await self._stop_ramp()

        session.completed_units = session.units_total
        self._emit_progress(
            self._estimator.estimate(
                ScanType.MALWARE_SCAN, session.units_total, session.completed_units
            )
        )

        unit = session.units[0]
        self._fold_error(session, result, unit)
        stderr_findings = classify_lines(result.stderr_lines, OutputStream.STDERR, unit.label)
        self._fold_findings(session, stderr_findings)
        stdout_findings = classify_lines(result.stdout_lines, OutputStream.STDOUT, unit.label)
        self._fold_findings(session, stdout_findings)
        streamed_threats = sum(
            1 for f in stdout_findings if mentions_threat(f.source_line or "")
        )

        structured = [] if stale_artifact else self._load_structured()
        if structured:
            self._fold_structured(session, structured)
        elif not stale_artifact and self._consumer.last_error is None:
            self._emit_line(Severity.INFO, "No signature-based threats detected.")

        session.threat_count = streamed_threats + count_threats(structured)
        if self._cancelled():
            session.cancelled = True

    def _load_structured(self) -> list[Finding]:
        findings = self._consumer.load()
        if findings is None and self._consumer.last_error is not None:
            self._emit_line(
                Severity.INFO,
                f"Structured results unavailable: {self._consumer.last_error}",
            )
        return findings or []

    def _fold_structured(self, session: ScanSession, findings: list[Finding]) -> None:
        for finding in findings:
            session.add_findings([finding])
            self._emit_line(finding.severity, finding.display_text)
            for reason in finding.reasons:
                self._emit_line(Severity.NEUTRAL, f"  • {reason}")

    # ------------------------------------------------------------------
    # Shared folding helpers
    # ------------------------------------------------------------------

    def _fold_error(
        self, session: ScanSession, result: InvocationResult, unit: WorkUnit
    ) -> None:
        if result.error is None:
            return
        if result.error == CANCELLED_MESSAGE:
            session.cancelled = True
            self._emit_line(Severity.INFO, f"[INFO] {CANCELLED_MESSAGE} during unit {unit.label}.")
            return
        logger.warning(
            "Unit %s of session %s failed: %s",
            unit.label,
            session.session_id,
            result.error,
            extra={"session_id": session.session_id},
        )
        session.errors.append(result.error)
        self._emit_line(Severity.DANGER, f"Error: {result.error}")

    def _fold_findings(self, session: ScanSession, findings: list[Finding]) -> None:
        session.add_findings(findings)
        for finding in findings:
            self._emit_line(finding.severity, finding.display_text)

    def _cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    async def _pause(self, seconds: float) -> None:
        """Inter-unit delay; returns early on cancellation."""
        if self._cancel_event is None:
            await asyncio.sleep(seconds)
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._cancel_event.wait(), timeout=seconds)

    # ------------------------------------------------------------------
    # Synthetic progress ramp
    # ------------------------------------------------------------------

    async def _start_ramp(self) -> None:
        await self._stop_ramp()
        self._ramp_task = asyncio.create_task(
            run_ramp(
                self._estimator.synthetic,
                self._emit_progress,
                self._settings.progress_tick,
            )
        )

    async def _stop_ramp(self) -> None:
        task, self._ramp_task = self._ramp_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    # ------------------------------------------------------------------
    # Observer dispatch
    # ------------------------------------------------------------------

    def _emit_line(self, severity: Severity, text: str) -> None:
        self._notify("on_line", severity, text)

    def _emit_progress(self, percent: int) -> None:
        self._notify("on_progress", percent)

    def _notify(self, method: str, *args: object) -> None:
        try:
            getattr(self._observer, method)(*args)
        except Exception:
            logger.exception("Observer callback %s failed", method)
