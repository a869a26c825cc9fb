"""
Error reporting sink for nuscout.

Search sessions and startup code hand unexpected errors to a
:class:`DiagnosticsReporter`. Reporters are fire-and-forget: callers never
expect them to raise, and :class:`LoggingDiagnostics` guarantees it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from nuscout.utils.logger import get_logger

logger = get_logger("diagnostics")


@runtime_checkable
class DiagnosticsReporter(Protocol):
    """Receives errors for telemetry or display."""

    def report_error(self, error: BaseException) -> None: ...


class LoggingDiagnostics:
    """Reporter that writes errors to the ``nuscout.diagnostics`` logger."""

    def report_error(self, error: BaseException) -> None:
        try:
            logger.error(
                "%s: %s",
                type(error).__name__,
                error,
                exc_info=(type(error), error, error.__traceback__),
            )
        except Exception:  # noqa: BLE001 - reporting must never raise
            pass
