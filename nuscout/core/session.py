"""Interactive search session state.

A :class:`SearchSession` backs a package-search box: every change of the
search term or of the pre-release flag starts a new search and cancels
the one in flight. Only the most recently started search may change the
displayed results; an older search that completes late is discarded.

State machine::

    IDLE / RESULTS_READY --(term or prerelease changed)--> SEARCHING
    SEARCHING --(blank term)--------------------------> IDLE
    SEARCHING --(search succeeded)--------------------> RESULTS_READY
    SEARCHING --(search failed, not cancelled)--------> IDLE

Observers subscribe with :meth:`SearchSession.subscribe` and receive
``(property_name, value)`` for every change of ``packages``,
``is_searching``, ``is_packages_menu_open`` and ``state``.

Sessions must be driven from a running event loop, since setting
``search_term`` or ``prerelease`` schedules a task on it.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, FrozenSet, Iterator, List, Optional, Set, Tuple

from nuscout.core.aggregator import PackageAggregator
from nuscout.core.cancellation import CancellationToken
from nuscout.diagnostics import DiagnosticsReporter, LoggingDiagnostics
from nuscout.exceptions import OperationCancelled
from nuscout.models.package import PackageResult
from nuscout.utils.logger import get_logger

logger = get_logger("session")

__all__ = ["SearchSession", "SessionState"]

PropertyObserver = Callable[[str, Any], None]
InstallListener = Callable[[PackageResult], None]


class SessionState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS_READY = "results_ready"


class SearchSession:
    """Debounced, cancellable package search for one search box.

    Args:
        aggregator: Performs the searches.
        diagnostics: Receives search errors other than cancellation.
    """

    def __init__(
        self,
        aggregator: PackageAggregator,
        diagnostics: Optional[DiagnosticsReporter] = None,
    ) -> None:
        self._aggregator = aggregator
        self._diagnostics = diagnostics or LoggingDiagnostics()

        self._search_term = ""
        self._prerelease = False
        self.exact_match = False

        self._packages: Tuple[PackageResult, ...] = ()
        self._is_packages_menu_open = False
        self._state = SessionState.IDLE
        self._active_searches = 0

        self._generation = 0
        self._token: Optional[CancellationToken] = None
        self._task: Optional["asyncio.Task[None]"] = None
        self._tasks: Set["asyncio.Task[None]"] = set()

        self._observers: List[PropertyObserver] = []
        self._install_listeners: List[InstallListener] = []

    # ------------------------------------------------------------------
    # Observable properties
    # ------------------------------------------------------------------

    @property
    def search_term(self) -> str:
        return self._search_term

    @search_term.setter
    def search_term(self, value: str) -> None:
        if value != self._search_term:
            self._search_term = value
            self.perform_search()

    @property
    def prerelease(self) -> bool:
        return self._prerelease

    @prerelease.setter
    def prerelease(self, value: bool) -> None:
        if value != self._prerelease:
            self._prerelease = value
            self.perform_search()

    @property
    def packages(self) -> Tuple[PackageResult, ...]:
        return self._packages

    @property
    def is_searching(self) -> bool:
        return self._active_searches > 0

    @property
    def is_packages_menu_open(self) -> bool:
        return self._is_packages_menu_open

    @is_packages_menu_open.setter
    def is_packages_menu_open(self, value: bool) -> None:
        self._set("_is_packages_menu_open", "is_packages_menu_open", value)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_task(self) -> Optional["asyncio.Task[None]"]:
        """Task running the most recently started search, if any."""
        return self._task

    @property
    def pending_tasks(self) -> FrozenSet["asyncio.Task[None]"]:
        """Search tasks that have not finished, superseded ones included."""
        return frozenset(self._tasks)

    def subscribe(self, observer: PropertyObserver) -> Callable[[], None]:
        """Register ``observer`` for property changes.

        Returns:
            A callable that removes the observer again.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _set(self, attr: str, name: str, value: Any) -> None:
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self._notify(name, value)

    def _notify(self, name: str, value: Any) -> None:
        for observer in list(self._observers):
            observer(name, value)

    # ------------------------------------------------------------------
    # Install requests
    # ------------------------------------------------------------------

    def on_package_installed(self, listener: InstallListener) -> None:
        """Register ``listener`` for install requests."""
        self._install_listeners.append(listener)

    def install_package(self, package: PackageResult) -> None:
        """Forward an install request for ``package`` to the listeners."""
        logger.debug("Install requested for %s", package.identity)
        for listener in list(self._install_listeners):
            listener(package)

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    def perform_search(self) -> "asyncio.Task[None]":
        """Cancel the search in flight and start a new one.

        Does not wait for the previous search to observe its cancellation.

        Returns:
            The task running the new search.
        """
        if self._token is not None:
            self._token.cancel()

        token = CancellationToken()
        self._token = token
        self._generation += 1

        task = asyncio.get_running_loop().create_task(
            self._run_search(
                self._search_term,
                self._prerelease,
                self.exact_match,
                token,
                self._generation,
            )
        )
        # superseded tasks still run to completion; hold them until then
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._task = task
        return task

    def close(self) -> None:
        """Cancel any search in flight."""
        if self._token is not None:
            self._token.cancel()

    def _is_current(self, token: CancellationToken, generation: int) -> bool:
        return not token.cancelled and generation == self._generation

    @contextmanager
    def _searching(self) -> Iterator[None]:
        """Hold ``is_searching`` for the duration of one attempt."""
        was_searching = self.is_searching
        self._active_searches += 1
        if not was_searching:
            self._notify("is_searching", True)
        try:
            yield
        finally:
            self._active_searches -= 1
            if not self.is_searching:
                self._notify("is_searching", False)

    async def _run_search(
        self,
        search_term: str,
        prerelease: bool,
        exact_match: bool,
        token: CancellationToken,
        generation: int,
    ) -> None:
        if not self._is_current(token, generation):
            return

        term = (search_term or "").strip()
        if not term:
            self._set("_packages", "packages", ())
            self.is_packages_menu_open = False
            self._set("_state", "state", SessionState.IDLE)
            return

        with self._searching():
            self._set("_state", "state", SessionState.SEARCHING)
            try:
                packages = await self._aggregator.search(
                    term,
                    include_prerelease=prerelease,
                    exact_match=exact_match,
                    token=token,
                )
            except OperationCancelled:
                logger.debug("Search for %r superseded", term)
                return
            except Exception as exc:
                if token.cancelled:
                    return
                self._diagnostics.report_error(exc)
                if self._is_current(token, generation):
                    self._set("_state", "state", SessionState.IDLE)
                return

            if not self._is_current(token, generation):
                logger.debug("Discarding stale results for %r", term)
                return

            self._set("_packages", "packages", tuple(packages))
            self.is_packages_menu_open = bool(packages)
            self._set("_state", "state", SessionState.RESULTS_READY)
