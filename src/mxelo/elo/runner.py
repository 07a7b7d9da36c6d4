"""
Background rating runs with stale-result discarding.

Any change to the race list or a rating option triggers a full
recomputation. Changes can arrive faster than runs finish, so every
submission is tagged with a monotonically increasing version. A run that
finishes after a newer one was submitted is still allowed to complete, but
its result is dropped instead of replacing the latest one.

Runs execute on a single worker thread so the caller stays responsive. The
engine itself knows nothing about threads; it only checks an optional
cancellation token between races.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from mxelo.elo.pipeline import (
    CancellationToken,
    EloParams,
    EloPipeline,
    RatingRun,
    RunCancelled,
)
from mxelo.events import RaceEvent

logger = logging.getLogger(__name__)

ResultCallback = Callable[[RatingRun], None]


class RatingRunner:
    """
    Host-side orchestration for rating runs.

    Usage:
        runner = RatingRunner(on_result=lambda run: show(run))
        runner.submit(races, EloParams(mulligan_enabled=True))
        runner.submit(races, EloParams(mulligan_enabled=False))  # supersedes
        ...
        runner.shutdown()

    Args:
        on_result: Called with each accepted (non-stale) result, on the
                   worker thread. It runs while the runner lock is held, so
                   no newer version can be issued before it returns; it may
                   call back into the runner.
        cancel_stale: Also set the superseded run's cancellation token so it
                      stops at the next race boundary instead of finishing
    """

    def __init__(
        self,
        on_result: Optional[ResultCallback] = None,
        cancel_stale: bool = False,
    ) -> None:
        self.on_result = on_result
        self.cancel_stale = cancel_stale
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mxelo-rating")
        self._lock = threading.RLock()
        self._version = 0
        self._token: Optional[CancellationToken] = None
        self._latest: Optional[RatingRun] = None

    @property
    def version(self) -> int:
        """Most recently issued version token."""
        with self._lock:
            return self._version

    def is_current(self, version: Optional[int]) -> bool:
        with self._lock:
            return version == self._version

    def latest(self) -> Optional[RatingRun]:
        """Most recent accepted result, or None if no run has been accepted."""
        with self._lock:
            return self._latest

    def invalidate(self) -> int:
        """
        Issue a new version without scheduling a run.

        Any run in flight becomes stale, and the latest result is cleared
        (e.g. after the race store was wiped).
        """
        with self._lock:
            self._version += 1
            self._latest = None
            self._cancel_previous_locked()
            self._token = None
            return self._version

    def submit(
        self,
        events: Iterable[RaceEvent],
        params: Optional[EloParams] = None,
    ) -> Future:
        """
        Schedule a full recomputation.

        The race list is copied before scheduling, so the caller may keep
        editing its own list.

        Returns:
            Future resolving to the RatingRun if it was accepted, or None if
            it was superseded before it finished.
        """
        snapshot = list(events)
        token = CancellationToken()
        with self._lock:
            self._version += 1
            version = self._version
            self._cancel_previous_locked()
            self._token = token

        logger.debug("Submitting rating run version=%d (%d races)", version, len(snapshot))
        return self._executor.submit(self._run, snapshot, params, token, version)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> RatingRunner:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _cancel_previous_locked(self) -> None:
        if self.cancel_stale and self._token is not None:
            self._token.cancel()

    def _run(
        self,
        events: list[RaceEvent],
        params: Optional[EloParams],
        token: CancellationToken,
        version: int,
    ) -> Optional[RatingRun]:
        run_token = token if self.cancel_stale else None
        try:
            result = EloPipeline(params).run(events, token=run_token, version=version)
        except RunCancelled:
            logger.debug("Rating run version=%d cancelled", version)
            return None

        with self._lock:
            if version != self._version:
                logger.debug(
                    "Discarding stale rating run version=%d (current=%d)",
                    version, self._version,
                )
                return None
            self._latest = result
            if self.on_result is not None:
                self.on_result(result)
        return result
