"""Background re-cleaning for interactive callers.

Every parameter or whitelist change submits a new run; only the newest
submission's result is delivered, older ones are dropped when they finish.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

import numpy as np

from .processors.artifact_cleaning import CleaningResult, ParamsLike, clean_artifacts
from .utils.logging_utils import get_logger

logger = get_logger(__name__)


class LatestResultRunner:
    """Run :func:`clean_artifacts` off the calling thread, last writer wins.

    Args:
        on_result: Optional callback invoked (on a worker thread) with each
            delivered result
        max_workers: Threads available for overlapping runs
    """

    def __init__(
        self,
        on_result: Optional[Callable[[CleaningResult], None]] = None,
        max_workers: int = 1,
    ):
        self.on_result = on_result
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="scan-cleaner")
        self._lock = threading.Lock()
        # held while a result is checked and handed to on_result, so
        # deliveries never overtake each other
        self._deliver_lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[CleaningResult] = None
        self._latest_future: Optional[Future] = None

    @property
    def generation(self) -> int:
        return self._generation

    def submit(
        self,
        raster: np.ndarray,
        params: ParamsLike = None,
        manual_whitelist: Optional[np.ndarray] = None,
    ) -> Future:
        """Queue a cleaning run, superseding any run still in flight.

        A superseded run that has not started yet is cancelled.
        """
        with self._lock:
            if self._latest_future is not None:
                self._latest_future.cancel()
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(
                self._run, generation, raster, params, manual_whitelist
            )
            self._latest_future = future
        return future

    def _run(self, generation, raster, params, manual_whitelist) -> Optional[CleaningResult]:
        result = clean_artifacts(raster, params=params, manual_whitelist=manual_whitelist)
        with self._deliver_lock:
            with self._lock:
                if generation != self._generation:
                    logger.debug(
                        f"Dropping superseded result {generation} (latest {self._generation})"
                    )
                    return None
                self._latest = result
            if self.on_result is not None:
                self.on_result(result)
        return result

    def latest(self) -> Optional[CleaningResult]:
        """The most recently delivered result, if any."""
        with self._lock:
            return self._latest

    def wait(self, timeout: Optional[float] = None) -> Optional[CleaningResult]:
        """Block until the newest submission finishes and return its result.

        Exceptions raised by that run propagate.
        """
        with self._lock:
            future = self._latest_future
        if future is None:
            return None
        return future.result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "LatestResultRunner":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
