"""Bounded-concurrency batch elevation lookups.

A fixed number of worker threads drain one shared queue of grid points. Each
point always yields exactly one `GridElevation`; a failed lookup becomes NaN
instead of an exception, so one bad point never aborts the batch.

Result order follows completion, not input. Correlate results by `row`/`col`.
"""

from __future__ import annotations

import logging
import math
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from slope_api.core.grid import GridElevation, GridPoint
from slope_api.errors import ElevationSourceError
from slope_api.logging_utils import log_event

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10

FetchFn = Callable[[float, float], float]


def fetch_elevation_batch(
    points: Sequence[GridPoint],
    fetch: FetchFn,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[GridElevation]:
    """Resolve elevations for `points` with at most `concurrency` lookups in flight.

    Parameters
    - **points**: grid points to resolve.
    - **fetch**: `(lat, lon) -> elevation`, typically `ElevationClient.fetch_elevation`.
    - **concurrency**: number of worker threads (>= 1).

    Returns one `GridElevation` per input point, NaN where the lookup failed.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")
    if not points:
        return []

    pending: queue.Queue[GridPoint] = queue.Queue()
    for pt in points:
        pending.put(pt)

    results: list[GridElevation] = []
    results_lock = threading.Lock()

    def worker() -> None:
        while True:
            try:
                pt = pending.get_nowait()
            except queue.Empty:
                return
            elevation = _resolve(pt, fetch)
            with results_lock:
                results.append(GridElevation.from_point(pt, elevation))

    n_workers = min(concurrency, len(points))
    started = time.perf_counter()
    with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="elevation") as pool:
        futures = [pool.submit(worker) for _ in range(n_workers)]
    for future in futures:
        future.result()

    failed = sum(1 for r in results if not r.has_elevation)
    log_event(
        LOGGER,
        "elevation.batch",
        "Batch finished",
        requested=len(points),
        resolved=len(results) - failed,
        failed=failed,
        workers=n_workers,
        elapsed_s=round(time.perf_counter() - started, 3),
    )
    return results


def _resolve(pt: GridPoint, fetch: FetchFn) -> float:
    try:
        return float(fetch(pt.lat, pt.lon))
    except ElevationSourceError as exc:
        log_event(
            LOGGER,
            "elevation.batch",
            "Point lookup failed; marking as no data",
            level="warning",
            row=pt.row,
            col=pt.col,
            code=exc.code,
            error=exc.message,
        )
    except Exception:  # keep the pool alive; the point is reported as missing
        LOGGER.exception("Unexpected error resolving elevation at row=%s col=%s", pt.row, pt.col)
    return math.nan
