"""
Bounded worker pool for the concurrent swarm phases.

Every unit of work is dominated by a blocking call to the text-generation
backend, so threads are the right primitive. Results come back in input
order; work that misses the phase deadline is reported as a TimeoutError
and its eventual result is discarded.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass
class WorkOutcome:
    item: Any
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_parallel(
    func: Callable[[Any], Any],
    items: Sequence[Any],
    max_workers: int = 8,
    timeout: Optional[float] = None
) -> List[WorkOutcome]:
    """
    Run func over items on a bounded thread pool.

    Args:
        func: Work function, called once per item
        items: Work items
        max_workers: Pool size
        timeout: Per-item budget in seconds. The phase deadline is this budget
                 times the number of scheduling waves (items / workers).

    Returns:
        One WorkOutcome per item, in input order
    """
    if not items:
        return []

    workers = max(1, min(max_workers, len(items)))
    deadline = timeout * math.ceil(len(items) / workers) if timeout else None

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="swarmiq")
    futures = [pool.submit(func, item) for item in items]
    try:
        _, not_done = wait(futures, timeout=deadline)
    finally:
        # Stragglers keep running in the background; nobody reads their result
        pool.shutdown(wait=False, cancel_futures=True)

    outcomes = []
    for item, future in zip(items, futures):
        if future in not_done:
            future.cancel()
            outcomes.append(WorkOutcome(item, error=TimeoutError(f"no result within {deadline}s")))
        elif future.exception() is not None:
            outcomes.append(WorkOutcome(item, error=future.exception()))
        else:
            outcomes.append(WorkOutcome(item, value=future.result()))

    if not_done:
        logger.warning("%d of %d work items missed the %.1fs deadline", len(not_done), len(items), deadline)
    return outcomes
