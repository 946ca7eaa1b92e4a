"""Sequential work queue for check cycles.

Each work item runs with its own temporary scratch directory, removed as soon
as the item returns. Items that fail are retried a bounded number of times;
configuration errors are never retried.
"""

from __future__ import annotations

import logging
import tempfile
from collections import Counter, deque
from pathlib import Path
from typing import TYPE_CHECKING

from prcheck_core.errors import ConfigurationError

if TYPE_CHECKING:
    from prcheck_core.workflow import CycleResult, WorkItem

logger = logging.getLogger(__name__)


class WorkQueue:
    def __init__(self, max_retries: int = 2, max_cycles: int = 10):
        self.max_retries = max_retries
        # Guards against a pull request that keeps re-dispatching itself.
        self.max_cycles = max_cycles
        self.failed: list[tuple[WorkItem, Exception]] = []
        self._pending: deque[WorkItem] = deque()

    def submit(self, item: WorkItem) -> None:
        self._pending.append(item)

    def __len__(self) -> int:
        return len(self._pending)

    def drain(self) -> list[CycleResult]:
        """Run items until the queue is empty and return the result of every successful run."""
        results: list[CycleResult] = []
        runs: Counter[str] = Counter()
        attempts: Counter[WorkItem] = Counter()

        while self._pending:
            item = self._pending.popleft()
            if runs[item.key] >= self.max_cycles:
                logger.error("%r exceeded %d cycles, dropping it", item, self.max_cycles)
                continue
            runs[item.key] += 1

            try:
                with tempfile.TemporaryDirectory(prefix="prcheck-") as scratch:
                    result = item.run(Path(scratch))
            except ConfigurationError:
                raise
            except Exception as e:
                attempts[item] += 1
                if attempts[item] <= self.max_retries:
                    logger.warning(
                        "%r failed (attempt %d/%d): %s. Retrying...",
                        item,
                        attempts[item],
                        self.max_retries + 1,
                        e,
                    )
                    item.reset()
                    self._pending.append(item)
                else:
                    logger.error("%r failed after %d attempts: %s", item, attempts[item], e)
                    self.failed.append((item, e))
                continue

            logger.debug("%r finished: %s, %d follow-up item(s)", item, result.action.value, len(result.work_items))
            results.append(result)
            self._pending.extend(result.work_items)

        return results
