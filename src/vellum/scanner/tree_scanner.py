"""
TreeScanner: parallel recursive directory enumeration.

Worker threads pull directories from a shared work queue, list them, and
push every entry they find into a bounded HandOff. Subdirectories go back
onto the work queue, so workers race over disjoint subtrees and no order
is guaranteed between them. The HandOff closes once every worker has
finished, which is the only end-of-stream signal its reader receives.
"""

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

HANDOFF_CAPACITY = 100

_CLOSED = object()


class ScannedEntry(NamedTuple):
    """A filesystem entry found during the walk."""
    path: Path
    name: str
    is_dir: bool


class HandOff:
    """Bounded single-reader channel between scanner workers and a consumer.

    ``put`` blocks while the queue is full; iteration blocks while it is
    empty and ends after ``close``.
    """

    def __init__(self, capacity: int = HANDOFF_CAPACITY):
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    def put(self, entry: ScannedEntry) -> None:
        if self._closed:
            raise RuntimeError("HandOff is closed")
        self._queue.put(entry)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[ScannedEntry]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


class TreeScanner:
    """Enumerates a directory tree with a fixed pool of worker threads."""

    def __init__(self, workers: int = 1):
        if workers < 1:
            raise ValueError("TreeScanner needs at least one worker")
        self.workers = workers

    def scan(self, root: Path, handoff: HandOff) -> int:
        """Walk ``root`` and push every entry below it into ``handoff``.

        Blocks until enumeration is complete, then closes ``handoff``.
        The root itself is not emitted. Entries that cannot be listed or
        stat'ed are dropped.

        Returns:
            Number of entries emitted.
        """
        pending: "queue.Queue[Optional[Path]]" = queue.Queue()
        counts: List[int] = [0] * self.workers
        pending.put(Path(root))

        threads = []
        for index in range(self.workers):
            t = threading.Thread(
                target=self._worker,
                args=(index, pending, handoff, counts),
                name=f"vellum-scan-{index}",
                daemon=True,
            )
            t.start()
            threads.append(t)

        try:
            # every queued directory is marked done only after its
            # subdirectories have been queued
            pending.join()
        finally:
            for _ in threads:
                pending.put(None)
            for t in threads:
                t.join()
            handoff.close()

        emitted = sum(counts)
        logger.debug(f"Scanned {emitted} entries under {root} with {self.workers} workers")
        return emitted

    def _worker(self, index: int, pending: "queue.Queue[Optional[Path]]",
                handoff: HandOff, counts: List[int]) -> None:
        while True:
            directory = pending.get()
            if directory is None:
                pending.task_done()
                return
            try:
                counts[index] += self._list_directory(directory, pending, handoff)
            finally:
                pending.task_done()

    def _list_directory(self, directory: Path, pending: "queue.Queue[Optional[Path]]",
                        handoff: HandOff) -> int:
        emitted = 0
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            return emitted

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.debug(f"Cannot stat {entry.path}: {e}")
                continue
            path = Path(entry.path)
            if is_dir:
                pending.put(path)
            handoff.put(ScannedEntry(path=path, name=entry.name, is_dir=is_dir))
            emitted += 1
        return emitted
