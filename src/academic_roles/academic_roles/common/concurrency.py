from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Hashable, Iterator, Tuple, TypeVar

from ..core.constants import TRANSITION_CONFLICT_RETRIES
from ..core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyedLocks:
    """Per-key mutual exclusion for writers inside one process.

    Several keys are always acquired in sorted order so two writers that need
    overlapping key sets cannot deadlock each other. A key's lock exists only
    while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, token: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(token)
            if lock is None:
                lock = self._locks[token] = threading.Lock()
            self._users[token] = self._users.get(token, 0) + 1
            return lock

    def _checkin(self, token: Hashable) -> None:
        with self._guard:
            self._users[token] -= 1
            if not self._users[token]:
                del self._users[token]
                del self._locks[token]

    @contextmanager
    def hold(self, *tokens: tuple) -> Iterator[None]:
        ordered = sorted(set(tokens))
        checked_out: list[Tuple[Hashable, threading.Lock]] = []
        acquired: list[threading.Lock] = []
        try:
            for token in ordered:
                checked_out.append((token, self._checkout(token)))
            for _, lock in checked_out:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for token, _ in checked_out:
                self._checkin(token)


def retry_on_conflict(
    work: Callable[[], T],
    *,
    what: str,
    retries: int = TRANSITION_CONFLICT_RETRIES,
) -> T:
    """Run `work`, re-running it after a ConflictError at most `retries` times.

    `work` must re-read whatever state it depends on; each attempt is a fresh
    unit of work.
    """
    attempt = 0
    while True:
        try:
            return work()
        except ConflictError:
            if attempt >= retries:
                logger.warning("%s: conflict persisted after %d retr%s", what, attempt, "y" if attempt == 1 else "ies")
                raise
            attempt += 1
            logger.warning("%s: concurrent change detected, retrying (%d/%d)", what, attempt, retries)
