from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class TournamentLocks:
    """One lock per tournament id so mutations of a tournament run one at a time."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, tournament_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[tournament_id] = lock
            return lock

    @contextmanager
    def hold(self, tournament_id: int) -> Iterator[None]:
        lock = self._lock_for(tournament_id)
        with lock:
            yield

    def discard(self, tournament_id: int) -> None:
        with self._guard:
            self._locks.pop(tournament_id, None)


default_locks = TournamentLocks()
