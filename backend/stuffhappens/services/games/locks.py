import threading
from contextlib import contextmanager
from typing import Dict, Hashable, List


class KeyedLocks:
    """In-process mutual exclusion keyed by an arbitrary hashable.

    Entries are reference counted and dropped once no thread holds or waits
    on them, so the registry does not grow with the number of games played.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self):
        with self._guard:
            return len(self._locks)
