"""Console reporting: verbose log, error stream and frame progress."""

from __future__ import annotations

import sys
import threading

VERBOSE = False


def set_verbose(enabled: bool) -> None:
    global VERBOSE
    VERBOSE = bool(enabled)


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def error(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


class ProgressCounter:
    """Count completed units from many threads and print ``done out of total``."""

    def __init__(self, total: int, label: str = "frame", *, quiet: bool = False):
        self.total = total
        self.label = label
        self.quiet = quiet
        self._done = 0
        self._lock = threading.Lock()

    @property
    def done(self) -> int:
        with self._lock:
            return self._done

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._done += amount
            done = self._done
        if not self.quiet:
            print("{0} {1} out of {2}".format(self.label, done, self.total), end='\r', flush=True)
        return done

    def finish(self) -> None:
        if not self.quiet:
            print()
