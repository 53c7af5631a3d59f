# rate_limit.py

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from loguru import logger

from errors import TooManyRequests


class SlidingWindowLimiter:
    """
    Per-client sliding-window log. Each key keeps the timestamps of its
    accepted requests inside the window; a request over the limit is refused
    without being recorded.

    Every `sweep_every` hits, keys whose whole log has expired are dropped
    so the maps only hold clients seen within the last window.
    """

    def __init__(self, max_requests: int = 100, window_seconds: float = 15 * 60,
                 clock: Callable[[], float] = time.monotonic, sweep_every: int = 1000):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.sweep_every = max(1, sweep_every)
        self._hits: Dict[str, Deque[float]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._since_sweep = 0

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def hit(self, key: str) -> int:
        """
        Record one request for key. Returns the remaining allowance,
        raises TooManyRequests when the window is already full.
        """
        while True:
            lock = self._lock_for(key)
            with lock:
                # a sweep may have retired this lock between lookup and acquire
                if self._locks.get(key) is not lock:
                    continue
                remaining = self._record(key)
                break
        self._maybe_sweep()
        return remaining

    def _record(self, key: str) -> int:
        now = self.clock()
        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self.max_requests:
            retry_after = self.window_seconds - (now - hits[0])
            logger.warning(f"[RateLimit] {key} exceeded {self.max_requests} requests per {self.window_seconds:.0f}s")
            raise TooManyRequests(retry_after=max(retry_after, 0.0))
        hits.append(now)
        return self.max_requests - len(hits)

    def _maybe_sweep(self) -> None:
        with self._registry_lock:
            self._since_sweep += 1
            if self._since_sweep < self.sweep_every:
                return
            self._since_sweep = 0
        self.sweep()

    def sweep(self) -> int:
        """Drop keys with no timestamp inside the window. Returns how many were dropped."""
        dropped = 0
        with self._registry_lock:
            now = self.clock()
            for key, lock in list(self._locks.items()):
                # keys busy in hit() are left for the next sweep
                if not lock.acquire(blocking=False):
                    continue
                try:
                    hits = self._hits.get(key)
                    if not hits or now - hits[-1] >= self.window_seconds:
                        self._hits.pop(key, None)
                        del self._locks[key]
                        dropped += 1
                finally:
                    lock.release()
        if dropped:
            logger.debug(f"[RateLimit] Swept {dropped} idle clients")
        return dropped

    def tracked_clients(self) -> int:
        with self._registry_lock:
            return len(self._locks)
