"""
[BK-M007] bazaarkit.marketplace.cache
만료 시간이 있는 스레드 안전 인메모리 캐시

version: 1.0.0
created: 2026-10-13
modified: 2026-10-13
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

import structlog

logger = structlog.get_logger()


class TTLCache:  # [BK-M007.1]
    """항목마다 만료 시각을 갖는 캐시.

    만료된 항목은 조회 시 보이지 않으며, sweep_interval 마다 한 번씩
    쓰기/조회 경로에서 일괄 정리됩니다. clock을 주입하면 테스트에서
    시간을 직접 제어할 수 있습니다.
    """

    def __init__(
        self,
        ttl: float,
        sweep_interval: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._items: dict[Hashable, tuple[Any, float]] = {}
        self._last_sweep = clock()

    def get(self, key: Hashable, default: Any = None) -> Any:  # [BK-M007.2]
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            item = self._items.get(key)
            if item is None:
                return default
            value, expires_at = item
            if now >= expires_at:
                del self._items[key]
                return default
            return value

    def put(self, key: Hashable, value: Any) -> None:  # [BK-M007.3]
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            self._items[key] = (value, now + self.ttl)

    def delete(self, key: Hashable) -> None:  # [BK-M007.4]
        with self._lock:
            self._items.pop(key, None)

    def flush(self) -> None:  # [BK-M007.5]
        with self._lock:
            self._items.clear()
        logger.debug("cache_flushed", cache=self.name)

    def sweep(self) -> int:  # [BK-M007.6]
        """만료된 항목을 지우고 지운 개수를 반환합니다."""
        with self._lock:
            return self._sweep(self._clock())

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._items.values() if now < expires_at)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self.sweep_interval:
            self._sweep(now)

    def _sweep(self, now: float) -> int:
        expired = [k for k, (_, expires_at) in self._items.items() if now >= expires_at]
        for key in expired:
            del self._items[key]
        self._last_sweep = now
        return len(expired)


_MISSING = object()
