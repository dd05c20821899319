"""
In-memory rate limiting for commands.

A window opens on first use and resets completely once it has elapsed, so this
is a fixed window that restarts on demand rather than an exact sliding log.
The limiter holds no policy; callers pass a RateLimitPolicy per call.

Everything runs on the bot's single event loop, and `rate_limit` never awaits,
so read-modify-write on an entry cannot interleave with another request.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass
class RateLimitEntry:
    window_start: float
    uses: int = 0


@dataclass(frozen=True)
class RateLimitPolicy:
    window: float = 60.0        # seconds
    max_per_window: int = 3
    by_user: bool = False       # True: one bucket per user across all channels


@dataclass(frozen=True)
class RateLimitScope:
    user_id: int
    channel_id: Optional[int] = None
    guild_id: Optional[int] = None
    privileged: bool = False    # moderators are never rate limited
    user_tag: str = ""


@dataclass(frozen=True)
class RateLimitResult:
    is_rate_limited: bool
    time_until_next_use: Optional[float] = None  # seconds, only when limited
    uses_left: Optional[int] = None              # None for privileged scopes


class RateLimitStore(Protocol):
    def get(self, key: str) -> Optional[RateLimitEntry]: ...

    def set(self, key: str, entry: RateLimitEntry) -> None: ...

    def evict(self, older_than: float) -> int: ...

    def __len__(self) -> int: ...


class InMemoryRateLimitStore:
    """
    Bounded LRU map of rate-limit entries.

    `evict` drops entries whose window started before `older_than`; the LRU
    bound caps memory between sweeps.
    """

    def __init__(self, max_entries: int = 10000) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, RateLimitEntry] = OrderedDict()

    def get(self, key: str) -> Optional[RateLimitEntry]:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def evict(self, older_than: float) -> int:
        stale = [k for k, e in self._entries.items() if e.window_start < older_than]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class RateLimiter:
    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock

    @staticmethod
    def scope_key(key: str, scope: RateLimitScope, by_user: bool) -> str:
        if by_user:
            return f"{scope.user_id}:{key}"
        return f"{scope.guild_id}:{scope.channel_id}:{scope.user_id}:{key}"

    def rate_limit(self, key: str, scope: RateLimitScope, policy: RateLimitPolicy) -> RateLimitResult:
        """
        Count one use of `key` for `scope` and report whether it is allowed.
        Rejected uses are not counted.
        """
        if scope.privileged:
            return RateLimitResult(is_rate_limited=False)

        map_key = self.scope_key(key, scope, policy.by_user)
        now = self.clock()
        entry = self.store.get(map_key)

        if entry is None:
            entry = RateLimitEntry(window_start=now)
            self.store.set(map_key, entry)
        elif now - entry.window_start > policy.window:
            entry.window_start = now
            entry.uses = 0

        if entry.uses + 1 > policy.max_per_window:
            logging.info("Rate limited %s for %s", scope.user_tag or scope.user_id, key)
            return RateLimitResult(
                is_rate_limited=True,
                time_until_next_use=entry.window_start + policy.window - now,
                uses_left=0,
            )

        entry.uses += 1
        return RateLimitResult(
            is_rate_limited=False,
            uses_left=policy.max_per_window - entry.uses,
        )

    def sweep(self, max_age: float) -> int:
        """Evict entries whose window started more than `max_age` seconds ago."""
        evicted = self.store.evict(self.clock() - max_age)
        if evicted:
            logging.debug("Rate limiter evicted %d stale entries (%d left)", evicted, len(self.store))
        return evicted
