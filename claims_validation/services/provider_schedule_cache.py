"""
Provider Schedule Cache.

Read-through cache over the Provider Details service. Entries are keyed by
office code; each positive entry accumulates the coverage windows of every
schedule seen for that office, so lookups for different effective dates
fill in the office's coverage over time. "No schedules" answers are cached
per (office code, effective date).

Known limitation: positive entries are not keyed by area of law, so an
office contracted for several areas shares one set of windows.
"""

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Optional

from claims_validation.core.config import get_validation_settings
from claims_validation.gateways.base import TRANSIENT_ERRORS, with_retry
from claims_validation.gateways.provider_details_gateway import (
    ProviderDetailsGateway,
    get_provider_details_gateway,
)
from claims_validation.schemas.provider import ProviderSchedules, Schedule
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Cache Model
# =============================================================================


@dataclass(frozen=True)
class CoverageWindow:
    """Inclusive date range during which a schedule applies."""

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


def windows_from_schedules(schedules: list[Schedule]) -> list[CoverageWindow]:
    """Build coverage windows from schedule dates; a missing bound is open-ended."""
    return [
        CoverageWindow(
            start=schedule.schedule_start_date or date.min,
            end=schedule.schedule_end_date or date.max,
        )
        for schedule in schedules
        if schedule.schedule_start_date or schedule.schedule_end_date
    ]


def merge_windows(windows: list[CoverageWindow]) -> tuple[CoverageWindow, ...]:
    """Union of windows, with overlapping and adjacent ranges collapsed."""
    merged: list[CoverageWindow] = []
    for window in sorted(windows, key=lambda w: (w.start, w.end)):
        if merged:
            last = merged[-1]
            adjacent = last.end != date.max and window.start <= last.end + timedelta(days=1)
            if window.start <= last.end or adjacent:
                if window.end > last.end:
                    merged[-1] = CoverageWindow(last.start, window.end)
                continue
        merged.append(window)
    return tuple(merged)


@dataclass(frozen=True)
class ProviderDetailsCachedSchedules:
    """
    Cached Provider Details answer for one office.

    Instances are immutable; refresh and merge return new entries.
    A negative entry has no value and no windows, so covers() is always False.
    """

    value: Optional[ProviderSchedules]
    windows: tuple[CoverageWindow, ...] = field(default_factory=tuple)
    expires_at: Optional[datetime] = None
    is_negative: bool = False

    @classmethod
    def positive(
        cls,
        value: ProviderSchedules,
        windows: list[CoverageWindow],
        time_to_live: timedelta,
        now: Optional[datetime] = None,
    ) -> "ProviderDetailsCachedSchedules":
        """Create a positive entry expiring after the TTL."""
        return cls(
            value=value,
            windows=merge_windows(windows),
            expires_at=(now or _utcnow()) + time_to_live,
            is_negative=False,
        )

    @classmethod
    def negative(
        cls, time_to_live: timedelta, now: Optional[datetime] = None
    ) -> "ProviderDetailsCachedSchedules":
        """Create a "no schedules" entry expiring after the TTL."""
        return cls(
            value=None,
            windows=(),
            expires_at=(now or _utcnow()) + time_to_live,
            is_negative=True,
        )

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at is None or (now or _utcnow()) < self.expires_at

    def covers(self, effective_date: date) -> bool:
        """True if the date falls within any cached coverage window."""
        return any(window.contains(effective_date) for window in self.windows)

    def refresh(
        self, time_to_live: timedelta, now: Optional[datetime] = None
    ) -> "ProviderDetailsCachedSchedules":
        """Extend the expiry of positive entries; negative entries are returned unchanged."""
        if self.is_negative:
            return self
        return replace(self, expires_at=(now or _utcnow()) + time_to_live)

    def merge(
        self,
        value: ProviderSchedules,
        time_to_live: timedelta,
        now: Optional[datetime] = None,
    ) -> "ProviderDetailsCachedSchedules":
        """Fold a fresh upstream answer into this entry's schedules and windows."""
        if self.is_negative or self.value is None:
            return ProviderDetailsCachedSchedules.positive(
                value, windows_from_schedules(value.schedules), time_to_live, now
            )

        schedules = list(self.value.schedules)
        for schedule in value.schedules:
            if schedule not in schedules:
                schedules.append(schedule)
        merged_value = self.value.model_copy(
            update={"office": value.office or self.value.office, "schedules": schedules}
        )
        return ProviderDetailsCachedSchedules.positive(
            merged_value,
            list(self.windows) + windows_from_schedules(value.schedules),
            time_to_live,
            now,
        )


# =============================================================================
# Cache Service
# =============================================================================


class ProviderScheduleCache:
    """
    Read-through provider schedule cache with retry on transient failures.

    Safe for concurrent use by several validation runs: each office code has
    its own asyncio lock, held across the upstream call so that concurrent
    misses for one office result in a single request.

    Positive and negative entries live in separate LRU maps capped at
    max_entries each. Expired entries are dropped when read and swept on
    every write; an office's lock is dropped once the office has no
    entries and no lookup in flight.
    """

    def __init__(
        self,
        gateway: Optional[ProviderDetailsGateway] = None,
        ttl_seconds: Optional[int] = None,
        retry_attempts: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        retry_backoff_factor: Optional[float] = None,
        clock: Optional[Clock] = None,
        max_entries: Optional[int] = None,
    ):
        settings = get_validation_settings()
        self._gateway = gateway or get_provider_details_gateway()
        self._ttl = timedelta(
            seconds=ttl_seconds
            if ttl_seconds is not None
            else settings.PROVIDER_SCHEDULE_CACHE_TTL_SECONDS
        )
        self._retry_attempts = retry_attempts or settings.PROVIDER_DETAILS_RETRY_ATTEMPTS
        self._retry_delay = (
            retry_delay_seconds
            if retry_delay_seconds is not None
            else settings.PROVIDER_DETAILS_RETRY_DELAY_SECONDS
        )
        self._retry_backoff = retry_backoff_factor or settings.PROVIDER_DETAILS_RETRY_BACKOFF
        self._max_entries = max_entries or settings.PROVIDER_SCHEDULE_CACHE_MAX_ENTRIES
        self._clock = clock or _utcnow

        self._entries: OrderedDict[str, ProviderDetailsCachedSchedules] = OrderedDict()
        self._negative_entries: OrderedDict[
            tuple[str, date], ProviderDetailsCachedSchedules
        ] = OrderedDict()
        # Negative entries held per office, so idle locks can be found without a scan
        self._negative_counts: dict[str, int] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._stats = {
            "hits": 0,
            "negative_hits": 0,
            "misses": 0,
            "upstream_calls": 0,
            "evictions": 0,
        }

    # -------------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _office_lock(self, office_code: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(office_code, asyncio.Lock())
        self._lock_users[office_code] = self._lock_users.get(office_code, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[office_code] -= 1
            if not self._lock_users[office_code]:
                del self._lock_users[office_code]
                self._drop_lock_if_idle(office_code)

    def _has_entries(self, office_code: str) -> bool:
        return office_code in self._entries or office_code in self._negative_counts

    def _drop_lock_if_idle(self, office_code: str) -> None:
        if office_code not in self._lock_users and not self._has_entries(office_code):
            self._locks.pop(office_code, None)

    # -------------------------------------------------------------------------
    # Entry Maps
    # -------------------------------------------------------------------------

    def _put_entry(self, office_code: str, entry: ProviderDetailsCachedSchedules) -> None:
        self._entries[office_code] = entry
        self._entries.move_to_end(office_code)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._stats["evictions"] += 1
            self._drop_lock_if_idle(evicted)

    def _put_negative(self, key: tuple[str, date], entry: ProviderDetailsCachedSchedules) -> None:
        if key not in self._negative_entries:
            self._negative_counts[key[0]] = self._negative_counts.get(key[0], 0) + 1
        self._negative_entries[key] = entry
        self._negative_entries.move_to_end(key)
        while len(self._negative_entries) > self._max_entries:
            evicted, _ = self._negative_entries.popitem(last=False)
            self._forget_negative(evicted)
            self._stats["evictions"] += 1

    def _drop_entry(self, office_code: str) -> None:
        if self._entries.pop(office_code, None) is not None:
            self._drop_lock_if_idle(office_code)

    def _drop_negative(self, key: tuple[str, date]) -> None:
        if self._negative_entries.pop(key, None) is not None:
            self._forget_negative(key)

    def _forget_negative(self, key: tuple[str, date]) -> None:
        office_code = key[0]
        self._negative_counts[office_code] -= 1
        if not self._negative_counts[office_code]:
            del self._negative_counts[office_code]
            self._drop_lock_if_idle(office_code)

    def _sweep_expired(self, now: datetime) -> None:
        """Remove every expired entry from both maps."""
        for office_code in [o for o, e in self._entries.items() if not e.is_valid(now)]:
            self._drop_entry(office_code)
        for key in [k for k, e in self._negative_entries.items() if not e.is_valid(now)]:
            self._drop_negative(key)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    async def get_schedules(
        self,
        office_code: str,
        area_of_law: Optional[str],
        effective_date: date,
    ) -> Optional[ProviderSchedules]:
        """
        Get the office's schedules for an effective date.

        Args:
            office_code: Provider office code (cache key)
            area_of_law: Passed through to the Provider Details service
            effective_date: Date the contract must cover

        Returns:
            The accumulated schedules for the office, or None when the
            service reports no schedules

        Raises:
            GatewayError: if the lookup still fails after all retry attempts
        """
        async with self._office_lock(office_code):
            now = self._clock()

            entry = self._entries.get(office_code)
            if entry is not None and not entry.is_valid(now):
                self._drop_entry(office_code)
                entry = None
            if entry is not None and entry.covers(effective_date):
                self._put_entry(office_code, entry.refresh(self._ttl, now))
                self._stats["hits"] += 1
                logger.debug(f"Provider schedule cache hit: {office_code} {effective_date}")
                return entry.value

            key = (office_code, effective_date)
            negative = self._negative_entries.get(key)
            if negative is not None and not negative.is_valid(now):
                self._drop_negative(key)
                negative = None
            if negative is not None:
                self._negative_entries.move_to_end(key)
                self._stats["negative_hits"] += 1
                logger.debug(
                    f"Provider schedule negative cache hit: {office_code} {effective_date}"
                )
                return None

            self._stats["misses"] += 1
            logger.info(f"Provider schedule cache miss: {office_code} {effective_date}")
            result = await self._fetch(office_code, area_of_law, effective_date)

            now = self._clock()
            self._sweep_expired(now)
            if result is None or not result.schedules:
                self._put_negative(key, ProviderDetailsCachedSchedules.negative(self._ttl, now))
                return None

            entry = self._entries.get(office_code)
            if entry is not None:
                updated = entry.merge(result, self._ttl, now)
            else:
                updated = ProviderDetailsCachedSchedules.positive(
                    result, windows_from_schedules(result.schedules), self._ttl, now
                )
            self._put_entry(office_code, updated)
            return updated.value

    async def _fetch(
        self,
        office_code: str,
        area_of_law: Optional[str],
        effective_date: date,
    ) -> Optional[ProviderSchedules]:
        async def call() -> Optional[ProviderSchedules]:
            self._stats["upstream_calls"] += 1
            return await self._gateway.get_schedules(office_code, area_of_law, effective_date)

        fetch = with_retry(
            max_attempts=self._retry_attempts,
            delay=self._retry_delay,
            backoff_factor=self._retry_backoff,
            exceptions=TRANSIENT_ERRORS,
        )(call)
        return await fetch()

    def get_entry(self, office_code: str) -> Optional[ProviderDetailsCachedSchedules]:
        """Current positive entry for an office, if any."""
        return self._entries.get(office_code)

    def clear(self) -> None:
        """Drop all cached entries and the locks no lookup is holding."""
        self._entries.clear()
        self._negative_entries.clear()
        self._negative_counts.clear()
        for office_code in list(self._locks):
            self._drop_lock_if_idle(office_code)
        logger.info("Provider schedule cache cleared")

    def get_stats(self) -> dict[str, int]:
        """Get cache statistics."""
        return dict(
            self._stats,
            offices=len(self._entries),
            negative_entries=len(self._negative_entries),
            locks=len(self._locks),
        )


# Singleton instance
_provider_schedule_cache: Optional[ProviderScheduleCache] = None


def get_provider_schedule_cache() -> ProviderScheduleCache:
    """Get or create the process-wide provider schedule cache."""
    global _provider_schedule_cache
    if _provider_schedule_cache is None:
        _provider_schedule_cache = ProviderScheduleCache()
    return _provider_schedule_cache
