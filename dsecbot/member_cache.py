from __future__ import annotations

import asyncio
from typing import Dict, Optional


class MembershipCache:
    """Positive-result cache: normalized student ID -> normalized full name.

    Filled only from membership store hits and never invalidated; the store
    stays the source of truth. One instance is shared by every in-flight
    verification, so each read and write takes the lock for just that access.
    Never hold it across a network call.

    len() and `in` skip the lock: they are synchronous snapshot helpers for
    diagnostics and tests, and the verification flow never relies on them.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._names: Dict[str, str] = {}

    async def lookup(self, student_id: str) -> Optional[str]:
        async with self._lock:
            return self._names.get(student_id)

    async def record(self, student_id: str, full_name: str) -> None:
        # Last writer wins; a student's canonical name doesn't change between writes.
        async with self._lock:
            self._names[student_id] = full_name

    # Lock-free snapshots; a single dict read cannot interleave with a write
    # on the event loop thread.
    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, student_id: object) -> bool:
        return student_id in self._names
