"""
Membership verification flow.

One run per "Verify Here" click:
  guild check -> verified-role check -> modal input -> cache lookup
  -> store lookup on miss -> grant role / report outcome

Discord-specific I/O lives behind the session object (see views.py), so the
flow can be driven by a fake session in tests.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Collection, Optional, Tuple

from dsecbot.config import DEFAULT_MODAL_TIMEOUT_SECONDS
from dsecbot.identity import NormalizedIdentity, normalize_identity, normalize_name
from dsecbot.member_cache import MembershipCache
from dsecbot.supabase_client import MembershipStore

log = logging.getLogger("dsec-bot")


class Outcome(enum.Enum):
    GRANTED = "granted"
    ALREADY_VERIFIED = "already_verified"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"
    REJECTED = "rejected"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class VerificationResult:
    outcome: Outcome
    via_cache: bool = False
    identity: Optional[NormalizedIdentity] = None


class VerificationSession:
    """What the flow needs from the chat platform for one interaction."""

    user_id: int
    guild_id: Optional[int]

    async def fetch_role_ids(self) -> Collection[int]:
        raise NotImplementedError

    async def request_identity(self, timeout: float) -> Optional[Tuple[str, str]]:
        """Ask for (full name, student ID). None if the user never submits."""
        raise NotImplementedError

    async def grant_role(self, role_id: int) -> None:
        raise NotImplementedError

    async def report(self, result: VerificationResult) -> None:
        raise NotImplementedError


class VerificationFlow:
    def __init__(
        self,
        cache: MembershipCache,
        store: MembershipStore,
        *,
        guild_id: int,
        verified_role_id: int,
        modal_timeout: float = DEFAULT_MODAL_TIMEOUT_SECONDS,
    ):
        self.cache = cache
        self.store = store
        self.guild_id = guild_id
        self.verified_role_id = verified_role_id
        self.modal_timeout = modal_timeout

    async def run(self, session: VerificationSession) -> VerificationResult:
        """Run one verification attempt to a terminal outcome.

        Platform and store errors are not caught here; the caller decides how
        to surface them.
        """
        result = await self._run(session)
        if result.outcome is Outcome.ABANDONED:
            log.info(f"[Verify] user={session.user_id} abandoned (no modal submission)")
            return result

        log.info(
            f"[Verify] user={session.user_id} outcome={result.outcome.value}"
            + (" (cache)" if result.via_cache else "")
        )
        await session.report(result)
        return result

    async def _run(self, session: VerificationSession) -> VerificationResult:
        if session.guild_id is None or session.guild_id != self.guild_id:
            return VerificationResult(Outcome.REJECTED)

        role_ids = await session.fetch_role_ids()
        if self.verified_role_id in role_ids:
            return VerificationResult(Outcome.ALREADY_VERIFIED)

        submitted = await session.request_identity(self.modal_timeout)
        if submitted is None:
            return VerificationResult(Outcome.ABANDONED)

        full_name, student_id = submitted
        identity = normalize_identity(full_name, student_id)

        result = await self.resolve(identity)
        if result.outcome is Outcome.GRANTED:
            await session.grant_role(self.verified_role_id)
        return result

    async def resolve(self, identity: NormalizedIdentity) -> VerificationResult:
        """Tiered lookup: cache first, membership store on miss.

        A cached name that differs from the submitted one is handled like a
        miss and re-checked against the store.
        """
        cached = await self.cache.lookup(identity.student_id)
        if cached is not None and cached == identity.full_name:
            return VerificationResult(Outcome.GRANTED, via_cache=True, identity=identity)

        rows = await self.store.find_by_student_id(identity.student_id)
        if not rows:
            return VerificationResult(Outcome.NOT_FOUND, identity=identity)

        stored_name = normalize_name(rows[0].full_name)
        # Recorded before the name comparison: the cache mirrors the store, not the decision.
        await self.cache.record(identity.student_id, stored_name)

        if stored_name == identity.full_name:
            return VerificationResult(Outcome.GRANTED, identity=identity)
        return VerificationResult(Outcome.MISMATCH, identity=identity)
