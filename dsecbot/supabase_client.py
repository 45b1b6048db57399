"""
Supabase membership store client.

Reads the active-members table through Supabase's PostgREST endpoint
(``/rest/v1/<table>``). This module owns every call to the membership store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import aiohttp
from aiohttp import ContentTypeError

from dsecbot.config import DEFAULT_MEMBERS_TABLE, DEFAULT_STORE_TIMEOUT_SECONDS

log = logging.getLogger("dsec-bot")


class SupabaseAPIError(Exception):
    """Raised for any failed membership store request."""
    pass


@dataclass(frozen=True)
class MemberRecord:
    full_name: str
    student_id: str


class MembershipStore:
    """Read-only client for the active members table."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = DEFAULT_MEMBERS_TABLE,
        timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    ):
        """
        Args:
            base_url: Project URL (https://<project>.supabase.co)
            api_key: Service or anon key with read access to ``table``
            table: Table holding one row per active member
            timeout_seconds: Total timeout for a single request
        """
        if not base_url:
            raise ValueError("Supabase URL is required")
        if not api_key:
            raise ValueError("Supabase API key is required")

        self.base_url = base_url.rstrip("/")
        self.table = table
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def _extract_error_message(self, data: object, status: int) -> str:
        """Readable message from PostgREST's error shape ({"message": ..., "code": ...})."""
        if isinstance(data, dict):
            msg = data.get("message") or data.get("error")
            code = data.get("code")
            if msg and code:
                return f"{msg} ({code})"
            if msg:
                return str(msg)
        return f"API error: {status}"

    async def _get(self, params: Dict[str, str]) -> object:
        url = f"{self.base_url}/rest/v1/{self.table}"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=self.headers,
                    params=params,
                    timeout=self.timeout,
                ) as resp:
                    if resp.status == 401:
                        raise SupabaseAPIError("Invalid Supabase API key")
                    if resp.status == 403:
                        raise SupabaseAPIError(f"API key cannot read table {self.table!r}")
                    if resp.status == 429:
                        raise SupabaseAPIError("Rate limit exceeded - wait before retrying")

                    try:
                        data = await resp.json()
                    except ContentTypeError:
                        txt = (await resp.text())[:2000]
                        data = {"message": txt, "code": "non_json"}

                    if resp.status >= 400:
                        raise SupabaseAPIError(self._extract_error_message(data, resp.status))
                    return data
        except aiohttp.ClientError as e:
            raise SupabaseAPIError(f"Network error: {e}") from e

    async def find_by_student_id(self, student_id: str) -> List[MemberRecord]:
        """Return the active member rows whose student_id equals ``student_id``.

        ``student_id`` must already be normalized. For this table the result
        holds zero or one row.
        """
        data = await self._get(
            {
                "select": "full_name,student_id",
                "student_id": f"eq.{student_id}",
            }
        )
        if not isinstance(data, list):
            raise SupabaseAPIError(f"Unexpected response shape from {self.table!r}: {type(data).__name__}")

        rows: List[MemberRecord] = []
        for item in data:
            rec = _to_record(item)
            if rec is not None:
                rows.append(rec)
        log.debug(f"[Store] {self.table} student_id={student_id} -> {len(rows)} row(s)")
        return rows


def _to_record(item: object) -> Optional[MemberRecord]:
    if not isinstance(item, dict):
        return None
    name = item.get("full_name")
    sid = item.get("student_id")
    if name is None or sid is None:
        return None
    return MemberRecord(full_name=str(name), student_id=str(sid))
