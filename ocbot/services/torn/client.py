"""
OC Watch Bot - Torn API Client
==============================

Fetches the faction member list from the Torn v2 API.

Any failure (transport, non-2xx, bad JSON, Torn error payload) is logged and
reported as None so the caller can skip the cycle. There is no retry here;
the next scheduled tick is the retry.
"""

import asyncio
from typing import Any, Optional

import aiohttp

from ocbot.core.config import NETWORK_TIMEOUT, TORN_API_BASE_URL
from ocbot.core.logger import logger
from ocbot.models import FactionMember


# =============================================================================
# Torn Client
# =============================================================================

class TornClient:
    """Thin async wrapper around the Torn faction members endpoint."""

    def __init__(
        self,
        base_url: str = TORN_API_BASE_URL,
        timeout: float = NETWORK_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Args:
            base_url: API root, without trailing slash
            timeout: Total request timeout in seconds
            session: Optional pre-built session (closed by close() only if we own it)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self.session and self._owns_session and not self.session.closed:
            await self.session.close()
        self.session = None

    # -------------------------------------------------------------------------
    # Faction Members
    # -------------------------------------------------------------------------

    async def fetch_faction_members(self, api_key: str) -> Optional[list[FactionMember]]:
        """
        Fetch the faction member list for the key's faction.

        Args:
            api_key: Torn API key

        Returns:
            List of members, or None if the data is unavailable this cycle
        """
        session = self._ensure_session()
        url = f"{self.base_url}/faction/members"

        try:
            async with session.get(url, params={"key": api_key}, timeout=self.timeout) as response:
                if response.status < 200 or response.status >= 300:
                    logger.warning("Torn API Request Failed", [
                        ("Status", str(response.status)),
                        ("Endpoint", "faction/members"),
                    ])
                    return None
                payload: Any = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Torn API Unreachable", [
                ("Type", type(e).__name__),
                ("Error", str(e)[:100] or "timeout"),
            ])
            return None
        except ValueError as e:
            logger.warning("Torn API Returned Invalid JSON", [
                ("Error", str(e)[:100]),
            ])
            return None

        return parse_members_payload(payload)


# =============================================================================
# Payload Parsing
# =============================================================================

def parse_members_payload(payload: Any) -> Optional[list[FactionMember]]:
    """
    Turn a decoded faction members response into FactionMember objects.

    Accepts the v2 list shape and the v1 mapping shape (keyed by member id).
    Entries that cannot be parsed are skipped.

    Returns:
        Parsed members, or None for error payloads and unexpected shapes
    """
    if not isinstance(payload, dict):
        logger.warning("Torn API Unexpected Response", [
            ("Type", type(payload).__name__),
        ])
        return None

    error = payload.get("error")
    if error:
        code = error.get("code", "?") if isinstance(error, dict) else "?"
        message = error.get("error", str(error)) if isinstance(error, dict) else str(error)
        logger.warning("Torn API Error", [
            ("Code", str(code)),
            ("Message", message),
        ])
        return None

    raw_members = payload.get("members")
    if isinstance(raw_members, dict):
        entries = []
        for member_id, data in raw_members.items():
            if isinstance(data, dict):
                entries.append({"id": member_id, **data})
    elif isinstance(raw_members, list):
        entries = raw_members
    else:
        logger.warning("Torn API Response Missing Members")
        return None

    members: list[FactionMember] = []
    skipped = 0
    for entry in entries:
        try:
            members.append(FactionMember.from_api(entry))
        except (KeyError, TypeError, ValueError, AttributeError):
            skipped += 1

    if skipped:
        logger.warning("Skipped Malformed Faction Members", [
            ("Skipped", str(skipped)),
            ("Parsed", str(len(members))),
        ])

    return members


__all__ = ["TornClient", "parse_members_payload"]
