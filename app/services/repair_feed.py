"""
Repair Feed

Holds the most recent repair list fetched from the shop API so dashboard
endpoints can serve from memory.

Overlapping refreshes resolve by request id, not completion order: each
refresh takes the next id, and a response is applied only if no newer
refresh was started while it was in flight.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.insights.aggregator import as_records
from app.services.shop_client import ShopClient, get_shop_client

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of one refresh call"""
    request_id: int
    applied: bool
    record_count: int
    fetched_at: datetime


def normalize_repairs_payload(payload: Any) -> List[Dict]:
    """Accept a bare list or a {"repairs": [...]} envelope; anything else is empty."""
    if isinstance(payload, dict):
        payload = payload.get("repairs", payload.get("data"))
    return as_records(payload)


class RepairFeed:
    """Latest-request-wins cache of repair records"""

    def __init__(self, shop_client: Optional[ShopClient] = None):
        self.shop_client = shop_client or get_shop_client()
        self.repairs: List[Dict] = []
        self.params: Optional[Dict] = None
        self.fetched_at: Optional[datetime] = None
        self._latest_request_id = 0
        self._applied_request_id = 0

    @property
    def has_data(self) -> bool:
        return self._applied_request_id > 0

    @property
    def applied_request_id(self) -> int:
        return self._applied_request_id

    async def refresh(self, params: Optional[Dict] = None) -> RefreshResult:
        """Fetch repairs; apply the response only if it is still the newest request."""
        self._latest_request_id += 1
        request_id = self._latest_request_id

        payload = await self.shop_client.get_repairs(params)
        repairs = normalize_repairs_payload(payload)
        fetched_at = datetime.now(timezone.utc)

        if request_id != self._latest_request_id:
            logger.info(
                f"[Repair Feed] Discarding stale response #{request_id} "
                f"(latest is #{self._latest_request_id})"
            )
            return RefreshResult(request_id, False, len(repairs), fetched_at)

        self.repairs = repairs
        self.params = params
        self.fetched_at = fetched_at
        self._applied_request_id = request_id
        logger.info(f"[Repair Feed] Applied response #{request_id}: {len(repairs)} repairs")
        return RefreshResult(request_id, True, len(repairs), fetched_at)

    async def get_repairs(self, force_refresh: bool = False) -> List[Dict]:
        """Current repairs, fetching first if nothing was loaded yet."""
        if force_refresh or not self.has_data:
            await self.refresh(self.params)
        return self.repairs


# Singleton instance
_repair_feed: Optional[RepairFeed] = None


def get_repair_feed() -> RepairFeed:
    """Get or create the shared repair feed"""
    global _repair_feed
    if _repair_feed is None:
        _repair_feed = RepairFeed()
    return _repair_feed
