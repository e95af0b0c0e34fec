"""
Shop API Client

Handles HTTP requests to the shop's REST layer (repairs, custom tickets).
"""

import os
import httpx
from typing import Optional, Dict, Any


class ShopClient:
    """Client for shop REST API requests"""

    def __init__(self, base_url: Optional[str] = None, api_token: Optional[str] = None):
        self.base_url = (base_url or os.getenv("SHOP_API_URL", "http://localhost:3000")).rstrip("/")
        self.api_token = api_token if api_token is not None else os.getenv("SHOP_API_TOKEN")
        self.timeout = 30.0

    def _get_headers(self) -> Dict[str, str]:
        """Get default headers for shop API requests"""
        headers = {
            "Content-Type": "application/json",
            "accept": "application/json"
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def get(self, path: str, params: Optional[Dict] = None) -> Any:
        """Make GET request to the shop API"""
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, headers=self._get_headers(), params=params)
            response.raise_for_status()
            return response.json()

    async def get_repairs(self, params: Optional[Dict] = None) -> Any:
        """Fetch repair records (raw payload, list or envelope)"""
        return await self.get("/api/repairs", params)

    async def get_payment_progress(self, ticket_id: str) -> Any:
        """Fetch payment progress for a custom ticket"""
        return await self.get(f"/api/custom-tickets/{ticket_id}/payment-progress")


# Singleton instance
_shop_client: Optional[ShopClient] = None


def get_shop_client() -> ShopClient:
    """Get or create shop client instance"""
    global _shop_client
    if _shop_client is None:
        _shop_client = ShopClient()
    return _shop_client
