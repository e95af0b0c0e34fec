import os

os.environ.setdefault("FEED_REFRESH_ENABLED", "false")

import copy
from typing import Any, Dict, List, Optional

import pytest

import app.services.repair_feed as repair_feed_module
import app.services.settings_service as settings_service_module
import app.services.shop_client as shop_client_module
import app.services.supabase_client as supabase_client_module


class FakeSettingsStore:
    """In-memory stand-in for the Supabase settings store"""

    def __init__(self, settings: Optional[Dict[str, Any]] = None, tasks: Optional[List[Dict]] = None):
        self.settings = copy.deepcopy(settings)
        self.tasks = copy.deepcopy(tasks or [])
        self.audit: List[Dict[str, Any]] = []
        self.price_updates: List[tuple] = []

    async def get_settings(self):
        return copy.deepcopy(self.settings)

    async def create_settings(self, fields):
        assert self.settings is None, "settings document already exists"
        self.settings = {**copy.deepcopy(fields), "id": "repair_task_admin_settings"}
        return copy.deepcopy(self.settings)

    async def save_settings(self, fields):
        assert self.settings is not None, "no settings document to update"
        self.settings = {**self.settings, **copy.deepcopy(fields)}
        return copy.deepcopy(self.settings)

    async def insert_audit(self, entry):
        self.audit.append(copy.deepcopy(entry))
        return entry

    async def list_repair_tasks(self):
        return copy.deepcopy(self.tasks)

    async def update_task_price(self, task_id, price, breakdown):
        self.price_updates.append((task_id, price, breakdown))
        for task in self.tasks:
            if task.get("id") == task_id:
                task["basePrice"] = price


class FakeShopClient:
    """Shop API stand-in returning canned payloads"""

    def __init__(self, repairs: Any = None, progress: Any = None):
        self.repairs = repairs if repairs is not None else []
        self.progress = progress
        self.repair_calls: List[Optional[Dict]] = []

    async def get_repairs(self, params=None):
        self.repair_calls.append(params)
        return copy.deepcopy(self.repairs)

    async def get_payment_progress(self, ticket_id):
        return copy.deepcopy(self.progress)


SAMPLE_TASKS = [
    {"id": "t1", "sku": "RING-SIZE", "title": "Ring sizing", "category": "rings",
     "laborHours": 2, "materialCost": 25, "basePrice": 150.0},
    {"id": "t2", "sku": "CHAIN-SOLDER", "title": "Chain solder", "category": "chains",
     "laborHours": 0.5, "materialCost": 0, "basePrice": 33.3},
    {"id": "t3", "sku": "PRONG-RETIP", "title": "Prong retip", "category": "rings",
     "laborHours": "1", "materialCost": None, "basePrice": 0},
]


@pytest.fixture
def settings_store(monkeypatch):
    store = FakeSettingsStore(
        settings={
            "id": "repair_task_admin_settings",
            "pricing": {
                "wage": 45.0,
                "materialMarkup": 1.5,
                "administrativeFee": 0.15,
                "businessFee": 0.25,
                "consumablesFee": 0.08,
            },
        },
        tasks=SAMPLE_TASKS,
    )
    monkeypatch.setattr(supabase_client_module, "_settings_store", store)
    monkeypatch.setattr(settings_service_module, "_settings_service", None)
    return store


@pytest.fixture
def empty_settings_store(monkeypatch):
    store = FakeSettingsStore(settings=None, tasks=SAMPLE_TASKS)
    monkeypatch.setattr(supabase_client_module, "_settings_store", store)
    monkeypatch.setattr(settings_service_module, "_settings_service", None)
    return store


@pytest.fixture
def shop_client(monkeypatch):
    client = FakeShopClient()
    monkeypatch.setattr(shop_client_module, "_shop_client", client)
    monkeypatch.setattr(repair_feed_module, "_repair_feed", None)
    return client
