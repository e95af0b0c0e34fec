"""
Supabase Settings Store

Document storage for the admin settings document, its audit trail and the
repair task catalog whose prices depend on it.

Database Schema (create in Supabase Dashboard):
-----------------------------------------------

CREATE TABLE admin_settings (
    id TEXT PRIMARY KEY,                     -- 'repair_task_admin_settings'
    pricing JSONB NOT NULL,                  -- wage, materialMarkup, fees
    security_code_hash TEXT,                 -- SHA-256 hex, never the plain code
    security_code_expires_at TIMESTAMP WITH TIME ZONE,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
    updated_by TEXT
);

CREATE TABLE admin_settings_audit (
    id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
    settings_id TEXT NOT NULL,
    action TEXT NOT NULL,                    -- 'pricing_update'
    previous_pricing JSONB,
    new_pricing JSONB,
    tasks_updated INTEGER DEFAULT 0,
    errors INTEGER DEFAULT 0,
    success BOOLEAN,                         -- code verification outcome
    reason TEXT,                             -- 'invalid_code' | 'expired_code'
    updated_by TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

CREATE TABLE repair_tasks (
    id TEXT PRIMARY KEY,
    sku TEXT,
    title TEXT,
    category TEXT,
    labor_hours DECIMAL(10,2) DEFAULT 0,
    material_cost DECIMAL(10,2) DEFAULT 0,
    base_price DECIMAL(10,2) DEFAULT 0,
    pricing_breakdown JSONB,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

logger = logging.getLogger(__name__)

SETTINGS_DOCUMENT_ID = os.getenv("SETTINGS_DOCUMENT_ID", "repair_task_admin_settings")


def task_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a repair_tasks row to the camelCase task shape the pricing code reads"""
    return {
        "id": row.get("id"),
        "sku": row.get("sku"),
        "title": row.get("title"),
        "category": row.get("category"),
        "laborHours": row.get("labor_hours"),
        "materialCost": row.get("material_cost"),
        "basePrice": row.get("base_price"),
    }


class SettingsStore:
    """Reads and writes admin settings and repair task prices in Supabase"""

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL")
            supabase_key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")

            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        self.document_id = SETTINGS_DOCUMENT_ID

        # Table names (configurable)
        self.settings_table = os.getenv("SETTINGS_TABLE", "admin_settings")
        self.audit_table = os.getenv("SETTINGS_AUDIT_TABLE", "admin_settings_audit")
        self.tasks_table = os.getenv("REPAIR_TASKS_TABLE", "repair_tasks")

    # =========================================================================
    # SETTINGS DOCUMENT
    # =========================================================================

    async def get_settings(self) -> Optional[Dict[str, Any]]:
        """Fetch the settings document, or None when it was never created"""
        result = self.supabase.table(self.settings_table) \
            .select("*") \
            .eq("id", self.document_id) \
            .limit(1) \
            .execute()

        if result.data:
            return result.data[0]
        logger.info(f"[Settings Store] No settings document '{self.document_id}'")
        return None

    async def create_settings(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the settings document (first code generation)"""
        record = {
            **fields,
            "id": self.document_id,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self.supabase.table(self.settings_table).insert(record).execute()

        logger.info(f"[Settings Store] Created settings document '{self.document_id}'")
        return result.data[0] if result.data else record

    async def save_settings(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update fields on the existing settings document"""
        record = {
            **fields,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self.supabase.table(self.settings_table) \
            .update(record) \
            .eq("id", self.document_id) \
            .execute()

        logger.info(f"[Settings Store] Saved settings fields: {sorted(k for k in fields if 'security' not in k)}")
        return result.data[0] if result.data else {**record, "id": self.document_id}

    async def insert_audit(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """Append an audit entry for a settings change"""
        record = {
            **entry,
            "settings_id": self.document_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self.supabase.table(self.audit_table).insert(record).execute()
        return result.data[0] if result.data else record

    # =========================================================================
    # REPAIR TASKS
    # =========================================================================

    async def list_repair_tasks(self) -> List[Dict[str, Any]]:
        """All repair tasks in pricing shape"""
        result = self.supabase.table(self.tasks_table) \
            .select("id, sku, title, category, labor_hours, material_cost, base_price") \
            .execute()
        return [task_from_row(row) for row in (result.data or [])]

    async def update_task_price(self, task_id: Any, price: float, breakdown: Dict[str, Any]) -> None:
        """Store a recalculated base price and its breakdown"""
        self.supabase.table(self.tasks_table) \
            .update({
                "base_price": price,
                "pricing_breakdown": breakdown,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }) \
            .eq("id", task_id) \
            .execute()


# Singleton instance
_settings_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get or create the Supabase settings store"""
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore()
    return _settings_store
