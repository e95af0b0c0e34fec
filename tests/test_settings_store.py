import asyncio
import re

import app.services.supabase_client as supabase_client_module
from app.services.settings_service import SettingsService
from app.services.supabase_client import SettingsStore


class _Result:
    def __init__(self, data):
        self.data = data


class _Query:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []

    def select(self, *args):
        return self

    def limit(self, n):
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, **kwargs):
        self.op, self.payload = "upsert", payload
        return self

    def execute(self):
        self.client.calls.append((self.table, self.op, self.payload, self.filters))
        if self.op == "select":
            return _Result(list(self.client.rows.get(self.table, [])))
        return _Result([])


class RecordingSupabase:
    """Chained-query stand-in that records every write"""

    def __init__(self, rows=None):
        self.rows = rows or {}
        self.calls = []

    def table(self, name):
        return _Query(self, name)

    def writes(self, table):
        return [(op, payload, filters) for t, op, payload, filters in self.calls if t == table and op != "select"]


def _columns(table):
    ddl = re.search(rf"CREATE TABLE {table} \((.*?)\n\);", supabase_client_module.__doc__, re.S).group(1)
    return {line.split()[0] for line in ddl.strip().splitlines()}


EXISTING = {"id": "repair_task_admin_settings", "pricing": {"wage": 45.0}}


def test_regenerating_code_updates_existing_document():
    client = RecordingSupabase(rows={"admin_settings": [EXISTING]})
    service = SettingsService(SettingsStore(client=client))

    asyncio.run(service.generate_security_code())

    writes = client.writes("admin_settings")
    assert len(writes) == 1
    op, payload, filters = writes[0]
    assert op == "update"
    assert filters == [("id", "repair_task_admin_settings")]
    assert "pricing" not in payload


def test_first_code_generation_inserts_full_document():
    client = RecordingSupabase()
    service = SettingsService(SettingsStore(client=client))

    asyncio.run(service.generate_security_code())

    op, payload, _ = client.writes("admin_settings")[0]
    assert op == "insert"
    assert payload["pricing"]["wage"] == 45.0
    assert payload["id"] == "repair_task_admin_settings"


def test_written_columns_exist_in_schema():
    client = RecordingSupabase(rows={"admin_settings": [EXISTING]})
    service = SettingsService(SettingsStore(client=client))

    code = asyncio.run(service.generate_security_code())["securityCode"]
    client.rows["admin_settings"] = [{**EXISTING, **client.writes("admin_settings")[0][1]}]
    asyncio.run(service.verify_security_code(code))

    audit_columns = _columns("admin_settings_audit")
    for _, payload, _ in client.writes("admin_settings_audit"):
        assert set(payload) <= audit_columns

    settings_columns = _columns("admin_settings")
    for _, payload, _ in client.writes("admin_settings"):
        assert set(payload) <= settings_columns
