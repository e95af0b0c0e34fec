import asyncio

from app.services.repair_feed import RepairFeed, normalize_repairs_payload


class GatedShopClient:
    """Each get_repairs call blocks until the test releases it"""

    def __init__(self):
        self.pending = []

    async def get_repairs(self, params=None):
        gate = asyncio.Event()
        slot = {"params": params, "gate": gate, "payload": None}
        self.pending.append(slot)
        await gate.wait()
        return slot["payload"]

    def release(self, index, payload):
        slot = self.pending[index]
        slot["payload"] = payload
        slot["gate"].set()


class StaticShopClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    async def get_repairs(self, params=None):
        self.calls += 1
        return self.payload


def test_normalize_accepts_list_or_envelope():
    assert normalize_repairs_payload([{"id": 1}]) == [{"id": 1}]
    assert normalize_repairs_payload({"repairs": [{"id": 2}]}) == [{"id": 2}]
    assert normalize_repairs_payload({"data": [{"id": 3}]}) == [{"id": 3}]
    assert normalize_repairs_payload({"error": "boom"}) == []
    assert normalize_repairs_payload(None) == []


def _overlapping_refreshes(finish_newest_first):
    async def scenario():
        client = GatedShopClient()
        feed = RepairFeed(client)

        older = asyncio.create_task(feed.refresh({"status": "receiving"}))
        await asyncio.sleep(0)
        newer = asyncio.create_task(feed.refresh({"status": "completed"}))
        await asyncio.sleep(0)

        if finish_newest_first:
            client.release(1, [{"id": "new"}])
            newer_result = await newer
            client.release(0, [{"id": "old"}])
            older_result = await older
        else:
            client.release(0, [{"id": "old"}])
            older_result = await older
            client.release(1, [{"id": "new"}])
            newer_result = await newer

        return feed, older_result, newer_result

    return asyncio.run(scenario())


def test_stale_response_arriving_last_is_discarded():
    feed, older, newer = _overlapping_refreshes(finish_newest_first=True)
    assert feed.repairs == [{"id": "new"}]
    assert feed.params == {"status": "completed"}
    assert newer.applied and not older.applied


def test_stale_response_arriving_first_is_discarded():
    feed, older, newer = _overlapping_refreshes(finish_newest_first=False)
    assert feed.repairs == [{"id": "new"}]
    assert not older.applied and newer.applied
    assert feed.applied_request_id == newer.request_id


def test_get_repairs_fetches_once_then_serves_from_memory():
    client = StaticShopClient({"repairs": [{"id": 1}]})
    feed = RepairFeed(client)

    async def scenario():
        first = await feed.get_repairs()
        second = await feed.get_repairs()
        forced = await feed.get_repairs(force_refresh=True)
        return first, second, forced

    first, second, forced = asyncio.run(scenario())
    assert first == second == forced == [{"id": 1}]
    assert client.calls == 2
