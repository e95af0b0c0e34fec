#!/usr/bin/env python3
"""
Local Recalculation Script
Reprices every repair task with the stored settings.

Dry run by default; pass --apply to write the new prices.
"""

import asyncio
import os
import sys
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Add app to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.services.pricing import recalculate_task_prices, resolve_pricing, to_dict
from app.services.supabase_client import get_settings_store


async def recalculate(apply: bool):
    store = get_settings_store()

    settings = await store.get_settings()
    pricing = resolve_pricing(settings.get("pricing") if settings else None)
    print(f"\nPricing: {pricing}")
    if not settings:
        print("No settings document found, using defaults")

    tasks = await store.list_repair_tasks()
    result = recalculate_task_prices(tasks, pricing)

    changed = [u for u in result.updates if abs(u.new_price - u.old_price) >= 0.01]
    print(f"Tasks: {result.total_tasks}, priced: {len(result.updates)}, "
          f"changed: {len(changed)}, errors: {result.errors}")

    for update in changed[:20]:
        print(f"  {update.sku or update.task_id}: {update.old_price:.2f} -> {update.new_price:.2f}")
    for detail in result.error_details:
        print(f"  ERROR {detail.get('sku') or detail.get('task_id')}: {detail.get('error')}")

    if not apply:
        print("\nDry run, nothing written (pass --apply to store prices)")
        return

    for update in changed:
        await store.update_task_price(update.task_id, update.new_price, to_dict(update.breakdown))
    print(f"\nStored {len(changed)} new prices")


def main():
    print("=" * 60)
    print("LOCAL PRICE RECALCULATION")
    print("=" * 60)

    asyncio.run(recalculate(apply="--apply" in sys.argv[1:]))

    print("\n" + "=" * 60)
    print("RECALCULATION COMPLETE!")
    print("=" * 60)


if __name__ == "__main__":
    main()
