"""
Dashboard Summaries

Composes the aggregator into the payloads the admin and wholesaler
dashboards show: status buckets, value metrics, customer insights and the
ready-for-work priority queue.
"""

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.models.enums import RepairStatus
from app.services.status_classifier import category_counts, classify_status
from app.insights.aggregator import (
    NOT_AVAILABLE,
    as_records,
    average_completion_time,
    client_key,
    count_by,
    most_recent,
    parse_date,
    parse_int,
    sum_field,
    top_n_by_count,
    upcoming_deadlines,
)


TOP_CLIENTS = 3
RECENT_LIMIT = 5

# Work priority weights
RUSH_POINTS = 100
OVERDUE_POINTS = 50
DUE_TODAY_POINTS = 30
DUE_SOON_POINTS = 15
DUE_SOON_DAYS = 3
ASSIGNED_POINTS = 5


def _status_of(record: Mapping) -> Optional[RepairStatus]:
    return RepairStatus.from_raw(record.get("status"))


def _is_closed(record: Mapping) -> bool:
    status = _status_of(record)
    return status is not None and status.is_closed


def _is_finished(record: Mapping) -> bool:
    """Completed or picked up (cancelled does not count)"""
    return _status_of(record) in (RepairStatus.COMPLETED, RepairStatus.PICKED_UP)


def _finished_at(record: Mapping) -> Optional[datetime]:
    for field in ("completedAt", "completedDate", "updatedAt"):
        parsed = parse_date(record.get(field))
        if parsed is not None:
            return parsed
    return None


def activity_entry(record: Mapping) -> Dict[str, Any]:
    info = classify_status(record.get("status"))
    return {
        "id": record.get("repairNumber") or record.get("repairID") or record.get("_id") or record.get("id"),
        "client_name": client_key(record),
        "status": info.raw,
        "status_label": info.label,
        "status_color": info.color,
        "status_category": info.category,
        "description": record.get("description") or record.get("repairDescription") or "No description",
        "created_at": record.get("createdAt") or NOT_AVAILABLE,
        "updated_at": record.get("updatedAt") or record.get("createdAt") or NOT_AVAILABLE,
        "promise_date": record.get("promiseDate") or NOT_AVAILABLE,
    }


def build_dashboard_summary(records: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Dashboard cards for a list of repairs.

    Value metrics use integer-parsed totalCost; the monthly figure only
    counts repairs finished in the calendar month of `now` (UTC).
    """
    repairs = as_records(records)
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)

    finished = [r for r in repairs if _is_finished(r)]
    active = [r for r in repairs if not _is_closed(r)]

    monthly_finished = []
    for repair in finished:
        finished_at = _finished_at(repair)
        if finished_at and finished_at.year == now.year and finished_at.month == now.month:
            monthly_finished.append(repair)

    average_value = round(sum_field(finished) / len(finished), 2) if finished else 0.0

    def latest_activity(record):
        return {**record, "_activity": record.get("updatedAt") or record.get("createdAt")}

    recent = most_recent([latest_activity(r) for r in repairs], n=RECENT_LIMIT, field="_activity")

    return {
        "total_repairs": len(repairs),
        "active_repairs": len(active),
        "completed_repairs": len(finished),
        "status_breakdown": category_counts(repairs),
        "total_revenue": sum_field(repairs),
        "average_value": average_value,
        "monthly_value": sum_field(monthly_finished),
        "rush_jobs": sum(1 for r in repairs if is_rush(r)),
        "average_completion_days": average_completion_time(repairs),
        "recent_activity": [activity_entry(r) for r in recent],
        "upcoming_deadlines": [activity_entry(r) for r in upcoming_deadlines(repairs)],
        "generated_at": now.isoformat(),
    }


def build_customer_insights(records: Any, top_n: int = TOP_CLIENTS) -> Dict[str, Any]:
    """Top clients by repair count plus the newest repairs."""
    repairs = as_records(records)
    counts = count_by(repairs, client_key)

    revenue_by_client: Dict[str, int] = {}
    for repair in repairs:
        key = client_key(repair)
        revenue_by_client[key] = revenue_by_client.get(key, 0) + parse_int(repair.get("totalCost"))

    top_clients = [
        {
            "client_name": name,
            "repair_count": count,
            "total_spent": revenue_by_client.get(name, 0),
        }
        for name, count in top_n_by_count(counts, top_n)
    ]

    return {
        "total_clients": len(counts),
        "total_repairs": len(repairs),
        "top_clients": top_clients,
        "recent_repairs": [activity_entry(r) for r in most_recent(repairs, n=RECENT_LIMIT)],
    }


# ============== Work Priority ==============

def is_rush(record: Mapping) -> bool:
    return bool(record.get("isRush") or record.get("rushJob") is True or record.get("priority") == "rush")


def work_priority(record: Mapping, now: Optional[datetime] = None) -> int:
    """
    Priority score for the ready-for-work queue.

    Rush +100, overdue +50, due today +30, due within 3 days +15,
    assigned jeweler +5. Days until due round up.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    priority = 0

    if is_rush(record):
        priority += RUSH_POINTS

    due = parse_date(record.get("promiseDate"))
    if due is not None:
        days_until_due = math.ceil((due - now).total_seconds() / 86400)
        if days_until_due < 0:
            priority += OVERDUE_POINTS
        elif days_until_due == 0:
            priority += DUE_TODAY_POINTS
        elif days_until_due <= DUE_SOON_DAYS:
            priority += DUE_SOON_POINTS

    jeweler = record.get("assignedJeweler")
    if jeweler and jeweler != "Unassigned":
        priority += ASSIGNED_POINTS

    return priority


def rank_work_queue(
    records: Any,
    now: Optional[datetime] = None,
    limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Open repairs by descending priority; equal scores keep input order."""
    now = now or datetime.now(timezone.utc)
    open_repairs = [r for r in as_records(records) if not _is_closed(r)]

    scored = [
        {**activity_entry(r), "priority": work_priority(r, now), "is_rush": is_rush(r)}
        for r in open_repairs
    ]
    scored.sort(key=lambda item: item["priority"], reverse=True)
    return scored[:limit] if limit is not None else scored
