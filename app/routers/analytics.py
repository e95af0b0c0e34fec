"""
Analytics Endpoints

Dashboard summaries over the repair feed:
- Status buckets, revenue and completion metrics
- Customer insights (top clients, newest repairs)
- Upcoming deadlines and the prioritized work queue
- Ad-hoc summaries over caller-supplied records
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Dict, List, Optional

from app.insights import (
    activity_entry,
    average_completion_time,
    build_customer_insights,
    build_dashboard_summary,
    client_key,
    count_by,
    most_recent,
    rank_work_queue,
    summarize_field,
    top_n_by_count,
    upcoming_deadlines,
)
from app.models.schemas import RefreshResponse, SummarizeRequest
from app.services.repair_feed import get_repair_feed

router = APIRouter()


async def _load_repairs(
    refresh: bool = False,
    status: Optional[str] = None,
    client: Optional[str] = None
) -> List[Dict]:
    """Repairs from the feed, optionally narrowed by exact status and client name."""
    feed = get_repair_feed()
    repairs = await feed.get_repairs(force_refresh=refresh)
    if status is not None:
        repairs = [r for r in repairs if r.get("status") == status]
    if client is not None:
        repairs = [r for r in repairs if client_key(r) == client]
    return repairs


@router.get("/dashboard")
async def get_dashboard(
    refresh: bool = Query(False, description="Fetch from the shop API before summarizing"),
    status: Optional[str] = Query(None, description="Only repairs with this exact status"),
    client: Optional[str] = Query(None, description="Only repairs for this client name")
):
    """
    Dashboard summary cards

    Returns totals, active/completed counts, per-category status buckets,
    revenue, average completed value, this month's completed value, rush
    count, average completion days ("N/A" when nothing qualifies), recent
    activity and upcoming deadlines.
    """
    try:
        repairs = await _load_repairs(refresh, status, client)
        return build_dashboard_summary(repairs)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/customers")
async def get_customer_insights(
    top: int = Query(3, ge=0, le=50, description="Number of top clients"),
    refresh: bool = Query(False)
):
    """
    Customer insights

    Top clients by repair count (ties keep first-seen order) with their
    revenue, plus the five newest repairs.
    """
    try:
        repairs = await _load_repairs(refresh)
        return build_customer_insights(repairs, top_n=top)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/deadlines")
async def get_upcoming_deadlines(
    limit: int = Query(5, ge=1, le=5, description="At most 5"),
    refresh: bool = Query(False)
):
    """Repairs with a promise date, soonest first"""
    try:
        repairs = await _load_repairs(refresh)
        deadlines = upcoming_deadlines(repairs, n=limit)
        return {
            "count": len(deadlines),
            "deadlines": [activity_entry(r) for r in deadlines],
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/work-queue")
async def get_work_queue(
    limit: Optional[int] = Query(None, ge=1, description="Max repairs to return"),
    refresh: bool = Query(False)
):
    """
    Open repairs ranked by work priority

    Rush +100, overdue +50, due today +30, due within 3 days +15,
    assigned jeweler +5. Equal scores keep feed order.
    """
    try:
        repairs = await _load_repairs(refresh)
        queue = rank_work_queue(repairs, limit=limit)
        return {
            "count": len(queue),
            "queue": queue,
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_feed():
    """Force a repair feed refresh; a response superseded by a newer refresh is not applied"""
    try:
        feed = get_repair_feed()
        result = await feed.refresh(feed.params)
        return RefreshResponse(
            request_id=result.request_id,
            applied=result.applied,
            record_count=result.record_count,
            fetched_at=result.fetched_at.isoformat(),
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/summarize")
async def summarize_records(request: SummarizeRequest):
    """
    Aggregate caller-supplied records

    Accepts any JSON for `records`; non-lists are treated as empty.
    """
    try:
        key = request.groupBy or client_key
        counts = count_by(request.records, key)
        return {
            "summary": summarize_field(request.records, request.field),
            "counts": counts,
            "top": [
                {"key": name, "count": count}
                for name, count in top_n_by_count(counts, request.top)
            ],
            "most_recent": most_recent(request.records, n=request.recent),
            "upcoming_deadlines": upcoming_deadlines(request.records),
            "average_completion_time": average_completion_time(request.records),
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
