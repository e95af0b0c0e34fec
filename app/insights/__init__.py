"""
Repair Insights Module

In-memory summaries over repair records for the dashboards.
"""

from .aggregator import (
    NOT_AVAILABLE,
    as_records,
    average_completion_time,
    average_field,
    client_key,
    count_by,
    max_field,
    min_field,
    most_recent,
    summarize_field,
    sum_field,
    top_n_by_count,
    upcoming_deadlines,
)
from .dashboard import (
    activity_entry,
    build_customer_insights,
    build_dashboard_summary,
    rank_work_queue,
    work_priority,
)

__all__ = [
    "NOT_AVAILABLE",
    "as_records",
    "average_completion_time",
    "average_field",
    "client_key",
    "count_by",
    "max_field",
    "min_field",
    "most_recent",
    "summarize_field",
    "sum_field",
    "top_n_by_count",
    "upcoming_deadlines",
    "activity_entry",
    "build_customer_insights",
    "build_dashboard_summary",
    "rank_work_queue",
    "work_priority",
]
