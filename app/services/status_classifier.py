"""
Status Classifier

Maps a raw repair status string to display metadata and a dashboard bucket.
Read-only: any record may carry any status string, nothing here guards
status changes.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from app.models.enums import RepairStatus, StatusCategory, StatusVocabulary


DEFAULT_COLOR = "default"
DEFAULT_ICON = "❔"


@dataclass(frozen=True)
class StatusInfo:
    """Display tuple for one status string"""
    raw: str
    label: str
    color: str
    icon: str
    category: str
    known: bool
    status: Optional[str] = None  # canonical key when known


def classify_status(
    raw: Any,
    vocabulary: StatusVocabulary = StatusVocabulary.CUSTOMER
) -> StatusInfo:
    """
    Classify a raw status string.

    Unknown strings (and non-strings) return the fallback tuple: the raw
    text as label, color 'default', category 'Unknown'.
    """
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    status = RepairStatus.from_raw(text)

    if status is None:
        return StatusInfo(
            raw=text,
            label=text,
            color=DEFAULT_COLOR,
            icon=DEFAULT_ICON,
            category=StatusCategory.UNKNOWN.value,
            known=False,
        )

    label = status.workflow_label if vocabulary == StatusVocabulary.WORKFLOW else status.customer_label
    return StatusInfo(
        raw=text,
        label=label,
        color=status.color,
        icon=status.icon,
        category=status.category.value,
        known=True,
        status=status.value,
    )


def status_category(raw: Any) -> str:
    """Dashboard bucket name for a raw status"""
    return classify_status(raw).category


def category_counts(records: Iterable[Dict]) -> Dict[str, int]:
    """
    Count records per status category.

    Every category is present in the result, zero when empty.
    """
    counts = {category.value: 0 for category in StatusCategory}
    for record in records:
        if not isinstance(record, Mapping):
            counts[StatusCategory.UNKNOWN.value] += 1
            continue
        counts[status_category(record.get("status"))] += 1
    return counts


def vocabulary_table() -> List[Dict[str, Any]]:
    """All known statuses with every projection, in workflow order"""
    return [
        {
            "status": status.value,
            "workflow_label": status.workflow_label,
            "customer_label": status.customer_label,
            "description": status.description,
            "color": status.color,
            "icon": status.icon,
            "category": status.category.value,
        }
        for status in RepairStatus
    ]
