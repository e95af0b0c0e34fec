"""
Repair Status Codes and Enums

One tagged enum for repair statuses with every display projection derived
from it. Two spellings are in use across the shop: the workflow board
("RECEIVING", "IN THE OVEN") and the customer-facing views ("receiving",
"in-progress"). Both are registered as exact aliases of the same member.
"""

from enum import Enum
from typing import Dict, Optional


class StatusCategory(str, Enum):
    """Dashboard bucket for a status"""
    INITIAL = "Initial"
    PREPARATION = "Preparation"
    PRODUCTION = "Production"
    QUALITY_CONTROL = "Quality Control"
    COMPLETION = "Completion"
    SPECIAL = "Special"
    UNKNOWN = "Unknown"


class RepairStatus(str, Enum):
    """Repair workflow status (value is the customer-facing key)"""
    RECEIVING = "receiving"
    NEEDS_PARTS = "needs-parts"
    PARTS_ORDERED = "parts-ordered"
    READY_FOR_WORK = "ready-for-work"
    IN_PROGRESS = "in-progress"
    QUALITY_CONTROL = "quality-control"
    READY_FOR_PICKUP = "ready-for-pickup"
    COMPLETED = "completed"
    PICKED_UP = "picked-up"
    DELIVERED = "delivered"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"

    @property
    def workflow_label(self) -> str:
        return _WORKFLOW_LABELS[self]

    @property
    def customer_label(self) -> str:
        return _CUSTOMER_LABELS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def category(self) -> StatusCategory:
        return _CATEGORIES[self]

    @property
    def is_closed(self) -> bool:
        """Completed, picked up or cancelled; no further work expected"""
        return self in (RepairStatus.COMPLETED, RepairStatus.PICKED_UP, RepairStatus.CANCELLED)

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> Optional["RepairStatus"]:
        """Exact, case-sensitive lookup across both vocabularies"""
        if not isinstance(raw, str):
            return None
        return _ALIASES.get(raw)


_WORKFLOW_LABELS: Dict[RepairStatus, str] = {
    RepairStatus.RECEIVING: "RECEIVING",
    RepairStatus.NEEDS_PARTS: "NEEDS PARTS",
    RepairStatus.PARTS_ORDERED: "PARTS ORDERED",
    RepairStatus.READY_FOR_WORK: "READY FOR WORK",
    RepairStatus.IN_PROGRESS: "IN THE OVEN",
    RepairStatus.QUALITY_CONTROL: "QUALITY CONTROL",
    RepairStatus.READY_FOR_PICKUP: "READY FOR PICK-UP",
    RepairStatus.COMPLETED: "COMPLETED",
    RepairStatus.PICKED_UP: "PICKED UP",
    RepairStatus.DELIVERED: "DELIVERED",
    RepairStatus.ON_HOLD: "ON HOLD",
    RepairStatus.CANCELLED: "CANCELLED",
}

_CUSTOMER_LABELS: Dict[RepairStatus, str] = {
    RepairStatus.RECEIVING: "Receiving",
    RepairStatus.NEEDS_PARTS: "Needs Parts",
    RepairStatus.PARTS_ORDERED: "Parts Ordered",
    RepairStatus.READY_FOR_WORK: "Ready for Work",
    RepairStatus.IN_PROGRESS: "In Progress",
    RepairStatus.QUALITY_CONTROL: "Quality Control",
    RepairStatus.READY_FOR_PICKUP: "Ready for Pickup",
    RepairStatus.COMPLETED: "Completed",
    RepairStatus.PICKED_UP: "Picked Up",
    RepairStatus.DELIVERED: "Delivered",
    RepairStatus.ON_HOLD: "On Hold",
    RepairStatus.CANCELLED: "Cancelled",
}

_DESCRIPTIONS: Dict[RepairStatus, str] = {
    RepairStatus.RECEIVING: "Item received, initial processing",
    RepairStatus.NEEDS_PARTS: "Waiting for parts to be ordered",
    RepairStatus.PARTS_ORDERED: "Parts ordered, waiting for delivery",
    RepairStatus.READY_FOR_WORK: "Ready to begin repair work",
    RepairStatus.IN_PROGRESS: "Repair work is currently being done",
    RepairStatus.QUALITY_CONTROL: "Final quality review and inspection",
    RepairStatus.READY_FOR_PICKUP: "Repair completed, ready for customer pickup",
    RepairStatus.COMPLETED: "Repair finished and ready",
    RepairStatus.PICKED_UP: "Customer has picked up the item",
    RepairStatus.DELIVERED: "Item has been delivered to customer",
    RepairStatus.ON_HOLD: "Repair temporarily paused",
    RepairStatus.CANCELLED: "Repair has been cancelled",
}

_COLORS: Dict[RepairStatus, str] = {
    RepairStatus.RECEIVING: "info",
    RepairStatus.NEEDS_PARTS: "warning",
    RepairStatus.PARTS_ORDERED: "info",
    RepairStatus.READY_FOR_WORK: "primary",
    RepairStatus.IN_PROGRESS: "warning",
    RepairStatus.QUALITY_CONTROL: "secondary",
    RepairStatus.READY_FOR_PICKUP: "primary",
    RepairStatus.COMPLETED: "success",
    RepairStatus.PICKED_UP: "success",
    RepairStatus.DELIVERED: "success",
    RepairStatus.ON_HOLD: "warning",
    RepairStatus.CANCELLED: "error",
}

_ICONS: Dict[RepairStatus, str] = {
    RepairStatus.RECEIVING: "📥",
    RepairStatus.NEEDS_PARTS: "🧩",
    RepairStatus.PARTS_ORDERED: "🚚",
    RepairStatus.READY_FOR_WORK: "🛠️",
    RepairStatus.IN_PROGRESS: "🔥",
    RepairStatus.QUALITY_CONTROL: "🔍",
    RepairStatus.READY_FOR_PICKUP: "📦",
    RepairStatus.COMPLETED: "✅",
    RepairStatus.PICKED_UP: "🤝",
    RepairStatus.DELIVERED: "📬",
    RepairStatus.ON_HOLD: "⏸️",
    RepairStatus.CANCELLED: "❌",
}

_CATEGORIES: Dict[RepairStatus, StatusCategory] = {
    RepairStatus.RECEIVING: StatusCategory.INITIAL,
    RepairStatus.NEEDS_PARTS: StatusCategory.PREPARATION,
    RepairStatus.PARTS_ORDERED: StatusCategory.PREPARATION,
    RepairStatus.READY_FOR_WORK: StatusCategory.PREPARATION,
    RepairStatus.IN_PROGRESS: StatusCategory.PRODUCTION,
    RepairStatus.QUALITY_CONTROL: StatusCategory.QUALITY_CONTROL,
    RepairStatus.READY_FOR_PICKUP: StatusCategory.COMPLETION,
    RepairStatus.COMPLETED: StatusCategory.COMPLETION,
    RepairStatus.PICKED_UP: StatusCategory.COMPLETION,
    RepairStatus.DELIVERED: StatusCategory.COMPLETION,
    RepairStatus.ON_HOLD: StatusCategory.SPECIAL,
    RepairStatus.CANCELLED: StatusCategory.SPECIAL,
}

# Exact spellings seen in the wild -> member
_ALIASES: Dict[str, RepairStatus] = {}
for _status in RepairStatus:
    _ALIASES[_status.value] = _status
    _ALIASES[_WORKFLOW_LABELS[_status]] = _status
_ALIASES["IN PROGRESS"] = RepairStatus.IN_PROGRESS
_ALIASES["RECEIVED"] = RepairStatus.RECEIVING
del _status


class StatusVocabulary(str, Enum):
    """Which label set a caller wants back"""
    WORKFLOW = "workflow"
    CUSTOMER = "customer"


class SkillLevel(str, Enum):
    """Jeweler skill level applied to the base wage"""
    BASIC = "basic"
    STANDARD = "standard"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def multiplier(self) -> float:
        return {
            "basic": 0.75,
            "standard": 1.0,
            "advanced": 1.25,
            "expert": 1.5,
        }[self.value]

    @classmethod
    def from_name(cls, name: Optional[str]) -> "SkillLevel":
        """Lenient lookup, falls back to STANDARD"""
        if not name:
            return cls.STANDARD
        try:
            return cls(str(name).lower())
        except ValueError:
            return cls.STANDARD
