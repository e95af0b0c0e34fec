from types import MappingProxyType

import pytest

from app.models.enums import RepairStatus, StatusCategory, StatusVocabulary
from app.services.status_classifier import (
    category_counts,
    classify_status,
    status_category,
    vocabulary_table,
)


def test_customer_spelling_classifies():
    info = classify_status("in-progress")
    assert info.known
    assert info.label == "In Progress"
    assert info.category == "Production"
    assert info.status == "in-progress"


def test_workflow_spelling_is_an_alias_of_the_same_status():
    workflow = classify_status("IN THE OVEN", StatusVocabulary.WORKFLOW)
    customer = classify_status("in-progress", StatusVocabulary.WORKFLOW)
    assert workflow.status == customer.status == RepairStatus.IN_PROGRESS.value
    assert workflow.label == "IN THE OVEN"
    assert workflow.color == customer.color


def test_received_and_receiving_are_both_initial():
    assert status_category("RECEIVED") == "Initial"
    assert status_category("receiving") == "Initial"
    assert status_category("RECEIVING") == "Initial"


def test_matching_is_case_sensitive():
    info = classify_status("In-Progress")
    assert not info.known
    assert info.category == "Unknown"


@pytest.mark.parametrize("raw", ["polishing", "", "   ", "COMPLETED!"])
def test_unknown_strings_fall_back_to_raw_label(raw):
    info = classify_status(raw)
    assert info.label == raw
    assert info.color == "default"
    assert not info.known


@pytest.mark.parametrize("raw", [None, 7, ["completed"], {"status": "completed"}])
def test_non_strings_never_raise(raw):
    info = classify_status(raw)
    assert info.color == "default"
    assert info.category == "Unknown"


def test_category_counts_include_every_bucket():
    records = [
        {"status": "receiving"},
        {"status": "IN THE OVEN"},
        {"status": "quality-control"},
        {"status": "picked-up"},
        {"status": "who knows"},
        {},
        "not a record",
    ]
    counts = category_counts(records)

    assert set(counts) == {c.value for c in StatusCategory}
    assert counts["Initial"] == 1
    assert counts["Production"] == 1
    assert counts["Quality Control"] == 1
    assert counts["Completion"] == 1
    assert counts["Unknown"] == 3
    assert sum(counts.values()) == len(records)


def test_every_status_has_every_projection():
    table = vocabulary_table()
    assert len(table) == len(RepairStatus)
    for row in table:
        assert row["workflow_label"]
        assert row["customer_label"]
        assert row["color"]
        assert row["icon"]
        assert row["category"] in {c.value for c in StatusCategory}


def test_closed_statuses():
    assert RepairStatus.COMPLETED.is_closed
    assert RepairStatus.CANCELLED.is_closed
    assert not RepairStatus.READY_FOR_PICKUP.is_closed


def test_category_counts_accept_any_mapping():
    records = [MappingProxyType({"status": "receiving"}), {"status": "receiving"}]
    counts = category_counts(records)
    assert counts["Initial"] == 2
    assert counts["Unknown"] == 0
