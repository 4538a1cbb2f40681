"""Tests for the daily activity document parser."""

from __future__ import annotations

from starpulse.domain.entities import parse_daily_document


def test_splits_metadata_from_ranked_entries() -> None:
    doc = parse_daily_document({"0": "a/b", "1": "c/d", "date": "2025-01-01"})
    assert doc.ranked == ("a/b", "c/d")
    assert doc.metadata == {"date": "2025-01-01"}


def test_orders_by_numeric_index_not_key_order() -> None:
    doc = parse_daily_document({"10": "k/k", "2": "b/b", "0": "a/a", "1": "x/x"})
    assert doc.ranked == ("a/a", "x/x", "b/b", "k/k")


def test_drops_non_string_and_blank_entries() -> None:
    doc = parse_daily_document({"0": "a/b", "1": None, "2": 7, "3": "  ", "4": "c/d"})
    assert doc.ranked == ("a/b", "c/d")


def test_non_numeric_keys_are_metadata() -> None:
    doc = parse_daily_document({"total_repositories": 2, "-1": "x/y", "1a": "z/z"})
    assert doc.is_empty
    assert set(doc.metadata) == {"total_repositories", "-1", "1a"}


def test_empty_payload() -> None:
    assert parse_daily_document({}).is_empty
