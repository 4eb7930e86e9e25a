# tests/test_document.py
"""Unit tests for the sparse document normalizer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from app.utils.document import normalize_document, parse_iso


class Color(Enum):
    RED = "red"


@dataclass
class Plate:
    number: str
    region: Optional[str] = None


class TestNormalizeDocument:
    def test_strips_none_and_empty_string(self):
        assert normalize_document({"a": 1, "b": None, "c": ""}) == {"a": 1}

    def test_keeps_false_and_zero(self):
        assert normalize_document({"active": False, "ms": 0}) == {"active": False, "ms": 0}

    def test_nested_map_emptied_by_stripping_is_removed(self):
        doc = {"tag": "E1", "vehicle": {"plate": None, "meta": {"x": None}}}
        assert normalize_document(doc) == {"tag": "E1"}

    def test_nested_values_survive(self):
        doc = {"vehicle": {"plate": "ABC-1234", "driver": None}}
        assert normalize_document(doc) == {"vehicle": {"plate": "ABC-1234"}}

    def test_datetimes_become_iso_strings_at_any_depth(self):
        ts = datetime(2026, 3, 1, 12, 30, 0)
        doc = {"at": ts, "rfid": {"valid_until": ts}}
        assert normalize_document(doc) == {"at": "2026-03-01T12:30:00",
                                           "rfid": {"valid_until": "2026-03-01T12:30:00"}}

    def test_enums_and_dataclasses(self):
        doc = {"color": Color.RED, "plate": Plate(number="XYZ-5678")}
        assert normalize_document(doc) == {"color": "red", "plate": {"number": "XYZ-5678"}}

    def test_lists_are_cleaned_and_dropped_when_empty(self):
        doc = {"tags": ["a", None, ""], "empty": [None], "none": []}
        assert normalize_document(doc) == {"tags": ["a"]}

    def test_fully_empty_document(self):
        assert normalize_document({"a": None, "b": {}}) == {}

    def test_input_is_not_mutated(self):
        doc = {"a": None, "b": {"c": None}}
        normalize_document(doc)
        assert doc == {"a": None, "b": {"c": None}}


class TestParseIso:
    def test_round_trip_value(self):
        assert parse_iso("2026-03-01T12:30:00") == datetime(2026, 3, 1, 12, 30, 0)

    def test_none(self):
        assert parse_iso(None) is None
