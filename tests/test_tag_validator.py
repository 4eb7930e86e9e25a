# tests/test_tag_validator.py
"""Unit tests for the RFID tag validator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, timedelta
from app.services.tag_validator import validate_tag, classify, system_error_outcome, ScanCategory
from app.services.vehicle_pass_service import VehiclePassRecord

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_record(**overrides):
    fields = dict(
        application_id=7,
        tag_id="E2800002",
        application_status="completed",
        rfid_active=True,
        rfid_valid_until=NOW + timedelta(days=1),
        rfid_assigned_at=NOW - timedelta(days=30),
        plate_number="ABC-1234",
        vehicle_type="car",
        driver_name="Juan Dela Cruz",
        linked_user_id=42,
    )
    fields.update(overrides)
    return VehiclePassRecord(**fields)


def lookup_returning(record):
    return AsyncMock(return_value=record)


class TestMissingTag:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("tag_id", [None, ""])
    async def test_missing_tag_is_400_without_lookup(self, tag_id):
        lookup = lookup_returning(make_record())
        outcome = await validate_tag(tag_id, NOW, lookup)

        assert outcome.category is ScanCategory.NO_TAG_SUPPLIED
        assert outcome.status_code == 400
        assert outcome.error_code == "TAG_REQUIRED"
        assert outcome.vehicle is None
        lookup.assert_not_awaited()


class TestDecisionOrder:
    @pytest.mark.asyncio
    async def test_unknown_tag_is_404(self):
        lookup = lookup_returning(None)
        outcome = await validate_tag("E2801234", NOW, lookup)

        assert outcome.status_code == 404
        assert outcome.scan_result == "denied"
        assert outcome.error_code == "TAG_NOT_FOUND"
        assert outcome.vehicle is None
        assert outcome.rfid_validity is None
        assert outcome.application_id is None
        lookup.assert_awaited_once_with("E2801234")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["pending", "approved", "completed", "rejected"])
    async def test_inactive_dominates_status_and_expiry(self, status):
        record = make_record(rfid_active=False, application_status=status,
                             rfid_valid_until=NOW - timedelta(days=10))
        outcome = await validate_tag("E2800003", NOW, lookup_returning(record))

        assert outcome.status_code == 423
        assert outcome.error_code == "TAG_INACTIVE"

    @pytest.mark.asyncio
    async def test_no_rfid_info_is_inactive(self):
        outcome = await validate_tag("E2800003", NOW, lookup_returning(make_record(rfid_active=None)))
        assert outcome.category is ScanCategory.INACTIVE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["pending", "approved", "rejected"])
    async def test_not_completed_dominates_expiry(self, status):
        record = make_record(application_status=status, rfid_valid_until=NOW - timedelta(days=1))
        outcome = await validate_tag("E2800004", NOW, lookup_returning(record))

        assert outcome.status_code == 409
        assert outcome.error_code == "APPLICATION_NOT_COMPLETED"

    @pytest.mark.asyncio
    async def test_expired_yesterday_is_410_with_snapshot(self):
        record = make_record(tag_id="E2800001", rfid_valid_until=NOW - timedelta(days=1))
        outcome = await validate_tag("E2800001", NOW, lookup_returning(record))

        assert outcome.status_code == 410
        assert outcome.error_code == "TAG_EXPIRED"
        assert outcome.vehicle.plate_number == "ABC-1234"
        assert outcome.rfid_validity.valid_until == NOW - timedelta(days=1)
        assert outcome.application_id == 7
        assert outcome.user_id == 42

    @pytest.mark.asyncio
    async def test_valid_until_tomorrow_is_granted(self):
        outcome = await validate_tag("E2800002", NOW, lookup_returning(make_record()))

        assert outcome.status_code == 200
        assert outcome.scan_result == "success"
        assert outcome.error_code is None
        assert outcome.granted
        assert outcome.vehicle.vehicle_type == "car"

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_still_granted(self):
        outcome = await validate_tag("E2800002", NOW, lookup_returning(make_record(rfid_valid_until=NOW)))
        assert outcome.status_code == 200

    @pytest.mark.asyncio
    async def test_one_microsecond_past_expiry_is_expired(self):
        record = make_record(rfid_valid_until=NOW - timedelta(microseconds=1))
        outcome = await validate_tag("E2800002", NOW, lookup_returning(record))
        assert outcome.status_code == 410

    @pytest.mark.asyncio
    async def test_no_expiry_date_never_expires(self):
        outcome = await validate_tag("E2800002", NOW, lookup_returning(make_record(rfid_valid_until=None)))
        assert outcome.status_code == 200


class TestDeterminismAndFaults:
    def test_classify_is_repeatable(self):
        record = make_record(rfid_valid_until=NOW - timedelta(hours=1))
        assert [classify(record, NOW) for _ in range(3)] == [ScanCategory.EXPIRED] * 3

    def test_not_found_regardless_of_time(self):
        for now in (datetime(2000, 1, 1), NOW, datetime(2100, 1, 1)):
            assert classify(None, now) is ScanCategory.NOT_FOUND

    @pytest.mark.asyncio
    async def test_lookup_error_propagates(self):
        lookup = AsyncMock(side_effect=ConnectionError("db down"))
        with pytest.raises(ConnectionError):
            await validate_tag("E2800002", NOW, lookup)

    def test_system_error_outcome_carries_message(self):
        outcome = system_error_outcome(RuntimeError("connection refused"))
        assert outcome.status_code == 500
        assert outcome.scan_result == "error"
        assert outcome.error_code == "SYSTEM_ERROR"
        assert outcome.error_message == "connection refused"
