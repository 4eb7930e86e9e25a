# app/services/tag_validator.py
"""
RFID tag validation. Decides whether a scanned tag is admitted.

Checks run in a fixed order and the first match wins:
  1. no tag id              → 400 TAG_REQUIRED   (lookup never called)
  2. no matching pass       → 404 TAG_NOT_FOUND
  3. RFID missing/inactive  → 423 TAG_INACTIVE
  4. application not done   → 409 APPLICATION_NOT_COMPLETED
  5. now > valid_until      → 410 TAG_EXPIRED
  6. otherwise              → 200 access granted

Denials are returned as outcomes, never raised. Lookup errors propagate
to the caller untouched.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from app.services.vehicle_pass_service import VehiclePassRecord, TagLookupFn


class ScanCategory(Enum):
    # name = (status, result, error_code, message)
    NO_TAG_SUPPLIED = (400, "denied", "TAG_REQUIRED", "RFID tag ID is required")
    NOT_FOUND = (404, "denied", "TAG_NOT_FOUND", "RFID tag not found")
    INACTIVE = (423, "denied", "TAG_INACTIVE", "RFID tag is not active")
    NOT_COMPLETED = (409, "denied", "APPLICATION_NOT_COMPLETED", "Application not completed")
    EXPIRED = (410, "denied", "TAG_EXPIRED", "RFID tag expired")
    GRANTED = (200, "success", None, "Access granted")
    # Not a validation result: used by the HTTP layer for infrastructure faults
    SYSTEM_ERROR = (500, "error", "SYSTEM_ERROR", "Internal system error")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def scan_result(self) -> str:
        return self.value[1]

    @property
    def error_code(self) -> Optional[str]:
        return self.value[2]

    @property
    def message(self) -> str:
        return self.value[3]


@dataclass(frozen=True)
class VehicleSnapshot:
    plate_number: str
    vehicle_type: str
    driver_name: Optional[str] = None


@dataclass(frozen=True)
class RfidValiditySnapshot:
    is_active: Optional[bool]
    valid_until: Optional[datetime]
    assigned_at: Optional[datetime] = None


@dataclass(frozen=True)
class ValidationOutcome:
    category: ScanCategory
    application_id: Optional[int] = None
    user_id: Optional[int] = None
    vehicle: Optional[VehicleSnapshot] = None
    rfid_validity: Optional[RfidValiditySnapshot] = None
    error_message: Optional[str] = None   # SYSTEM_ERROR only

    @property
    def status_code(self) -> int:
        return self.category.status_code

    @property
    def scan_result(self) -> str:
        return self.category.scan_result

    @property
    def scan_message(self) -> str:
        return self.category.message

    @property
    def error_code(self) -> Optional[str]:
        return self.category.error_code

    @property
    def granted(self) -> bool:
        return self.category is ScanCategory.GRANTED


def _outcome_for_record(category: ScanCategory, record: VehiclePassRecord) -> ValidationOutcome:
    return ValidationOutcome(
        category=category,
        application_id=record.application_id,
        user_id=record.linked_user_id,
        vehicle=VehicleSnapshot(
            plate_number=record.plate_number,
            vehicle_type=record.vehicle_type,
            driver_name=record.driver_name,
        ),
        rfid_validity=RfidValiditySnapshot(
            is_active=record.rfid_active,
            valid_until=record.rfid_valid_until,
            assigned_at=record.rfid_assigned_at,
        ),
    )


def classify(record: Optional[VehiclePassRecord], now: datetime) -> ScanCategory:
    """Pure decision over an already-fetched record."""
    if record is None:
        return ScanCategory.NOT_FOUND
    if not record.rfid_active:
        return ScanCategory.INACTIVE
    if record.application_status != "completed":
        return ScanCategory.NOT_COMPLETED
    # Strict: a tag expiring exactly now is still valid
    if record.rfid_valid_until is not None and now > record.rfid_valid_until:
        return ScanCategory.EXPIRED
    return ScanCategory.GRANTED


async def validate_tag(tag_id: Optional[str], now: datetime, lookup: TagLookupFn) -> ValidationOutcome:
    if not tag_id:
        return ValidationOutcome(category=ScanCategory.NO_TAG_SUPPLIED)

    record = await lookup(tag_id)
    category = classify(record, now)
    if record is None:
        return ValidationOutcome(category=category)
    return _outcome_for_record(category, record)


def system_error_outcome(exc: Exception) -> ValidationOutcome:
    """Outcome logged when lookup or evaluation blew up."""
    return ValidationOutcome(category=ScanCategory.SYSTEM_ERROR, error_message=str(exc) or type(exc).__name__)
