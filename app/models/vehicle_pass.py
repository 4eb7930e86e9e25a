# app/models/vehicle_pass.py
"""
Vehicle pass applications table.
Owned by the application-management side; the checkpoint only reads it.
RFID assignment is flattened into rfid_* columns. rfid_is_active is NULL
until a tag has ever been assigned ("no RFID info").
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.database import Base


class VehiclePassApplication(Base):
    __tablename__ = "vehicle_pass_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_name = Column(String(200))
    status = Column(String(20), nullable=False, default="pending")  # pending | approved | completed | rejected
    linked_user_id = Column(Integer)          # applicant's user account (if applied online)

    # Vehicle
    plate_number = Column(String(50), nullable=False)
    vehicle_type = Column(String(50), nullable=False)  # motorcycle | car | suv | ...
    driver_name = Column(String(200))

    # RFID assignment. Tag id is not unique at the DB level, lookups take the first match
    rfid_tag_id = Column(String(100), index=True)
    rfid_is_active = Column(Boolean)
    rfid_valid_until = Column(DateTime)
    rfid_assigned_at = Column(DateTime)

    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<VehiclePassApplication {self.id} plate={self.plate_number} tag={self.rfid_tag_id} status={self.status}>"
