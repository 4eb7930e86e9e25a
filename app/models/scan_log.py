# app/models/scan_log.py
"""
RFID scan log table, one row per validation attempt.
Written only by DatabaseLogSink, append-only. Read by the scans router.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from app.database import Base


class ScanLog(Base):
    __tablename__ = "rfid_scans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scan_id = Column(String(64), unique=True, nullable=False)
    tag_id = Column(String(100), index=True)
    application_id = Column(Integer, index=True)
    user_id = Column(Integer, index=True)

    scan_type = Column(String(20), nullable=False)     # validation
    direction = Column(String(10), nullable=False)     # in | out | both
    scan_result = Column(String(20), nullable=False, index=True)  # success | denied | error
    scan_message = Column(Text)
    error_code = Column(String(50))
    error_message = Column(Text)
    system_status = Column(String(20))                 # online | offline | maintenance
    response_time = Column(Integer)                    # milliseconds

    vehicle = Column(JSON)                             # plate_number, vehicle_type, driver_name
    rfid_validity = Column(JSON)                       # is_active, valid_until, assigned_at

    scan_timestamp = Column(DateTime, nullable=False, index=True)
    logged_at = Column(DateTime)

    def __repr__(self):
        return f"<ScanLog {self.scan_id} tag={self.tag_id} result={self.scan_result}>"
