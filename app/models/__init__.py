# Vehicle Pass RFID: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.vehicle_pass import VehiclePassApplication   # noqa
from app.models.scan_log import ScanLog                     # noqa
