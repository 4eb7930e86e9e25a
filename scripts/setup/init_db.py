"""
Initialize database: creates all tables, optionally seeds sample passes.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--seed]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import datetime, timedelta
from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.models.vehicle_pass import VehiclePassApplication
from sqlalchemy import text


def sample_passes(now):
    """One application per validation outcome, keyed by tag id."""
    return [
        # 200: completed, active, valid until tomorrow
        VehiclePassApplication(applicant_name="Dela Cruz, Juan", status="completed",
                               plate_number="ABC-1234", vehicle_type="car", driver_name="Juan Dela Cruz",
                               rfid_tag_id="E2800002", rfid_is_active=True,
                               rfid_valid_until=now + timedelta(days=1), rfid_assigned_at=now - timedelta(days=30)),
        # 410: expired yesterday
        VehiclePassApplication(applicant_name="Santos, Maria", status="completed",
                               plate_number="XYZ-5678", vehicle_type="motorcycle",
                               rfid_tag_id="E2800001", rfid_is_active=True,
                               rfid_valid_until=now - timedelta(days=1), rfid_assigned_at=now - timedelta(days=365)),
        # 423: tag deactivated
        VehiclePassApplication(applicant_name="Reyes, Pedro", status="completed",
                               plate_number="LMN-4321", vehicle_type="suv",
                               rfid_tag_id="E2800003", rfid_is_active=False),
        # 409: approved but not yet completed
        VehiclePassApplication(applicant_name="Garcia, Ana", status="approved",
                               plate_number="QRS-8765", vehicle_type="tricycle",
                               rfid_tag_id="E2800004", rfid_is_active=True),
    ]


def main():
    parser = argparse.ArgumentParser(description="Create tables for the RFID checkpoint")
    parser.add_argument("--seed", action="store_true", help="insert sample vehicle passes")
    args = parser.parse_args()

    print("🗄️  RFID Checkpoint DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ Tables ready: vehicle_pass_applications, rfid_scans")

    if args.seed:
        now = datetime.utcnow()
        db = SessionLocal()
        try:
            passes = sample_passes(now)
            for p in passes:
                p.created_at = now
                p.updated_at = now
            db.add_all(passes)
            db.commit()
            for p in passes:
                print(f"   ✓ tag {p.rfid_tag_id} → {p.plate_number} ({p.status})")
        finally:
            db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
