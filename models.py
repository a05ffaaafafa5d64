# models.py - SQLAlchemy model for the Requests table
from sqlalchemy import Column, Integer, String, Unicode, Boolean, DateTime
from sqlalchemy.orm import declarative_base
import datetime

Base = declarative_base()


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class Requests(Base):
    """One row per re-print submission. Rows are inserted once and never updated.

    Applicant text is Thai, so those columns are Unicode (NVARCHAR on SQL Server).
    """
    __tablename__ = "Requests"
    request_id = Column("RequestId", String(32), primary_key=True)
    timestamp = Column("Timestamp", DateTime(timezone=True), nullable=False, default=_utcnow)
    full_name = Column("FullName", Unicode(200), nullable=False)
    age = Column("Age", Integer)
    phone = Column("Phone", String(20))
    address = Column("Address", Unicode(500))
    province = Column("Province", Unicode(100))
    district = Column("District", Unicode(100))
    subdistrict = Column("Subdistrict", Unicode(100))
    vehicle_type = Column("VehicleType", Unicode(50))
    vehicle_brand = Column("VehicleBrand", Unicode(100))
    license_plate = Column("LicensePlate", Unicode(50))
    consent = Column("Consent", Boolean, nullable=False, default=False)
    image_blob_path = Column("ImageBlobPath", String(500), nullable=False)
