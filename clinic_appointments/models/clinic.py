from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

# Doctor-clinic membership; a row grants the doctor bookings at the clinic
doctor_clinic = Table(
    "doctor_clinic",
    Base.metadata,
    Column("id", Integer, primary_key=True),
    Column("doctor_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("clinic_id", Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("created_at", DateTime, server_default=func.now()),
    UniqueConstraint("doctor_id", "clinic_id", name="uq_doctor_clinic"),
)

class Clinic(Base):
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctors = relationship("User", secondary=doctor_clinic, back_populates="clinics")
    appointments = relationship("Appointment", back_populates="clinic")

    def __repr__(self):
        return f"<Clinic(id={self.id}, name='{self.name}')>"
