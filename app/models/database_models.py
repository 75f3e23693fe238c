"""
SQLAlchemy models for farm operations.

Every business table carries organization_id; routers always filter by the
caller's organization.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import relationship

from app.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    ruc = Column(String(50), nullable=True)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(200), nullable=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    name = Column(String(200), nullable=False)
    razon_social = Column(String(200), nullable=True)
    cuit = Column(String(20), nullable=True)
    contacto_principal = Column(String(200), nullable=True)
    puesto = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    farms = relationship("Farm", back_populates="client", cascade="all, delete-orphan")


class Farm(TimestampMixin, Base):
    __tablename__ = "farms"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    cultivo = Column(String(100), nullable=True)
    area_hectares = Column(Float, nullable=True)
    localidad = Column(String(200), nullable=True)
    location = Column(String(200), nullable=True)

    client = relationship("Client", back_populates="farms")


class Job(TimestampMixin, Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    farm_id = Column(String(36), ForeignKey("farms.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    task = Column(String(100), nullable=True)
    application_dose = Column(String(50), nullable=True)
    cuadro = Column(String(100), nullable=True)
    cultivo = Column(String(100), nullable=True)
    superficie_teorica_has = Column(Float, nullable=True)
    superficie_aplicada_has = Column(Float, nullable=True)
    # Calculator settings persisted from the job mix screen
    calc_hectares = Column(Float, nullable=True)
    dose_caldo_l_ha = Column(Float, nullable=True)
    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    notes = Column(Text, nullable=True)

    client = relationship("Client")
    farm = relationship("Farm")
    agrochemicals = relationship(
        "AgrochemicalUsed",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="AgrochemicalUsed.application_order",
    )
    attendance_records = relationship(
        "OperationalAttendance",
        back_populates="job",
        cascade="all, delete-orphan",
    )


class Agrochemical(Base):
    """Organization catalog of agrochemical products."""
    __tablename__ = "agrochemicals"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    name = Column(String(200), nullable=False)
    active_ingredient = Column(String(200), nullable=True)
    category = Column(String(100), nullable=True)
    mode_of_action = Column(String(200), nullable=True)
    toxicological_class = Column(String(50), nullable=True)
    manufacturer = Column(String(200), nullable=True)
    function = Column(String(200), nullable=True)
    safety_precautions = Column(Text, nullable=True)
    label_url = Column(String(500), nullable=True)
    standard_dose = Column(Float, nullable=True)
    unit = Column(String(20), default="L/ha", nullable=False)
    formulation_code = Column(String(20), nullable=True)


class AgrochemicalUsed(Base):
    """Agrochemical line of a job."""
    __tablename__ = "agrochemicals_used"

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    agrochemical_id = Column(String(36), ForeignKey("agrochemicals.id"), nullable=True)
    product_name = Column(String(200), nullable=False)
    dose = Column(Float, nullable=False, default=0.0)
    unit = Column(String(20), nullable=False)
    application_order = Column(Integer, default=0, nullable=False)
    cost_per_unit = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    job = relationship("Job", back_populates="agrochemicals")


class WorkTeam(TimestampMixin, Base):
    __tablename__ = "work_teams"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)


class Drone(TimestampMixin, Base):
    __tablename__ = "drones"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    model = Column(String(200), nullable=False)
    serial_number = Column(String(100), nullable=True)
    total_hours = Column(Float, default=0.0, nullable=False)


class Generator(TimestampMixin, Base):
    __tablename__ = "generators"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    brand = Column(String(200), nullable=False)
    internal_code = Column(String(100), nullable=True)
    total_hours = Column(Float, default=0.0, nullable=False)


class OperationalAttendance(TimestampMixin, Base):
    __tablename__ = "operational_attendance"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    check_in_time = Column(String(8), nullable=True)
    check_out_time = Column(String(8), nullable=True)
    activity_type = Column(String(20), nullable=True)
    pilot_id = Column(String(36), ForeignKey("work_teams.id"), nullable=True)
    assistant_id = Column(String(36), ForeignKey("work_teams.id"), nullable=True)
    drone_id = Column(String(36), ForeignKey("drones.id"), nullable=True, index=True)
    generator_id = Column(String(36), ForeignKey("generators.id"), nullable=True, index=True)
    gen_usage_hours = Column(Float, nullable=True)
    hectares_done = Column(Float, nullable=True)
    agronomic_obs = Column(Text, nullable=True)
    technical_obs = Column(Text, nullable=True)
    is_reviewed = Column(Boolean, default=False, nullable=False)

    job = relationship("Job", back_populates="attendance_records")
