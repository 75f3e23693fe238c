"""
Operational Attendance Router.

Attendance records log field work against a job. Writing a record
refreshes the hours of the drone/generator it used and checks the job's
accumulated hectares; an exceeded surface is reported as a warning and
never blocks the write.
"""
from dataclasses import asdict
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
import logging

from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import (
    User, Job, Drone, Generator, WorkTeam, OperationalAttendance,
)
from app.schemas.operations_schemas import (
    AttendanceCreate,
    AttendanceUpdate,
    AttendanceResponse,
    AttendanceWriteResponse,
    ActivityTypeEnum,
    HectaresSummaryResponse,
)
from app.services.equipment_hours_service import refresh_equipment_hours
from app.services.hectares_guard import (
    build_hectares_summary,
    check_hectares_limit,
    sum_hectares_done,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/attendance", tags=["attendance"])

REFERENCE_CHECKS = [
    ("drone_id", Drone, "Dron no encontrado"),
    ("generator_id", Generator, "Generador no encontrado"),
    ("pilot_id", WorkTeam, "Piloto no encontrado"),
    ("assistant_id", WorkTeam, "Asistente no encontrado"),
]


def get_record_or_404(db: Session, record_id: str, organization_id: str) -> OperationalAttendance:
    record = db.query(OperationalAttendance).filter(
        OperationalAttendance.id == record_id,
        OperationalAttendance.organization_id == organization_id
    ).first()
    if not record:
        raise HTTPException(status_code=404, detail="Registro no encontrado")
    return record


def get_job_for_attendance(db: Session, job_id: str, organization_id: str) -> Job:
    job = db.query(Job).filter(
        Job.id == job_id,
        Job.organization_id == organization_id
    ).first()
    if not job:
        raise HTTPException(status_code=400, detail="Trabajo no encontrado")
    return job


def validate_references(db: Session, data: dict, organization_id: str) -> None:
    """Equipment and staff referenced by a record must belong to the organization."""
    for field_name, model, detail in REFERENCE_CHECKS:
        item_id = data.get(field_name)
        if not item_id:
            continue
        exists = db.query(model.id).filter(
            model.id == item_id,
            model.organization_id == organization_id
        ).first()
        if not exists:
            raise HTTPException(status_code=400, detail=detail)


def job_hectares_done(db: Session, job_id: str, exclude_record_id: Optional[str] = None) -> float:
    query = db.query(OperationalAttendance.hectares_done).filter(OperationalAttendance.job_id == job_id)
    if exclude_record_id:
        query = query.filter(OperationalAttendance.id != exclude_record_id)
    return sum_hectares_done(row[0] for row in query.all())


def hectares_warnings(job: Job, total_hectares_done: float) -> List[str]:
    warning = check_hectares_limit(
        total_hectares_done,
        applied_hectares=job.superficie_aplicada_has,
        theoretical_hectares=job.superficie_teorica_has,
    )
    return [warning.message] if warning else []


def enum_values(data: dict) -> dict:
    if data.get("activity_type") is not None:
        data["activity_type"] = ActivityTypeEnum(data["activity_type"]).value
    return data


@router.get("", response_model=List[AttendanceResponse])
async def list_attendance(
    job_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    activity_type: Optional[ActivityTypeEnum] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """List attendance records, newest first."""
    query = db.query(OperationalAttendance).filter(
        OperationalAttendance.organization_id == current_user.organization_id
    )
    if job_id:
        query = query.filter(OperationalAttendance.job_id == job_id)
    if start_date:
        query = query.filter(OperationalAttendance.start_date >= start_date)
    if end_date:
        query = query.filter(OperationalAttendance.start_date <= end_date)
    if activity_type:
        query = query.filter(OperationalAttendance.activity_type == activity_type.value)
    return query.order_by(desc(OperationalAttendance.start_date), desc(OperationalAttendance.created_at)).all()


@router.get("/jobs/{job_id}/hectares-summary", response_model=HectaresSummaryResponse)
async def get_hectares_summary(
    job_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = db.query(Job).filter(
        Job.id == job_id,
        Job.organization_id == current_user.organization_id
    ).first()
    if not job:
        raise HTTPException(status_code=404, detail="Trabajo no encontrado")

    rows = db.query(OperationalAttendance.hectares_done).filter(OperationalAttendance.job_id == job.id).all()
    summary = build_hectares_summary(
        (row[0] for row in rows),
        theoretical_hectares=job.superficie_teorica_has,
        applied_hectares=job.superficie_aplicada_has,
    )
    return HectaresSummaryResponse(job_id=job.id, **asdict(summary))


@router.get("/{record_id}", response_model=AttendanceResponse)
async def get_attendance(
    record_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_record_or_404(db, record_id, current_user.organization_id)


@router.post("", response_model=AttendanceWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_attendance(
    request: AttendanceCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create an attendance record.

    The job's hectares are checked with this record included before it is
    saved; the record is saved either way.
    """
    job = get_job_for_attendance(db, request.job_id, current_user.organization_id)
    data = enum_values(request.model_dump())
    validate_references(db, data, current_user.organization_id)

    warnings = []
    if request.hectares_done:
        prospective_total = job_hectares_done(db, job.id) + request.hectares_done
        warnings = hectares_warnings(job, prospective_total)

    record = OperationalAttendance(**data, organization_id=current_user.organization_id)
    db.add(record)
    db.flush()
    refresh_equipment_hours(db, drone_ids=[record.drone_id], generator_ids=[record.generator_id])
    db.commit()
    db.refresh(record)

    logger.info(f"Attendance created for job {job.id}: {record.hectares_done or 0:.2f} ha")
    return AttendanceWriteResponse(
        record=AttendanceResponse.model_validate(record),
        message="Registro de asistencia creado exitosamente",
        warnings=warnings,
    )


@router.put("/{record_id}", response_model=AttendanceWriteResponse)
async def update_attendance(
    record_id: str,
    request: AttendanceUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    record = get_record_or_404(db, record_id, current_user.organization_id)
    updates = enum_values(request.model_dump(exclude_unset=True))

    job = get_job_for_attendance(db, updates.get("job_id") or record.job_id, current_user.organization_id)
    validate_references(db, updates, current_user.organization_id)

    previous_drone_id = record.drone_id
    previous_generator_id = record.generator_id

    for key, value in updates.items():
        setattr(record, key, value)
    db.flush()

    warnings = []
    if record.hectares_done and ("hectares_done" in updates or "job_id" in updates):
        total = job_hectares_done(db, job.id, exclude_record_id=record.id) + record.hectares_done
        warnings = hectares_warnings(job, total)

    refresh_equipment_hours(
        db,
        drone_ids=[previous_drone_id, record.drone_id],
        generator_ids=[previous_generator_id, record.generator_id],
    )
    db.commit()
    db.refresh(record)

    return AttendanceWriteResponse(
        record=AttendanceResponse.model_validate(record),
        message="Registro actualizado exitosamente",
        warnings=warnings,
    )


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attendance(
    record_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    record = get_record_or_404(db, record_id, current_user.organization_id)
    drone_id, generator_id = record.drone_id, record.generator_id

    db.delete(record)
    db.flush()
    refresh_equipment_hours(db, drone_ids=[drone_id], generator_ids=[generator_id])
    db.commit()
    return None
