"""
Jobs Router.
Job CRUD, the job's agrochemical lines, and the job caldo calculation
with its Excel/PDF sheets.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy import desc
import io
import logging
import re
import unicodedata
from urllib.parse import quote

from app import config
from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import User, Job, AgrochemicalUsed, Agrochemical
from app.routers.clients import get_client_or_404, get_farm_or_404
from app.schemas.operations_schemas import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobStatusEnum,
    AgrochemicalUsedCreate,
    AgrochemicalUsedUpdate,
    AgrochemicalUsedResponse,
)
from app.schemas.calculator_schemas import JobMixResponse, JobMixSettings
from app.services.dose_calculator import (
    ChemicalEntry,
    JobMixResult,
    compute_job_mix,
    parse_decimal,
)
from app.services.mix_excel_service import mix_excel_service
from app.services.equipment_hours_service import refresh_equipment_hours
from app.services.mix_pdf_service import create_job_mix_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def get_job_or_404(db: Session, job_id: str, organization_id: str) -> Job:
    job = db.query(Job).filter(
        Job.id == job_id,
        Job.organization_id == organization_id
    ).first()
    if not job:
        raise HTTPException(status_code=404, detail="Trabajo no encontrado")
    return job


def validate_job_references(db: Session, client_id: str, farm_id: str, organization_id: str) -> None:
    """Client and farm must belong to the caller's organization and to each other."""
    try:
        get_client_or_404(db, client_id, organization_id)
        farm = get_farm_or_404(db, farm_id, organization_id)
    except HTTPException as e:
        raise HTTPException(status_code=400, detail=e.detail)
    if farm.client_id != client_id:
        raise HTTPException(status_code=400, detail="El campo no pertenece al cliente")


def validate_catalog_reference(db: Session, agrochemical_id: Optional[str], organization_id: str) -> None:
    if not agrochemical_id:
        return
    exists = db.query(Agrochemical.id).filter(
        Agrochemical.id == agrochemical_id,
        Agrochemical.organization_id == organization_id
    ).first()
    if not exists:
        raise HTTPException(status_code=400, detail="Producto de catálogo no encontrado")


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    client_id: Optional[str] = None,
    farm_id: Optional[str] = None,
    status_filter: Optional[JobStatusEnum] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """List jobs, newest first."""
    query = db.query(Job).filter(Job.organization_id == current_user.organization_id)
    if client_id:
        query = query.filter(Job.client_id == client_id)
    if farm_id:
        query = query.filter(Job.farm_id == farm_id)
    if status_filter:
        query = query.filter(Job.status == status_filter.value)
    return query.order_by(desc(Job.created_at)).all()


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_job_or_404(db, job_id, current_user.organization_id)


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: JobCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    validate_job_references(db, request.client_id, request.farm_id, current_user.organization_id)

    data = request.model_dump()
    data["status"] = request.status.value
    job = Job(**data, organization_id=current_user.organization_id, user_id=current_user.id)
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info(f"Job created: {job.title} ({job.id})")
    return job


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    request: JobUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    updates = request.model_dump(exclude_unset=True)

    if "client_id" in updates or "farm_id" in updates:
        validate_job_references(
            db,
            updates.get("client_id") or job.client_id,
            updates.get("farm_id") or job.farm_id,
            current_user.organization_id,
        )
    if updates.get("status") is not None:
        updates["status"] = JobStatusEnum(updates["status"]).value

    for key, value in updates.items():
        setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    drone_ids = [r.drone_id for r in job.attendance_records]
    generator_ids = [r.generator_id for r in job.attendance_records]

    db.delete(job)
    db.flush()
    refresh_equipment_hours(db, drone_ids=drone_ids, generator_ids=generator_ids)
    db.commit()
    logger.info(f"Job deleted: {job_id} with {len(drone_ids)} attendance record(s)")
    return None


# ============== Agrochemicals used by a job ==============

@router.get("/{job_id}/agrochemicals", response_model=List[AgrochemicalUsedResponse])
async def list_job_agrochemicals(
    job_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    return db.query(AgrochemicalUsed).filter(
        AgrochemicalUsed.job_id == job.id
    ).order_by(AgrochemicalUsed.application_order).all()


@router.post("/{job_id}/agrochemicals", response_model=AgrochemicalUsedResponse, status_code=status.HTTP_201_CREATED)
async def add_job_agrochemical(
    job_id: str,
    request: AgrochemicalUsedCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    validate_catalog_reference(db, request.agrochemical_id, current_user.organization_id)

    line = AgrochemicalUsed(**request.model_dump(), job_id=job.id)
    db.add(line)
    db.commit()
    db.refresh(line)
    return line


@router.put("/{job_id}/agrochemicals/{line_id}", response_model=AgrochemicalUsedResponse)
async def update_job_agrochemical(
    job_id: str,
    line_id: str,
    request: AgrochemicalUsedUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    line = db.query(AgrochemicalUsed).filter(
        AgrochemicalUsed.id == line_id,
        AgrochemicalUsed.job_id == job.id
    ).first()
    if not line:
        raise HTTPException(status_code=404, detail="Agroquímico no encontrado")

    updates = request.model_dump(exclude_unset=True)
    validate_catalog_reference(db, updates.get("agrochemical_id"), current_user.organization_id)
    for key, value in updates.items():
        setattr(line, key, value)
    db.commit()
    db.refresh(line)
    return line


@router.delete("/{job_id}/agrochemicals/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_agrochemical(
    job_id: str,
    line_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    line = db.query(AgrochemicalUsed).filter(
        AgrochemicalUsed.id == line_id,
        AgrochemicalUsed.job_id == job.id
    ).first()
    if not line:
        raise HTTPException(status_code=404, detail="Agroquímico no encontrado")
    db.delete(line)
    db.commit()
    return None


# ============== Job caldo calculation ==============

def job_chemical_entries(db: Session, job: Job) -> List[ChemicalEntry]:
    lines = db.query(AgrochemicalUsed).filter(
        AgrochemicalUsed.job_id == job.id
    ).order_by(AgrochemicalUsed.application_order).all()
    return [
        ChemicalEntry(id=line.id, product_name=line.product_name, dose=line.dose, unit=line.unit)
        for line in lines
    ]


def resolve_mix_parameters(job: Job, hectares: Optional[float], dose_caldo: Optional[float]):
    """
    Fill calculator inputs the caller left out from what the job stores.

    Hectares: saved calculator value, then applied surface, then 0.
    Caldo rate: saved calculator value, then the job's application dose
    text, then the default rate.
    """
    if hectares is None:
        if job.calc_hectares is not None:
            hectares = job.calc_hectares
        else:
            hectares = job.superficie_aplicada_has or 0.0

    if dose_caldo is None:
        if job.dose_caldo_l_ha is not None:
            dose_caldo = job.dose_caldo_l_ha
        else:
            dose_caldo = parse_decimal(job.application_dose) or config.DEFAULT_CALDO_RATE

    return hectares, dose_caldo


def calculate_job_mix(db: Session, job: Job, hectares: Optional[float], dose_caldo: Optional[float]) -> JobMixResult:
    hectares, dose_caldo = resolve_mix_parameters(job, hectares, dose_caldo)
    return compute_job_mix(
        job_chemical_entries(db, job),
        hectares=hectares,
        dose_caldo=dose_caldo,
        total_job_hectares=job.superficie_teorica_has,
    )


def ascii_filename(filename: str) -> str:
    """Accents stripped; runs of anything outside [A-Za-z0-9.-] become one '_'."""
    normalized = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    normalized = re.sub(r"[^A-Za-z0-9.-]+", "_", normalized)
    normalized = re.sub(r"_(?=\.)", "", normalized).strip("_")
    return normalized or "caldo"


def attachment_headers(filename: str) -> dict:
    """Content-Disposition with a latin-1 safe name plus the UTF-8 original (RFC 6266)."""
    return {
        "Content-Disposition": (
            f'attachment; filename="{ascii_filename(filename)}"; '
            f"filename*=UTF-8''{quote(filename)}"
        )
    }


def job_sheet_header(job: Job) -> dict:
    return {
        "id": job.id,
        "title": job.title,
        "client_name": job.client.name if job.client else None,
        "farm_name": job.farm.name if job.farm else None,
        "cultivo": job.cultivo,
    }


@router.get("/{job_id}/mix", response_model=JobMixResponse)
async def get_job_mix(
    job_id: str,
    hectares: Optional[float] = Query(None, ge=0),
    dose_caldo: Optional[float] = Query(None, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Calculate caldo, water and product quantities for a stored job.

    Absolute-unit products are prorated against the job's theoretical surface.
    """
    job = get_job_or_404(db, job_id, current_user.organization_id)
    result = calculate_job_mix(db, job, hectares, dose_caldo)
    return JobMixResponse(job_id=job.id, **result.to_dict())


@router.put("/{job_id}/mix-settings", response_model=JobResponse)
async def save_job_mix_settings(
    job_id: str,
    request: JobMixSettings,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Persist the hectares and caldo rate edited in the calculator."""
    job = get_job_or_404(db, job_id, current_user.organization_id)
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


@router.get("/{job_id}/mix/excel")
async def export_job_mix_excel(
    job_id: str,
    hectares: Optional[float] = Query(None, ge=0),
    dose_caldo: Optional[float] = Query(None, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    result = calculate_job_mix(db, job, hectares, dose_caldo)

    try:
        excel_buffer = mix_excel_service.generate_job_mix_excel(
            mix=result.to_dict(),
            job=job_sheet_header(job),
            user_name=current_user.full_name or current_user.email,
        )
    except Exception as e:
        logger.error(f"Error generating mix Excel for job {job.id}: {e}")
        raise HTTPException(status_code=500, detail="Error al generar el Excel")

    filename = f"caldo_{job.title}.xlsx"
    return StreamingResponse(
        excel_buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=attachment_headers(filename)
    )


@router.get("/{job_id}/mix/pdf")
async def export_job_mix_pdf(
    job_id: str,
    hectares: Optional[float] = Query(None, ge=0),
    dose_caldo: Optional[float] = Query(None, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    job = get_job_or_404(db, job_id, current_user.organization_id)
    result = calculate_job_mix(db, job, hectares, dose_caldo)

    try:
        pdf_bytes = create_job_mix_pdf(
            mix=result.to_dict(),
            job=job_sheet_header(job),
            user_name=current_user.full_name or current_user.email,
        )
    except Exception as e:
        logger.error(f"Error generating mix PDF for job {job.id}: {e}")
        raise HTTPException(status_code=500, detail="Error al generar el PDF")

    filename = f"caldo_{job.title}.pdf"
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers=attachment_headers(filename)
    )
