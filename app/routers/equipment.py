"""
Equipment and Work Team Router.
Drones and generators expose total_hours but never accept it: hours are
derived from attendance records.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import User, Drone, Generator, WorkTeam, OperationalAttendance
from app.schemas.operations_schemas import (
    DroneCreate,
    DroneUpdate,
    DroneResponse,
    GeneratorCreate,
    GeneratorUpdate,
    GeneratorResponse,
    WorkTeamCreate,
    WorkTeamUpdate,
    WorkTeamResponse,
    StaffRoleEnum,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/equipment", tags=["equipment"])


def get_scoped_or_404(db: Session, model, item_id: str, organization_id: str, detail: str):
    item = db.query(model).filter(
        model.id == item_id,
        model.organization_id == organization_id
    ).first()
    if not item:
        raise HTTPException(status_code=404, detail=detail)
    return item


def ensure_not_in_attendance(db: Session, columns, item_id: str, detail: str) -> None:
    """Equipment and staff referenced by attendance records cannot be deleted."""
    for column in columns:
        if db.query(OperationalAttendance.id).filter(column == item_id).first():
            raise HTTPException(status_code=400, detail=detail)


# ============== Drones ==============

@router.get("/drones", response_model=List[DroneResponse])
async def list_drones(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return db.query(Drone).filter(
        Drone.organization_id == current_user.organization_id
    ).order_by(Drone.model).all()


@router.get("/drones/{drone_id}", response_model=DroneResponse)
async def get_drone(
    drone_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_scoped_or_404(db, Drone, drone_id, current_user.organization_id, "Dron no encontrado")


@router.post("/drones", response_model=DroneResponse, status_code=status.HTTP_201_CREATED)
async def create_drone(
    request: DroneCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    drone = Drone(**request.model_dump(), organization_id=current_user.organization_id, total_hours=0.0)
    db.add(drone)
    db.commit()
    db.refresh(drone)
    return drone


@router.put("/drones/{drone_id}", response_model=DroneResponse)
async def update_drone(
    drone_id: str,
    request: DroneUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    drone = get_scoped_or_404(db, Drone, drone_id, current_user.organization_id, "Dron no encontrado")
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(drone, key, value)
    db.commit()
    db.refresh(drone)
    return drone


@router.delete("/drones/{drone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drone(
    drone_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    drone = get_scoped_or_404(db, Drone, drone_id, current_user.organization_id, "Dron no encontrado")
    ensure_not_in_attendance(db, [OperationalAttendance.drone_id], drone.id, "El dron tiene registros de asistencia")
    db.delete(drone)
    db.commit()
    return None


# ============== Generators ==============

@router.get("/generators", response_model=List[GeneratorResponse])
async def list_generators(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return db.query(Generator).filter(
        Generator.organization_id == current_user.organization_id
    ).order_by(Generator.brand).all()


@router.get("/generators/{generator_id}", response_model=GeneratorResponse)
async def get_generator(
    generator_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_scoped_or_404(db, Generator, generator_id, current_user.organization_id, "Generador no encontrado")


@router.post("/generators", response_model=GeneratorResponse, status_code=status.HTTP_201_CREATED)
async def create_generator(
    request: GeneratorCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    generator = Generator(**request.model_dump(), organization_id=current_user.organization_id, total_hours=0.0)
    db.add(generator)
    db.commit()
    db.refresh(generator)
    return generator


@router.put("/generators/{generator_id}", response_model=GeneratorResponse)
async def update_generator(
    generator_id: str,
    request: GeneratorUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    generator = get_scoped_or_404(db, Generator, generator_id, current_user.organization_id, "Generador no encontrado")
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(generator, key, value)
    db.commit()
    db.refresh(generator)
    return generator


@router.delete("/generators/{generator_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_generator(
    generator_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    generator = get_scoped_or_404(db, Generator, generator_id, current_user.organization_id, "Generador no encontrado")
    ensure_not_in_attendance(
        db, [OperationalAttendance.generator_id], generator.id, "El generador tiene registros de asistencia"
    )
    db.delete(generator)
    db.commit()
    return None


# ============== Work team ==============

@router.get("/work-team", response_model=List[WorkTeamResponse])
async def list_work_team(
    role: Optional[StaffRoleEnum] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    query = db.query(WorkTeam).filter(WorkTeam.organization_id == current_user.organization_id)
    if role:
        query = query.filter(WorkTeam.role == role.value)
    return query.order_by(WorkTeam.full_name).all()


@router.post("/work-team", response_model=WorkTeamResponse, status_code=status.HTTP_201_CREATED)
async def create_work_team_member(
    request: WorkTeamCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    data = request.model_dump()
    data["role"] = request.role.value
    member = WorkTeam(**data, organization_id=current_user.organization_id)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@router.put("/work-team/{member_id}", response_model=WorkTeamResponse)
async def update_work_team_member(
    member_id: str,
    request: WorkTeamUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    member = get_scoped_or_404(db, WorkTeam, member_id, current_user.organization_id, "Integrante no encontrado")
    updates = request.model_dump(exclude_unset=True)
    if updates.get("role") is not None:
        updates["role"] = StaffRoleEnum(updates["role"]).value
    for key, value in updates.items():
        setattr(member, key, value)
    db.commit()
    db.refresh(member)
    return member


@router.delete("/work-team/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_team_member(
    member_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    member = get_scoped_or_404(db, WorkTeam, member_id, current_user.organization_id, "Integrante no encontrado")
    ensure_not_in_attendance(
        db,
        [OperationalAttendance.pilot_id, OperationalAttendance.assistant_id],
        member.id,
        "El integrante tiene registros de asistencia",
    )
    db.delete(member)
    db.commit()
    return None
