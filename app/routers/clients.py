"""
Clients and Farms Router.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import User, Client, Farm, Job
from app.schemas.operations_schemas import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    FarmCreate,
    FarmUpdate,
    FarmResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["clients"])


def get_client_or_404(db: Session, client_id: str, organization_id: str) -> Client:
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.organization_id == organization_id
    ).first()
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return client


def get_farm_or_404(db: Session, farm_id: str, organization_id: str) -> Farm:
    farm = db.query(Farm).filter(
        Farm.id == farm_id,
        Farm.organization_id == organization_id
    ).first()
    if not farm:
        raise HTTPException(status_code=404, detail="Campo no encontrado")
    return farm


def ensure_no_jobs(db: Session, column, item_id: str, detail: str) -> None:
    """Clients and farms with jobs cannot be deleted; the jobs go first."""
    if db.query(Job.id).filter(column == item_id).first():
        raise HTTPException(status_code=400, detail=detail)


@router.get("/clients", response_model=List[ClientResponse])
async def list_clients(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return db.query(Client).filter(
        Client.organization_id == current_user.organization_id
    ).order_by(Client.name).all()


@router.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_client_or_404(db, client_id, current_user.organization_id)


@router.post("/clients", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = Client(
        **request.model_dump(),
        organization_id=current_user.organization_id,
        user_id=current_user.id,
    )
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info(f"Client created: {client.name} ({client.id})")
    return client


@router.put("/clients/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    request: ClientUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = get_client_or_404(db, client_id, current_user.organization_id)
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = get_client_or_404(db, client_id, current_user.organization_id)
    ensure_no_jobs(db, Job.client_id, client.id, "El cliente tiene trabajos asociados")
    db.delete(client)
    db.commit()
    return None


# ============== Farms ==============

@router.get("/clients/{client_id}/farms", response_model=List[FarmResponse])
async def list_client_farms(
    client_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = get_client_or_404(db, client_id, current_user.organization_id)
    return db.query(Farm).filter(Farm.client_id == client.id).order_by(Farm.name).all()


@router.post("/clients/{client_id}/farms", response_model=FarmResponse, status_code=status.HTTP_201_CREATED)
async def create_farm(
    client_id: str,
    request: FarmCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = get_client_or_404(db, client_id, current_user.organization_id)
    farm = Farm(
        **request.model_dump(),
        client_id=client.id,
        organization_id=current_user.organization_id,
    )
    db.add(farm)
    db.commit()
    db.refresh(farm)
    return farm


@router.get("/farms/{farm_id}", response_model=FarmResponse)
async def get_farm(
    farm_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_farm_or_404(db, farm_id, current_user.organization_id)


@router.put("/farms/{farm_id}", response_model=FarmResponse)
async def update_farm(
    farm_id: str,
    request: FarmUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    farm = get_farm_or_404(db, farm_id, current_user.organization_id)
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(farm, key, value)
    db.commit()
    db.refresh(farm)
    return farm


@router.delete("/farms/{farm_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_farm(
    farm_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    farm = get_farm_or_404(db, farm_id, current_user.organization_id)
    ensure_no_jobs(db, Job.farm_id, farm.id, "El campo tiene trabajos asociados")
    db.delete(farm)
    db.commit()
    return None
