"""
Agrochemical Catalog Router.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import User, Agrochemical, AgrochemicalUsed
from app.schemas.operations_schemas import (
    CatalogProductCreate,
    CatalogProductUpdate,
    CatalogProductResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_product_or_404(db: Session, product_id: str, organization_id: str) -> Agrochemical:
    product = db.query(Agrochemical).filter(
        Agrochemical.id == product_id,
        Agrochemical.organization_id == organization_id
    ).first()
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")
    return product


@router.get("/agrochemicals", response_model=List[CatalogProductResponse])
async def list_catalog(
    search: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """List the organization's products ordered by name, optionally filtered by name or active ingredient."""
    query = db.query(Agrochemical).filter(Agrochemical.organization_id == current_user.organization_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            Agrochemical.name.ilike(pattern) | Agrochemical.active_ingredient.ilike(pattern)
        )
    return query.order_by(Agrochemical.name).all()


@router.get("/agrochemicals/{product_id}", response_model=CatalogProductResponse)
async def get_catalog_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_product_or_404(db, product_id, current_user.organization_id)


@router.post("/agrochemicals", response_model=CatalogProductResponse, status_code=status.HTTP_201_CREATED)
async def create_catalog_product(
    request: CatalogProductCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = Agrochemical(**request.model_dump(), organization_id=current_user.organization_id)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"Catalog product added: {product.name}")
    return product


@router.put("/agrochemicals/{product_id}", response_model=CatalogProductResponse)
async def update_catalog_product(
    product_id: str,
    request: CatalogProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = get_product_or_404(db, product_id, current_user.organization_id)
    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/agrochemicals/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catalog_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = get_product_or_404(db, product_id, current_user.organization_id)
    # Job lines keep their own product_name; only the catalog link goes.
    db.query(AgrochemicalUsed).filter(AgrochemicalUsed.agrochemical_id == product.id).update(
        {AgrochemicalUsed.agrochemical_id: None}, synchronize_session=False
    )
    db.delete(product)
    db.commit()
    return None
