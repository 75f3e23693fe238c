"""
Calculator Router.
Stateless caldo and recipe calculations; nothing here is persisted.
"""
from typing import Dict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app import config
from app.database import get_db
from app.core.auth import get_current_active_user
from app.models.database_models import User, Agrochemical
from app.schemas.calculator_schemas import (
    JobMixRequest,
    JobMixResponse,
    MixRequest,
    MixResponse,
    MixLineOut,
    UnitsResponse,
)
from app.services.dose_calculator import ChemicalEntry, RecipeCalculator, compute_job_mix
from app.services.dose_rules import ABSOLUTE_UNITS, RATE_UNITS, RECIPE_UNITS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calculator", tags=["calculator"])


def load_catalog_names(db: Session, organization_id: str) -> Dict[str, str]:
    rows = db.query(Agrochemical.id, Agrochemical.name).filter(
        Agrochemical.organization_id == organization_id
    ).all()
    return {row[0]: row[1] for row in rows}


@router.get("/units", response_model=UnitsResponse)
async def get_units():
    """Unit vocabularies accepted by the calculators."""
    return UnitsResponse(
        rate_units=RATE_UNITS,
        absolute_units=ABSOLUTE_UNITS,
        recipe_units=RECIPE_UNITS,
        default_dose_caldo_l_ha=config.DEFAULT_CALDO_RATE,
    )


@router.post("/job-mix", response_model=JobMixResponse)
async def calculate_job_mix(
    request: JobMixRequest,
    current_user: User = Depends(get_current_active_user)
):
    """
    Calculate caldo total, water and per-product quantities.

    Caldo Total = Hectares x Caldo rate
    Water = Caldo Total - liquid products (L/ha, mL/ha, cc/ha)
    Products = Dose x Hectares for /ha units; absolute units prorated by
    hectares / total job hectares when the job total is known.
    """
    entries = [
        ChemicalEntry(id=e.id, product_name=e.product_name, dose=e.dose, unit=e.unit)
        for e in request.entries
    ]
    dose_caldo = config.DEFAULT_CALDO_RATE if request.dose_caldo is None else request.dose_caldo
    result = compute_job_mix(
        entries,
        hectares=request.hectares,
        dose_caldo=dose_caldo,
        total_job_hectares=request.total_job_hectares,
    )
    return JobMixResponse(**result.to_dict())


@router.post("/mix", response_model=MixResponse)
async def calculate_mix(
    request: MixRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Scale a reference recipe to the target hectares.

    Ingredients picked from the catalog take the catalog name. Ingredients
    without a positive dose or a resolvable name are left out.
    """
    catalog = {}
    if any(i.product_id for i in request.ingredients):
        catalog = load_catalog_names(db, current_user.organization_id)

    calculator = RecipeCalculator(request.reference_hectares, request.target_hectares, catalog=catalog)
    skipped = 0
    for ingredient in request.ingredients:
        added = calculator.add_ingredient(
            standard_dose=ingredient.standard_dose,
            unit=ingredient.unit,
            product_id=ingredient.product_id,
            product_name=ingredient.product_name,
            ingredient_id=ingredient.id,
        )
        if added is None:
            skipped += 1

    warnings = []
    if skipped:
        warnings.append(f"{skipped} ingrediente(s) sin dosis válida o sin producto fueron omitidos")
        logger.info(f"Mix calculation skipped {skipped} ingredient(s)")

    lines = [
        MixLineOut(
            id=line.ingredient.id,
            product_id=line.ingredient.product_id,
            product_name=line.ingredient.product_name,
            standard_dose=line.ingredient.standard_dose,
            unit=line.ingredient.unit,
            calculated_amount=line.calculated_amount,
        )
        for line in calculator.compute()
    ]
    return MixResponse(
        reference_hectares=calculator.reference_hectares,
        target_hectares=calculator.target_hectares,
        ingredients=lines,
        warnings=warnings,
    )
