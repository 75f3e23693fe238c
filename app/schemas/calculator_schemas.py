"""
Pydantic schemas for the job mix and recipe (mix) calculators.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from app.services.dose_rules import (
    DEFAULT_RECIPE_UNIT,
    DEFAULT_REFERENCE_HECTARES,
    DEFAULT_TARGET_HECTARES,
)


class UnitBasisEnum(str, Enum):
    """How a dose relates to the treated area."""
    RATE = "rate"
    ABSOLUTE = "absolute"


# ==================== JOB MIX SCHEMAS ====================

class ChemicalEntryIn(BaseModel):
    """Agrochemical line sent to the job calculator."""
    id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1, max_length=200)
    dose: float = Field(default=0, ge=0, description="Rate (per ha) or absolute quantity")
    unit: str = Field(..., min_length=1, max_length=20, description="e.g. L/ha, mL/ha, cc/ha, kg/ha, g/ha, L, kg")


class JobMixRequest(BaseModel):
    """Request schema for a caldo calculation."""
    entries: List[ChemicalEntryIn] = Field(default_factory=list)
    hectares: float = Field(default=0, ge=0, description="Hectares to treat in this pass")
    dose_caldo: Optional[float] = Field(None, ge=0, description="Caldo rate L/ha (default 10)")
    total_job_hectares: Optional[float] = Field(None, ge=0, description="Job's planned area for absolute doses")


class ProductCalculationOut(BaseModel):
    """Applied quantity of one product."""
    id: str
    product_name: str
    dose: float
    unit: str
    basis: UnitBasisEnum
    is_liquid: bool
    calculated_amount: float
    display_unit: str


class JobMixResponse(BaseModel):
    """Caldo breakdown."""
    job_id: Optional[str] = None
    hectares: float
    dose_caldo: float
    total_job_hectares: Optional[float] = None
    caldo_total: float
    total_liquid_products: float
    agua_litros: float
    liquid_entry_ids: List[str] = Field(default_factory=list)
    products: List[ProductCalculationOut] = Field(default_factory=list)


class JobMixSettings(BaseModel):
    """Calculator settings stored on a job."""
    calc_hectares: Optional[float] = Field(None, ge=0)
    dose_caldo_l_ha: Optional[float] = Field(None, ge=0)


# ==================== RECIPE (MIX) SCHEMAS ====================

class RecipeIngredientIn(BaseModel):
    """Ingredient of a reference recipe, picked from the catalog or typed in."""
    id: Optional[str] = None
    product_id: Optional[str] = Field(None, description="Catalog product id")
    product_name: Optional[str] = Field(None, max_length=200, description="Free text name when not in catalog")
    standard_dose: float = Field(..., description="Dose for the reference area")
    unit: str = Field(default=DEFAULT_RECIPE_UNIT, max_length=20)


class MixRequest(BaseModel):
    """Request schema for recipe scaling."""
    reference_hectares: float = Field(default=DEFAULT_REFERENCE_HECTARES, ge=0)
    target_hectares: float = Field(default=DEFAULT_TARGET_HECTARES, ge=0)
    ingredients: List[RecipeIngredientIn] = Field(default_factory=list)


class MixLineOut(BaseModel):
    id: str
    product_id: Optional[str] = None
    product_name: str
    standard_dose: float
    unit: str
    calculated_amount: float


class MixResponse(BaseModel):
    reference_hectares: float
    target_hectares: float
    ingredients: List[MixLineOut] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class UnitsResponse(BaseModel):
    rate_units: List[str]
    absolute_units: List[str]
    recipe_units: List[str]
    default_dose_caldo_l_ha: float
