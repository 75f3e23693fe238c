"""
Dose/Mix Calculation Service.

Calculates agrochemical quantities for a spraying job:
- Caldo (total spray mixture) volume from hectares and caldo rate
- Water volume after discounting liquid products
- Per-product applied quantity, rate units scaled by hectares and
  absolute units prorated against the job's total surface
- Recipe scaling from a reference area to a target area

Everything here is pure arithmetic over small in-memory lists. Invalid
numbers degrade to zero instead of raising, because incomplete input is
the normal state of an interactive calculator.
"""
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
import logging
import math
import uuid

from app.services.dose_rules import (
    DEFAULT_DOSE_CALDO_L_HA,
    DEFAULT_RECIPE_UNIT,
    LIQUID_RATE_UNITS_TO_LITERS,
    PER_HECTARE_SUFFIX,
)

logger = logging.getLogger(__name__)


class UnitBasis(str, Enum):
    """Whether a dose is expressed per hectare or as a total quantity."""
    RATE = "rate"
    ABSOLUTE = "absolute"


@dataclass(frozen=True)
class DoseUnit:
    """A dose unit resolved from its label (e.g. 'mL/ha' -> mL, RATE)."""
    label: str
    base: str
    basis: UnitBasis

    @property
    def is_rate(self) -> bool:
        return self.basis == UnitBasis.RATE

    @property
    def liters_per_unit(self) -> Optional[float]:
        """Liters per unit of dose for liquid rate units, None otherwise."""
        return LIQUID_RATE_UNITS_TO_LITERS.get(self.label)

    @property
    def is_liquid(self) -> bool:
        return self.liters_per_unit is not None

    @property
    def display_unit(self) -> str:
        return self.base


def parse_unit(unit: Optional[str]) -> DoseUnit:
    """
    Resolve a unit label into a DoseUnit.

    Labels ending in '/ha' are rates; anything else, including unknown
    labels, is an absolute quantity shown as-is.
    """
    label = (unit or "").strip()
    if label.endswith(PER_HECTARE_SUFFIX):
        return DoseUnit(label=label, base=label[:-len(PER_HECTARE_SUFFIX)], basis=UnitBasis.RATE)
    return DoseUnit(label=label, base=label, basis=UnitBasis.ABSOLUTE)


def parse_decimal(value: Any, default: float = 0.0) -> float:
    """
    Parse a number leniently, returning `default` on failure.

    Accepts ints, floats and numeric strings (a decimal comma is accepted).
    None, blanks, garbage, NaN and infinities all yield `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def parse_non_negative(value: Any, default: float = 0.0) -> float:
    """parse_decimal, with negatives treated as zero."""
    number = parse_decimal(value, default)
    return number if number > 0 else 0.0


def scale_proportional(value: float, from_basis: float, to_basis: float) -> float:
    """
    Scale `value` defined over `from_basis` to `to_basis` linearly.

    A zero basis cannot be scaled from and yields 0.
    """
    if not from_basis:
        return 0.0
    return (value / from_basis) * to_basis


# ==================== JOB CALCULATOR ====================

@dataclass
class ChemicalEntry:
    """One agrochemical line of a job."""
    id: str
    product_name: str
    dose: float
    unit: str

    def __post_init__(self):
        self.dose = parse_non_negative(self.dose)

    @property
    def dose_unit(self) -> DoseUnit:
        return parse_unit(self.unit)


@dataclass
class ProductCalculation:
    """Applied quantity of one product for the hectares being calculated."""
    id: str
    product_name: str
    dose: float
    unit: str
    basis: UnitBasis
    is_liquid: bool
    calculated_amount: float
    display_unit: str


@dataclass
class JobMixResult:
    """Caldo breakdown for one calculation pass."""
    hectares: float
    dose_caldo: float
    total_job_hectares: Optional[float]
    caldo_total: float
    total_liquid_products: float
    agua_litros: float
    liquid_entries: List[ChemicalEntry] = field(default_factory=list)
    products: List[ProductCalculation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hectares": self.hectares,
            "dose_caldo": self.dose_caldo,
            "total_job_hectares": self.total_job_hectares,
            "caldo_total": self.caldo_total,
            "total_liquid_products": self.total_liquid_products,
            "agua_litros": self.agua_litros,
            "liquid_entry_ids": [e.id for e in self.liquid_entries],
            "products": [
                {
                    "id": p.id,
                    "product_name": p.product_name,
                    "dose": p.dose,
                    "unit": p.unit,
                    "basis": p.basis.value,
                    "is_liquid": p.is_liquid,
                    "calculated_amount": p.calculated_amount,
                    "display_unit": p.display_unit,
                }
                for p in self.products
            ],
        }


def calculate_product_amount(
    entry: ChemicalEntry,
    hectares: float,
    total_job_hectares: Optional[float] = None
) -> ProductCalculation:
    """
    Calculate the quantity of one product for `hectares`.

    Rate doses are multiplied by the area. Absolute doses describe the whole
    job, so they are prorated by hectares / total_job_hectares; without a
    usable total they pass through unscaled.
    """
    unit = entry.dose_unit
    if unit.is_rate:
        amount = scale_proportional(entry.dose, 1.0, hectares)
    elif total_job_hectares and total_job_hectares > 0:
        amount = scale_proportional(entry.dose, total_job_hectares, hectares)
    else:
        amount = entry.dose

    return ProductCalculation(
        id=entry.id,
        product_name=entry.product_name,
        dose=entry.dose,
        unit=entry.unit,
        basis=unit.basis,
        is_liquid=unit.is_liquid,
        calculated_amount=amount,
        display_unit=unit.display_unit,
    )


def liquid_volume_liters(entry: ChemicalEntry, hectares: float) -> float:
    """Liters of product an entry adds to the caldo (0 for non-liquid units)."""
    factor = entry.dose_unit.liters_per_unit
    if factor is None:
        return 0.0
    return entry.dose * factor * hectares


def compute_job_mix(
    entries: List[ChemicalEntry],
    hectares: Any,
    dose_caldo: Any = None,
    total_job_hectares: Any = None
) -> JobMixResult:
    """
    Compute the caldo breakdown for a job's products.

    Args:
        entries: Agrochemical lines of the job (may be empty)
        hectares: Area being treated in this pass
        dose_caldo: Caldo rate in L/ha (None -> default rate)
        total_job_hectares: Job's planned area, denominator for absolute doses

    Returns:
        JobMixResult. Water is caldo minus liquid products and is not
        clamped, so an overdosed mix shows a negative water volume.
    """
    ha = parse_non_negative(hectares)
    rate = DEFAULT_DOSE_CALDO_L_HA if dose_caldo is None else parse_non_negative(dose_caldo)
    total_ha = None if total_job_hectares is None else parse_non_negative(total_job_hectares)

    caldo_total = ha * rate

    liquid_entries = [e for e in entries if e.dose_unit.is_liquid]
    total_liquid_products = sum(liquid_volume_liters(e, ha) for e in liquid_entries)

    agua_litros = caldo_total - total_liquid_products

    products = [calculate_product_amount(e, ha, total_ha) for e in entries]

    logger.debug(
        f"Job mix: {ha:.2f} ha x {rate:.2f} L/ha = {caldo_total:.2f} L caldo, "
        f"{total_liquid_products:.2f} L products, {agua_litros:.2f} L water"
    )

    return JobMixResult(
        hectares=ha,
        dose_caldo=rate,
        total_job_hectares=total_ha,
        caldo_total=caldo_total,
        total_liquid_products=total_liquid_products,
        agua_litros=agua_litros,
        liquid_entries=liquid_entries,
        products=products,
    )


# ==================== MIX (RECIPE) CALCULATOR ====================

def compute_required_amount(standard_dose: Any, reference_hectares: Any, target_hectares: Any) -> float:
    """Scale a recipe dose from the reference area to the target area."""
    return scale_proportional(
        parse_decimal(standard_dose),
        parse_decimal(reference_hectares),
        parse_decimal(target_hectares),
    )


@dataclass
class RecipeIngredient:
    """Ingredient of a reference recipe."""
    id: str
    product_name: str
    standard_dose: float
    unit: str = DEFAULT_RECIPE_UNIT
    product_id: Optional[str] = None


@dataclass
class RecipeLine:
    """Recipe ingredient scaled to the target area."""
    ingredient: RecipeIngredient
    calculated_amount: float


class RecipeCalculator:
    """
    Holds a reference recipe and scales it to a target area.

    `catalog` maps catalog product ids to display names, used when an
    ingredient is picked from the catalog instead of typed in.
    """

    def __init__(
        self,
        reference_hectares: Any,
        target_hectares: Any,
        catalog: Optional[Dict[str, str]] = None
    ):
        self.reference_hectares = parse_decimal(reference_hectares)
        self.target_hectares = parse_decimal(target_hectares)
        self.catalog = catalog or {}
        self.ingredients: List[RecipeIngredient] = []

    def resolve_product_name(self, product_id: Optional[str], product_name: Optional[str]) -> str:
        if product_id:
            return self.catalog.get(product_id, "")
        return product_name or ""

    def add_ingredient(
        self,
        standard_dose: Any,
        unit: str = DEFAULT_RECIPE_UNIT,
        product_id: Optional[str] = None,
        product_name: Optional[str] = None,
        ingredient_id: Optional[str] = None
    ) -> Optional[RecipeIngredient]:
        """
        Append an ingredient; returns None and leaves the list untouched when
        the dose is not positive or no product name can be resolved.
        """
        dose = parse_decimal(standard_dose)
        if dose <= 0:
            return None

        name = self.resolve_product_name(product_id, product_name)
        if not name.strip():
            return None

        ingredient = RecipeIngredient(
            id=ingredient_id or str(uuid.uuid4()),
            product_name=name,
            standard_dose=dose,
            unit=unit or DEFAULT_RECIPE_UNIT,
            product_id=product_id or None,
        )
        self.ingredients.append(ingredient)
        return ingredient

    def remove_ingredient(self, ingredient_id: str) -> None:
        self.ingredients = [i for i in self.ingredients if i.id != ingredient_id]

    def clear(self) -> None:
        self.ingredients = []

    def required_amount(self, standard_dose: float) -> float:
        return compute_required_amount(standard_dose, self.reference_hectares, self.target_hectares)

    def compute(self) -> List[RecipeLine]:
        return [RecipeLine(ingredient=i, calculated_amount=self.required_amount(i.standard_dose)) for i in self.ingredients]
