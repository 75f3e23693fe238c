"""
Deterministic dosing constants for caldo and mix calculations.

This module centralizes constants so the job calculator, the recipe
calculator, the exports and the tests all read the same values.
"""

DEFAULT_DOSE_CALDO_L_HA = 10.0

ML_PER_LITER = 1000.0

PER_HECTARE_SUFFIX = "/ha"

# Rate units whose volume is part of the caldo.
LIQUID_RATE_UNITS_TO_LITERS = {
    "L/ha": 1.0,
    "mL/ha": 1.0 / ML_PER_LITER,
    "cc/ha": 1.0 / ML_PER_LITER,
}

RATE_UNITS = ["L/ha", "mL/ha", "cc/ha", "kg/ha", "g/ha"]
ABSOLUTE_UNITS = ["L", "kg", "mL", "g"]

RECIPE_UNITS = ["L", "kg", "mL", "g"]
DEFAULT_RECIPE_UNIT = "L"

DEFAULT_REFERENCE_HECTARES = 120.0
DEFAULT_TARGET_HECTARES = 100.0
