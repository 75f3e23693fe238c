"""
Tests for the Dose/Mix Calculation Service.

Covers the job caldo calculation:
1. Caldo total = hectares x caldo rate
2. Water = caldo - liquid products (mL/cc converted to liters)
3. Rate units scaled by hectares, /ha stripped for display
4. Absolute units prorated by the job surface or passed through
5. Lenient numeric parsing (invalid -> 0)
"""
import pytest
from app.services.dose_calculator import (
    ChemicalEntry,
    UnitBasis,
    calculate_product_amount,
    compute_job_mix,
    parse_decimal,
    parse_non_negative,
    parse_unit,
    scale_proportional,
)


def entry(dose, unit, entry_id="a1", name="Producto"):
    return ChemicalEntry(id=entry_id, product_name=name, dose=dose, unit=unit)


class TestParseUnit:
    """Tests for parse_unit()."""

    @pytest.mark.parametrize("label,base", [
        ("L/ha", "L"), ("mL/ha", "mL"), ("cc/ha", "cc"), ("kg/ha", "kg"), ("g/ha", "g"),
    ])
    def test_rate_units(self, label, base):
        unit = parse_unit(label)
        assert unit.basis == UnitBasis.RATE
        assert unit.display_unit == base

    @pytest.mark.parametrize("label", ["L", "kg", "mL", "g", "bolsas"])
    def test_absolute_units_keep_label(self, label):
        unit = parse_unit(label)
        assert unit.basis == UnitBasis.ABSOLUTE
        assert unit.display_unit == label

    def test_liquid_rate_units(self):
        assert parse_unit("L/ha").liters_per_unit == 1.0
        assert parse_unit("mL/ha").liters_per_unit == pytest.approx(0.001)
        assert parse_unit("cc/ha").liters_per_unit == pytest.approx(0.001)

    def test_absolute_liters_are_not_liquid_rate(self):
        """Absolute L is a job total, not part of the per-hectare caldo."""
        assert parse_unit("L").is_liquid is False
        assert parse_unit("kg/ha").is_liquid is False

    def test_empty_unit_is_absolute(self):
        unit = parse_unit(None)
        assert unit.basis == UnitBasis.ABSOLUTE
        assert unit.display_unit == ""


class TestParseDecimal:
    """Tests for the parse-or-zero helpers."""

    @pytest.mark.parametrize("value,expected", [
        (12, 12.0),
        (2.5, 2.5),
        ("3.5", 3.5),
        ("2,5", 2.5),
        (" 7 ", 7.0),
    ])
    def test_valid_numbers(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", float("nan"), float("inf"), True])
    def test_invalid_numbers_default_to_zero(self, value):
        assert parse_decimal(value) == 0.0

    def test_custom_default(self):
        assert parse_decimal("x", default=10.0) == 10.0

    def test_negative_treated_as_zero(self):
        assert parse_non_negative(-5) == 0.0
        assert parse_non_negative("4") == 4.0


class TestScaleProportional:

    def test_linear_scaling(self):
        assert scale_proportional(40, 100, 25) == pytest.approx(10)

    def test_zero_basis_yields_zero(self):
        assert scale_proportional(40, 0, 25) == 0.0


class TestComputeJobMix:
    """Tests for compute_job_mix()."""

    def test_caldo_total(self):
        result = compute_job_mix([], hectares=100, dose_caldo=10)
        assert result.caldo_total == 1000

    def test_liquid_product_subtracted_from_water(self):
        result = compute_job_mix([entry(2, "L/ha")], hectares=100, dose_caldo=10)
        assert result.total_liquid_products == pytest.approx(200)
        assert result.agua_litros == pytest.approx(800)

    def test_ml_converted_to_liters(self):
        result = compute_job_mix([entry(500, "mL/ha")], hectares=10, dose_caldo=10)
        assert result.total_liquid_products == pytest.approx(5)

    def test_cc_converted_to_liters(self):
        result = compute_job_mix([entry(250, "cc/ha")], hectares=8, dose_caldo=10)
        assert result.total_liquid_products == pytest.approx(2)

    def test_solid_rate_products_do_not_reduce_water(self):
        result = compute_job_mix([entry(3, "kg/ha")], hectares=50, dose_caldo=10)
        assert result.total_liquid_products == 0
        assert result.agua_litros == pytest.approx(500)
        assert result.liquid_entries == []

    def test_rate_unit_scaling(self):
        result = compute_job_mix([entry(3, "kg/ha")], hectares=50, dose_caldo=10)
        product = result.products[0]
        assert product.calculated_amount == pytest.approx(150)
        assert product.display_unit == "kg"

    def test_absolute_unit_prorated(self):
        result = compute_job_mix([entry(40, "kg")], hectares=25, dose_caldo=10, total_job_hectares=100)
        assert result.products[0].calculated_amount == pytest.approx(10)
        assert result.products[0].display_unit == "kg"

    def test_absolute_unit_pass_through_without_total(self):
        result = compute_job_mix([entry(40, "kg")], hectares=25, dose_caldo=10)
        assert result.products[0].calculated_amount == 40

    def test_absolute_unit_pass_through_with_zero_total(self):
        result = compute_job_mix([entry(40, "kg")], hectares=25, dose_caldo=10, total_job_hectares=0)
        assert result.products[0].calculated_amount == 40

    def test_empty_entries(self):
        result = compute_job_mix([], hectares=50, dose_caldo=8)
        assert result.caldo_total == 400
        assert result.total_liquid_products == 0
        assert result.agua_litros == 400
        assert result.products == []

    def test_negative_water_is_not_clamped(self):
        """Liquid products above the caldo volume show as negative water."""
        result = compute_job_mix([entry(15, "L/ha")], hectares=10, dose_caldo=10)
        assert result.caldo_total == 100
        assert result.total_liquid_products == pytest.approx(150)
        assert result.agua_litros == pytest.approx(-50)

    def test_default_caldo_rate(self):
        result = compute_job_mix([], hectares=3)
        assert result.dose_caldo == 10
        assert result.caldo_total == 30

    def test_explicit_zero_caldo_rate_is_kept(self):
        result = compute_job_mix([], hectares=3, dose_caldo=0)
        assert result.caldo_total == 0

    def test_invalid_inputs_coerced_to_zero(self):
        result = compute_job_mix([entry("abc", "L/ha")], hectares="n/a", dose_caldo=-4)
        assert result.hectares == 0
        assert result.dose_caldo == 0
        assert result.caldo_total == 0
        assert result.products[0].dose == 0
        assert result.products[0].calculated_amount == 0

    def test_mixed_products(self):
        entries = [
            entry(1.5, "L/ha", "a"),
            entry(200, "cc/ha", "b"),
            entry(0.5, "kg/ha", "c"),
            entry(20, "L", "d"),
        ]
        result = compute_job_mix(entries, hectares=40, dose_caldo=12, total_job_hectares=80)

        assert result.caldo_total == pytest.approx(480)
        assert [e.id for e in result.liquid_entries] == ["a", "b"]
        assert result.total_liquid_products == pytest.approx(60 + 8)
        assert result.agua_litros == pytest.approx(480 - 68)

        amounts = {p.id: (p.calculated_amount, p.display_unit) for p in result.products}
        assert amounts["a"] == (pytest.approx(60), "L")
        assert amounts["b"] == (pytest.approx(8000), "cc")
        assert amounts["c"] == (pytest.approx(20), "kg")
        assert amounts["d"] == (pytest.approx(10), "L")

    def test_products_keep_input_order(self):
        entries = [entry(1, "L/ha", "z"), entry(1, "kg", "a"), entry(1, "g/ha", "m")]
        result = compute_job_mix(entries, hectares=1, dose_caldo=10)
        assert [p.id for p in result.products] == ["z", "a", "m"]

    def test_to_dict_shape(self):
        result = compute_job_mix([entry(2, "L/ha")], hectares=100, dose_caldo=10)
        data = result.to_dict()
        assert data["caldo_total"] == 1000
        assert data["liquid_entry_ids"] == ["a1"]
        assert data["products"][0]["basis"] == "rate"
        assert data["products"][0]["is_liquid"] is True


class TestCalculateProductAmount:

    def test_rate_ignores_job_total(self):
        product = calculate_product_amount(entry(2, "L/ha"), hectares=10, total_job_hectares=1000)
        assert product.calculated_amount == pytest.approx(20)

    def test_absolute_full_job(self):
        """Calculating the whole job surface gives back the full absolute dose."""
        product = calculate_product_amount(entry(40, "kg"), hectares=100, total_job_hectares=100)
        assert product.calculated_amount == pytest.approx(40)

    def test_unit_change_is_reflected(self):
        """The unit partition follows the entry's current unit."""
        chemical = entry(500, "mL/ha")
        assert chemical.dose_unit.is_liquid is True

        chemical.unit = "g/ha"
        assert chemical.dose_unit.is_liquid is False
        result = compute_job_mix([chemical], hectares=10, dose_caldo=10)
        assert result.total_liquid_products == 0
        assert result.products[0].display_unit == "g"
