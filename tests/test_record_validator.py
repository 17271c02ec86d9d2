"""
Tests for schema-driven record validation.

Covers unknown and missing fields, text trimming and length limits, numeric
coercion with comma decimal separators, integer and decimal bounds, partial
updates and derived fields.
"""
from decimal import Decimal

import pytest

from backoffice.core.exceptions import RecordValidationError
from backoffice.domain.catalogs.fields import (
    CatalogDefinition,
    decimal_field,
    integer_field,
    text_field,
)
from backoffice.domain.catalogs.registry import get_catalog
from backoffice.domain.imports.validators import is_empty, parse_decimal, validate_record

PRODUCTS = CatalogDefinition(
    key="products",
    label="Products",
    table_name="products",
    fields=(
        text_field("name", max_length=10),
        integer_field("code"),
        decimal_field("rate", required=False, precision=5, scale=2),
        text_field("parent_name", required=False, derived=True),
    ),
    unique_key=("code",),
    searchable_fields=("name",),
)


class TestUnknownAndMissingFields:
    def test_unknown_field_is_rejected(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(PRODUCTS, {"name": "A", "code": 1, "color": "red"})
        assert "color" in exc_info.value.message
        assert exc_info.value.field == "color"

    def test_missing_required_field(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(PRODUCTS, {"name": "A"})
        assert "code" in exc_info.value.message
        assert "required" in exc_info.value.message

    def test_blank_value_counts_as_missing(self):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, {"name": "   ", "code": 1})

    def test_optional_blank_value_is_omitted(self):
        record = validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": ""})
        assert record == {"name": "A", "code": 1}

    def test_partial_allows_missing_required_fields(self):
        assert validate_record(PRODUCTS, {"rate": "1,5"}, partial=True) == {"rate": Decimal("1.50")}

    def test_partial_still_rejects_unknown_fields(self):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, {"other": 1}, partial=True)

    def test_payload_must_be_a_mapping(self):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, ["name", "code"])


class TestTextFields:
    def test_text_is_trimmed(self):
        assert validate_record(PRODUCTS, {"name": "  Widget ", "code": 1})["name"] == "Widget"

    def test_text_longer_than_max_length(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(PRODUCTS, {"name": "x" * 11, "code": 1})
        assert "10" in exc_info.value.message

    def test_length_is_checked_after_trimming(self):
        assert validate_record(PRODUCTS, {"name": "  " + "x" * 10 + "  ", "code": 1})["name"] == "x" * 10

    def test_whole_float_becomes_integer_text(self):
        currencies = get_catalog("codigos-moneda")
        record = validate_record(currencies, {"pais": "Costa Rica", "moneda": "Colón", "codigo": 188.0})
        assert record["codigo"] == "188"


class TestNumericFields:
    @pytest.mark.parametrize("raw, expected", [
        (7, 7),
        ("7", 7),
        (" 7 ", 7),
        ("7,0", 7),
        (7.0, 7),
        (Decimal("7"), 7),
    ])
    def test_integer_coercion(self, raw, expected):
        record = validate_record(PRODUCTS, {"name": "A", "code": raw})
        assert record["code"] == expected
        assert isinstance(record["code"], int)

    @pytest.mark.parametrize("raw", ["7,5", "7.5", 7.5, "abc", "1.234,5", True])
    def test_integer_rejects_non_whole_or_non_numeric(self, raw):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, {"name": "A", "code": raw})

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-inf", float("inf")])
    def test_non_finite_numbers_are_rejected(self, raw):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": raw})

    def test_decimal_accepts_comma_separator(self):
        record = validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": "12,5"})
        assert record["rate"] == Decimal("12.5")
        assert isinstance(record["rate"], Decimal)

    def test_decimal_is_rounded_to_scale(self):
        record = validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": "1.005"})
        assert record["rate"] == Decimal("1.01")

    def test_decimal_integer_digits_are_bounded(self):
        # precision 5, scale 2 leaves three integer digits
        assert validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": "999.99"})["rate"] == Decimal("999.99")
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": "1000"})
        assert "precision" in exc_info.value.message

    @pytest.mark.parametrize("raw", ["2147483648", 10 ** 20, "-2147483649", "100000000000000000000"])
    def test_integer_outside_column_range_is_rejected(self, raw):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(PRODUCTS, {"name": "A", "code": raw})
        assert "between" in exc_info.value.message

    def test_integer_column_range_edges_are_accepted(self):
        assert validate_record(PRODUCTS, {"name": "A", "code": "2147483647"})["code"] == 2147483647
        assert validate_record(PRODUCTS, {"name": "A", "code": -2147483648})["code"] == -2147483648

    @pytest.mark.parametrize("raw", ["1e30", "99999999999999999999999999", 1e40])
    def test_decimal_wider_than_the_decimal_context_is_a_validation_error(self, raw):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_record(get_catalog("tipos-impuestos"), {"descripcion": "x", "codigo": raw})
        assert "precision" in exc_info.value.message

    def test_rounding_that_carries_an_extra_digit_is_rejected(self):
        with pytest.raises(RecordValidationError):
            validate_record(PRODUCTS, {"name": "A", "code": 1, "rate": "999.995"})

    def test_cabys_tax_rate_fits_two_digits(self):
        cabys = get_catalog("cabys")
        record = validate_record(cabys, {"categoria": "0111", "descripcion": "Trigo", "impuesto": "13"})
        assert record["impuesto"] == Decimal("13")
        with pytest.raises(RecordValidationError):
            validate_record(cabys, {"categoria": "0111", "descripcion": "Trigo", "impuesto": 100})


class TestDerivedFields:
    def test_derived_field_is_accepted_but_dropped(self):
        record = validate_record(PRODUCTS, {"name": "A", "code": 1, "parent_name": "Anything"})
        assert "parent_name" not in record


class TestParseDecimal:
    @pytest.mark.parametrize("value", [
        Decimal("0.1"),
        Decimal("-12.3456"),
        Decimal("1000"),
        Decimal("0"),
    ])
    def test_parse_of_formatted_value_is_identity(self, value):
        assert parse_decimal(str(value)) == value
        assert parse_decimal(str(value).replace(".", ",")) == value

    def test_float_keeps_its_shortest_form(self):
        assert parse_decimal(0.1) == Decimal("0.1")

    def test_empty_string_is_rejected(self):
        with pytest.raises(RecordValidationError):
            parse_decimal("   ")


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
    def test_empty_values(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, "0", False, Decimal("0")])
    def test_falsy_values_are_not_empty(self, value):
        assert not is_empty(value)
