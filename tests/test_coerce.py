"""
Tests for the amount coercion helpers.
"""

import math

import pytest

from spendboard.connect.coerce import (
    extract_amount,
    field_variants,
    minor_to_major,
    sum_amounts,
    usage_percentage,
)


class TestExtractAmount:
    """Tests for extract_amount."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (12.5, 12.5),
            (7, 7.0),
            ("12.5", 12.5),
            (" 3.25 ", 3.25),
            ({"value": 4}, 4.0),
            ({"value": {"value": "3"}}, 3.0),
            (None, 0.0),
            ("abc", 0.0),
            ("", 0.0),
            ([1, 2], 0.0),
            ({"amount": 5}, 0.0),
            (True, 0.0),
        ],
    )
    def test_values(self, value, expected):
        assert extract_amount(value) == expected

    @pytest.mark.parametrize(
        "value",
        [float("nan"), float("inf"), float("-inf"), "NaN", "Infinity", "1e999", {"value": "inf"}],
    )
    def test_non_finite_becomes_zero(self, value):
        assert extract_amount(value) == 0.0

    def test_always_finite(self):
        for value in (object(), b"12", {"value": None}, (), set(), -0.0, 10**400):
            result = extract_amount(value)
            assert isinstance(result, float)
            assert math.isfinite(result)


class TestSumAmounts:
    """Tests for sum_amounts."""

    def test_sums_field(self):
        records = [{"amount": 10}, {"amount": "15"}, {"amount": {"value": 2.5}}]
        assert sum_amounts(records, "amount") == 27.5

    def test_tolerates_malformed_elements(self):
        records = [{"amount": 10}, None, "junk", {"other": 3}, {"amount": "bad"}, 42]
        assert sum_amounts(records, "amount") == 10

    def test_non_list_input(self):
        assert sum_amounts(None, "amount") == 0
        assert sum_amounts({"amount": 5}, "amount") == 0
        assert sum_amounts("amount", "amount") == 0

    def test_either_case(self):
        records = [{"net_amount": 1.5}, {"netAmount": 2.5}]
        assert sum_amounts(records, "net_amount", either_case=True) == 4.0
        assert sum_amounts(records, "netAmount", either_case=True) == 4.0
        assert sum_amounts(records, "net_amount") == 1.5

    def test_either_case_counts_each_record_once(self):
        records = [{"net_amount": 1, "netAmount": 1}]
        assert sum_amounts(records, "net_amount", either_case=True) == 1

    def test_field_variants(self):
        assert field_variants("amount") == ("amount",)
        assert field_variants("amount_paid") == ("amount_paid", "amountPaid")
        assert field_variants("amountPaid") == ("amountPaid", "amount_paid")


class TestUsagePercentage:
    """Tests for usage_percentage."""

    def test_basic(self):
        assert usage_percentage(25, 100) == 25.0

    def test_zero_or_missing_limit(self):
        assert usage_percentage(25, 0) == 0.0
        assert usage_percentage(25, None) == 0.0
        assert usage_percentage(25, -5) == 0.0

    def test_clamped(self):
        assert usage_percentage(150, 100) == 100.0
        assert usage_percentage(-10, 100) == 0.0

    def test_minor_to_major(self):
        assert minor_to_major(12345) == 123.45
        assert minor_to_major("250") == 2.5
        assert minor_to_major(None) == 0.0
