"""Tests for unit/location/category normalization and the non-food filter."""

import pytest

from shelflife.normalize import (
    guess_category,
    is_non_food,
    normalize_category,
    normalize_location,
    normalize_name,
    normalize_unit,
)


class TestNormalizeUnit:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("liter", "L"),
            ("L", "L"),
            ("grams", "g"),
            ("Kg.", "kg"),
            ("500 g", "g"),
            ("1L bottle", "L"),
            ("punnet", "tray"),
            ("tins", "can"),
            ("ea", "pcs"),
            ("weird", "pcs"),
            (None, "pcs"),
            ("", "pcs"),
        ],
    )
    def test_aliases(self, raw, expected):
        assert normalize_unit(raw) == expected


class TestNormalizeLocation:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Freezer", "freezer"),
            ("frozen section", "freezer"),
            ("refrigerator", "fridge"),
            ("Pantry", "pantry"),
            ("counter", "fridge"),
            (None, "fridge"),
        ],
    )
    def test_locations(self, raw, expected):
        assert normalize_location(raw) == expected


class TestNormalizeName:
    def test_ampersand_and_punctuation(self):
        assert normalize_name("Mac & Cheese!") == "mac and cheese"

    def test_case_and_spacing(self):
        assert normalize_name("  Whole   MILK ") == normalize_name("whole milk")

    def test_empty(self):
        assert normalize_name(None) == ""


class TestCategory:
    def test_specific_model_category_kept(self):
        assert normalize_category("Dairy", "Mystery item") == "dairy"

    def test_generic_category_replaced(self):
        assert normalize_category("Other", "Greek yogurt") == "dairy"
        assert normalize_category("food", "Chicken breast") == "meat"

    def test_generic_name_preferred(self):
        assert normalize_category(None, "Organic Fuji", "Apple") == "fruit"

    def test_phrase_keyword(self):
        assert normalize_category(None, "Vanilla ice cream") == "frozen"

    def test_unknown(self):
        assert normalize_category(None, "Mystery item") == "other"
        assert guess_category("") is None


class TestNonFood:
    @pytest.mark.parametrize(
        "name",
        [
            "paper tissue",
            "Kleenex Tissues",
            "Carrier bag",
            "BAG",
            "Bottle deposit",
            "Dish soap",
            "Toilet paper 9 rolls",
            "Total",
            "Kitchen sponges 3pk",
            "Tin foil",
            "",
        ],
    )
    def test_non_food(self, name):
        assert is_non_food(name) is True

    @pytest.mark.parametrize(
        "name",
        [
            "Whole milk",
            "Tea bags",
            "Chicken breast",
            "Paper-thin ham",
            "Victoria sponge cake",
            "Foil baked salmon",
            "Sponge fingers",
        ],
    )
    def test_food(self, name):
        assert is_non_food(name) is False
