"""Tests for the shelf-life decision policy."""

from datetime import date, timedelta

import pytest

from shelflife.config import ShelfLifeConfig
from shelflife.context import classify
from shelflife.dates import Reference
from shelflife.policy import clamp_days, decide

PURCHASED = Reference(date=date(2024, 1, 1), type="purchase")
OPENED = Reference(date=date(2024, 1, 3), type="open")


def _decide(name, location, model_days, reference=PURCHASED, **kwargs):
    return decide(classify(name, location), location, reference, model_days, **kwargs)


class TestSourceSelection:
    def test_rule_overrides_model(self):
        d = _decide("fried rice", "fridge", 10)
        assert d.days == 1
        assert d.source == "rule"
        assert d.rule_id == "cooked_rice"

    def test_model_when_no_rule(self):
        d = _decide("whole milk", "fridge", 6)
        assert d.days == 6
        assert d.source == "model"
        assert d.rule_id is None

    def test_open_reference_skips_rules(self):
        d = _decide("chicken breast", "fridge", 3, reference=OPENED)
        assert d.source == "model"
        assert d.days == 3

    @pytest.mark.parametrize("model_days", [None, 0, -4])
    def test_fallback(self, model_days):
        d = _decide("whole milk", "fridge", model_days)
        assert d.source == "fallback"
        assert d.days == 7

    def test_fallback_default_override(self):
        assert _decide("whole milk", "fridge", None, default_days=5).days == 5


class TestBestBefore:
    def test_caps_window(self):
        d = _decide("eggs", "fridge", None, best_before=date(2024, 1, 10))
        assert d.source == "rule"
        assert d.days == 9
        assert d.predicted_expiry == date(2024, 1, 10)

    def test_later_best_before_does_not_extend(self):
        d = _decide("eggs", "fridge", None, best_before=date(2024, 6, 1))
        assert d.days == 21

    def test_past_best_before_floors_to_one_day(self):
        d = _decide("whole milk", "fridge", 6, best_before=date(2023, 12, 25))
        assert d.days == 1

    def test_ignored_in_freezer(self):
        d = _decide("chicken", "freezer", None, best_before=date(2024, 1, 5))
        assert d.days == 270


class TestFreezerAndCeilings:
    def test_implausible_freezer_estimate_raised(self):
        d = _decide("ice cream", "freezer", 5)
        assert d.days == 90
        assert d.source == "model"

    def test_plausible_freezer_estimate_kept(self):
        assert _decide("ice cream", "freezer", 60).days == 60

    def test_freezer_fallback_raised(self):
        assert _decide("ice cream", "freezer", None).days == 90

    def test_ceiling(self):
        assert _decide("honey", "fridge", 1000).days == 365

    def test_pantry_ceiling_configurable(self):
        cfg = ShelfLifeConfig(pantry_max_days=730)
        assert _decide("rice", "pantry", 1000, config=cfg).days == 730
        assert _decide("honey", "fridge", 1000, config=cfg).days == 365

    def test_custom_freezer_thresholds(self):
        cfg = ShelfLifeConfig(freezer_floor_days=60, freezer_min_plausible_days=14)
        assert _decide("ice cream", "freezer", 10, config=cfg).days == 60
        assert _decide("ice cream", "freezer", 20, config=cfg).days == 20


class TestExpiry:
    @pytest.mark.parametrize(
        "name, location, model_days",
        [
            ("fried rice", "fridge", None),
            ("whole milk", "fridge", 6),
            ("ice cream", "freezer", 2),
            ("flour", "pantry", 5000),
            ("mystery", "fridge", None),
        ],
    )
    def test_expiry_is_reference_plus_days(self, name, location, model_days):
        d = _decide(name, location, model_days)
        assert 1 <= d.days <= 365
        assert d.predicted_expiry == d.reference.date + timedelta(days=d.days)
        assert d.predicted_expiry >= d.reference.date

    def test_open_date_example(self):
        d = _decide(
            "yogurt", "fridge", 10, reference=OPENED, best_before=date(2024, 1, 6)
        )
        assert d.reference.type == "open"
        assert d.days == 3
        assert d.predicted_expiry == date(2024, 1, 6)


class TestClampDays:
    def test_bounds(self):
        assert clamp_days(0, 365) == 1
        assert clamp_days(400, 365) == 365
        assert clamp_days(12, 365) == 12
