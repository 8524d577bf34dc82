"""Tests for the deterministic shelf-life rule table."""

import pytest

from shelflife.context import classify
from shelflife.rules import RULES, evaluate


def _days(name, location):
    match = evaluate(classify(name, location))
    return match.days if match else None


class TestRulePriority:
    def test_fried_rice_uses_rice_rule(self):
        match = evaluate(classify("fried rice", "fridge"))
        assert match.rule_id == "cooked_rice"
        assert match.days == 1

    def test_generic_leftovers(self):
        match = evaluate(classify("leftover pasta", "fridge"))
        assert match.rule_id == "leftovers"
        assert match.days == 2

    def test_cooked_chicken_is_leftover_not_raw_poultry(self):
        match = evaluate(classify("grilled chicken", "fridge"))
        assert match.rule_id == "leftovers"

    def test_ground_meat_before_red_meat(self):
        assert evaluate(classify("ground beef", "fridge")).rule_id == "ground_meat"
        assert evaluate(classify("beef steak", "fridge")).rule_id == "fresh_red_meat"


class TestCategories:
    @pytest.mark.parametrize(
        "name, location, days",
        [
            ("chicken thighs", "fridge", 2),
            ("chicken thighs", "freezer", 270),
            ("minced pork", "fridge", 2),
            ("pork chops", "fridge", 4),
            ("salmon fillet", "fridge", 2),
            ("prawns", "freezer", 180),
            ("free range eggs", "fridge", 21),
            ("fried rice", "freezer", 30),
        ],
    )
    def test_days(self, name, location, days):
        assert _days(name, location) == days

    def test_canned_fish_not_matched(self):
        assert _days("canned tuna", "pantry") is None
        assert _days("canned tuna", "fridge") is None

    def test_egg_noodles_not_eggs(self):
        assert _days("egg noodles", "fridge") is None

    def test_no_match(self):
        assert evaluate(classify("whole milk", "fridge")) is None


class TestLocationHandling:
    def test_unknown_location_skips_rules(self):
        assert evaluate(classify("fried rice", "counter")) is None
        assert evaluate(classify("chicken", "")) is None

    def test_first_match_without_location_value_defers(self):
        # cooked rice has no pantry value; the model decides
        assert evaluate(classify("fried rice", "pantry")) is None


class TestTableShape:
    def test_freezer_exceeds_fridge(self):
        for rule in RULES:
            if rule.fridge_days is not None and rule.freezer_days is not None:
                assert rule.freezer_days > rule.fridge_days, rule.id

    def test_ids_unique(self):
        ids = [r.id for r in RULES]
        assert len(ids) == len(set(ids))

    def test_days_within_bounds(self):
        for rule in RULES:
            for days in (rule.fridge_days, rule.freezer_days, rule.pantry_days):
                assert days is None or 1 <= days <= 365
