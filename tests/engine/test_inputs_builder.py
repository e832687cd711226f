"""
Tests for the inputs_builder module.

Covers: preset defaults, snapshot and override precedence, permissive
coercion and unknown models.
"""

import pytest

from proforma_engine import AssumptionSet, InputError, build_assumption_set, default_assumptions


def test_defaults_only():
    a = build_assumption_set("creator_platform")
    assert isinstance(a, AssumptionSet)
    assert a == default_assumptions("creator_platform")
    assert a["starting_podcasters"] == 20


def test_snapshot_overrides_defaults():
    a = build_assumption_set("creator_platform", snapshot={"starting_podcasters": 50})
    assert a["starting_podcasters"] == 50
    assert a["podcaster_growth_rate"] == 25


def test_override_beats_snapshot():
    a = build_assumption_set(
        "creator_platform",
        snapshot={"starting_podcasters": 50, "monthly_churn_rate": 3},
        overrides={"starting_podcasters": 75},
    )
    assert a["starting_podcasters"] == 75
    assert a["monthly_churn_rate"] == 3


def test_unknown_keys_are_kept():
    a = build_assumption_set("pro_forma_workbook", overrides={"custom_metric": 12})
    assert a["custom_metric"] == 12


def test_bad_values_are_coerced():
    a = build_assumption_set("creator_platform", overrides={"marketing_cac": "abc", "avg_cpm": "30"})
    assert a["marketing_cac"] == 0.0
    assert a["avg_cpm"] == 30.0


def test_unknown_model():
    with pytest.raises(InputError):
        build_assumption_set("no_such_model")
