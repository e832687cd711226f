"""
Tests for the ProjectionService orchestration layer.
"""

from unittest.mock import MagicMock, patch

import pytest

from proforma_engine import AnnualPlan, InputError, StressSettings, project
from proforma_service.services.projection import ProjectionService, clear_projection_cache
from proforma_service.stores import BaseSnapshotStore, SnapshotNotFoundError


@pytest.fixture
def store():
    return MagicMock(spec=BaseSnapshotStore)


def test_service_initialization(store):
    service = ProjectionService(store)
    assert service.store == store


def test_calculate_flow(store):
    service = ProjectionService(store)
    result = service.calculate("creator_platform", {"starting_podcasters": 0}, months=12)

    assert result["months"] == 12
    assert result["assumptions"]["starting_podcasters"] == 0
    assert len(result["periods"]) == 12
    assert len(result["annual_summaries"]) == 1
    store.load.assert_not_called()


def test_scenario_is_loaded_and_overrides_win(store):
    store.load.return_value = {"starting_podcasters": 40, "podcaster_growth_rate": 50}
    service = ProjectionService(store)

    result = service.run("creator_platform", {"podcaster_growth_rate": 25}, months=1, scenario="base")

    store.load.assert_called_once_with("base")
    assert result.assumptions["starting_podcasters"] == 40
    assert result.assumptions["podcaster_growth_rate"] == 25
    assert result.periods[0].cohorts["podcasters"] == 48


def test_missing_scenario_propagates(store):
    store.load.side_effect = SnapshotNotFoundError("ghost")
    with pytest.raises(SnapshotNotFoundError):
        ProjectionService(store).run("creator_platform", scenario="ghost")


def test_negative_months_rejected(store):
    with pytest.raises(InputError):
        ProjectionService(store).run("creator_platform", months=-1)


def test_default_months(store):
    assert len(ProjectionService(store).run("pro_forma_workbook").periods) == 36


def test_projection_is_cached(store):
    clear_projection_cache()
    service = ProjectionService(store)

    with patch("proforma_service.services.projection.project", wraps=project) as spy:
        first = service.run("creator_platform", {"avg_cpm": 31}, months=24)
        second = service.run("creator_platform", {"avg_cpm": "31"}, months=24)
        service.run("creator_platform", {"avg_cpm": 32}, months=24)

    assert spy.call_count == 2
    assert first.periods is second.periods


def test_compare_scenarios(store):
    rows = ProjectionService(store).compare_scenarios(
        "creator_platform",
        [{"name": "base"}, {"assumptions": {"monthly_churn_rate": 20}}],
        months=12,
    )

    assert rows[0]["name"] == "base"
    assert rows[1]["name"] == "scenario_2"
    assert rows[1]["ending_users"] < rows[0]["ending_users"]


def test_exports(store):
    service = ProjectionService(store)
    text = service.export_csv("creator_platform", months=12)
    data = service.export_xlsx("creator_platform", months=12)

    assert text.startswith("Metric,Month 1")
    assert data[:2] == b"PK"


def test_plan_metrics_defaults_and_extrapolation(store):
    service = ProjectionService(store)

    default = service.plan_metrics()
    assert default["metrics"].break_even_month == 14

    grown = service.plan_metrics(extrapolate_growth_pct=8)
    assert isinstance(grown["plan"], AnnualPlan)
    assert grown["plan"].revenue["saas_subscriptions"][1] == pytest.approx(480000 * 1.96)


def test_runway_uses_default_horizon(store):
    result = ProjectionService(store).runway(1000, 100, 0, 0)
    assert len(result.months) == 36
    assert result.runway_months == 11


def test_unit_economics_include_advertiser_tiers(store):
    result = ProjectionService(store).run("pro_forma_workbook", months=12)
    segments = [ue.segment for ue in result.unit_economics]

    assert segments[0] == "podcasters"
    assert segments[-4:] == ["quick_ads_starter", "quick_ads_growth", "quick_ads_pro", "quick_ads_enterprise"]


def test_stress_test_defaults_to_plan_ebitda(store):
    result = ProjectionService(store).stress_test(StressSettings(starting_cash=500000))

    # default plan: -96k EBITDA in year 1, profitable afterwards
    assert result.monthly_burn[0] == pytest.approx(8000)
    assert result.monthly_burn[12] == 0.0
    assert result.cash_balance[11] == pytest.approx(404000)
    assert result.runway_months == 36
    assert result.next_raise_month is None
    assert result.survives_year == [True, True, True]


def test_stress_test_with_explicit_ebitda(store):
    result = ProjectionService(store).stress_test(
        StressSettings(starting_cash=100000), annual_ebitda=[-120000], capital_events=[(5, 50000)]
    )
    assert len(result.cash_balance) == 12
    assert result.runway_months == 12


def test_calculators(store):
    service = ProjectionService(store)

    assert service.marketing_roi(10000, 100, 5, 20).roi_pct == pytest.approx(300)
    estimate = service.estimate_breakeven(120000, 240000, 0, 0)
    assert estimate.break_even_month is None
    assert estimate.months == 36


def test_scenario_crud_delegates_to_store(store):
    store.list_names.return_value = ["a", "b"]
    store.load.return_value = {"x": 1.0}
    service = ProjectionService(store)

    assert service.list_scenarios() == ["a", "b"]
    assert service.get_scenario("a") == {"x": 1.0}
    assert service.save_scenario("c", {"x": "2", "y": None}) == {"x": 2.0, "y": 0.0}
    store.save.assert_called_once_with("c", {"x": 2.0, "y": 0.0})
    service.delete_scenario("a")
    store.delete.assert_called_once_with("a")


def test_list_models(store):
    models = ProjectionService(store).list_models()
    assert "podcasters" in models["creator_platform"]["segments"]
    assert models["pro_forma_workbook"]["defaults"]["starting_users"] == 100
