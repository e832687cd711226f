"""
Tests for annual rollups, breakeven detection, key metrics and unit economics.
"""

from types import SimpleNamespace

import pytest

from proforma_engine import (
    InputError,
    blended_cac,
    breakeven_from_periods,
    compute_key_metrics,
    compute_stream_unit_economics,
    compute_unit_economics,
    default_assumptions,
    find_breakeven_month,
    get_model,
    lifetime_value,
    project,
    summarize,
)


@pytest.fixture(scope="module")
def creator_periods():
    return project(get_model("creator_platform"), default_assumptions("creator_platform"), 36)


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------


def test_annual_sums_reconcile(creator_periods):
    summaries = summarize(creator_periods)
    assert len(summaries) == 3

    for i, summary in enumerate(summaries):
        window = creator_periods[i * 12 : (i + 1) * 12]
        assert summary.period_count == 12
        assert summary.total_revenue == pytest.approx(sum(p.total_revenue for p in window))
        assert summary.total_costs == pytest.approx(sum(p.total_costs for p in window))
        assert summary.new_users == pytest.approx(sum(p.new_users for p in window))
        assert summary.ending_users == window[-1].total_users
        assert summary.average_users == pytest.approx(sum(p.total_users for p in window) / 12)
        for line, value in summary.revenue_by_line.items():
            assert value == pytest.approx(sum(p.revenue[line] for p in window))


def test_margins_recomputed_from_sums(creator_periods):
    for s in summarize(creator_periods):
        assert s.net_margin_pct == pytest.approx((s.total_revenue - s.total_costs) / s.total_revenue * 100)
        assert s.gross_margin_pct == pytest.approx((s.total_revenue - s.cost_of_revenue) / s.total_revenue * 100)
        assert s.arpu_monthly == pytest.approx(s.arpu_annual / s.period_count)


def test_zero_revenue_margin_is_zero():
    periods = project(get_model("creator_platform"), default_assumptions("creator_platform").with_overrides(
        {k: 0 for k in default_assumptions("creator_platform") if k.startswith("starting_")}
    ), 12)
    summary = summarize(periods)[0]
    assert summary.total_revenue == 0
    assert summary.net_margin_pct == 0
    assert summary.gross_margin_pct == 0


def test_partial_trailing_window(creator_periods):
    summaries = summarize(creator_periods[:30])
    assert [s.period_count for s in summaries] == [12, 12, 6]
    assert summaries[2].year == 3
    assert summaries[2].total_revenue == pytest.approx(sum(p.total_revenue for p in creator_periods[24:30]))


def test_year_over_year_growth(creator_periods):
    summaries = summarize(creator_periods)
    assert summaries[0].yoy_growth_pct is None
    expected = (summaries[1].ending_users - summaries[0].ending_users) / summaries[0].ending_users * 100
    assert summaries[1].yoy_growth_pct == pytest.approx(expected)


def test_summarize_empty_and_invalid():
    assert summarize([]) == []
    with pytest.raises(InputError):
        summarize([], periods_per_year=0)


# ---------------------------------------------------------------------------
# Breakeven
# ---------------------------------------------------------------------------


def test_breakeven_crossing_month():
    # -100/month for a year, then +200/month: cumulative reaches exactly 0 at month 18
    assert find_breakeven_month([-1200, 2400]) == 18


def test_breakeven_never_reached():
    assert find_breakeven_month([-1200, -600, -10]) is None


def test_breakeven_zero_counts():
    assert find_breakeven_month([0]) == 1


def test_breakeven_horizon_limits_walk():
    assert find_breakeven_month([-1200, 2400], horizon=15) is None


def test_breakeven_partial_trailing_window():
    # a 6-month window spreads its EBITDA over 6 months, not 12
    assert find_breakeven_month([-1200, 1800], period_counts=[12, 6]) == 16
    assert find_breakeven_month([-1200, 600], period_counts=[12, 6]) is None


def test_breakeven_from_periods():
    periods = [SimpleNamespace(index=i + 1, net_profit=v) for i, v in enumerate([-50, -30, 40, 50, 10])]
    assert breakeven_from_periods(periods) == 4
    assert breakeven_from_periods(periods[:3]) is None
    assert breakeven_from_periods([]) is None


# ---------------------------------------------------------------------------
# Key metrics
# ---------------------------------------------------------------------------


def test_blended_cac_and_ltv():
    assert blended_cac(85, 15) == pytest.approx(57)
    assert lifetime_value(45, 5) == pytest.approx(900)
    assert lifetime_value(45, 0) == pytest.approx(45 * 24)


def test_key_metrics(creator_periods):
    summaries = summarize(creator_periods)
    metrics = compute_key_metrics(
        summaries,
        cac_paid=85,
        cac_organic=15,
        avg_revenue_per_user=45,
        churn_pct=5,
        cash_on_hand=500000,
    )

    assert metrics.arr == [s.total_revenue for s in summaries]
    assert metrics.ebitda == [s.net_profit for s in summaries]
    assert metrics.ltv_to_cac == pytest.approx(900 / 57)
    assert metrics.runway_months <= 36
    for ebitda, burn in zip(metrics.ebitda, metrics.burn_rate):
        assert burn == (pytest.approx(-ebitda / 12) if ebitda < 0 else 0.0)



def _constant_loss_summaries(months, monthly_loss):
    periods = [SimpleNamespace(index=i + 1, net_profit=-monthly_loss) for i in range(months)]
    summaries = []
    for start in range(0, months, 12):
        window = periods[start : start + 12]
        summaries.append(
            SimpleNamespace(
                period_count=len(window),
                net_profit=sum(p.net_profit for p in window),
                total_revenue=0.0,
                gross_margin_pct=0.0,
            )
        )
    return summaries


def test_key_metrics_partial_trailing_window():
    summaries = _constant_loss_summaries(18, 100)
    metrics = compute_key_metrics(
        summaries,
        cac_paid=85,
        cac_organic=15,
        avg_revenue_per_user=45,
        churn_pct=5,
        cash_on_hand=1_000_000,
    )

    assert metrics.burn_rate == pytest.approx([100.0, 100.0])
    assert metrics.runway_months == 18
    assert metrics.break_even_month is None


def test_key_metrics_runway_from_partial_projection():
    model = get_model("creator_platform")
    periods = project(model, default_assumptions("creator_platform"), 18)
    summaries = summarize(periods)
    metrics = compute_key_metrics(
        summaries,
        cac_paid=85,
        cac_organic=15,
        avg_revenue_per_user=45,
        churn_pct=5,
        cash_on_hand=1e12,
    )

    assert metrics.runway_months <= 18
    if metrics.break_even_month is not None:
        assert metrics.break_even_month <= 18

# ---------------------------------------------------------------------------
# Unit economics
# ---------------------------------------------------------------------------


def test_unit_economics_creator_platform(creator_periods):
    assumptions = default_assumptions("creator_platform")
    rows = {ue.segment: ue for ue in compute_unit_economics(get_model("creator_platform"), assumptions, creator_periods)}

    assert set(rows) == {"podcasters", "event_creators", "event_orgs", "political", "my_page", "industry_creators"}

    podcasters = rows["podcasters"]
    arpu = 0.40 * 19 + 0.45 * 49 + 0.15 * 199
    assert podcasters.monthly_arpu == pytest.approx(arpu)
    assert podcasters.cac == 45
    assert podcasters.ltv == pytest.approx(arpu / 0.05)
    assert podcasters.payback_months == pytest.approx(45 / arpu)
    assert podcasters.average_users == pytest.approx(sum(p.cohorts["podcasters"] for p in creator_periods) / 36)


def test_unit_economics_guards():
    assumptions = default_assumptions("creator_platform").with_overrides(
        {"event_creator_price": 0, "monthly_churn_rate": 0}
    )
    model = get_model("creator_platform")
    rows = {ue.segment: ue for ue in compute_unit_economics(model, assumptions, project(model, assumptions, 12))}

    assert rows["event_creators"].payback_months == 0.0
    assert rows["event_creators"].ltv == 0.0
    assert rows["event_orgs"].ltv == pytest.approx(299 * 24)


def test_unit_economics_without_periods():
    rows = compute_unit_economics(get_model("pro_forma_workbook"), default_assumptions("pro_forma_workbook"), [])
    assert all(ue.average_users == 0.0 for ue in rows)


def test_stream_unit_economics_advertiser_tiers():
    model = get_model("pro_forma_workbook")
    assumptions = default_assumptions("pro_forma_workbook")
    periods = project(model, assumptions, 12)
    rows = {ue.segment: ue for ue in compute_stream_unit_economics(model, assumptions, periods)}

    assert set(rows) == {"quick_ads_starter", "quick_ads_growth", "quick_ads_pro", "quick_ads_enterprise"}

    average_advertisers = 50 * (1.2**12 - 1) / 0.2 / 12
    starter = rows["quick_ads_starter"]
    assert starter.label == "Quick Ads Advertiser Starter"
    assert starter.average_users == pytest.approx(average_advertisers * 0.5)
    assert starter.monthly_arpu == 199
    assert starter.cac == 90
    assert starter.ltv == pytest.approx(199 * 12 / 0.15)
    assert starter.payback_months == pytest.approx(90 / 199)

    enterprise = rows["quick_ads_enterprise"]
    assert enterprise.monthly_arpu == pytest.approx(13750)
    assert enterprise.cac == 135
    assert enterprise.ltv == pytest.approx(13750 * 12 / 0.10)


def test_stream_unit_economics_without_streams(creator_periods):
    model = get_model("creator_platform")
    assert compute_stream_unit_economics(model, default_assumptions("creator_platform"), creator_periods) == []


def test_stream_unit_economics_without_periods():
    rows = compute_stream_unit_economics(get_model("pro_forma_workbook"), default_assumptions("pro_forma_workbook"), [])
    assert len(rows) == 4
    assert all(ue.average_users == 0.0 for ue in rows)
