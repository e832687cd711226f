import pytest

from proforma_engine import estimate_breakeven, marketing_roi


def test_marketing_roi():
    result = marketing_roi(10000, cac=100, churn_pct=5, arpu=20)

    assert result.new_customers == pytest.approx(100)
    assert result.ltv == pytest.approx(400)
    assert result.revenue_from_new == pytest.approx(40000)
    assert result.ltv_to_cac == pytest.approx(4)
    assert result.roi_pct == pytest.approx(300)
    assert result.payback_months == pytest.approx(5)


def test_marketing_roi_guards():
    result = marketing_roi(0, cac=0, churn_pct=0, arpu=0)

    assert result.new_customers == 0.0
    assert result.ltv_to_cac == 0.0
    assert result.roi_pct == 0.0
    assert result.payback_months == 0.0


def test_marketing_roi_zero_churn_lifetime():
    assert marketing_roi(1000, cac=50, churn_pct=0, arpu=10).ltv == pytest.approx(240)


def test_breakeven_estimate_with_growth():
    # revenue 11000, 12100, 13310 against 12000/month fixed: -1000, -900, +410
    result = estimate_breakeven(120000, fixed_opex=144000, variable_opex_pct=0, revenue_growth_pct=120)

    assert result.break_even_month == 3
    assert result.run_rate == pytest.approx(13310 * 12)
    assert result.months == 36


def test_breakeven_estimate_variable_costs():
    # 10000 revenue against 5000 fixed plus 50% variable nets exactly zero
    result = estimate_breakeven(120000, fixed_opex=60000, variable_opex_pct=50, revenue_growth_pct=0)
    assert result.break_even_month == 1


def test_breakeven_estimate_never_reached():
    result = estimate_breakeven(120000, fixed_opex=240000, variable_opex_pct=0, revenue_growth_pct=0, months=24)

    assert result.break_even_month is None
    assert result.run_rate == pytest.approx(120000)
    assert result.months == 24
