import unittest

import pytest

from proforma_engine import (
    AnnualPlan,
    AssumptionSet,
    InputError,
    compute_plan_metrics,
    default_plan,
    extrapolate_revenue,
    summarize_plan,
)


class TestAnnualPlan(unittest.TestCase):
    def setUp(self):
        self.plan = default_plan()

    def test_summaries(self):
        summaries = summarize_plan(self.plan)
        self.assertEqual(len(summaries), 3)

        year1 = summaries[0]
        self.assertEqual(year1.total_revenue, 780000)
        self.assertEqual(year1.cost_of_revenue, 108000)
        self.assertEqual(year1.total_costs, 876000)
        self.assertEqual(year1.net_profit, -96000)
        self.assertAlmostEqual(year1.gross_margin_pct, 672000 / 780000 * 100)
        self.assertEqual(summaries[1].net_profit, 978000)

    def test_enterprise_toggle(self):
        plan = AnnualPlan(
            revenue=self.plan.revenue,
            cogs=self.plan.cogs,
            opex=self.plan.opex,
            enterprise_enabled=False,
        )
        summaries = summarize_plan(plan)
        self.assertEqual(summaries[1].total_revenue, 2340000)
        self.assertNotIn("enterprise_licensing", summaries[1].revenue_by_line)

    def test_key_metrics(self):
        metrics = compute_plan_metrics(self.plan)

        self.assertEqual(metrics.arr[0], 780000)
        self.assertAlmostEqual(metrics.burn_rate[0], 8000)
        self.assertEqual(metrics.burn_rate[1], 0.0)
        self.assertAlmostEqual(metrics.cac, 57)
        self.assertAlmostEqual(metrics.ltv, 900)
        # 500k / 8k = 62.5 months, capped at the 36-month horizon
        self.assertEqual(metrics.runway_months, 36)
        self.assertEqual(metrics.break_even_month, 14)

    def test_metric_overrides(self):
        metrics = compute_plan_metrics(self.plan, AssumptionSet({"cash_on_hand": 80000, "churn_rate": 0}))
        self.assertAlmostEqual(metrics.runway_months, 10)
        self.assertAlmostEqual(metrics.ltv, 45 * 24)

    def test_mismatched_years(self):
        plan = AnnualPlan(revenue={"a": [1, 2]}, cogs={"b": [1, 2, 3]}, opex={})
        with self.assertRaises(InputError):
            summarize_plan(plan)


def test_extrapolate_revenue():
    plan = extrapolate_revenue(default_plan(), monthly_growth_pct=8)
    m = 1 + 0.08 * 12

    assert plan.revenue["saas_subscriptions"][0] == 480000
    assert plan.revenue["saas_subscriptions"][1] == pytest.approx(480000 * m)
    assert plan.revenue["saas_subscriptions"][2] == pytest.approx(480000 * m**2)
    assert plan.revenue["ai_production_tools"][1] == pytest.approx(120000 * m * 1.2)
    assert plan.revenue["advertising_marketplace"][2] == pytest.approx(round(180000 * m**2 * 1.2))
    assert plan.revenue["enterprise_licensing"] == [0, 150000, 500000]
    assert plan.cogs == default_plan().cogs


def test_empty_plan():
    assert summarize_plan(AnnualPlan(revenue={}, cogs={}, opex={})) == []
