"""
Model presets and their default assumptions.

``creator_platform``   : interactive 36-month spreadsheet: six independently
                         growing segments, shared churn, rounded head-counts.
``pro_forma_workbook`` : investor workbook: one compounding user base split
                         into segment shares, plus advertiser and add-on streams.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .assumptions import AssumptionSet
from .engine import (
    CHURN_NONE,
    CHURN_SHARED,
    MARGIN_BASIS_TOTAL_COSTS,
    CompoundingStreamLine,
    InputError,
    ModelSpec,
    PerUnitLine,
    RecurrenceConfig,
    SegmentSpec,
    TierSpec,
)

CREATOR_PLATFORM = "creator_platform"
PRO_FORMA_WORKBOOK = "pro_forma_workbook"

_PER_THOUSAND = 1.0 / 1000.0


def _single_price(key: str) -> Tuple[TierSpec, ...]:
    return (TierSpec("standard", (key,)),)


# ---------------------------------------------------------------------- #
# Creator platform
# ---------------------------------------------------------------------- #

CREATOR_PLATFORM_DEFAULTS: Dict[str, float] = {
    # Pricing (monthly)
    "podcaster_basic_price": 19,
    "podcaster_pro_price": 49,
    "podcaster_enterprise_price": 199,
    "event_creator_price": 29,
    "event_org_price": 299,
    "political_campaign_price": 499,
    "my_page_basic_price": 9,
    "my_page_pro_price": 29,
    "industry_creator_price": 149,
    # Starting customers
    "starting_podcasters": 20,
    "starting_event_creators": 5,
    "starting_event_orgs": 1,
    "starting_political": 1,
    "starting_my_page": 30,
    "starting_industry_creators": 3,
    # Monthly growth (%)
    "podcaster_growth_rate": 25,
    "event_creator_growth_rate": 20,
    "event_org_growth_rate": 15,
    "political_growth_rate": 10,
    "my_page_growth_rate": 30,
    "industry_creator_growth_rate": 15,
    # Tier distribution (%)
    "podcaster_basic_percent": 40,
    "podcaster_pro_percent": 45,
    "podcaster_enterprise_percent": 15,
    "my_page_basic_percent": 70,
    "my_page_pro_percent": 30,
    # Churn (%)
    "monthly_churn_rate": 5,
    # Ad revenue
    "avg_cpm": 25,
    "avg_episodes_per_month": 4,
    "avg_listeners_per_episode": 1000,
    "ad_fill_rate": 80,
    "platform_ad_rev_share": 30,
    # Costs (per user per month unless noted)
    "ai_compute_cost": 2.5,
    "storage_cost_per_gb": 0.023,
    "avg_storage_per_user_gb": 50,
    "bandwidth_cost_per_gb": 0.05,
    "avg_bandwidth_per_user_gb": 100,
    "streaming_cost_per_hour": 0.15,
    "avg_streaming_hours_per_user": 5,
    "support_cost_per_user": 1.2,
    "marketing_cac": 45,
    "payment_processing_rate": 2.9,
}

_CREATOR_AD_INVENTORY = ("avg_episodes_per_month", "avg_listeners_per_episode", "avg_cpm")

CREATOR_PLATFORM_MODEL = ModelSpec(
    name=CREATOR_PLATFORM,
    title="Creator Platform 36-Month Forecast",
    segments=(
        SegmentSpec(
            name="podcasters",
            label="Podcasters",
            starting_key="starting_podcasters",
            growth_key="podcaster_growth_rate",
            tiers=(
                TierSpec("basic", ("podcaster_basic_price",), "podcaster_basic_percent"),
                TierSpec("pro", ("podcaster_pro_price",), "podcaster_pro_percent"),
                TierSpec("enterprise", ("podcaster_enterprise_price",), "podcaster_enterprise_percent"),
            ),
        ),
        SegmentSpec(
            name="event_creators",
            label="Event Creators",
            starting_key="starting_event_creators",
            growth_key="event_creator_growth_rate",
            tiers=_single_price("event_creator_price"),
        ),
        SegmentSpec(
            name="event_orgs",
            label="Event Orgs",
            starting_key="starting_event_orgs",
            growth_key="event_org_growth_rate",
            tiers=_single_price("event_org_price"),
        ),
        SegmentSpec(
            name="political",
            label="Political Campaigns",
            starting_key="starting_political",
            growth_key="political_growth_rate",
            tiers=_single_price("political_campaign_price"),
        ),
        SegmentSpec(
            name="my_page",
            label="My Page",
            starting_key="starting_my_page",
            growth_key="my_page_growth_rate",
            tiers=(
                TierSpec("basic", ("my_page_basic_price",), "my_page_basic_percent"),
                TierSpec("pro", ("my_page_pro_price",), "my_page_pro_percent"),
            ),
        ),
        SegmentSpec(
            name="industry_creators",
            label="Industry Creators",
            starting_key="starting_industry_creators",
            growth_key="industry_creator_growth_rate",
            tiers=_single_price("industry_creator_price"),
        ),
    ),
    revenue_lines=(
        PerUnitLine(
            name="ad_revenue_platform",
            label="Ad Revenue (Platform Share)",
            segment="podcasters",
            factors=_CREATOR_AD_INVENTORY,
            rate_factors=("ad_fill_rate", "platform_ad_rev_share"),
            scale=_PER_THOUSAND,
        ),
    ),
    cost_lines=(
        PerUnitLine(name="ai_costs", label="AI Compute", factors=("ai_compute_cost",)),
        PerUnitLine(
            name="storage_costs",
            label="Storage",
            factors=("avg_storage_per_user_gb", "storage_cost_per_gb"),
        ),
        PerUnitLine(
            name="bandwidth_costs",
            label="Bandwidth",
            factors=("avg_bandwidth_per_user_gb", "bandwidth_cost_per_gb"),
        ),
        PerUnitLine(
            name="streaming_costs",
            label="Streaming",
            factors=("avg_streaming_hours_per_user", "streaming_cost_per_hour"),
        ),
        PerUnitLine(name="support_costs", label="Support", factors=("support_cost_per_user",)),
    ),
    trailing_cost_lines=(
        PerUnitLine(
            name="creator_payouts",
            label="Creator Payouts",
            segment="podcasters",
            factors=_CREATOR_AD_INVENTORY,
            rate_factors=("ad_fill_rate",),
            complement_rate_factors=("platform_ad_rev_share",),
            scale=_PER_THOUSAND,
            cost_of_revenue=True,
        ),
    ),
    acquisition_cost_key="marketing_cac",
    processing_rate_key="payment_processing_rate",
    recurrence=RecurrenceConfig(
        churn_mode=CHURN_SHARED,
        shared_churn_key="monthly_churn_rate",
        round_cohorts=True,
        round_tier_counts=True,
    ),
)


# ---------------------------------------------------------------------- #
# Pro forma workbook
# ---------------------------------------------------------------------- #

PRO_FORMA_WORKBOOK_DEFAULTS: Dict[str, float] = {
    # Subscription pricing (monthly)
    "podcaster_basic_price": 29,
    "podcaster_pro_price": 79,
    "podcaster_enterprise_price": 199,
    "event_creator_price": 49,
    "event_org_price": 149,
    "political_campaign_price": 299,
    "my_page_basic_price": 19,
    "my_page_pro_price": 49,
    "industry_creator_price": 99,
    # Customer growth
    "starting_users": 100,
    "monthly_growth_rate": 15,
    # Segment distribution (% of total users)
    "podcaster_share": 35,
    "event_creator_share": 20,
    "event_org_share": 10,
    "political_share": 5,
    "my_page_share": 25,
    "industry_creator_share": 5,
    # Tier mixes (%)
    "podcaster_basic_percent": 40,
    "podcaster_pro_percent": 40,
    "podcaster_enterprise_percent": 20,
    "my_page_basic_percent": 70,
    "my_page_pro_percent": 30,
    # Podcast ad insertion
    "platform_cpm": 15,
    "episodes_per_podcaster": 4,
    "avg_listeners_per_episode": 500,
    "ad_fill_rate": 65,
    "platform_ad_rev_share": 30,
    # Quick Ads advertisers
    "quick_ads_starter_price": 199,
    "quick_ads_growth_price": 499,
    "quick_ads_pro_price": 999,
    "quick_ads_enterprise_low_price": 2500,
    "quick_ads_enterprise_high_price": 25000,
    "quick_ads_starting_advertisers": 50,
    "quick_ads_growth_rate": 20,
    "quick_ads_starter_percent": 50,
    "quick_ads_growth_percent": 30,
    "quick_ads_pro_percent": 15,
    "quick_ads_enterprise_percent": 5,
    # Add-on modules
    "blog_adoption_rate": 15,
    "blog_price": 25,
    "rss_adoption_rate": 20,
    "rss_price": 15,
    "auto_publishing_adoption_rate": 10,
    "auto_publishing_price": 10,
    # Cost structure
    "ai_compute_cost": 2.5,
    "storage_cost_per_gb": 0.02,
    "avg_storage_per_user_gb": 5,
    "bandwidth_cost_per_gb": 0.08,
    "avg_bandwidth_per_user_gb": 10,
    "streaming_cost_per_hour": 0.15,
    "avg_streaming_hours_per_user": 5,
    "support_cost_per_user": 1.5,
    "marketing_cac": 45,
    "payment_processing_rate": 2.9,
    "monthly_churn_rate": 5,
}

PRO_FORMA_WORKBOOK_MODEL = ModelSpec(
    name=PRO_FORMA_WORKBOOK,
    title="3-Year Financial Pro Forma",
    segments=(
        SegmentSpec(
            name="total_users",
            label="Total Users",
            starting_key="starting_users",
            growth_key="monthly_growth_rate",
        ),
        SegmentSpec(
            name="podcasters",
            label="Podcasters",
            share_of="total_users",
            share_key="podcaster_share",
            counts_as_user=False,
            tiers=(
                TierSpec("basic", ("podcaster_basic_price",), "podcaster_basic_percent"),
                TierSpec("pro", ("podcaster_pro_price",), "podcaster_pro_percent"),
                TierSpec("enterprise", ("podcaster_enterprise_price",), "podcaster_enterprise_percent"),
            ),
        ),
        SegmentSpec(
            name="event_creators",
            label="Event Creators",
            share_of="total_users",
            share_key="event_creator_share",
            counts_as_user=False,
            tiers=_single_price("event_creator_price"),
        ),
        SegmentSpec(
            name="event_orgs",
            label="Event Organizations",
            share_of="total_users",
            share_key="event_org_share",
            counts_as_user=False,
            tiers=_single_price("event_org_price"),
        ),
        SegmentSpec(
            name="political",
            label="Political Campaigns",
            share_of="total_users",
            share_key="political_share",
            counts_as_user=False,
            tiers=_single_price("political_campaign_price"),
        ),
        SegmentSpec(
            name="my_page",
            label="My Page Users",
            share_of="total_users",
            share_key="my_page_share",
            counts_as_user=False,
            tiers=(
                TierSpec("basic", ("my_page_basic_price",), "my_page_basic_percent"),
                TierSpec("pro", ("my_page_pro_price",), "my_page_pro_percent"),
            ),
        ),
        SegmentSpec(
            name="industry_creators",
            label="Industry Creators",
            share_of="total_users",
            share_key="industry_creator_share",
            counts_as_user=False,
            tiers=_single_price("industry_creator_price"),
        ),
    ),
    revenue_lines=(
        PerUnitLine(
            name="podcast_ad_insertion",
            label="Podcast Ad Insertion Revenue",
            segment="podcasters",
            factors=("episodes_per_podcaster", "avg_listeners_per_episode", "platform_cpm"),
            rate_factors=("ad_fill_rate", "platform_ad_rev_share"),
            scale=_PER_THOUSAND,
        ),
        CompoundingStreamLine(
            name="quick_ads",
            label="Quick Ads Advertiser Revenue",
            starting_key="quick_ads_starting_advertisers",
            growth_key="quick_ads_growth_rate",
            tiers=(
                TierSpec("starter", ("quick_ads_starter_price",), "quick_ads_starter_percent"),
                TierSpec("growth", ("quick_ads_growth_price",), "quick_ads_growth_percent"),
                TierSpec("pro", ("quick_ads_pro_price",), "quick_ads_pro_percent"),
                TierSpec(
                    "enterprise",
                    ("quick_ads_enterprise_low_price", "quick_ads_enterprise_high_price"),
                    "quick_ads_enterprise_percent",
                ),
            ),
        ),
        PerUnitLine(
            name="blog_module",
            label="Blog Module Revenue",
            factors=("blog_price",),
            rate_factors=("blog_adoption_rate",),
        ),
        PerUnitLine(
            name="rss_auto_posting",
            label="RSS Auto-Posting Revenue",
            segment="podcasters",
            factors=("rss_price",),
            rate_factors=("rss_adoption_rate",),
        ),
        PerUnitLine(
            name="auto_publishing",
            label="Auto-Publishing Tools",
            factors=("auto_publishing_price",),
            rate_factors=("auto_publishing_adoption_rate",),
        ),
    ),
    cost_lines=(
        PerUnitLine(name="ai_costs", label="AI Compute Costs", factors=("ai_compute_cost",)),
        PerUnitLine(
            name="storage_costs",
            label="Storage Costs",
            factors=("avg_storage_per_user_gb", "storage_cost_per_gb"),
        ),
        PerUnitLine(
            name="bandwidth_costs",
            label="Bandwidth Costs",
            factors=("avg_bandwidth_per_user_gb", "bandwidth_cost_per_gb"),
        ),
        PerUnitLine(
            name="streaming_costs",
            label="Streaming Costs",
            factors=("avg_streaming_hours_per_user", "streaming_cost_per_hour"),
        ),
        PerUnitLine(name="support_costs", label="Support Costs", factors=("support_cost_per_user",)),
    ),
    trailing_cost_lines=(
        PerUnitLine(
            name="churn_impact",
            label="Churn Impact",
            rate_factors=("monthly_churn_rate",),
            averaged_factors=("podcaster_basic_price", "my_page_basic_price"),
        ),
    ),
    acquisition_cost_key="marketing_cac",
    acquisition_label="CAC (New Users)",
    processing_rate_key="payment_processing_rate",
    recurrence=RecurrenceConfig(
        churn_mode=CHURN_NONE,
        shared_churn_key="monthly_churn_rate",
        round_cohorts=False,
        round_tier_counts=False,
        grow_first_period=False,
    ),
    gross_margin_basis=MARGIN_BASIS_TOTAL_COSTS,
)


MODELS: Dict[str, ModelSpec] = {
    CREATOR_PLATFORM: CREATOR_PLATFORM_MODEL,
    PRO_FORMA_WORKBOOK: PRO_FORMA_WORKBOOK_MODEL,
}

DEFAULTS: Dict[str, Dict[str, float]] = {
    CREATOR_PLATFORM: CREATOR_PLATFORM_DEFAULTS,
    PRO_FORMA_WORKBOOK: PRO_FORMA_WORKBOOK_DEFAULTS,
}


def get_model(name: str) -> ModelSpec:
    try:
        return MODELS[name]
    except KeyError:
        raise InputError(f"Unknown model: {name!r}. Available: {sorted(MODELS)}") from None


def default_assumptions(name: str) -> AssumptionSet:
    get_model(name)
    return AssumptionSet(DEFAULTS[name])
