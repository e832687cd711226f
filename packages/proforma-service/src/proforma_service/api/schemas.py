from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectionRequest(BaseModel):
    """Request body for the projection and export endpoints."""

    model: str = Field("creator_platform", description="Registered model preset (see GET /models)")
    months: Optional[int] = Field(None, ge=0, le=600, description="Projection horizon in months")
    scenario: Optional[str] = Field(None, description="Saved scenario snapshot to start from")
    assumptions: Optional[Dict[str, Any]] = Field(
        None, description="Assumption overrides; percentages as typed (25 means 25%)"
    )

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "model": "creator_platform",
                "months": 36,
                "assumptions": {
                    "starting_podcasters": 20,
                    "podcaster_growth_rate": 25,
                    "monthly_churn_rate": 5,
                    "podcaster_basic_price": 19,
                },
            }
        },
    )


class CompareScenario(BaseModel):
    name: Optional[str] = Field(None, description="Label for this scenario in the response")
    scenario: Optional[str] = Field(None, description="Saved scenario snapshot to start from")
    assumptions: Optional[Dict[str, Any]] = Field(None, description="Assumption overrides")


class CompareRequest(BaseModel):
    model: str = Field("creator_platform", description="Registered model preset")
    months: Optional[int] = Field(None, ge=0, le=600, description="Projection horizon in months")
    scenarios: List[CompareScenario] = Field(..., min_length=1, description="Scenarios to compare")

    model_config = ConfigDict(protected_namespaces=())


class PlanRequest(BaseModel):
    """Year-level plan; omitted line groups fall back to the default plan."""

    revenue: Optional[Dict[str, List[float]]] = Field(None, description="Revenue lines, one value per year")
    cogs: Optional[Dict[str, List[float]]] = Field(None, description="Cost of goods sold lines, one value per year")
    opex: Optional[Dict[str, List[float]]] = Field(None, description="Operating expense lines, one value per year")
    enterprise_enabled: bool = Field(True, description="Include enterprise licensing revenue")
    assumptions: Optional[Dict[str, Any]] = Field(
        None, description="Metric assumptions (cac_paid, cac_organic, churn_rate, cash_on_hand, ...)"
    )
    extrapolate_growth_pct: Optional[float] = Field(
        None, description="Rebuild later-year revenue from year 1 at this monthly growth rate"
    )


class CapitalEventItem(BaseModel):
    month: int = Field(..., ge=1, description="1-indexed month the capital lands in")
    amount: float = Field(..., description="Cash injected")


class RunwayRequest(BaseModel):
    starting_cash: float = Field(..., description="Cash on hand at the start of month 1")
    monthly_expenses: float = Field(..., description="Constant monthly expenses")
    monthly_revenue: float = Field(0.0, description="Revenue in month 1")
    revenue_growth_pct: float = Field(0.0, description="Monthly revenue growth, percent")
    months: Optional[int] = Field(None, ge=0, le=600, description="Projection horizon in months")
    capital_events: List[CapitalEventItem] = Field(default_factory=list, description="Planned capital raises")


class StressTestRequest(BaseModel):
    """Capital stress test; omit ``annual_ebitda`` to stress the default annual plan."""

    starting_cash: float = Field(500000, description="Cash on hand at the start of month 1")
    annual_ebitda: Optional[List[float]] = Field(None, description="EBITDA per year")
    minimum_cash_target: float = Field(0.0, description="Runway ends once cash falls to this balance")
    scenario: Literal["base", "best", "worst"] = Field("base", description="Burn scenario (x1.0, x0.8, x1.3)")
    burn_rate_change_pct: float = Field(0.0, description="Across-the-board burn change, percent")
    revenue_shock_pct: float = Field(0.0, description="Revenue lost to a shock, percent (raises burn)")
    opex_compression_pct: float = Field(0.0, description="OpEx cut, percent (lowers burn)")
    hiring_freeze: bool = Field(False, description="Freeze hiring (burn x0.7)")
    cash_to_ebitda_conversion_pct: float = Field(
        0.0, description="Share of positive monthly EBITDA converted to cash, percent"
    )
    capital_events: List[CapitalEventItem] = Field(default_factory=list, description="Planned capital raises")


class RoiRequest(BaseModel):
    marketing_spend: float = Field(..., description="Marketing budget")
    cac: float = Field(..., description="Customer acquisition cost")
    churn_pct: float = Field(5.0, description="Monthly churn, percent")
    arpu: float = Field(..., description="Monthly revenue per customer")


class BreakevenRequest(BaseModel):
    initial_revenue: float = Field(..., description="Annual revenue at the start")
    fixed_opex: float = Field(..., description="Fixed operating expenses per year")
    variable_opex_pct: float = Field(0.0, description="Variable cost, percent of revenue")
    revenue_growth_pct: float = Field(0.0, description="Annual revenue growth, percent")
    months: Optional[int] = Field(None, ge=0, le=600, description="Months to search")


class ScenarioBody(BaseModel):
    assumptions: Dict[str, Any] = Field(..., description="Assumption values to store under this name")
