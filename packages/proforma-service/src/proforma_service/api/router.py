"""
API Router: all endpoint definitions for the projection service.
"""

import logging

from fastapi import APIRouter, HTTPException, Response

from proforma_engine import AnnualPlan, StressSettings, default_plan
from proforma_service.api.schemas import (
    BreakevenRequest,
    CompareRequest,
    PlanRequest,
    ProjectionRequest,
    RoiRequest,
    RunwayRequest,
    ScenarioBody,
    StressTestRequest,
)
from proforma_service.config import settings
from proforma_service.services.projection import ProjectionService
from proforma_service.stores import SnapshotNotFoundError, StoreFactory
from proforma_service.utils.json import sanitize_for_json

logger = logging.getLogger(__name__)
router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_service() -> ProjectionService:
    return ProjectionService(StoreFactory.get_store(settings.snapshot_store))


def _not_found(e: SnapshotNotFoundError) -> HTTPException:
    name = e.args[0] if e.args else ""
    logger.warning(f"Scenario not found: {name}")
    return HTTPException(status_code=404, detail=f"Scenario '{name}' not found")


@router.get(
    "/models",
    summary="List Models",
    description="Registered model presets with their segments and default assumptions.",
)
def list_models():
    try:
        return sanitize_for_json(get_service().list_models())
    except Exception as e:
        logger.error(f"Internal Error listing models: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/projection/calculate",
    summary="Calculate Projection",
    description="Runs the monthly projection for a model preset. Accepts a saved scenario and assumption overrides.",
    response_description="Per-period results, annual summaries, unit economics and breakeven month.",
)
def calculate_projection(request: ProjectionRequest):
    try:
        service = get_service()
        result = service.calculate(request.model, request.assumptions, request.months, request.scenario)
        return sanitize_for_json(result)
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for {request.model}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error projecting {request.model}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/projection/export/csv",
    summary="Export Projection CSV",
    description="Metric table (rows = metrics, columns = months then years) as a CSV attachment.",
)
def export_projection_csv(request: ProjectionRequest):
    try:
        content = get_service().export_csv(request.model, request.assumptions, request.months, request.scenario)
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for {request.model}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error exporting CSV for {request.model}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{request.model}_projection.csv"'},
    )


@router.post(
    "/projection/export/xlsx",
    summary="Export Projection Workbook",
    description="Seven-sheet pro forma workbook as an XLSX attachment.",
)
def export_projection_xlsx(request: ProjectionRequest):
    try:
        content = get_service().export_xlsx(request.model, request.assumptions, request.months, request.scenario)
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for {request.model}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error exporting workbook for {request.model}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{request.model}_pro_forma.xlsx"'},
    )


@router.post(
    "/projection/compare",
    summary="Compare Scenarios",
    description="Year-1 revenue, costs, EBITDA, margin and breakeven for several scenarios side by side.",
)
def compare_scenarios(request: CompareRequest):
    try:
        scenarios = [s.model_dump() for s in request.scenarios]
        return sanitize_for_json(get_service().compare_scenarios(request.model, scenarios, request.months))
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for {request.model}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error comparing scenarios for {request.model}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/plan/metrics",
    summary="Annual Plan Metrics",
    description="ARR, margins, EBITDA, burn, CAC, LTV, runway and breakeven for a year-level plan.",
)
def plan_metrics(request: PlanRequest):
    try:
        base = default_plan()
        plan = AnnualPlan(
            revenue=request.revenue if request.revenue is not None else base.revenue,
            cogs=request.cogs if request.cogs is not None else base.cogs,
            opex=request.opex if request.opex is not None else base.opex,
            enterprise_enabled=request.enterprise_enabled,
            headcount=base.headcount,
        )
        result = get_service().plan_metrics(plan, request.assumptions, request.extrapolate_growth_pct)
        return sanitize_for_json(result)
    except ValueError as e:
        logger.warning(f"Bad Request for annual plan: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error computing plan metrics: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/runway",
    summary="Capital Runway",
    description="Month-by-month cash walk-forward with compounding revenue and planned capital events.",
)
def runway(request: RunwayRequest):
    try:
        result = get_service().runway(
            request.starting_cash,
            request.monthly_expenses,
            request.monthly_revenue,
            request.revenue_growth_pct,
            months=request.months,
            capital_events=[(e.month, e.amount) for e in request.capital_events],
        )
        return sanitize_for_json(result)
    except ValueError as e:
        logger.warning(f"Bad Request for runway: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error computing runway: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/runway/stress",
    summary="Capital Stress Test",
    description="Annual EBITDA run through a burn scenario with revenue shock, OpEx compression and hiring freeze.",
)
def stress_test(request: StressTestRequest):
    try:
        stress = StressSettings(
            starting_cash=request.starting_cash,
            minimum_cash_target=request.minimum_cash_target,
            scenario=request.scenario,
            burn_rate_change_pct=request.burn_rate_change_pct,
            revenue_shock_pct=request.revenue_shock_pct,
            opex_compression_pct=request.opex_compression_pct,
            hiring_freeze=request.hiring_freeze,
            cash_to_ebitda_conversion_pct=request.cash_to_ebitda_conversion_pct,
        )
        result = get_service().stress_test(
            stress,
            annual_ebitda=request.annual_ebitda,
            capital_events=[(e.month, e.amount) for e in request.capital_events],
        )
        return sanitize_for_json(result)
    except ValueError as e:
        logger.warning(f"Bad Request for stress test: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error running stress test: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/calculators/roi",
    summary="Marketing ROI",
    description="Customers, lifetime revenue, LTV:CAC, ROI and payback for a marketing budget.",
)
def roi_calculator(request: RoiRequest):
    try:
        result = get_service().marketing_roi(request.marketing_spend, request.cac, request.churn_pct, request.arpu)
        return sanitize_for_json(result)
    except Exception as e:
        logger.error(f"Internal Error computing ROI: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/calculators/breakeven",
    summary="Breakeven Estimate",
    description="Month a growing revenue line covers fixed plus variable OpEx, and the run rate at that month.",
)
def breakeven_calculator(request: BreakevenRequest):
    try:
        result = get_service().estimate_breakeven(
            request.initial_revenue,
            request.fixed_opex,
            request.variable_opex_pct,
            request.revenue_growth_pct,
            months=request.months,
        )
        return sanitize_for_json(result)
    except ValueError as e:
        logger.warning(f"Bad Request for breakeven estimate: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error estimating breakeven: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


# ---------------------------------------------------------------------- #
# Scenario snapshots
# ---------------------------------------------------------------------- #


@router.get("/scenarios", summary="List Scenarios")
def list_scenarios():
    try:
        return {"scenarios": get_service().list_scenarios()}
    except Exception as e:
        logger.error(f"Internal Error listing scenarios: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/scenarios/{name}", summary="Get Scenario")
def get_scenario(name: str):
    try:
        return {"name": name, "assumptions": sanitize_for_json(get_service().get_scenario(name))}
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for scenario {name}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error loading scenario {name}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put("/scenarios/{name}", summary="Save Scenario")
def save_scenario(name: str, body: ScenarioBody):
    try:
        return {"name": name, "assumptions": get_service().save_scenario(name, body.assumptions)}
    except ValueError as e:
        logger.warning(f"Bad Request for scenario {name}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error saving scenario {name}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/scenarios/{name}", summary="Delete Scenario")
def delete_scenario(name: str):
    try:
        get_service().delete_scenario(name)
        return {"deleted": name}
    except SnapshotNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        logger.warning(f"Bad Request for scenario {name}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error deleting scenario {name}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
