import argparse

from proforma_engine import DEFAULT_HORIZON_MONTHS
from proforma_engine.presets import MODELS
from proforma_service.services.projection import ProjectionService
from proforma_service.stores import JsonFileSnapshotStore
from proforma_service.config import settings


def _parse_overrides(pairs):
    overrides = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"--set expects key=value, got {pair!r}")
        overrides[key.strip()] = value.strip()
    return overrides


def main():
    parser = argparse.ArgumentParser(description="Run a pro forma projection for one of the model presets.")
    parser.add_argument("--model", "-m", choices=sorted(MODELS), default="creator_platform", help="Model preset")
    parser.add_argument("--months", "-n", type=int, default=DEFAULT_HORIZON_MONTHS, help="Projection horizon in months")
    parser.add_argument("--scenario", "-s", type=str, default=None, help="Saved scenario snapshot to start from")
    parser.add_argument("--set", dest="overrides", action="append", metavar="KEY=VALUE", help="Override an assumption")
    parser.add_argument("--csv", type=str, default=None, help="Write the metric table CSV to this path")
    parser.add_argument("--xlsx", type=str, default=None, help="Write the pro forma workbook to this path")
    args = parser.parse_args()

    service = ProjectionService(JsonFileSnapshotStore(settings.snapshot_dir))
    overrides = _parse_overrides(args.overrides)

    print(f"Running {args.model} projection for {args.months} months...")
    try:
        result = service.run(args.model, overrides, args.months, args.scenario)
    except (ValueError, KeyError) as e:
        print(f"Error running projection: {e}")
        return

    print("\nAnnual Summary:")
    for s in result.summaries:
        print(
            f"Year {s.year} ({s.period_count} months): revenue {s.total_revenue:,.2f}  "
            f"costs {s.total_costs:,.2f}  EBITDA {s.net_profit:,.2f}  "
            f"net margin {s.net_margin_pct:.1f}%  ending users {s.ending_users:,.0f}"
        )
    breakeven = result.breakeven_month
    print(f"Breakeven month: {breakeven if breakeven is not None else 'not reached'}")

    if args.csv:
        with open(args.csv, "w", encoding="utf-8", newline="") as fh:
            fh.write(service.export_csv(args.model, overrides, args.months, args.scenario))
        print(f"Wrote {args.csv}")
    if args.xlsx:
        with open(args.xlsx, "wb") as fh:
            fh.write(service.export_xlsx(args.model, overrides, args.months, args.scenario))
        print(f"Wrote {args.xlsx}")


if __name__ == "__main__":
    main()
