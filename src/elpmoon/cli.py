from __future__ import annotations

import argparse
import importlib
import inspect
import logging
import math
import sys
from datetime import date

from .core.errors import ElpError
from .core.time import JD_J2000, TimeContext


def _parse_ymd(s: str) -> date:
    y, m, d = map(int, s.split("-"))
    return date(y, m, d)


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _add_time_args(p: argparse.ArgumentParser) -> None:
    g = p.add_mutually_exclusive_group()
    g.add_argument("--jd", type=float, default=None, help=f"Julian ephemeris date, TT (default: J2000.0 = {JD_J2000})")
    g.add_argument("--date", default=None, help="YYYY-MM-DD, 0h TT")


def _time_from_args(args: argparse.Namespace) -> TimeContext:
    if args.date is not None:
        return TimeContext.from_date(_parse_ymd(args.date))
    return TimeContext(args.jd if args.jd is not None else JD_J2000)


def cmd_position(argv: list[str]) -> int:
    from elpmoon import config
    from elpmoon.moon import MoonPosition

    p = argparse.ArgumentParser(prog="elpmoon position", description="Geocentric ecliptic position of the Moon (equinox of date).")
    _add_time_args(p)
    p.add_argument(
        "--accuracy",
        choices=sorted(config.ACCURACY_LEVELS) + [config.COMPLETE],
        default=config.COMPLETE,
        help="Truncation preset (default: complete)",
    )
    args = p.parse_args(argv)

    ctx = _time_from_args(args)
    moon = MoonPosition(ctx, accuracy=args.accuracy)

    print(f"Time Input:")
    print(f"  JDE = {ctx.jd:.6f}")
    print(f"  T   = {ctx.T:.12f}")
    print()
    print(f"Lunar Position ({moon.accuracy}):")
    print(f"  Longitude (l) = {math.degrees(moon.l):.6f} deg")
    print(f"  Latitude  (b) = {math.degrees(moon.b):.6f} deg")
    print(f"  Distance  (r) = {moon.r:.3f} km")
    print()
    print("Estimated truncation error:")
    for item, unit in (("l", "arcsec"), ("b", "arcsec"), ("r", "km")):
        print(f"  {item}: {moon.get_max_error(item):.4f} {unit}   plan={moon.get_truncation(item) or 'all'}")
    return 0


def cmd_truncate(argv: list[str]) -> int:
    from elpmoon.data.models import load_model
    from elpmoon.series.evaluate import estimate_max_error
    from elpmoon.series.truncation import (
        make_mean_truncation_nums,
        make_safe_truncation_nums,
        make_truncation_nums,
    )

    p = argparse.ArgumentParser(prog="elpmoon truncate", description="Truncation plan for an error budget.")
    p.add_argument("item", choices=["l", "b", "r"])
    p.add_argument("max_error", type=float, help="Budget: arcsec for l/b, km for r")
    p.add_argument("--mode", choices=["true", "mean", "safe"], default="true")
    _add_time_args(p)
    args = p.parse_args(argv)

    model = load_model(args.item)
    ctx = _time_from_args(args)

    if args.mode == "true":
        plan = make_truncation_nums(model, args.max_error, ctx)
    elif args.mode == "mean":
        plan = make_mean_truncation_nums(model, args.max_error)
    else:
        plan = make_safe_truncation_nums(model, args.max_error)

    print(f"model     = {model.name} ({model.unit}), blocks = {list(model.term_counts)}")
    print(f"mode      = {args.mode}")
    print(f"plan      = {plan}")
    print(f"terms     = {sum(plan)} / {model.total_terms}")
    print(f"estimate  = {estimate_max_error(model, plan, ctx):.6f} {model.unit} at JDE {ctx.jd:.1f}")
    return 0


def cmd_error(argv: list[str]) -> int:
    from elpmoon.data.models import load_model
    from elpmoon.series.evaluate import estimate_max_error

    p = argparse.ArgumentParser(prog="elpmoon error", description="Estimated truncation error of a plan.")
    p.add_argument("item", choices=["l", "b", "r"])
    p.add_argument("counts", type=int, nargs="*", help="terms per block (none: all terms)")
    _add_time_args(p)
    args = p.parse_args(argv)

    model = load_model(args.item)
    ctx = _time_from_args(args)
    plan = args.counts or None

    print(f"plan      = {plan or 'all'}")
    print(f"estimate  = {estimate_max_error(model, plan, ctx):.6f} {model.unit} at JDE {ctx.jd:.1f}")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="elpmoon", description="ELP2000 lunar series toolkit CLI.")
    p.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("position", help="Lunar longitude, latitude and distance at a given time.")
    sub.add_parser("truncate", help="Truncation plan for an error budget.")
    sub.add_parser("error", help="Estimated truncation error of a plan.")

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument("tool", choices=["plan-drift"], help="Which diagnostic to run")

    args, rest = p.parse_known_args(argv)

    if args.verbose:
        from elpmoon.log_config import setup_logging
        setup_logging(logging.DEBUG)

    try:
        if args.cmd == "position":
            return cmd_position(rest)

        if args.cmd == "truncate":
            return cmd_truncate(rest)

        if args.cmd == "error":
            return cmd_error(rest)

        if args.cmd == "diag":
            tool_map = {
                "plan-drift": "elpmoon.diagnostics.plan_drift",
            }
            return _run_module_main(tool_map[args.tool], rest)
    except ElpError as e:
        raise SystemExit(f"error: {e}")

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
