from __future__ import annotations

import argparse
import json
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .calendar import month_window, resolve_timezone, today as current_day
from .config import SettingsError, TimelineSettings, load_settings
from .layout import compute_layout
from .models import Order
from .parse_orders import load_orders
from .render_timeline import render_timeline
from .resolution import OrderValidationError


def _parse_date(value: str):
    import datetime as dt

    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _parse_month(value: str):
    import datetime as dt

    try:
        year, month = value.split("-")
        return dt.date(int(year), int(month), 1)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid month '{value}', expected YYYY-MM") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="production-timeline",
        description="Production schedule timeline",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("orders", help="Path to order snapshot YAML")
    parser.add_argument("--out", default="output/production_timeline.svg", help="Output SVG path")
    parser.add_argument("--json", dest="json_out", help="Also write the layout as JSON to this path")
    parser.add_argument("--month", type=_parse_month, help="First visible month (YYYY-MM); defaults to this month")
    parser.add_argument("--query", default="", help="Search text over product, requester and status label")
    parser.add_argument("--cell-width", type=int, help="Pixels per day column (default 50)")
    parser.add_argument("--timezone", help="IANA timezone used to read timestamps (default: host local)")
    parser.add_argument("--today", type=_parse_date, help="Override the current date (YYYY-MM-DD)")
    parser.add_argument("--settings", help="Optional YAML settings file")
    parser.add_argument("--title", default="생산일정 캘린더", help="Chart title")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=False,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.settings) if args.settings else TimelineSettings()
        settings = settings.merged(cell_width=args.cell_width, timezone=args.timezone)
        tz = resolve_timezone(settings.timezone)
    except (yaml.YAMLError, SettingsError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: settings file not found: {args.settings}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected, e.g. unknown timezone
        print(f"Error: invalid settings: {exc}", file=sys.stderr)
        return 2

    if settings.cell_width <= 0:
        print("Error: --cell-width must be positive", file=sys.stderr)
        return 2

    orders_path = Path(args.orders)
    try:
        orders: list[Order] = load_orders(str(orders_path))
    except (yaml.YAMLError, OrderValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: orders file not found: {orders_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading orders: {exc}", file=sys.stderr)
        return 1

    day = args.today or current_day(tz)
    window = month_window(args.month or day)
    layout = compute_layout(orders, window, query=args.query, cell_width=settings.cell_width, today=day, tz=tz)

    try:
        render_timeline(layout, out_path=args.out, title=args.title, today=day)
        if args.json_out:
            Path(args.json_out).parent.mkdir(parents=True, exist_ok=True)
            with open(args.json_out, "w", encoding="utf-8") as fh:
                json.dump(layout.to_dict(), fh, ensure_ascii=False, indent=2)
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except Exception:
            pass

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
