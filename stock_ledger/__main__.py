"""CLI entry point for the stock ledger.

Usage:
    # Show inventory grouped by section
    python -m stock_ledger show

    # Stock reports (low/over-stock, expiring, expired, most stocked)
    python -m stock_ledger report
    python -m stock_ledger report --today 2025-05-05

    # Add a plain item, restock a perishable one
    python -m stock_ledger add-item Rice --section Pantry --quantity 40
    python -m stock_ledger restock Apple --quantity 50 --expires 2025-05-10 \\
        --section "Vegetables & Fruits" --manager alex

    # Adjust a plain item
    python -m stock_ledger adjust Rice - 5

    # Queue and process orders
    python -m stock_ledger order "10 apples" "2 rice"

    # Manager-only summary
    python -m stock_ledger summary --manager alex

The data file and YAML store config come from STOCK_LEDGER_DATA_FILE and
STOCK_LEDGER_CONFIG_FILE (or --file / --config).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from .config import StoreConfig, get_settings, load_store_config
from .errors import LedgerError
from .ledger import Ledger
from .models import PlainItem
from .persistence import load_ledger, save_ledger
from .rendering import (
    render_inventory,
    render_item,
    render_manager_summary,
    render_order_outcomes,
    render_stock_report,
)

logger = logging.getLogger("stock_ledger.cli")


def _open_ledger(args: argparse.Namespace) -> tuple[Ledger, StoreConfig, Path]:
    config = load_store_config(args.config)
    path = Path(args.file)
    ledger, result = load_ledger(path, Ledger.from_config(config))
    for warning in result.warnings:
        logger.warning(warning)
    return ledger, config, path


def _save(ledger: Ledger, config: StoreConfig, path: Path) -> None:
    save_ledger(ledger, path, per_batch=config.per_batch_csv)


def _require_manager(config: StoreConfig, manager: str) -> None:
    if not config.is_manager(manager):
        print(f"Error: '{manager}' is not a recognized manager", file=sys.stderr)
        sys.exit(1)


def _cmd_show(args: argparse.Namespace) -> None:
    ledger, _, _ = _open_ledger(args)
    print(render_inventory(ledger))


def _cmd_report(args: argparse.Namespace) -> None:
    ledger, _, _ = _open_ledger(args)
    print(render_stock_report(ledger, today=args.today))


def _cmd_add_item(args: argparse.Namespace) -> None:
    ledger, config, path = _open_ledger(args)
    item = PlainItem(name=args.name, section=args.section, quantity=args.quantity)
    ledger.add_item(item)
    _save(ledger, config, path)
    print(f"Added {render_item(item)}")


def _cmd_restock(args: argparse.Namespace) -> None:
    ledger, config, path = _open_ledger(args)
    if args.manager:
        _require_manager(config, args.manager)

    item = ledger.add_or_update_perishable(
        args.name, args.quantity, args.expires, args.section
    )
    if args.manager:
        total = ledger.record_manager_contribution(args.manager, args.quantity)
        print(f"Credited {args.manager} with {args.quantity} units ({total} this session)")

    _save(ledger, config, path)
    print(f"Restocked {render_item(item)}")


def _cmd_adjust(args: argparse.Namespace) -> None:
    ledger, config, path = _open_ledger(args)
    item = ledger.adjust_stock(args.name, args.operator, args.value)
    _save(ledger, config, path)
    print(f"Now {render_item(item)}")


def _cmd_order(args: argparse.Namespace) -> None:
    ledger, config, path = _open_ledger(args)
    for text in args.orders:
        ledger.add_order(text)
    outcomes = ledger.process_orders()
    if any(outcome.ok for outcome in outcomes):
        _save(ledger, config, path)
    print(render_order_outcomes(outcomes))


def _cmd_summary(args: argparse.Namespace) -> None:
    ledger, config, _ = _open_ledger(args)
    _require_manager(config, args.manager)
    print(render_manager_summary(ledger.manager_summary(), args.manager))


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="stock_ledger",
        description="Stock ledger for a small retail store",
    )
    parser.add_argument(
        "--file",
        default=settings.data_file,
        help=f"Inventory CSV file (default: {settings.data_file})",
    )
    parser.add_argument(
        "--config",
        default=settings.config_file,
        help="YAML store config (thresholds, managers)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    show_parser = subparsers.add_parser("show", help="Show inventory by section")
    show_parser.set_defaults(func=_cmd_show)

    report_parser = subparsers.add_parser("report", help="Print stock reports")
    report_parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reference date for expiry reports (default: today)",
    )
    report_parser.set_defaults(func=_cmd_report)

    add_parser = subparsers.add_parser("add-item", help="Add a non-perishable item")
    add_parser.add_argument("name")
    add_parser.add_argument("--section", required=True)
    add_parser.add_argument("--quantity", type=int, default=0)
    add_parser.set_defaults(func=_cmd_add_item)

    restock_parser = subparsers.add_parser("restock", help="Add perishable stock")
    restock_parser.add_argument("name")
    restock_parser.add_argument("--quantity", type=int, required=True)
    restock_parser.add_argument(
        "--expires",
        type=date.fromisoformat,
        required=True,
        help="Expiration date (YYYY-MM-DD)",
    )
    restock_parser.add_argument("--section", default="")
    restock_parser.add_argument("--manager", help="Manager to credit")
    restock_parser.set_defaults(func=_cmd_restock)

    adjust_parser = subparsers.add_parser("adjust", help="Adjust a plain item")
    adjust_parser.add_argument("name")
    adjust_parser.add_argument("operator", choices=["+", "-"])
    adjust_parser.add_argument("value", type=int)
    adjust_parser.set_defaults(func=_cmd_adjust)

    order_parser = subparsers.add_parser("order", help="Queue and process orders")
    order_parser.add_argument("orders", nargs="+", help='Order text, e.g. "10 apples"')
    order_parser.set_defaults(func=_cmd_order)

    summary_parser = subparsers.add_parser("summary", help="Manager-only summary")
    summary_parser.add_argument("--manager", required=True)
    summary_parser.set_defaults(func=_cmd_summary)

    return parser


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (LedgerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
