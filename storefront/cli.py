# storefront/cli.py
from __future__ import annotations

import argparse
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from storefront.config import DEFAULT_CONFIG_PATH, Settings, load_settings
from storefront.db import check_connection, init_db
from storefront.errors import BackendError, ConfigError, StoreError, ValidationError
from storefront.models import Product
from storefront.seed_db import seed
from storefront.service import StoreService

YES = {"yes", "y", "yeah", "yep", "sure", "ok", "okay", "confirm"}
NO = {"no", "n", "nope", "cancel", "stop"}

COLUMNS = ("ID", "Product Name", "Price (Rs.)", "Stock")

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_FAILED = 2


def format_table(products: Sequence[Product]) -> str:
    rows = [COLUMNS] + [(str(p.id), p.name, f"{p.price:.2f}", str(p.stock)) for p in products]
    widths = [max(len(r[i]) for r in rows) for i in range(len(COLUMNS))]
    lines = [" | ".join(cell.ljust(w) for cell, w in zip(r, widths)).rstrip() for r in rows]
    lines.insert(1, "-+-".join("-" * w for w in widths))
    if not products:
        lines.append("(no products)")
    return "\n".join(lines)


def describe_error(e: StoreError) -> str:
    if isinstance(e, BackendError):
        return f"Database Error: {e}"
    return str(e)


def ask_yes_no(question: str, read: Optional[Callable[[str], str]] = None) -> bool:
    read = read or input
    while True:
        try:
            answer = read(f"{question} (yes/no): ").strip().lower()
        except EOFError:
            # closed stdin never confirms
            print()
            return False
        if answer in YES:
            return True
        if answer in NO:
            return False
        print("Please reply 'yes' to confirm the purchase or 'no' to cancel.")


def confirm_purchase(product: Product, read: Optional[Callable[[str], str]] = None) -> bool:
    return ask_yes_no(f"Do you want to buy {product.name} for Rs. {product.price:.2f}?", read)


def _buy(service: StoreService, raw_id: str, confirm: Callable[[Product], bool], err: Optional[TextIO] = None) -> bool:
    err = err or sys.stdout
    try:
        product_id = int(raw_id)
    except ValueError:
        print(f"Not a product id: {raw_id!r}", file=err)
        return False

    try:
        result = service.buy(product_id, confirm)
    except StoreError as e:
        print(describe_error(e), file=err)
        return False

    if result is None:
        print("Okay, purchase cancelled.")
        return True

    product = service.find(product_id)
    name = product.name if product else f"product {product_id}"
    print(f"Successfully purchased {name}!")
    print(format_table(service.snapshot))
    return True


# -------------------------
# Commands
# -------------------------

def cmd_list(service: StoreService, args: argparse.Namespace) -> int:
    try:
        service.refresh()
    except StoreError as e:
        print(describe_error(e), file=sys.stderr)
        return EXIT_FAILED
    print(format_table(service.snapshot))
    return EXIT_OK


def cmd_buy(service: StoreService, args: argparse.Namespace) -> int:
    try:
        service.refresh()
    except StoreError as e:
        print(describe_error(e), file=sys.stderr)
        return EXIT_FAILED

    confirm = (lambda _p: True) if args.yes else confirm_purchase
    return EXIT_OK if _buy(service, args.product_id, confirm, err=sys.stderr) else EXIT_FAILED


def cmd_init_db(service: StoreService, args: argparse.Namespace) -> int:
    try:
        if args.seed:
            count = seed(service.settings)
            print(f"Seeded {count} products.")
        else:
            init_db(service.settings)
            print("Schema ready.")
    except StoreError as e:
        print(describe_error(e), file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


def cmd_shell(service: StoreService, args: argparse.Namespace) -> int:
    print("E-Commerce Product List. Commands: list, buy <id>, exit")
    try:
        service.refresh()
        print(format_table(service.snapshot))
    except StoreError as e:
        print(describe_error(e))

    while True:
        try:
            line = input("\n> ").strip()
        except EOFError:
            print("Goodbye.")
            return EXIT_OK

        if not line:
            continue
        cmd, _, rest = line.partition(" ")
        cmd = cmd.lower()

        if cmd in {"exit", "quit"}:
            print("Goodbye.")
            return EXIT_OK

        if cmd in {"list", "refresh", "show"}:
            try:
                service.refresh()
            except StoreError as e:
                # old snapshot stays on screen
                print(describe_error(e))
                continue
            print(format_table(service.snapshot))
            continue

        if cmd == "buy":
            if not rest.strip():
                print(describe_error(ValidationError("Please select a product to buy.")))
                continue
            _buy(service, rest.strip(), confirm_purchase)
            continue

        print(f"Unknown command {cmd!r}. Try: list, buy <id>, exit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="List products and buy one unit at a time.")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH),
                        help="Properties file with DB_URL, DB_USER, DB_PASSWORD (default: config.properties).")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="Print the product catalog.").set_defaults(func=cmd_list)

    p_buy = sub.add_parser("buy", help="Buy one unit of a product.")
    p_buy.add_argument("product_id")
    p_buy.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")
    p_buy.set_defaults(func=cmd_buy)

    p_init = sub.add_parser("init-db", help="Create the products table.")
    p_init.add_argument("--seed", action="store_true", help="Also load the sample catalog (replaces existing rows).")
    p_init.set_defaults(func=cmd_init_db)

    sub.add_parser("shell", help="Interactive mode (default).").set_defaults(func=cmd_shell)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings: Settings = load_settings(args.config)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return EXIT_CONFIG

    func = getattr(args, "func", cmd_shell)
    if func is not cmd_init_db:
        if check_connection(settings):
            print("Database connection successful!")
        else:
            print("Database connection failed; see log for details.", file=sys.stderr)

    return func(StoreService(settings), args)


if __name__ == "__main__":
    sys.exit(main())
