"""CLI entry point for the shelf-life engine."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .errors import ShelfLifeError
from .pipeline import ShelfLifeEngine
from .vision import ImageInput, sniff_media_type


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="shelflife",
        description="Scan receipts or fridge photos into a food inventory "
        "with conservative expiry estimates",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # scan
    scan_parser = sub.add_parser("scan", help="Extract inventory from images")
    scan_parser.add_argument(
        "--image", type=str, nargs="+", default=[], help="Image files to scan"
    )
    scan_parser.add_argument(
        "--url", type=str, nargs="+", default=[], help="Image URLs to scan"
    )
    scan_parser.add_argument(
        "--mode", choices=["receipt", "fridge"], default="receipt",
        help="What the images show",
    )
    scan_parser.add_argument("--json", action="store_true", help="Output JSON")

    # expiry
    expiry_parser = sub.add_parser("expiry", help="Estimate expiry of one item")
    expiry_parser.add_argument("name", type=str, help="Food name")
    expiry_parser.add_argument("--generic", type=str, default=None, help="Generic food name")
    expiry_parser.add_argument(
        "--location", type=str, default="fridge", help="fridge / freezer / pantry"
    )
    expiry_parser.add_argument(
        "--purchased", type=str, default=None,
        help="Purchase date YYYY-MM-DD (default: today)",
    )
    expiry_parser.add_argument("--opened", type=str, default=None, help="Open date YYYY-MM-DD")
    expiry_parser.add_argument(
        "--best-before", type=str, default=None, help="Best-before date YYYY-MM-DD"
    )
    expiry_parser.add_argument("--json", action="store_true", help="Output JSON")

    # parse
    parse_parser = sub.add_parser("parse", help="Turn a typed note into inventory items")
    parse_parser.add_argument(
        "text", type=str, help='e.g. "3 packs of Lays and 2 bottles of milk"'
    )
    parse_parser.add_argument(
        "--list", action="store_true", help="The note may name several items"
    )
    parse_parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config)

    try:
        match args.command:
            case "scan":
                asyncio.run(_cmd_scan(config, args))
            case "expiry":
                asyncio.run(_cmd_expiry(config, args))
            case "parse":
                asyncio.run(_cmd_parse(config, args))
    except ShelfLifeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1 if e.status < 500 else 2)


def _load_images(args) -> list[ImageInput]:
    images: list[ImageInput] = []
    for path in args.image:
        data = Path(path).read_bytes()
        images.append(ImageInput(data=data, media_type=sniff_media_type(data)))
    for url in args.url:
        images.append(ImageInput.from_url(url))
    return images


async def _cmd_scan(config, args) -> None:
    images = _load_images(args)
    if not images:
        print("Specify at least one --image or --url.", file=sys.stderr)
        sys.exit(1)

    engine = ShelfLifeEngine.from_config(config)
    try:
        result = await engine.scan(images, args.mode)
    finally:
        engine.close()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    if not result.items:
        print("No food items found.")
        return
    print(f"Purchased {result.purchase_date.isoformat()}: {len(result.items)} items")
    _print_items(result.items)


async def _cmd_parse(config, args) -> None:
    engine = ShelfLifeEngine.from_config(config)
    try:
        result = await engine.parse_text(args.text, expect_list=args.list)
    finally:
        engine.close()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return
    if not result.items:
        print("No food items found.")
        return
    _print_items(result.items)


def _print_items(items) -> None:
    for i in items:
        print(
            f"  {i.name:<24} {i.quantity:g} {i.unit:<6} {i.storage_location:<8} "
            f"{i.shelf_life_days:>3}d → {i.predicted_expiry.isoformat()}  "
            f"[{i.category}, {i.source}, {i.confidence:.0%}]"
        )


async def _cmd_expiry(config, args) -> None:
    engine = ShelfLifeEngine.from_config(config)
    try:
        estimate = await engine.predict_expiry(
            name=args.name,
            generic_name=args.generic,
            location=args.location,
            purchased_date=args.purchased or date.today().isoformat(),
            open_date=args.opened,
            best_before_date=args.best_before,
        )
    finally:
        engine.close()

    if args.json:
        print(json.dumps(estimate.to_dict(), ensure_ascii=False, indent=2))
        return

    print(
        f"{args.name}: {estimate.days} days from {estimate.reference_type} "
        f"date {estimate.reference_date.isoformat()} → "
        f"{estimate.predicted_expiry.isoformat()} ({estimate.source})"
    )
    if estimate.reason:
        print(f"  {estimate.reason}")
