"""Command line entry point: one operation, one session, console output."""

import argparse
import logging
import sys
from typing import List, Optional

from catalog.clients import check_connection, open_session
from catalog.config import ConfigurationError, get_config
from catalog.errors import CatalogConnectionError, IntegrityFaultError, NotFoundError, QueryError
from catalog.models import LOCALIZED_FIELDS, ProductType
from catalog.reports import ReportKind, format_report
from catalog.services import CatalogQueryService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONNECTION = 1
EXIT_NOT_FOUND = 2
EXIT_QUERY = 3
EXIT_INTEGRITY = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-tool",
        description="Inspect, report on and patch rows of the products catalog",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_lang(sub):
        sub.add_argument("--lang", help="Language code for localized fields (default from config)")

    show = subparsers.add_parser("show", help="Show one product by id")
    show.add_argument("product_id", type=int)
    add_lang(show)

    listing = subparsers.add_parser("list", help="List active products of a type, most stars first")
    listing.add_argument("product_type", choices=[t.value for t in ProductType])
    listing.add_argument("--limit", type=int, help="Maximum number of products (default: all)")
    add_lang(listing)

    id_range = subparsers.add_parser("range", help="List products with ids in [START, END]")
    id_range.add_argument("start_id", type=int)
    id_range.add_argument("end_id", type=int)
    add_lang(id_range)

    count = subparsers.add_parser("count", help="Count active products per type")
    count.add_argument("product_type", nargs="?", choices=[t.value for t in ProductType])

    top = subparsers.add_parser("top", help="Show the most popular active products of every type")
    top.add_argument("--limit", type=int, default=5, help="Products per type (default: 5)")
    add_lang(top)

    status = subparsers.add_parser("translation-status", help="Summarize translation completeness")
    add_lang(status)

    patch = subparsers.add_parser("set-localized", help="Set one localized field of one product")
    patch.add_argument("product_id", type=int)
    patch.add_argument("--field", choices=LOCALIZED_FIELDS, default="description")
    patch.add_argument("--lang", required=True)
    value = patch.add_mutually_exclusive_group(required=True)
    value.add_argument("--value", help="New localized text")
    value.add_argument("--clear", action="store_true", help="Remove the localized value")

    subparsers.add_parser("image-audit", help="List products whose image URL would not render")

    set_image = subparsers.add_parser("set-image", help="Set the image URL of one product")
    set_image.add_argument("product_id", type=int)
    set_image.add_argument("--url", required=True, help="Absolute http(s) image URL")

    subparsers.add_parser("ping", help="Check that the catalog database is reachable")

    return parser


def run_command(args: argparse.Namespace, service: CatalogQueryService, default_lang: str) -> List[str]:
    """Dispatch a parsed command to the query service and format the result."""
    lang = getattr(args, "lang", None) or default_lang

    if args.command == "show":
        return format_report(ReportKind.DETAIL, service.fetch_by_id(args.product_id), lang)

    if args.command == "list":
        products = service.fetch_by_type(args.product_type, limit=args.limit)
        return format_report(ReportKind.LIST, products, lang, title=args.product_type)

    if args.command == "range":
        products = service.fetch_range(args.start_id, args.end_id)
        return format_report(ReportKind.LIST, products, lang, title=f"ids {args.start_id}-{args.end_id}")

    if args.command == "top":
        products = []
        for product_type in ProductType:
            products.extend(service.fetch_by_type(product_type, limit=args.limit))
        return format_report(ReportKind.BY_TYPE, products, lang)

    if args.command == "count":
        if args.product_type:
            return [f"{args.product_type}: {service.count_by_type(args.product_type)}"]
        return format_report(ReportKind.COUNTS, service.count_all_types(), lang)

    if args.command == "translation-status":
        return format_report(ReportKind.TRANSLATION_STATUS, service.translation_status(lang), lang)

    if args.command == "image-audit":
        return format_report(ReportKind.IMAGE_AUDIT, service.image_audit(), lang)

    if args.command == "set-localized":
        value = None if args.clear else args.value
        product = service.update_localized_field(args.product_id, args.field, lang, value)
        header = f"Updated {args.field}_{lang} of product {args.product_id}"
        return [header] + format_report(ReportKind.DETAIL, product, lang)

    if args.command == "set-image":
        product = service.update_image_url(args.product_id, args.url)
        return [f"Updated image_url of product {args.product_id}: {product.image_url}"]

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONNECTION

    logging.basicConfig(level=config.logging.level)

    try:
        if args.command == "ping":
            check_connection(config.database)
            print(f"Connected to {config.database.backend} catalog")
            return EXIT_OK

        with open_session(config.database) as client:
            service = CatalogQueryService(
                client,
                languages=config.catalog.languages,
                placeholder_patterns=config.catalog.placeholder_patterns,
            )
            lines = run_command(args, service, config.catalog.default_language)
    except CatalogConnectionError as e:
        logger.error(f"Connection failed: {e}")
        return EXIT_CONNECTION
    except NotFoundError as e:
        logger.error(str(e))
        return EXIT_NOT_FOUND
    except IntegrityFaultError as e:
        logger.critical(f"Integrity fault: {e}")
        return EXIT_INTEGRITY
    except QueryError as e:
        logger.error(str(e))
        return EXIT_QUERY
    except ValueError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return EXIT_QUERY

    for line in lines:
        print(line)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
