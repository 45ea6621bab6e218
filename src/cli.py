"""Command line entry point for registry checks.

Examples:
    registry-check verify 12345678
    registry-check risk 12345678
    registry-check stats "SW1A 1AA" --property-type D
    registry-check owner DN123456 "Acme Holdings Ltd"
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from src.api.companies_house import CompaniesHouseClient
from src.api.errors import RegistryError
from src.api.land_registry import LandRegistryClient
from src.services.associations import AssociationChecker
from src.services.compliance import ComplianceVerifier
from src.services.ownership import OwnershipValidator
from src.services.pricing import PriceAggregator
from src.services.risk import CompanyRiskAssessor
from src.utils.config import Settings
from src.utils.retry import with_retry

logger = logging.getLogger(__name__)

EXIT_UNAVAILABLE = 1
EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="registry-check",
        description="Query Companies House and HM Land Registry.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search companies by name")
    search.add_argument("query")
    search.add_argument("--page-size", type=int, default=20)

    company = commands.add_parser("company", help="Show a company profile")
    company.add_argument("company_number")

    verify = commands.add_parser("verify", help="Check a company's compliance")
    verify.add_argument("company_number")

    risk = commands.add_parser("risk", help="Score a company's legitimacy")
    risk.add_argument("company_number")

    prices = commands.add_parser("prices", help="List sale prices for a postcode")
    prices.add_argument("postcode")
    prices.add_argument("--limit", type=int, default=100)
    prices.add_argument("--from-date", type=date.fromisoformat, help="Earliest sale date (YYYY-MM-DD)")
    prices.add_argument("--to-date", type=date.fromisoformat, help="Latest sale date (YYYY-MM-DD)")

    stats = commands.add_parser("stats", help="Price statistics for a postcode")
    stats.add_argument("postcode")
    stats.add_argument("--property-type")

    title = commands.add_parser("title", help="Show a title register entry")
    title.add_argument("title_number")

    associate = commands.add_parser("associate", help="Check a person's roles in a company")
    associate.add_argument("company_number")
    associate.add_argument("person_name")

    owner = commands.add_parser("owner", help="Check a claimed owner of a title")
    owner.add_argument("title_number")
    owner.add_argument("owner_name")

    return parser


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


async def run(args: argparse.Namespace, settings: Settings) -> Any:
    """Run one command against freshly built clients."""
    attempts = settings.retry_attempts

    async with CompaniesHouseClient(
        settings.companies_house_api_key,
        base_url=settings.companies_house_base_url,
        timeout=settings.request_timeout,
    ) as companies_house, LandRegistryClient(
        settings.land_registry_api_key,
        base_url=settings.land_registry_base_url,
        timeout=settings.request_timeout,
        validate_postcodes=settings.validate_postcodes,
    ) as land_registry:
        if args.command == "search":
            return await with_retry(companies_house.search_companies, attempts)(
                args.query, args.page_size
            )
        if args.command == "company":
            return await with_retry(companies_house.fetch_company, attempts)(args.company_number)
        if args.command == "verify":
            verifier = ComplianceVerifier(companies_house)
            return await with_retry(verifier.verify, attempts)(args.company_number)
        if args.command == "risk":
            assessor = CompanyRiskAssessor(companies_house)
            return await with_retry(assessor.assess, attempts)(args.company_number)
        if args.command == "prices":
            return await with_retry(land_registry.fetch_prices_by_postcode, attempts)(
                args.postcode, args.limit, from_date=args.from_date, to_date=args.to_date
            )
        if args.command == "stats":
            aggregator = PriceAggregator(land_registry)
            return await with_retry(aggregator.aggregate, attempts)(
                args.postcode, args.property_type
            )
        if args.command == "title":
            return await with_retry(land_registry.fetch_title_record, attempts)(args.title_number)
        if args.command == "associate":
            checker = AssociationChecker(companies_house)
            return await with_retry(checker.check_person_association, attempts)(
                args.company_number, args.person_name
            )
        if args.command == "owner":
            validator = OwnershipValidator(land_registry)
            return await with_retry(validator.validate, attempts)(
                args.title_number, args.owner_name
            )

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the registry-check command."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        result = asyncio.run(run(args, settings))
    except RegistryError as e:
        logger.error("External data unavailable: %s", e)
        print(f"External data unavailable ({e.registry} registry, {e.operation})", file=sys.stderr)
        return EXIT_UNAVAILABLE
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    print(json.dumps(_to_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
