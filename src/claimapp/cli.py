#!/usr/bin/env python3
"""
CLI for registering and viewing claims.

Usage:
    claimapp register vehicle --description "..." --registration-number "ABC 123" --police-report-number K-1
    claimapp register property --address "Storgatan 1" --damage-type water --estimated-value 75000
    claimapp register travel --destination Rome --start-date 2024-05-01 --end-date 2024-05-08 --incident-type lost_luggage
    claimapp list
    claimapp show <claim-id>
    claimapp search ABC123
"""

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .domain.errors import BusinessRuleViolation, ClaimValidationError
from .domain.rules import ClaimBusinessRules
from .domain.schema import (
    Claim,
    ClaimStatus,
    PropertyClaim,
    PropertyDamageType,
    TravelClaim,
    TravelIncidentType,
    TravelInterval,
    VehicleClaim,
)
from .intake.claim_workflow import ClaimService
from .storage.claim_store import create_claim_store
from .utils.config import get_settings

console = Console()

STATUS_STYLES = {
    ClaimStatus.PENDING: "white",
    ClaimStatus.APPROVED: "green",
    ClaimStatus.REJECTED: "red",
    ClaimStatus.REQUIRES_MANUAL_REVIEW: "yellow",
    ClaimStatus.ESCALATED: "magenta",
}


def setup_logging(verbose: bool = False, level: str = "WARNING"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def parse_decimal(value: str) -> Decimal:
    """argparse type for exact amounts."""
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount '{value}'")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog='claimapp',
        description='Register and view insurance claims',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Register a vehicle claim
  claimapp register vehicle --description "Rear-ended at a red light on the E4" \\
      --reported-date 2024-05-02 --registration-number "ABC 123" --police-report-number K-2024-1

  # List claims in a throwaway in-memory store
  claimapp --memory list

  # Find every claim on a vehicle
  claimapp search abc-123
        """
    )

    # Storage
    storage_group = parser.add_mutually_exclusive_group()
    storage_group.add_argument(
        '--db',
        type=Path,
        help='SQLite database path (default: DB_PATH setting)'
    )
    storage_group.add_argument(
        '--memory',
        action='store_true',
        help='Use an in-memory store (nothing is kept after exit)'
    )

    # Logging
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    commands = parser.add_subparsers(dest='command', required=True)

    # register <kind>
    register = commands.add_parser('register', help='Register a new claim')
    kinds = register.add_subparsers(dest='kind', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--description',
        default='',
        help='What happened (empty, or at least 20 characters)'
    )
    common.add_argument(
        '--reported-date',
        type=parse_date,
        default=None,
        help='Report date YYYY-MM-DD (default: today)'
    )

    vehicle = kinds.add_parser('vehicle', parents=[common], help='Vehicle damage')
    vehicle.add_argument('--registration-number', required=True, help='Plate, e.g. ABC123')
    vehicle.add_argument('--police-report-number', required=True, help='Police report reference')

    prop = kinds.add_parser('property', parents=[common], help='Property damage')
    prop.add_argument('--address', required=True, help='Address of the damaged property')
    prop.add_argument(
        '--damage-type',
        required=True,
        choices=[t.value for t in PropertyDamageType],
        help='Cause of the damage'
    )
    prop.add_argument('--estimated-value', required=True, type=parse_decimal, help='Estimated loss')

    travel = kinds.add_parser('travel', parents=[common], help='Travel incident')
    travel.add_argument('--destination', required=True, help='Travel destination')
    travel.add_argument('--start-date', required=True, type=parse_date, help='Trip start YYYY-MM-DD')
    travel.add_argument('--end-date', type=parse_date, help='Trip end YYYY-MM-DD (omit if ongoing)')
    travel.add_argument(
        '--incident-type',
        required=True,
        choices=[t.value for t in TravelIncidentType],
        help='What went wrong'
    )

    # Queries
    commands.add_parser('list', help='List all claims')

    show = commands.add_parser('show', help='Show one claim')
    show.add_argument('claim_id', help='Claim ID')

    search = commands.add_parser('search', help='Find vehicle claims by registration number')
    search.add_argument('registration_number', help='Plate, any spacing or case')

    return parser


def build_claim(args: argparse.Namespace) -> Claim:
    """Construct the claim described by the register arguments."""
    common = {
        "description": args.description,
        "reported_date": args.reported_date or date.today(),
    }

    if args.kind == "vehicle":
        return VehicleClaim(
            registration_number=args.registration_number,
            police_report_number=args.police_report_number,
            **common,
        )
    if args.kind == "property":
        return PropertyClaim(
            address=args.address,
            damage_type=args.damage_type,
            estimated_value=args.estimated_value,
            **common,
        )
    if args.kind == "travel":
        return TravelClaim(
            destination=args.destination,
            travel_period=TravelInterval(args.start_date, args.end_date),
            incident_type=args.incident_type,
            **common,
        )
    raise ValueError(f"Unknown claim kind: {args.kind}")


# =============================================================================
# Display
# =============================================================================


def truncate(text: str, max_len: int = 40) -> str:
    """Truncate text with ellipsis."""
    if len(text) > max_len:
        return text[:max_len-3] + "..."
    return text


def format_status(status: ClaimStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def claim_subject(claim: Claim) -> str:
    """Short kind-specific summary: plate, address or destination."""
    if isinstance(claim, VehicleClaim):
        return claim.registration_number.value
    if isinstance(claim, PropertyClaim):
        return claim.address
    if isinstance(claim, TravelClaim):
        return claim.destination
    raise TypeError(f"Unknown claim type: {type(claim).__name__}")


def claim_detail_rows(claim: Claim) -> List[tuple]:
    """Kind-specific (label, value) rows for the detail view."""
    if isinstance(claim, VehicleClaim):
        return [
            ("Registration #", claim.registration_number.value),
            ("Police report #", claim.police_report_number),
        ]
    if isinstance(claim, PropertyClaim):
        return [
            ("Address", claim.address),
            ("Damage Type", claim.damage_type.value),
            ("Est. Value", f"{claim.estimated_value:,.2f}"),
        ]
    if isinstance(claim, TravelClaim):
        return [
            ("Destination", claim.destination),
            ("Travel Period", str(claim.travel_period)),
            ("Incident Type", claim.incident_type.value),
        ]
    raise TypeError(f"Unknown claim type: {type(claim).__name__}")


def make_summary_table(claims: List[Claim], title: str = "All Claims") -> Table:
    """Create summary table with key claim info."""
    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Claim ID", style="bold", no_wrap=True)
    table.add_column("Type")
    table.add_column("Reported", style="dim")
    table.add_column("Status")
    table.add_column("Subject")
    table.add_column("Description")

    for claim in sorted(claims, key=lambda c: c.reported_date, reverse=True):
        table.add_row(
            escape(claim.claim_id),
            claim.claim_type,
            claim.reported_date.isoformat(),
            format_status(claim.status),
            escape(truncate(claim_subject(claim), 25)),
            escape(truncate(claim.description)) or "-",
        )

    return table


def make_detail_table(claim: Claim) -> Table:
    """Detailed card for a single claim."""
    table = Table(
        title=f"Claim {escape(claim.claim_id)}",
        box=box.ROUNDED,
        show_header=False,
        padding=(0, 1),
    )
    table.add_column("Field", style="bold cyan", width=16)
    table.add_column("Value", overflow="fold")

    table.add_row("Type", claim.claim_type)
    table.add_row("Status", format_status(claim.status))
    table.add_row("Reported", claim.reported_date.isoformat())
    table.add_row("Age (days)", str(claim.age_in_days()))
    table.add_row("Description", escape(claim.description) or "-")
    table.add_row("", "")
    for label, value in claim_detail_rows(claim):
        table.add_row(label, escape(value))

    return table


# =============================================================================
# Entry point
# =============================================================================


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        for error in e.errors():
            setting = ".".join(str(part) for part in error["loc"])
            console.print(
                f"[red]Invalid configuration:[/red] {escape(setting)}: {escape(error['msg'])}",
                soft_wrap=True,
            )
        return 1

    setup_logging(args.verbose, settings.log_level)
    logger = logging.getLogger(__name__)

    if args.memory:
        settings = settings.model_copy(update={"storage_backend": "memory"})
    elif args.db:
        settings = settings.model_copy(update={"storage_backend": "sqlite", "db_path": args.db})

    store = create_claim_store(settings)
    service = ClaimService(store, ClaimBusinessRules(settings.rule_settings()))

    try:
        if args.command == "register":
            claim = build_claim(args)
            result = service.process_claim(claim)
            console.print(
                f"Registered {claim.claim_type} claim {claim.claim_id} "
                f"with status {format_status(result.final_status)}",
                soft_wrap=True,
            )
            if result.fired_rules:
                fired = ", ".join(rule.value for rule in result.fired_rules)
                console.print(f"Rules fired: {fired}", soft_wrap=True)

        elif args.command == "list":
            claims = service.get_all_claims()
            if not claims:
                console.print("No claims found.")
            else:
                console.print(make_summary_table(claims))
                console.print(f"Total: {len(claims)} claim(s)")

        elif args.command == "show":
            claim = service.get_claim_by_id(args.claim_id)
            if claim is None:
                console.print(f"[red]Claim not found:[/red] {escape(args.claim_id)}", soft_wrap=True)
                return 1
            console.print(make_detail_table(claim))

        elif args.command == "search":
            claims = service.get_claims_by_registration_number(args.registration_number)
            if not claims:
                console.print(f"No claims found for {escape(args.registration_number)}.", soft_wrap=True)
            else:
                console.print(make_summary_table(claims, title=f"Claims for {claims[0].registration_number}"))
                console.print(f"Total: {len(claims)} claim(s)")

    except ClaimValidationError as e:
        logger.debug(f"Validation failed: {e.to_dict()}")
        label = "Invalid registration number" if args.command == "search" else "Invalid claim"
        console.print(f"[red]{label}:[/red] {escape(str(e))}", soft_wrap=True)
        return 1
    except BusinessRuleViolation as e:
        console.print(f"[red]Claim rejected ({e.rule_code}):[/red] {escape(e.message)}", soft_wrap=True)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
