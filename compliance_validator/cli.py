from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from .azure.clients import AUTH_MODES, build_credential
from .azure.provider import AzureResourceProvider, ResourceProvider
from .config import settings
from .errors import CollaboratorQueryError, ValidatorConnectionError
from .report.console import PIPELINE_FORMATS, ConsoleReporter, emit_pipeline_variables
from .report.pdf_report import build_pdf
from .runner import run_validation
from .utils.logging_utils import configure_logging, exc_to_text

logger = logging.getLogger(__name__)


def _retention_days(value: str) -> int:
    # also applied to the COMPLIANCE_MIN_RETENTION_DAYS default
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number of days, got {value!r}")
    if days < 0:
        raise argparse.ArgumentTypeError(f"retention days cannot be negative: {days}")
    return days


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="validate-compliance",
        description="Check the resources in an Azure resource group against the compliance checklist.",
    )
    p.add_argument("--resource-group", "-g", default=settings.RESOURCE_GROUP,
                   help="Resource group to validate (env: COMPLIANCE_RESOURCE_GROUP)")
    p.add_argument("--subscription", "-s", default=settings.SUBSCRIPTION_ID,
                   help="Subscription ID (env: AZURE_SUBSCRIPTION_ID)")
    p.add_argument("--auth-mode", choices=AUTH_MODES, default=settings.AUTH_MODE,
                   help="Credential type (env: COMPLIANCE_AUTH_MODE, default: default)")
    p.add_argument("--tenant-id", default=settings.TENANT_ID)
    p.add_argument("--client-id", default=settings.CLIENT_ID)
    p.add_argument("--client-secret", default=settings.CLIENT_SECRET,
                   help="Prefer AZURE_CLIENT_SECRET over passing the secret on the command line")
    p.add_argument("--min-retention-days", type=_retention_days, default=settings.MIN_RETENTION_DAYS,
                   help="Minimum Application Insights / Log Analytics retention (default: 90)")
    p.add_argument("--function-subnet-pattern", default=settings.FUNCTION_SUBNET_PATTERN,
                   help="Glob identifying Function App integration subnets (default: *function-app*)")
    p.add_argument("--skip-unavailable", action="store_true",
                   help="Report categories that cannot be listed as UNKNOWN instead of aborting")
    p.add_argument("--pipeline-format", choices=PIPELINE_FORMATS, default="plain",
                   help="How to publish CompliancePassed/ComplianceFailed")
    p.add_argument("--pdf", metavar="PATH", help="Also write a PDF report to PATH")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def make_provider(args: argparse.Namespace) -> ResourceProvider:
    credential = build_credential(args.auth_mode, args.tenant_id, args.client_id, args.client_secret)
    return AzureResourceProvider(credential, args.subscription, args.resource_group)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.resource_group:
        parser.error("--resource-group is required (or set COMPLIANCE_RESOURCE_GROUP)")
    if not args.subscription:
        parser.error("--subscription is required (or set AZURE_SUBSCRIPTION_ID)")
    configure_logging(args.verbose)

    console = ConsoleReporter()
    console.header(args.resource_group, args.subscription)
    try:
        provider = make_provider(args)
    except ValueError as e:
        logger.error("Invalid credential configuration: %s", e)
        return 1
    try:
        report = run_validation(
            provider,
            min_retention_days=args.min_retention_days,
            function_subnet_pattern=args.function_subnet_pattern,
            skip_unavailable=args.skip_unavailable,
            on_phase=console.phase,
            on_finding=console.finding,
        )
    except ValidatorConnectionError as e:
        logger.error("Cannot connect: %s", e)
        logger.debug(exc_to_text(e))
        return 1
    except CollaboratorQueryError as e:
        logger.error("Validation aborted, no compliance result: %s", e)
        logger.debug(exc_to_text(e))
        return 1

    console.summary(report)
    emit_pipeline_variables(report, args.pipeline_format)
    if args.pdf:
        build_pdf(args.pdf, report, args.resource_group, args.subscription)
        logger.info("PDF report written to %s", args.pdf)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
