from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .azure.provider import ResourceProvider
from .checks.base import Check, ComplianceReport, Finding
from .checks.app_checks import FunctionAppHttpsOnlyCheck, FunctionAppManagedIdentityCheck, FunctionAppMinTLSCheck
from .checks.storage_checks import (
    StorageMinTLSCheck, StorageHttpsOnlyCheck, StorageServiceEncryptionCheck,
    StorageInfrastructureEncryptionCheck, StoragePublicAccessCheck,
)
from .checks.network_checks import DEFAULT_FUNCTION_SUBNET_PATTERN, FunctionSubnetDelegationCheck, NSGDefaultDenyCheck
from .checks.keyvault_checks import KeyVaultPurgeProtectionCheck, KeyVaultSoftDeleteCheck
from .checks.monitoring_checks import DEFAULT_MIN_RETENTION_DAYS, AppInsightsRetentionCheck, LogAnalyticsRetentionCheck
from .errors import CollaboratorQueryError

logger = logging.getLogger(__name__)

PHASES: List[Tuple[str, List[Check]]] = [
    ("TLS", [
        FunctionAppMinTLSCheck(),
        FunctionAppHttpsOnlyCheck(),
        StorageMinTLSCheck(),
        StorageHttpsOnlyCheck(),
    ]),
    ("Network", [
        NSGDefaultDenyCheck(),
        FunctionSubnetDelegationCheck(),
    ]),
    ("Encryption", [
        StorageServiceEncryptionCheck(),
        StorageInfrastructureEncryptionCheck(),
    ]),
    ("Monitoring", [
        AppInsightsRetentionCheck(),
        LogAnalyticsRetentionCheck(),
    ]),
    ("AccessControl", [
        FunctionAppManagedIdentityCheck(),
        StoragePublicAccessCheck(),
        KeyVaultSoftDeleteCheck(),
        KeyVaultPurgeProtectionCheck(),
    ]),
]


def run_validation(
    provider: ResourceProvider,
    *,
    min_retention_days: int = DEFAULT_MIN_RETENTION_DAYS,
    function_subnet_pattern: str = DEFAULT_FUNCTION_SUBNET_PATTERN,
    skip_unavailable: bool = False,
    on_phase: Optional[Callable[[str], None]] = None,
    on_finding: Optional[Callable[[Finding], None]] = None,
) -> ComplianceReport:
    """Connect, run every phase in order and return the filled report.

    A failed listing raises CollaboratorQueryError and ends the run, unless
    ``skip_unavailable`` is set; then each check that needed the category
    records one UNKNOWN finding and the run continues. ValidatorConnectionError
    from ``provider.connect()`` always propagates.
    """
    sub = provider.connect()
    report = ComplianceReport(scope=sub.scope)
    ctx = {
        "subscription_id": sub.subscription_id,
        "resource_group": sub.resource_group,
        "min_retention_days": min_retention_days,
        "function_subnet_pattern": function_subnet_pattern,
    }
    unavailable: Dict[str, CollaboratorQueryError] = {}
    empty_logged = set()

    for phase, checks in PHASES:
        logger.debug("Phase %s: %d check(s)", phase, len(checks))
        if on_phase:
            on_phase(phase)
        for chk in checks:
            findings = _run_check(provider, chk, ctx, skip_unavailable, unavailable, empty_logged)
            for f in findings:
                report.add(f)
                if on_finding:
                    on_finding(f)

    logger.info("Validation finished: %s", report.summary())
    return report


def _run_check(provider, chk: Check, ctx, skip_unavailable: bool, unavailable, empty_logged) -> List[Finding]:
    # a category that already failed is not queried again
    if chk.category in unavailable:
        return [chk.unknown(unavailable[chk.category])]
    try:
        resources = provider.list_resources(chk.category)
    except CollaboratorQueryError as e:
        if not skip_unavailable:
            logger.error("Aborting: %s", e)
            raise
        logger.warning("%s; marking dependent checks UNKNOWN", e)
        unavailable[chk.category] = e
        return [chk.unknown(e)]
    if not resources and chk.category not in empty_logged:
        # zero resources means zero evaluations, not a failure
        logger.warning("No %s resources found in resource group %s; its checks are not evaluated",
                       chk.category, ctx["resource_group"])
        empty_logged.add(chk.category)
    findings = chk.run(resources, ctx)
    if resources and not findings:
        # e.g. no subnet matches the function-app naming pattern
        logger.warning("%s matched none of the %d %s resource(s) in resource group %s; it is not evaluated",
                       chk.check_id, len(resources), chk.category, ctx["resource_group"])
    return findings
