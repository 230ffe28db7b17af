from __future__ import annotations
from fnmatch import fnmatchcase
from typing import Any, Dict, List

from .base import Check, Finding
from ..azure.snapshots import (
    NETWORK_SECURITY_GROUP, VIRTUAL_NETWORK,
    NetworkSecurityGroupSnapshot, SecurityRuleSnapshot, VirtualNetworkSnapshot,
)

DENY_ALL_RULE_NAME = "DenyAllInbound"
DENY_ALL_PRIORITY = 4096
APP_SERVICE_DELEGATION = "Microsoft.Web/serverFarms"
DEFAULT_FUNCTION_SUBNET_PATTERN = "*function-app*"


def _is_default_deny(rule: SecurityRuleSnapshot) -> bool:
    return (
        rule.name == DENY_ALL_RULE_NAME
        and str(rule.access).lower() == "deny"
        and rule.priority == DENY_ALL_PRIORITY
    )


class NSGDefaultDenyCheck(Check):
    check_id = "CV-NET-001"
    category = NETWORK_SECURITY_GROUP

    def evaluate(self, nsg: NetworkSecurityGroupSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        ok = any(_is_default_deny(r) for r in nsg.security_rules)
        return [self.result(
            ok, nsg.name,
            f"{nsg.name} has a default deny rule",
            f"{nsg.name} does not have a default deny rule",
            evidence=f"rules: {', '.join(r.name for r in nsg.security_rules) or '(none)'}",
        )]


class FunctionSubnetDelegationCheck(Check):
    """Subnets are recognized as Function App integration subnets by name only.

    The pattern (``function_subnet_pattern`` in ctx, default ``*function-app*``)
    is a naming convention of the deployment templates; subnets that do not
    match it are not evaluated.
    """
    check_id = "CV-NET-002"
    category = VIRTUAL_NETWORK

    def evaluate(self, vnet: VirtualNetworkSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        pattern = ctx.get("function_subnet_pattern") or DEFAULT_FUNCTION_SUBNET_PATTERN
        findings = []
        for subnet in vnet.subnets:
            if not fnmatchcase(subnet.name.lower(), pattern.lower()):
                continue
            ok = any(d.lower() == APP_SERVICE_DELEGATION.lower() for d in subnet.delegations)
            f = self.result(
                ok, subnet.name,
                f"{subnet.name} is delegated to {APP_SERVICE_DELEGATION}",
                f"{subnet.name} does not have proper delegation",
                evidence=f"vnet={vnet.name}; delegations: {', '.join(subnet.delegations) or '(none)'}",
            )
            f.metadata["virtual_network"] = vnet.name
            findings.append(f)
        return findings
