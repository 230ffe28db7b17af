from __future__ import annotations
from typing import Any, Dict, List

from .base import Check, Finding
from ..azure.snapshots import FUNCTION_APP, FunctionAppSnapshot

ACCEPTED_TLS = ("1.2", "1.3")


class FunctionAppMinTLSCheck(Check):
    """minTlsVersion must be 1.2; 1.3 is accepted as well since it is stricter."""
    check_id = "CV-TLS-001"
    category = FUNCTION_APP

    def evaluate(self, app: FunctionAppSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        tls = app.min_tls_version
        return [self.result(
            tls in ACCEPTED_TLS, app.name,
            f"{app.name} enforces TLS 1.2",
            f"{app.name} does not enforce TLS 1.2",
            evidence=f"minTlsVersion={tls}",
        )]


class FunctionAppHttpsOnlyCheck(Check):
    check_id = "CV-TLS-002"
    category = FUNCTION_APP

    def evaluate(self, app: FunctionAppSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        return [self.result(
            app.https_only is True, app.name,
            f"{app.name} enforces HTTPS only",
            f"{app.name} does not enforce HTTPS only",
            evidence=f"httpsOnly={app.https_only}",
        )]


def _has_system_identity(identity_type) -> bool:
    # "SystemAssigned, UserAssigned" carries a system-assigned identity too
    if not identity_type:
        return False
    return "systemassigned" in [t.strip().lower() for t in identity_type.split(",")]


class FunctionAppManagedIdentityCheck(Check):
    """identity.type must include SystemAssigned.

    "SystemAssigned, UserAssigned" passes too: the app still has its
    system-assigned identity, only with extra user-assigned ones attached.
    """
    check_id = "CV-IAM-001"
    category = FUNCTION_APP

    def evaluate(self, app: FunctionAppSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        return [self.result(
            _has_system_identity(app.identity_type), app.name,
            f"{app.name} has system-assigned managed identity",
            f"{app.name} does not have system-assigned managed identity",
            evidence=f"identity.type={app.identity_type}",
        )]
