from __future__ import annotations
from typing import Any, Dict, List

from .base import Check, Finding
from ..azure.snapshots import STORAGE_ACCOUNT, StorageAccountSnapshot

ACCEPTED_TLS = ("tls1_2", "tls1_3")

# (label used in messages, snapshot attribute)
ENCRYPTED_SERVICES = (
    ("Blob", "blob_encryption"),
    ("File", "file_encryption"),
    ("Table", "table_encryption"),
    ("Queue", "queue_encryption"),
)


class StorageMinTLSCheck(Check):
    """minimumTlsVersion must be TLS1_2; TLS1_3 is accepted as well since it is stricter."""
    check_id = "CV-TLS-003"
    category = STORAGE_ACCOUNT

    def evaluate(self, acct: StorageAccountSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        tls = acct.minimum_tls_version
        return [self.result(
            str(tls).lower() in ACCEPTED_TLS, acct.name,
            f"{acct.name} enforces TLS 1.2",
            f"{acct.name} does not enforce TLS 1.2",
            evidence=f"minimumTlsVersion={tls}",
        )]


class StorageHttpsOnlyCheck(Check):
    check_id = "CV-TLS-004"
    category = STORAGE_ACCOUNT

    def evaluate(self, acct: StorageAccountSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        return [self.result(
            acct.https_traffic_only is True, acct.name,
            f"{acct.name} enforces HTTPS only",
            f"{acct.name} does not enforce HTTPS only",
            evidence=f"supportsHttpsTrafficOnly={acct.https_traffic_only}",
        )]


class StorageServiceEncryptionCheck(Check):
    """One predicate per service; a service the API does not report counts as disabled."""
    check_id = "CV-ENC-001"
    category = STORAGE_ACCOUNT

    def evaluate(self, acct: StorageAccountSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        findings = []
        for label, attr in ENCRYPTED_SERVICES:
            enabled = getattr(acct, attr)
            f = self.result(
                enabled is True, acct.name,
                f"{acct.name} has {label} encryption enabled",
                f"{acct.name} does not have {label} encryption enabled",
                evidence=f"encryption.services.{label.lower()}.enabled={enabled}",
            )
            f.metadata["service"] = label
            findings.append(f)
        return findings


class StorageInfrastructureEncryptionCheck(Check):
    check_id = "CV-ENC-002"
    category = STORAGE_ACCOUNT

    def evaluate(self, acct: StorageAccountSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        value = acct.require_infrastructure_encryption
        return [self.result(
            value is True, acct.name,
            f"{acct.name} requires infrastructure encryption",
            f"{acct.name} does not require infrastructure encryption",
            evidence=f"requireInfrastructureEncryption={value}",
        )]


class StoragePublicAccessCheck(Check):
    check_id = "CV-IAM-002"
    category = STORAGE_ACCOUNT

    def evaluate(self, acct: StorageAccountSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        value = acct.allow_blob_public_access
        return [self.result(
            value is False, acct.name,
            f"{acct.name} blocks public blob access",
            f"{acct.name} allows public blob access",
            evidence=f"allowBlobPublicAccess={value}",
        )]
