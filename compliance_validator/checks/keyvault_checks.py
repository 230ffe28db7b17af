from __future__ import annotations
from typing import Any, Dict, List

from .base import Check, Finding
from ..azure.snapshots import KEY_VAULT, KeyVaultSnapshot


class KeyVaultSoftDeleteCheck(Check):
    check_id = "CV-IAM-003"
    category = KEY_VAULT

    def evaluate(self, vault: KeyVaultSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        return [self.result(
            vault.enable_soft_delete is True, vault.name,
            f"{vault.name} has soft delete enabled",
            f"{vault.name} does not have soft delete enabled",
            evidence=f"enableSoftDelete={vault.enable_soft_delete}",
        )]


class KeyVaultPurgeProtectionCheck(Check):
    check_id = "CV-IAM-004"
    category = KEY_VAULT

    def evaluate(self, vault: KeyVaultSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        return [self.result(
            vault.enable_purge_protection is True, vault.name,
            f"{vault.name} has purge protection enabled",
            f"{vault.name} does not have purge protection enabled",
            evidence=f"enablePurgeProtection={vault.enable_purge_protection}",
        )]
