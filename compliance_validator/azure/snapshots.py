"""Read-only views of the deployed resources the checks inspect.

Each snapshot carries only the properties a check reads. ``from_sdk`` builds a
snapshot from the corresponding ``azure-mgmt-*`` model; properties the API
did not return are kept as ``None`` so a check can tell "not set" from "off".
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple


def _text(value: Any) -> Optional[str]:
    # SDK enums are str subclasses; .value gives the wire string
    if value is None:
        return None
    return str(getattr(value, "value", value))


def _service_enabled(services: Any, name: str) -> Optional[bool]:
    svc = getattr(services, name, None) if services is not None else None
    if svc is None:
        return None
    return getattr(svc, "enabled", None)


@dataclass(frozen=True)
class FunctionAppSnapshot:
    name: str
    min_tls_version: Optional[str] = None
    https_only: Optional[bool] = None
    identity_type: Optional[str] = None

    @classmethod
    def from_sdk(cls, site: Any, config: Any = None) -> "FunctionAppSnapshot":
        cfg = config if config is not None else getattr(site, "site_config", None)
        identity = getattr(site, "identity", None)
        return cls(
            name=site.name,
            min_tls_version=_text(getattr(cfg, "min_tls_version", None)),
            https_only=getattr(site, "https_only", None),
            identity_type=_text(getattr(identity, "type", None)),
        )


@dataclass(frozen=True)
class StorageAccountSnapshot:
    name: str
    minimum_tls_version: Optional[str] = None
    https_traffic_only: Optional[bool] = None
    allow_blob_public_access: Optional[bool] = None
    blob_encryption: Optional[bool] = None
    file_encryption: Optional[bool] = None
    table_encryption: Optional[bool] = None
    queue_encryption: Optional[bool] = None
    require_infrastructure_encryption: Optional[bool] = None

    @classmethod
    def from_sdk(cls, acct: Any) -> "StorageAccountSnapshot":
        enc = getattr(acct, "encryption", None)
        services = getattr(enc, "services", None)
        return cls(
            name=acct.name,
            minimum_tls_version=_text(getattr(acct, "minimum_tls_version", None)),
            https_traffic_only=getattr(acct, "enable_https_traffic_only", None),
            allow_blob_public_access=getattr(acct, "allow_blob_public_access", None),
            blob_encryption=_service_enabled(services, "blob"),
            file_encryption=_service_enabled(services, "file"),
            table_encryption=_service_enabled(services, "table"),
            queue_encryption=_service_enabled(services, "queue"),
            require_infrastructure_encryption=getattr(enc, "require_infrastructure_encryption", None),
        )


@dataclass(frozen=True)
class SecurityRuleSnapshot:
    name: str
    access: Optional[str] = None
    direction: Optional[str] = None
    priority: Optional[int] = None

    @classmethod
    def from_sdk(cls, rule: Any) -> "SecurityRuleSnapshot":
        return cls(
            name=rule.name,
            access=_text(getattr(rule, "access", None)),
            direction=_text(getattr(rule, "direction", None)),
            priority=getattr(rule, "priority", None),
        )


@dataclass(frozen=True)
class NetworkSecurityGroupSnapshot:
    name: str
    security_rules: Tuple[SecurityRuleSnapshot, ...] = ()

    @classmethod
    def from_sdk(cls, nsg: Any) -> "NetworkSecurityGroupSnapshot":
        rules = tuple(SecurityRuleSnapshot.from_sdk(r) for r in (getattr(nsg, "security_rules", None) or []))
        return cls(name=nsg.name, security_rules=rules)


@dataclass(frozen=True)
class SubnetSnapshot:
    name: str
    delegations: Tuple[str, ...] = ()

    @classmethod
    def from_sdk(cls, subnet: Any) -> "SubnetSnapshot":
        services = []
        for d in getattr(subnet, "delegations", None) or []:
            svc = getattr(d, "service_name", None)
            if svc:
                services.append(svc)
        return cls(name=subnet.name, delegations=tuple(services))


@dataclass(frozen=True)
class VirtualNetworkSnapshot:
    name: str
    subnets: Tuple[SubnetSnapshot, ...] = ()

    @classmethod
    def from_sdk(cls, vnet: Any) -> "VirtualNetworkSnapshot":
        subnets = tuple(SubnetSnapshot.from_sdk(s) for s in (getattr(vnet, "subnets", None) or []))
        return cls(name=vnet.name, subnets=subnets)


@dataclass(frozen=True)
class KeyVaultSnapshot:
    name: str
    enable_soft_delete: Optional[bool] = None
    enable_purge_protection: Optional[bool] = None

    @classmethod
    def from_sdk(cls, vault: Any) -> "KeyVaultSnapshot":
        props = getattr(vault, "properties", None)
        return cls(
            name=vault.name,
            enable_soft_delete=getattr(props, "enable_soft_delete", None),
            enable_purge_protection=getattr(props, "enable_purge_protection", None),
        )


@dataclass(frozen=True)
class RetentionSnapshot:
    """Application Insights component or Log Analytics workspace."""
    name: str
    kind: str
    retention_in_days: Optional[int] = None

    @classmethod
    def from_sdk(cls, resource: Any, kind: str) -> "RetentionSnapshot":
        return cls(name=resource.name, kind=kind, retention_in_days=getattr(resource, "retention_in_days", None))


# Resource categories, as named in findings and provider listings
FUNCTION_APP = "FunctionApp"
STORAGE_ACCOUNT = "StorageAccount"
NETWORK_SECURITY_GROUP = "NetworkSecurityGroup"
VIRTUAL_NETWORK = "VirtualNetwork"
KEY_VAULT = "KeyVault"
APP_INSIGHTS = "AppInsightsComponent"
LOG_ANALYTICS = "LogAnalyticsWorkspace"


@dataclass(frozen=True)
class SubscriptionContext:
    subscription_id: str
    resource_group: str
    subscription_name: str = ""
    location: str = ""

    @property
    def scope(self) -> str:
        name = f"{self.subscription_name} " if self.subscription_name else ""
        where = f" ({self.location})" if self.location else ""
        return f"Subscription: {name}({self.subscription_id}) / Resource group: {self.resource_group}{where}"
