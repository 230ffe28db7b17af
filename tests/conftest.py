from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

import pytest

from compliance_validator.azure.provider import ResourceProvider
from compliance_validator.azure.snapshots import (
    APP_INSIGHTS, LOG_ANALYTICS,
    FunctionAppSnapshot, KeyVaultSnapshot, NetworkSecurityGroupSnapshot, RetentionSnapshot,
    SecurityRuleSnapshot, StorageAccountSnapshot, SubnetSnapshot, SubscriptionContext,
    VirtualNetworkSnapshot,
)
from compliance_validator.errors import ValidatorConnectionError


class FakeProvider(ResourceProvider):
    """In-memory provider. ``errors`` maps a list_* method name to the exception it raises."""

    def __init__(self, errors: Optional[Dict[str, Exception]] = None, connect_error: Optional[Exception] = None, **resources: List[Any]):
        super().__init__()
        self.resources = resources
        self.errors = errors or {}
        self.connect_error = connect_error
        self.calls = Counter()

    def connect(self) -> SubscriptionContext:
        if self.connect_error:
            raise self.connect_error
        return SubscriptionContext(subscription_id="00000000-0000-0000-0000-000000000000",
                                   resource_group="rg-test", subscription_name="test-sub")

    def _get(self, key: str):
        self.calls[key] += 1
        if key in self.errors:
            raise self.errors[key]
        return list(self.resources.get(key, []))

    def list_function_apps(self):
        return self._get("function_apps")

    def list_storage_accounts(self):
        return self._get("storage_accounts")

    def list_network_security_groups(self):
        return self._get("network_security_groups")

    def list_virtual_networks(self):
        return self._get("virtual_networks")

    def list_key_vaults(self):
        return self._get("key_vaults")

    def list_app_insights_components(self):
        return self._get("app_insights")

    def list_log_analytics_workspaces(self):
        return self._get("log_analytics")


def good_app(name: str = "func-orders-prod", **overrides) -> FunctionAppSnapshot:
    values = dict(name=name, min_tls_version="1.2", https_only=True, identity_type="SystemAssigned")
    values.update(overrides)
    return FunctionAppSnapshot(**values)


def good_storage(name: str = "stordersprod", **overrides) -> StorageAccountSnapshot:
    values = dict(
        name=name, minimum_tls_version="TLS1_2", https_traffic_only=True, allow_blob_public_access=False,
        blob_encryption=True, file_encryption=True, table_encryption=True, queue_encryption=True,
        require_infrastructure_encryption=True,
    )
    values.update(overrides)
    return StorageAccountSnapshot(**values)


def deny_all_rule() -> SecurityRuleSnapshot:
    return SecurityRuleSnapshot(name="DenyAllInbound", access="Deny", direction="Inbound", priority=4096)


def good_nsg(name: str = "nsg-function-app") -> NetworkSecurityGroupSnapshot:
    return NetworkSecurityGroupSnapshot(name=name, security_rules=(
        SecurityRuleSnapshot(name="AllowFrontDoorInbound", access="Allow", direction="Inbound", priority=100),
        deny_all_rule(),
    ))


def good_vnet(name: str = "vnet-prod") -> VirtualNetworkSnapshot:
    return VirtualNetworkSnapshot(name=name, subnets=(
        SubnetSnapshot(name="snet-function-app", delegations=("Microsoft.Web/serverFarms",)),
        SubnetSnapshot(name="snet-private-endpoints"),
    ))


def good_vault(name: str = "kv-orders-prod") -> KeyVaultSnapshot:
    return KeyVaultSnapshot(name=name, enable_soft_delete=True, enable_purge_protection=True)


def compliant_resources() -> Dict[str, List[Any]]:
    return dict(
        function_apps=[good_app()],
        storage_accounts=[good_storage()],
        network_security_groups=[good_nsg()],
        virtual_networks=[good_vnet()],
        key_vaults=[good_vault()],
        app_insights=[RetentionSnapshot(name="appi-orders-prod", kind=APP_INSIGHTS, retention_in_days=90)],
        log_analytics=[RetentionSnapshot(name="log-orders-prod", kind=LOG_ANALYTICS, retention_in_days=365)],
    )


# predicates evaluated over compliant_resources(): function app 3, storage 2+4+1+1,
# nsg 1, matching subnet 1, key vault 2, retention 2
COMPLIANT_PREDICATES = 3 + 8 + 1 + 1 + 2 + 2


@pytest.fixture
def resources():
    return compliant_resources()


@pytest.fixture
def connection_error():
    return ValidatorConnectionError("Cannot open subscription: ResourceGroupNotFound")


@pytest.fixture(autouse=True)
def reset_package_logger():
    # cli.main() installs a stderr handler bound to the captured stream of that test
    yield
    logger = logging.getLogger("compliance_validator")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)
