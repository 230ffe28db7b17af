from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List

from azure.core.exceptions import AzureError
from azure.mgmt.applicationinsights import ApplicationInsightsManagementClient
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.loganalytics import LogAnalyticsManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient, SubscriptionClient
from azure.mgmt.storage import StorageManagementClient
from azure.mgmt.web import WebSiteManagementClient

from ..errors import CollaboratorQueryError, ValidatorConnectionError
from .snapshots import (
    APP_INSIGHTS, FUNCTION_APP, KEY_VAULT, LOG_ANALYTICS, NETWORK_SECURITY_GROUP,
    STORAGE_ACCOUNT, VIRTUAL_NETWORK,
    FunctionAppSnapshot, KeyVaultSnapshot, NetworkSecurityGroupSnapshot, RetentionSnapshot,
    StorageAccountSnapshot, SubscriptionContext, VirtualNetworkSnapshot,
)

logger = logging.getLogger(__name__)


class ResourceProvider:
    """Source of resource snapshots for one subscription + resource group.

    Subclasses implement ``connect`` and the ``list_*`` methods.
    ``list_resources`` fetches each category at most once per provider
    instance, so checks in different phases share one listing.
    """

    def __init__(self):
        self._cache: Dict[str, List[Any]] = {}

    def connect(self) -> SubscriptionContext:
        raise NotImplementedError

    def list_function_apps(self) -> Iterable[FunctionAppSnapshot]:
        raise NotImplementedError

    def list_storage_accounts(self) -> Iterable[StorageAccountSnapshot]:
        raise NotImplementedError

    def list_network_security_groups(self) -> Iterable[NetworkSecurityGroupSnapshot]:
        raise NotImplementedError

    def list_virtual_networks(self) -> Iterable[VirtualNetworkSnapshot]:
        raise NotImplementedError

    def list_key_vaults(self) -> Iterable[KeyVaultSnapshot]:
        raise NotImplementedError

    def list_app_insights_components(self) -> Iterable[RetentionSnapshot]:
        raise NotImplementedError

    def list_log_analytics_workspaces(self) -> Iterable[RetentionSnapshot]:
        raise NotImplementedError

    def _fetchers(self) -> Dict[str, Callable[[], Iterable[Any]]]:
        return {
            FUNCTION_APP: self.list_function_apps,
            STORAGE_ACCOUNT: self.list_storage_accounts,
            NETWORK_SECURITY_GROUP: self.list_network_security_groups,
            VIRTUAL_NETWORK: self.list_virtual_networks,
            KEY_VAULT: self.list_key_vaults,
            APP_INSIGHTS: self.list_app_insights_components,
            LOG_ANALYTICS: self.list_log_analytics_workspaces,
        }

    def list_resources(self, category: str) -> List[Any]:
        if category not in self._cache:
            fetch = self._fetchers()[category]
            items = list(fetch())
            logger.debug("Listed %d %s resource(s)", len(items), category)
            self._cache[category] = items
        return self._cache[category]


class AzureResourceProvider(ResourceProvider):
    """ResourceProvider backed by the azure-mgmt-* management clients."""

    def __init__(self, credential, subscription_id: str, resource_group: str):
        super().__init__()
        self.credential = credential
        self.subscription_id = subscription_id
        self.resource_group = resource_group

    def connect(self) -> SubscriptionContext:
        try:
            sub = SubscriptionClient(self.credential).subscriptions.get(self.subscription_id)
            rg = ResourceManagementClient(self.credential, self.subscription_id).resource_groups.get(self.resource_group)
        except AzureError as e:
            raise ValidatorConnectionError(
                f"Cannot open subscription {self.subscription_id} / resource group {self.resource_group}: "
                f"{type(e).__name__}: {e}"
            ) from e
        ctx = SubscriptionContext(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            subscription_name=getattr(sub, "display_name", "") or "",
            location=getattr(rg, "location", "") or "",
        )
        logger.info("Connected to %s", ctx.scope)
        return ctx

    def _query(self, category: str, fn: Callable[[], List[Any]]) -> List[Any]:
        # pagers are lazy; errors surface while iterating, so materialize here
        try:
            return fn()
        except AzureError as e:
            raise CollaboratorQueryError(category, e) from e

    def list_function_apps(self) -> List[FunctionAppSnapshot]:
        def fetch():
            web = WebSiteManagementClient(self.credential, self.subscription_id)
            apps = []
            for site in web.web_apps.list_by_resource_group(self.resource_group):
                if "functionapp" not in (getattr(site, "kind", "") or "").lower():
                    continue
                # site_config is not populated on list results
                cfg = web.web_apps.get_configuration(self.resource_group, site.name)
                apps.append(FunctionAppSnapshot.from_sdk(site, cfg))
            return apps
        return self._query(FUNCTION_APP, fetch)

    def list_storage_accounts(self) -> List[StorageAccountSnapshot]:
        def fetch():
            st = StorageManagementClient(self.credential, self.subscription_id)
            return [StorageAccountSnapshot.from_sdk(a) for a in st.storage_accounts.list_by_resource_group(self.resource_group)]
        return self._query(STORAGE_ACCOUNT, fetch)

    def list_network_security_groups(self) -> List[NetworkSecurityGroupSnapshot]:
        def fetch():
            net = NetworkManagementClient(self.credential, self.subscription_id)
            return [NetworkSecurityGroupSnapshot.from_sdk(n) for n in net.network_security_groups.list(self.resource_group)]
        return self._query(NETWORK_SECURITY_GROUP, fetch)

    def list_virtual_networks(self) -> List[VirtualNetworkSnapshot]:
        def fetch():
            net = NetworkManagementClient(self.credential, self.subscription_id)
            return [VirtualNetworkSnapshot.from_sdk(v) for v in net.virtual_networks.list(self.resource_group)]
        return self._query(VIRTUAL_NETWORK, fetch)

    def list_key_vaults(self) -> List[KeyVaultSnapshot]:
        def fetch():
            kv = KeyVaultManagementClient(self.credential, self.subscription_id)
            return [KeyVaultSnapshot.from_sdk(v) for v in kv.vaults.list_by_resource_group(self.resource_group)]
        return self._query(KEY_VAULT, fetch)

    def list_app_insights_components(self) -> List[RetentionSnapshot]:
        def fetch():
            ai = ApplicationInsightsManagementClient(self.credential, self.subscription_id)
            return [RetentionSnapshot.from_sdk(c, APP_INSIGHTS) for c in ai.components.list_by_resource_group(self.resource_group)]
        return self._query(APP_INSIGHTS, fetch)

    def list_log_analytics_workspaces(self) -> List[RetentionSnapshot]:
        def fetch():
            la = LogAnalyticsManagementClient(self.credential, self.subscription_id)
            return [RetentionSnapshot.from_sdk(w, LOG_ANALYTICS) for w in la.workspaces.list_by_resource_group(self.resource_group)]
        return self._query(LOG_ANALYTICS, fetch)
