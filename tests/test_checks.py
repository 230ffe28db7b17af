"""Predicate-level tests for each check."""
from __future__ import annotations

import pytest

from compliance_validator.azure.snapshots import (
    APP_INSIGHTS, LOG_ANALYTICS,
    KeyVaultSnapshot, NetworkSecurityGroupSnapshot, RetentionSnapshot, SecurityRuleSnapshot,
    SubnetSnapshot, VirtualNetworkSnapshot,
)
from compliance_validator.checks.app_checks import (
    FunctionAppHttpsOnlyCheck, FunctionAppManagedIdentityCheck, FunctionAppMinTLSCheck,
)
from compliance_validator.checks.base import STATUS_FAIL, STATUS_PASS
from compliance_validator.checks.keyvault_checks import KeyVaultPurgeProtectionCheck, KeyVaultSoftDeleteCheck
from compliance_validator.checks.monitoring_checks import AppInsightsRetentionCheck, LogAnalyticsRetentionCheck
from compliance_validator.checks.network_checks import FunctionSubnetDelegationCheck, NSGDefaultDenyCheck
from compliance_validator.checks.storage_checks import (
    StorageHttpsOnlyCheck, StorageInfrastructureEncryptionCheck, StorageMinTLSCheck,
    StoragePublicAccessCheck, StorageServiceEncryptionCheck,
)

from conftest import deny_all_rule, good_app, good_storage

CTX = {"min_retention_days": 90, "function_subnet_pattern": "*function-app*"}


class TestFunctionAppChecks:
    @pytest.mark.parametrize("tls,status", [
        ("1.2", STATUS_PASS),
        ("1.3", STATUS_PASS),
        ("1.0", STATUS_FAIL),
        ("1.1", STATUS_FAIL),
        (None, STATUS_FAIL),
    ])
    def test_min_tls(self, tls, status):
        [f] = FunctionAppMinTLSCheck().run([good_app(min_tls_version=tls)], CTX)
        assert f.status == status

    def test_min_tls_failure_message(self):
        [f] = FunctionAppMinTLSCheck().run([good_app("func-legacy", min_tls_version="1.0")], CTX)
        assert f.message == "func-legacy does not enforce TLS 1.2"
        assert f.resource == "func-legacy"
        assert f.check_id == "CV-TLS-001"
        assert f.phase == "TLS"
        assert "minTlsVersion=1.0" in f.evidence

    @pytest.mark.parametrize("https_only,status", [(True, STATUS_PASS), (False, STATUS_FAIL), (None, STATUS_FAIL)])
    def test_https_only(self, https_only, status):
        [f] = FunctionAppHttpsOnlyCheck().run([good_app("func-a", https_only=https_only)], CTX)
        assert f.status == status
        if status == STATUS_FAIL:
            assert f.message == "func-a does not enforce HTTPS only"

    @pytest.mark.parametrize("identity,status", [
        ("SystemAssigned", STATUS_PASS),
        ("SystemAssigned, UserAssigned", STATUS_PASS),
        ("UserAssigned", STATUS_FAIL),
        ("None", STATUS_FAIL),
        (None, STATUS_FAIL),
    ])
    def test_managed_identity(self, identity, status):
        [f] = FunctionAppManagedIdentityCheck().run([good_app("func-a", identity_type=identity)], CTX)
        assert f.status == status
        if status == STATUS_FAIL:
            assert f.message == "func-a does not have system-assigned managed identity"

    def test_one_finding_per_app(self):
        apps = [good_app("func-a"), good_app("func-b", https_only=False)]
        findings = FunctionAppHttpsOnlyCheck().run(apps, CTX)
        assert [(f.resource, f.status) for f in findings] == [("func-a", STATUS_PASS), ("func-b", STATUS_FAIL)]


class TestStorageChecks:
    @pytest.mark.parametrize("tls,status", [
        ("TLS1_2", STATUS_PASS),
        ("TLS1_3", STATUS_PASS),
        ("TLS1_0", STATUS_FAIL),
        (None, STATUS_FAIL),
    ])
    def test_min_tls(self, tls, status):
        [f] = StorageMinTLSCheck().run([good_storage("st1", minimum_tls_version=tls)], CTX)
        assert f.status == status

    def test_https_only(self):
        [f] = StorageHttpsOnlyCheck().run([good_storage("st1", https_traffic_only=False)], CTX)
        assert f.status == STATUS_FAIL
        assert f.message == "st1 does not enforce HTTPS only"

    def test_public_access(self):
        [ok] = StoragePublicAccessCheck().run([good_storage("st1")], CTX)
        [bad] = StoragePublicAccessCheck().run([good_storage("st2", allow_blob_public_access=True)], CTX)
        assert ok.status == STATUS_PASS
        assert bad.status == STATUS_FAIL
        assert bad.message == "st2 allows public blob access"
        assert bad.phase == "AccessControl"

    def test_service_encryption_one_finding_per_service(self):
        acct = good_storage("st1", table_encryption=False, queue_encryption=None)
        findings = StorageServiceEncryptionCheck().run([acct], CTX)
        assert len(findings) == 4
        assert [f.metadata["service"] for f in findings] == ["Blob", "File", "Table", "Queue"]
        failed = [f.message for f in findings if f.status == STATUS_FAIL]
        assert failed == [
            "st1 does not have Table encryption enabled",
            "st1 does not have Queue encryption enabled",
        ]

    def test_infrastructure_encryption(self):
        [f] = StorageInfrastructureEncryptionCheck().run([good_storage("st1", require_infrastructure_encryption=None)], CTX)
        assert f.status == STATUS_FAIL
        assert f.message == "st1 does not require infrastructure encryption"
        assert f.phase == "Encryption"


class TestNetworkChecks:
    def test_default_deny_present(self):
        nsg = NetworkSecurityGroupSnapshot(name="nsg-a", security_rules=(deny_all_rule(),))
        [f] = NSGDefaultDenyCheck().run([nsg], CTX)
        assert f.status == STATUS_PASS

    @pytest.mark.parametrize("rule", [
        SecurityRuleSnapshot(name="DenyAllInbound", access="Allow", priority=4096),
        SecurityRuleSnapshot(name="DenyAllInbound", access="Deny", priority=4000),
        SecurityRuleSnapshot(name="DenyEverything", access="Deny", priority=4096),
    ])
    def test_default_deny_must_match_name_access_and_priority(self, rule):
        nsg = NetworkSecurityGroupSnapshot(name="nsg-a", security_rules=(rule,))
        [f] = NSGDefaultDenyCheck().run([nsg], CTX)
        assert f.status == STATUS_FAIL
        assert f.message == "nsg-a does not have a default deny rule"

    def test_nsg_without_rules_fails(self):
        [f] = NSGDefaultDenyCheck().run([NetworkSecurityGroupSnapshot(name="nsg-empty")], CTX)
        assert f.status == STATUS_FAIL
        assert "(none)" in f.evidence

    def test_only_function_app_subnets_are_evaluated(self):
        vnet = VirtualNetworkSnapshot(name="vnet", subnets=(
            SubnetSnapshot(name="snet-function-app", delegations=("Microsoft.Web/serverFarms",)),
            SubnetSnapshot(name="snet-Function-App-2"),
            SubnetSnapshot(name="snet-data"),
        ))
        findings = FunctionSubnetDelegationCheck().run([vnet], CTX)
        assert [(f.resource, f.status) for f in findings] == [
            ("snet-function-app", STATUS_PASS),
            ("snet-Function-App-2", STATUS_FAIL),
        ]
        assert findings[1].message == "snet-Function-App-2 does not have proper delegation"
        assert findings[1].metadata["virtual_network"] == "vnet"

    def test_wrong_delegation_fails(self):
        vnet = VirtualNetworkSnapshot(name="vnet", subnets=(
            SubnetSnapshot(name="function-app-subnet", delegations=("Microsoft.ContainerInstance/containerGroups",)),
        ))
        [f] = FunctionSubnetDelegationCheck().run([vnet], CTX)
        assert f.status == STATUS_FAIL

    def test_custom_subnet_pattern(self):
        vnet = VirtualNetworkSnapshot(name="vnet", subnets=(
            SubnetSnapshot(name="snet-func"),
            SubnetSnapshot(name="snet-function-app"),
        ))
        findings = FunctionSubnetDelegationCheck().run([vnet], {"function_subnet_pattern": "snet-func"})
        assert [f.resource for f in findings] == ["snet-func"]


class TestKeyVaultChecks:
    def test_soft_delete_and_purge_protection(self):
        vault = KeyVaultSnapshot(name="kv-a", enable_soft_delete=True, enable_purge_protection=None)
        [sd] = KeyVaultSoftDeleteCheck().run([vault], CTX)
        [pp] = KeyVaultPurgeProtectionCheck().run([vault], CTX)
        assert sd.status == STATUS_PASS
        assert pp.status == STATUS_FAIL
        assert pp.message == "kv-a does not have purge protection enabled"

    def test_soft_delete_disabled(self):
        [f] = KeyVaultSoftDeleteCheck().run([KeyVaultSnapshot(name="kv-b", enable_soft_delete=False)], CTX)
        assert f.message == "kv-b does not have soft delete enabled"


class TestRetentionChecks:
    @pytest.mark.parametrize("days,status", [(90, STATUS_PASS), (730, STATUS_PASS), (30, STATUS_FAIL), (None, STATUS_FAIL)])
    def test_app_insights_retention(self, days, status):
        res = RetentionSnapshot(name="appi-a", kind=APP_INSIGHTS, retention_in_days=days)
        [f] = AppInsightsRetentionCheck().run([res], CTX)
        assert f.status == status

    def test_log_analytics_failure_message(self):
        res = RetentionSnapshot(name="log-a", kind=LOG_ANALYTICS, retention_in_days=30)
        [f] = LogAnalyticsRetentionCheck().run([res], CTX)
        assert f.message == "log-a retention is 30 days (minimum 90)"
        assert f.phase == "Monitoring"

    def test_threshold_comes_from_context(self):
        res = RetentionSnapshot(name="log-a", kind=LOG_ANALYTICS, retention_in_days=90)
        [f] = LogAnalyticsRetentionCheck().run([res], {"min_retention_days": 180})
        assert f.status == STATUS_FAIL
        assert "minimum 180" in f.message
