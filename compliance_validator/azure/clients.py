from __future__ import annotations

from azure.identity import AzureCliCredential, ClientSecretCredential, DefaultAzureCredential

AUTH_MODES = ("default", "cli", "service_principal")


def build_credential(auth_mode: str, tenant_id: str = "", client_id: str = "", client_secret: str = ""):
    """Create an Azure credential.

    auth_mode:
      - 'default' (DefaultAzureCredential; pipeline service connection, managed identity, Azure CLI, etc.)
      - 'cli' (AzureCliCredential; reuse an existing `az login` session)
      - 'service_principal' (Tenant/Client/Secret)
    """
    if auth_mode == "default":
        return DefaultAzureCredential(exclude_interactive_browser_credential=True)
    if auth_mode == "cli":
        return AzureCliCredential(tenant_id=tenant_id or None)
    if auth_mode == "service_principal":
        missing = [n for n, v in (("tenant_id", tenant_id), ("client_id", client_id), ("client_secret", client_secret)) if not v]
        if missing:
            raise ValueError(f"service_principal auth requires {', '.join(missing)}")
        return ClientSecretCredential(tenant_id=tenant_id, client_id=client_id, client_secret=client_secret)
    raise ValueError(f"Unknown auth mode: {auth_mode!r} (expected one of {', '.join(AUTH_MODES)})")
