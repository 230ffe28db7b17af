import os
from dotenv import load_dotenv

load_dotenv()

# Values from the environment (or a .env file); command-line flags override them.
SUBSCRIPTION_ID = os.getenv("AZURE_SUBSCRIPTION_ID")
RESOURCE_GROUP = os.getenv("COMPLIANCE_RESOURCE_GROUP")

# Credentials for auth mode 'service_principal'. 'default' and 'cli' ignore the secret.
TENANT_ID = os.getenv("AZURE_TENANT_ID", "")
CLIENT_ID = os.getenv("AZURE_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("AZURE_CLIENT_SECRET", "")
AUTH_MODE = os.getenv("COMPLIANCE_AUTH_MODE", "default")

# parsed (and validated) by the CLI so a bad value is a usage error
MIN_RETENTION_DAYS = os.getenv("COMPLIANCE_MIN_RETENTION_DAYS", "90")
FUNCTION_SUBNET_PATTERN = os.getenv("COMPLIANCE_FUNCTION_SUBNET_PATTERN", "*function-app*")
