import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

# Database
# Async driver URL, e.g. sqlite+aiosqlite:///data/storefront.db or postgresql+asyncpg://...
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")

# Web server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000

# Pricing Configuration
# Currency reported for an order when no product defines one
DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "INR").upper()

# Ceiling on (customer discount % + influencer commission %) for products without an explicit cap
try:
    DEFAULT_CAP_PERCENT = float(os.environ.get("DEFAULT_CAP_PERCENT", "20.0"))
    if not 0 <= DEFAULT_CAP_PERCENT <= 100:
        raise ValueError(f"DEFAULT_CAP_PERCENT must be between 0 and 100 (got: {DEFAULT_CAP_PERCENT})")
except ValueError as e:
    print(f"\n ERROR: Invalid DEFAULT_CAP_PERCENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: Number between 0 and 100 (e.g., 20, 25.5)", file=sys.stderr)
    print(f"Current value: {os.environ.get('DEFAULT_CAP_PERCENT', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Largest quantity accepted on one cart line; keeps line amounts inside Decimal precision
MAX_LINE_QTY = int(os.environ.get("MAX_LINE_QTY", "10000"))

# Discount code cookies (read and written only by the HTTP layer)
PROMO_COOKIE = os.environ.get("PROMO_COOKIE", "mi_promo_code")
REF_COOKIE = os.environ.get("REF_COOKIE", "mi_ref_code")
ATTRIBUTION_DAYS = int(os.environ.get("REF_ATTRIBUTION_DAYS", "30"))  # Cookie lifetime for promo/referral codes
COOKIE_SECURE = os.environ.get("COOKIE_SECURE", "true") == "true"

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: keep a month for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# Web Security Configuration
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "true") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", "false") == "true"  # Enable HSTS (only for HTTPS)
CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if os.environ.get("CORS_ALLOWED_ORIGINS") else []
