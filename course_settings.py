"""Shared enrollment configuration pulled from environment variables."""
import os
from decimal import Decimal

def _bool_env(name: str, default: str = "false") -> bool:
    value = os.getenv(name, default)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}

# Promo code -> price multiplier. One entry today; new codes are new rows.
PROMO_CODES = {
    "BFSALE25": Decimal("0.5"),
}

# The server matches codes exactly unless this is switched off.
PROMO_CODE_CASE_SENSITIVE = _bool_env("PROMO_CODE_CASE_SENSITIVE", "true")

IDENTITY_PROVIDER_URL = (os.getenv("IDENTITY_PROVIDER_URL") or os.getenv("SUPABASE_URL") or "").strip()
IDENTITY_PROVIDER_KEY = (os.getenv("IDENTITY_PROVIDER_KEY") or os.getenv("SUPABASE_ANON_KEY") or "").strip()
IDENTITY_TIMEOUT_S = float(os.getenv("IDENTITY_TIMEOUT_S", "5"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()] or ["*"]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-Client-Info", "Apikey"]
