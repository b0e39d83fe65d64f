"""Runtime settings read from the environment at import time."""
import os
from decimal import Decimal

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Identity provider (Supabase GoTrue)
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
IDENTITY_TIMEOUT_SECONDS = float(os.getenv("IDENTITY_TIMEOUT_SECONDS", "10"))

# Billing
MINIMUM_SESSION_MINUTES = Decimal(os.getenv("MINIMUM_SESSION_MINUTES", "5"))
WALLET_CURRENCY = os.getenv("WALLET_CURRENCY", "INR")

# Astrologer presence
HEARTBEAT_SWEEP_ENABLED = os.getenv("HEARTBEAT_SWEEP_ENABLED", "1") == "1"
HEARTBEAT_SWEEP_INTERVAL_SECONDS = float(
    os.getenv("HEARTBEAT_SWEEP_INTERVAL_SECONDS", "60")
)
HEARTBEAT_STALE_AFTER_SECONDS = float(os.getenv("HEARTBEAT_STALE_AFTER_SECONDS", "120"))
