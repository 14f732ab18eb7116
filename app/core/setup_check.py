"""
Setup verification.

Checks that the environment variables the backend needs are present and
not left at placeholder values. Run it with:

    python -m app.core.setup_check
"""

import logging
import sys
from typing import List, Tuple

from dotenv import load_dotenv

from app.core.config import Settings

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKERS = ("your_", "changeme", "<")

# (env var, label, settings attribute)
REQUIRED_VARS = [
    ("BREVO_API_KEY", "Brevo API Key", "brevo_api_key"),
    ("FROM_EMAIL", "From Email", "from_email"),
    ("ADMIN_EMAIL", "Admin Email", "admin_email"),
    ("MONGODB_URL", "MongoDB URI", "mongodb_url"),
]

OPTIONAL_VARS = [
    ("PORT", "Port", "port"),
    ("ENVIRONMENT", "Environment", "environment"),
    ("FRONTEND_URL", "Frontend URL", "frontend_url"),
    ("RATE_LIMIT_WINDOW_MS", "Rate Limit Window", "rate_limit_window_ms"),
    ("RATE_LIMIT_MAX_REQUESTS", "Rate Limit Max Requests", "rate_limit_max_requests"),
    ("TRUST_PROXY", "Trust Proxy", "trust_proxy"),
]

SECRET_VARS = {"BREVO_API_KEY", "MONGODB_URL"}


def is_placeholder(value) -> bool:
    if value is None or not str(value).strip():
        return True
    lowered = str(value).lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def display_value(key: str, value) -> str:
    if key in SECRET_VARS:
        return f"{str(value)[:20]}..."
    return str(value)


def check_settings(settings: Settings) -> Tuple[List[str], List[str]]:
    """
    Returns:
        tuple: (report lines, names of missing critical variables)
    """
    lines = ["📋 Environment Variables Check:"]
    missing = []

    for key, label, attribute in REQUIRED_VARS:
        value = getattr(settings, attribute)
        if key == "MONGODB_URL":
            value = settings.mongodb_url or settings.mongodb_uri
        if is_placeholder(value):
            lines.append(f"❌ {label}: NOT SET or using placeholder")
            missing.append(key)
        else:
            lines.append(f"✅ {label}: {display_value(key, value)}")

    for key, label, attribute in OPTIONAL_VARS:
        lines.append(f"✓  {label}: {getattr(settings, attribute)}")

    return lines, missing


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format='%(message)s')

    lines, missing = check_settings(Settings())
    for line in lines:
        logger.info(line)

    if missing:
        logger.error(f"❌ Setup incomplete, missing: {', '.join(missing)}")
        return 1

    logger.info("🎉 Setup looks good")
    return 0


if __name__ == "__main__":
    sys.exit(main())
